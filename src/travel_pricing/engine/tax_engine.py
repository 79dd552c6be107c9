"""
Tax Engine - Destination tax and source-withholding (TDS) calculation.

Tax rates matching the requested service type, plus any 'all' rates, are
summed additively. Exclusive mode adds tax on top of the amount; inclusive
mode extracts the tax already contained in the amount. A country without an
active tax table is taxed at zero.
"""
from typing import Iterable, Optional

from .errors import InvalidServiceTypeError
from .models import (
    SERVICE_TYPES,
    TaxBreakdownItem,
    TaxConfiguration,
    TaxRate,
    TaxResult,
    TdsConfiguration,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


def select_tax_rates(config: TaxConfiguration, service_type: str) -> list[TaxRate]:
    """Rates whose service type equals the requested one or 'all', in table order."""
    return [r for r in config.tax_rates if r.service_type in (service_type, 'all')]


def compute_tds(total_amount: float, tds: Optional[TdsConfiguration]) -> Optional[float]:
    """
    Withholding on a total.

    None when TDS does not apply to the country; 0 at or below the threshold;
    otherwise (total - exemption_limit) × rate/100, floored at 0.
    """
    if tds is None or not tds.is_applicable:
        return None
    if total_amount <= tds.threshold:
        return 0.0
    return max(0.0, total_amount - tds.exemption_limit) * tds.rate / 100.0


class TaxEngine:
    """
    Calculates destination taxes from per-country tax tables.

    At most one active configuration is expected per country; if several are
    present the first active one in stored order is used.
    """

    def __init__(self, configurations: Optional[Iterable[TaxConfiguration]] = None):
        self.configurations = list(configurations or [])

    def configuration_for(self, country_code: Optional[str]) -> Optional[TaxConfiguration]:
        """Active tax configuration for a country, or None."""
        code = str(country_code or '').strip().upper()
        for config in self.configurations:
            if config.is_active and config.country_code.strip().upper() == code:
                return config
        return None

    def effective_rate(self, country_code: str, service_type: str) -> float:
        """Combined percentage applied to a service type in a country."""
        self.check_service_type(service_type)
        config = self.configuration_for(country_code)
        if config is None:
            return 0.0
        return sum(r.rate for r in select_tax_rates(config, service_type))

    def calculate_tax(
        self,
        amount: float,
        country_code: Optional[str],
        service_type: str = 'all',
        is_inclusive: bool = False,
    ) -> TaxResult:
        """
        Calculate tax for an amount.

        Args:
            amount: Taxable amount (already containing tax when is_inclusive)
            country_code: Destination country
            service_type: One of SERVICE_TYPES
            is_inclusive: Whether amount already contains tax

        Returns:
            TaxResult; TDS is reported separately and not netted from total_amount
        """
        self.check_service_type(service_type)

        config = self.configuration_for(country_code)
        if config is None:
            logger.debug("No active tax configuration for %s; zero tax", country_code)
            return TaxResult(
                base_amount=amount,
                tax_amount=0.0,
                total_amount=amount,
                tax_breakdown=[],
                tds_amount=None,
                is_inclusive=is_inclusive,
            )

        rates = select_tax_rates(config, service_type)
        rate_sum = sum(r.rate for r in rates)

        if is_inclusive:
            base_amount = amount / (1 + rate_sum / 100.0)
            total_amount = amount
        else:
            base_amount = amount

        breakdown = [
            TaxBreakdownItem(
                type=config.tax_type,
                rate=r.rate,
                amount=base_amount * r.rate / 100.0,
                description=r.description or f"{config.tax_type} ({r.service_type})",
            )
            for r in rates
        ]
        tax_amount = sum(item.amount for item in breakdown)

        if not is_inclusive:
            total_amount = amount + tax_amount

        return TaxResult(
            base_amount=base_amount,
            tax_amount=tax_amount,
            total_amount=total_amount,
            tax_breakdown=breakdown,
            tds_amount=compute_tds(total_amount, config.tds_configuration),
            is_inclusive=is_inclusive,
        )

    @staticmethod
    def check_service_type(service_type: str):
        if service_type not in SERVICE_TYPES:
            raise InvalidServiceTypeError(service_type, SERVICE_TYPES)
