"""
Pricing Engine - Core markup resolution logic with traceability.

Turns a supplier cost into a priced subtotal using exactly one strategy:
- Country/tier rule (when country-based pricing is enabled)
- Amount slab (when slab pricing is enabled)
- Flat default markup percentage (fallback)

Every resolution step is recorded on the result trace.
"""
from typing import Iterable, Optional, Union

from ..config.settings import PricingConfig, SLAB_MODE_PER_PERSON
from .country_rules import resolve_country_rule, compute_country_markup, tier_multiplier
from .currency import CurrencyConverter, effective_rate
from .errors import InvalidPaxCountError
from .models import (
    CountryPricingRule,
    MarkupSlab,
    PaxCount,
    PricingResult,
    STRATEGY_COUNTRY,
    STRATEGY_DEFAULT,
    STRATEGY_SLAB,
)
from .slab_resolver import SlabResolver, compute_markup
from ..utils.logger import get_logger

logger = get_logger(__name__)


def paying_pax(pax: PaxCount) -> int:
    """Adults plus children; negative counts or no paying passenger raise InvalidPaxCountError."""
    if min(pax.adults, pax.children, pax.infants) < 0 or pax.total <= 0:
        raise InvalidPaxCountError(pax.adults, pax.children, pax.infants)
    return pax.total


class PricingEngine:
    """
    Core pricing engine that resolves markup using Country → Slab → Default pipeline.

    Resolution order:
    1. If country-based pricing is enabled and the country has a rule, use it
    2. Else if slab pricing is enabled, match a slab (per-person or total amount)
    3. Fall back to the flat default markup percentage
    Strategies are never blended; the first one that applies wins.
    """

    def __init__(
        self,
        config: Optional[PricingConfig] = None,
        slabs: Optional[Iterable[MarkupSlab]] = None,
        country_rules: Optional[Iterable[CountryPricingRule]] = None,
        converter: Optional[CurrencyConverter] = None,
    ):
        self.config = config or PricingConfig()
        self.slab_resolver = SlabResolver(slabs)
        self.country_rules = list(country_rules or [])
        self.converter = converter or CurrencyConverter()

    def price(
        self,
        base_amount: float,
        pax: Union[PaxCount, int],
        country_code: Optional[str],
        currency: str,
        source_currency: Optional[str] = None,
    ) -> PricingResult:
        """
        Price a supplier cost.

        Args:
            base_amount: Supplier cost for the whole booking
            pax: Passenger mix (an int is read as adults)
            country_code: Destination country
            currency: Quote currency
            source_currency: Currency of base_amount when it differs from the quote currency

        Returns:
            PricingResult with markup, final price, per-person split and trace
        """
        pax = PaxCount.from_value(pax)
        total_pax = paying_pax(pax)

        currency = str(currency).strip().upper()
        result = PricingResult(
            currency=currency,
            base_price=base_amount,
            markup=0.0,
            tier_multiplier=1.0,
            final_price=base_amount,
            total_pax=total_pax,
            country_code=(country_code or '').strip().upper() or None,
        )
        result.add_trace("Passengers", f"{pax.adults} adults, {pax.children} children, {pax.infants} infants", str(total_pax))

        # 1. Country-based pricing
        if self.config.enable_country_based_pricing:
            rule = resolve_country_rule(country_code, self.country_rules)
            if rule is not None:
                self._price_by_country(result, base_amount, rule, currency, source_currency)
                return self._finish(result)
            result.add_trace("Country Rule", f"No rule for {result.country_code}, falling through", None)
            logger.debug("No country rule for %s; falling through to slab/default", country_code)

        base = self._convert_base(result, base_amount, source_currency, currency)

        # 2. Slab pricing
        if self.config.use_slab_pricing:
            if self.config.slab_application_mode == SLAB_MODE_PER_PERSON:
                comparison = base / total_pax
                result.add_trace("Slab Mode", "Per-person comparison amount", f"{comparison:.2f}")
            else:
                comparison = base
                result.add_trace("Slab Mode", "Total comparison amount", f"{comparison:.2f}")

            matched = self.slab_resolver.find(comparison, currency)
            if matched is not None:
                slab = matched.slab
                result.strategy = STRATEGY_SLAB
                result.slab_id = slab.id
                result.markup = compute_markup(base, slab)
                result.add_trace("Slab Match", f"{slab.name} ({matched.match_reason})", slab.id)
                result.add_trace("Markup", f"{slab.markup_type} {slab.markup_value:g} on full base", f"{result.markup:.2f}")
                return self._finish(result)

            result.add_trace("Slab Match", "No slab matched, using default markup", None)

        # 3. Flat default
        result.strategy = STRATEGY_DEFAULT
        result.markup = base * self.config.default_markup_percentage / 100.0
        result.add_trace(
            "Default Markup",
            f"{self.config.default_markup_percentage:g}% of base",
            f"{result.markup:.2f}",
        )
        return self._finish(result)

    def per_person(self, final_price: float, pax: Union[PaxCount, int]) -> float:
        """Per-person display split, guarded against zero paying passengers."""
        return final_price / paying_pax(PaxCount.from_value(pax))

    def _price_by_country(
        self,
        result: PricingResult,
        base_amount: float,
        rule: CountryPricingRule,
        currency: str,
        source_currency: Optional[str],
    ):
        """Apply a country rule; an explicit source currency converts at the rule's margin."""
        result.add_trace("Country Rule", f"{rule.country_code} tier {rule.tier} ({rule.region})", rule.tier)
        base = self._convert_base(
            result, base_amount, source_currency, currency, margin_override=rule.conversion_margin
        )

        multiplier = tier_multiplier(rule.tier, self.config.tier_multipliers)
        result.strategy = STRATEGY_COUNTRY
        result.tier_multiplier = multiplier
        result.markup = compute_country_markup(base, rule, self.config.tier_multipliers)
        result.add_trace(
            "Markup",
            f"{rule.markup_type} {rule.default_markup:g} × tier {multiplier:g}",
            f"{result.markup:.2f}",
        )

    def _convert_base(
        self,
        result: PricingResult,
        base_amount: float,
        source_currency: Optional[str],
        currency: str,
        margin_override: Optional[float] = None,
    ) -> float:
        """Convert the supplier cost into the quote currency before any markup."""
        if not source_currency or source_currency.strip().upper() == currency:
            return result.base_price

        source = source_currency.strip().upper()
        record = self.converter.find_rate(source, currency)
        converted = self.converter.convert(base_amount, source, currency, record, margin_override)
        result.source_currency = source
        result.source_amount = base_amount
        result.conversion_rate = effective_rate(record, margin_override)
        result.base_price = converted
        result.add_trace("Conversion", f"{base_amount:.2f} {source} → {currency}", f"{converted:.2f}")
        return converted

    def _finish(self, result: PricingResult) -> PricingResult:
        result.final_price = result.base_price + result.markup
        result.per_person_price = result.final_price / result.total_pax
        result.add_trace("Final Price", f"Base {result.base_price:.2f} + markup {result.markup:.2f}", f"{result.final_price:.2f}")
        logger.debug("Priced %s via %s strategy: %.2f", result.country_code, result.strategy, result.final_price)
        return result
