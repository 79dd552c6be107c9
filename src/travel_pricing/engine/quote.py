"""
Quote Service - Prices a supplier cost and taxes the result in one call.
"""
from typing import Optional, Union

from .models import PaxCount, QuoteResult
from .pricing_engine import PricingEngine
from .tax_engine import TaxEngine


class QuoteService:
    """Runs the pricing engine, then the tax engine on the priced subtotal."""

    def __init__(self, pricing_engine: PricingEngine, tax_engine: TaxEngine):
        self.pricing_engine = pricing_engine
        self.tax_engine = tax_engine

    def quote(
        self,
        base_amount: float,
        pax: Union[PaxCount, int],
        country_code: Optional[str],
        currency: str,
        service_type: str = 'all',
        is_inclusive: bool = False,
        source_currency: Optional[str] = None,
    ) -> QuoteResult:
        # Service type is checked before pricing so a bad token never yields a partial quote
        self.tax_engine.check_service_type(service_type)

        pricing = self.pricing_engine.price(
            base_amount, pax, country_code, currency, source_currency=source_currency
        )
        tax = self.tax_engine.calculate_tax(
            pricing.final_price, country_code, service_type, is_inclusive
        )
        pricing.add_trace("Tax", f"{'Inclusive' if is_inclusive else 'Exclusive'} {service_type}", f"{tax.tax_amount:.2f}")
        return QuoteResult(pricing=pricing, tax=tax, service_type=service_type)
