"""Engine subpackage - core pricing, currency and tax logic."""
from .pricing_engine import PricingEngine
from .tax_engine import TaxEngine
from .currency import CurrencyConverter, RateCache
from .slab_resolver import resolve_slab, compute_markup
from .quote import QuoteService
from .models import PaxCount, PricingResult, TaxResult, QuoteResult

__all__ = [
    'PricingEngine', 'TaxEngine', 'CurrencyConverter', 'RateCache',
    'resolve_slab', 'compute_markup', 'QuoteService',
    'PaxCount', 'PricingResult', 'TaxResult', 'QuoteResult',
]
