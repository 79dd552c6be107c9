"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
Configuration records (slabs, country rules, tax tables, exchange rates) are
supplied by the caller and treated as read-only; results are derived.
"""
from dataclasses import dataclass, field
from typing import Optional, Union


SERVICE_TYPES = ('all', 'transport', 'hotel', 'restaurant', 'sightseeing', 'activity')
MARKUP_TYPES = ('percentage', 'fixed')

STRATEGY_COUNTRY = 'country'
STRATEGY_SLAB = 'slab'
STRATEGY_DEFAULT = 'default'


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class ExchangeRate:
    """A stored currency pair rate. Margin and surcharge sit on top of the mid rate."""
    from_currency: str
    to_currency: str
    rate: float
    margin: float = 0.0  # percent
    additional_surcharge: float = 0.0
    is_fixed: bool = False  # locked against automated refresh
    last_updated: Optional[str] = None  # ISO timestamp
    is_custom: bool = False
    id: Optional[str] = None

    @property
    def pair(self) -> tuple[str, str]:
        return (self.from_currency.upper(), self.to_currency.upper())


@dataclass
class MarkupSlab:
    """An amount range with an associated markup rule."""
    id: str
    name: str
    min_amount: float
    max_amount: float
    markup_type: str = 'percentage'
    markup_value: float = 0.0
    currency: str = 'USD'
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def contains(self, amount: float) -> bool:
        """Both bounds are inclusive."""
        return self.min_amount <= amount <= self.max_amount


@dataclass
class CountryPricingRule:
    """Country tier classification with its default markup and FX margin."""
    country_code: str
    tier: str = 'standard'
    region: str = ''
    default_markup: float = 0.0
    markup_type: str = 'percentage'
    conversion_margin: float = 0.0
    country_name: Optional[str] = None
    currency: Optional[str] = None  # currency supplier costs are held in
    seasonal_adjustment: float = 0.0  # percent applied on top of the markup
    is_active: bool = True


@dataclass
class TaxRate:
    """One entry of a country's tax table."""
    id: str
    service_type: str
    rate: float
    description: str = ''
    is_default: bool = False


@dataclass
class TdsConfiguration:
    """Source-withholding settings for a country."""
    is_applicable: bool = False
    rate: float = 0.0
    threshold: float = 0.0
    exemption_limit: float = 0.0


@dataclass
class TaxConfiguration:
    """Per-country tax table."""
    country_code: str
    tax_type: str
    tax_rates: list[TaxRate] = field(default_factory=list)
    tds_configuration: Optional[TdsConfiguration] = None
    is_active: bool = True
    updated_at: Optional[str] = None


@dataclass
class PaxCount:
    """Passenger mix. Infants never count as paying passengers."""
    adults: int = 1
    children: int = 0
    infants: int = 0

    @property
    def total(self) -> int:
        return self.adults + self.children

    @classmethod
    def from_value(cls, value: Union['PaxCount', int, dict]) -> 'PaxCount':
        """Accept a PaxCount, a plain adult count, or a mapping."""
        if isinstance(value, PaxCount):
            return value
        if isinstance(value, dict):
            return cls(
                adults=int(value.get('adults', 0) or 0),
                children=int(value.get('children', 0) or 0),
                infants=int(value.get('infants', 0) or 0),
            )
        return cls(adults=int(value), children=0, infants=0)


@dataclass
class PricingResult:
    """Base/markup/final breakdown for one quote."""
    currency: str
    base_price: float
    markup: float
    tier_multiplier: float
    final_price: float
    strategy: str = STRATEGY_DEFAULT
    total_pax: int = 1
    per_person_price: float = 0.0
    country_code: Optional[str] = None
    slab_id: Optional[str] = None
    source_currency: Optional[str] = None
    source_amount: Optional[float] = None  # caller amount before conversion
    conversion_rate: float = 1.0
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this result."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class TaxBreakdownItem:
    """A single tax line in a tax result."""
    type: str
    rate: float
    amount: float
    description: str = ''


@dataclass
class TaxResult:
    """Tax breakdown for an amount. TDS is reported, never netted out of total_amount."""
    base_amount: float
    tax_amount: float
    total_amount: float
    tax_breakdown: list[TaxBreakdownItem] = field(default_factory=list)
    tds_amount: Optional[float] = None
    is_inclusive: bool = False

    @property
    def effective_rate(self) -> float:
        return sum(item.rate for item in self.tax_breakdown)

    def net_payable(self) -> float:
        """Total after the withholding deduction applied at settlement."""
        return self.total_amount - (self.tds_amount or 0.0)


@dataclass
class QuoteResult:
    """Priced subtotal plus destination tax for one service type."""
    pricing: PricingResult
    tax: TaxResult
    service_type: str

    @property
    def grand_total(self) -> float:
        return self.tax.total_amount

    @property
    def per_person_total(self) -> float:
        return self.tax.total_amount / self.pricing.total_pax

    def to_dict(self) -> dict:
        """Flat summary used by scripts and the API."""
        return {
            "Currency": self.pricing.currency,
            "Strategy": self.pricing.strategy,
            "Base Price": self.pricing.base_price,
            "Markup": self.pricing.markup,
            "Tier Multiplier": self.pricing.tier_multiplier,
            "Subtotal": self.pricing.final_price,
            "Tax": self.tax.tax_amount,
            "Total": self.tax.total_amount,
            "TDS": self.tax.tds_amount,
            "Per Person": self.per_person_total,
            "Taxes": [
                {
                    "Type": item.type,
                    "Rate": item.rate,
                    "Amount": item.amount,
                    "Description": item.description,
                }
                for item in self.tax.tax_breakdown
            ],
        }
