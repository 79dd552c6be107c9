"""
Slab Resolver - Matches an amount against range-based markup slabs.

Used by the pricing engine when slab pricing is enabled. The resolver does
not know whether the amount is a booking total or a per-person figure; the
caller decides that from the configured application mode.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from .models import MarkupSlab
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class MatchedSlab:
    """A slab that matched with context."""
    slab: MarkupSlab
    compared_amount: float
    match_reason: str


def resolve_slab(amount: float, currency: str, active_slabs: Iterable[MarkupSlab]) -> Optional[MarkupSlab]:
    """
    Find the slab covering an amount in a currency.

    Returns the first active slab in stored order whose inclusive
    [min_amount, max_amount] range contains the amount, or None.
    Overlapping slabs resolve first-match-wins.
    """
    currency = str(currency).strip().upper()
    for slab in active_slabs:
        if not slab.is_active:
            continue
        if str(slab.currency).strip().upper() != currency:
            continue
        if slab.contains(amount):
            return slab
    return None


def compute_markup(amount: float, slab: MarkupSlab) -> float:
    """Percentage slabs scale with the amount; fixed slabs add their value as-is."""
    if slab.markup_type == 'percentage':
        return amount * slab.markup_value / 100.0
    return slab.markup_value


class SlabResolver:
    """
    Holds the configured slab list for the pricing engine.

    Slabs are kept in stored order; inactive slabs are kept too so the
    list mirrors configuration, and are skipped at resolve time.
    """

    def __init__(self, slabs: Optional[Iterable[MarkupSlab]] = None):
        self.slabs = list(slabs or [])

    @property
    def loaded(self) -> bool:
        return len(self.slabs) > 0

    def active_slabs(self, currency: Optional[str] = None) -> list[MarkupSlab]:
        """Active slabs, optionally restricted to one currency."""
        result = [s for s in self.slabs if s.is_active]
        if currency:
            code = currency.strip().upper()
            result = [s for s in result if s.currency.strip().upper() == code]
        return result

    def find(self, amount: float, currency: str) -> Optional[MatchedSlab]:
        """Resolve a slab and explain the match."""
        slab = resolve_slab(amount, currency, self.slabs)
        if slab is None:
            logger.debug("No %s slab covers %.2f", currency, amount)
            return None
        reason = f"{slab.min_amount:g} <= {amount:g} <= {slab.max_amount:g} {slab.currency}"
        return MatchedSlab(slab=slab, compared_amount=amount, match_reason=reason)

    def overlapping_pairs(self) -> list[tuple[MarkupSlab, MarkupSlab]]:
        """Active same-currency slab pairs whose ranges intersect, in stored order."""
        pairs = []
        active = self.active_slabs()
        for i, first in enumerate(active):
            for second in active[i + 1:]:
                if first.currency.upper() != second.currency.upper():
                    continue
                if first.min_amount <= second.max_amount and second.min_amount <= first.max_amount:
                    pairs.append((first, second))
        return pairs
