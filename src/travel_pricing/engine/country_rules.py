"""
Country Rules - Tier-based markup for destination countries.

A country rule carries a tier (budget/standard/premium/luxury), a default
markup and a currency conversion margin. The tier scales the markup through
a multiplier table; tiers missing from the table scale by 1.
"""
from typing import Iterable, Optional

from .models import CountryPricingRule
from ..config.settings import DEFAULT_TIER_MULTIPLIERS


def resolve_country_rule(country_code: str, rules: Iterable[CountryPricingRule]) -> Optional[CountryPricingRule]:
    """
    Look up the rule for a country code.

    Inactive rules are ignored. Duplicated codes resolve to the last entry.
    """
    code = str(country_code or '').strip().upper()
    if not code:
        return None

    found = None
    for rule in rules:
        if rule.is_active and rule.country_code.strip().upper() == code:
            found = rule
    return found


def tier_multiplier(tier: Optional[str], table: Optional[dict[str, float]] = None) -> float:
    """Multiplier for a tier, 1 when the tier has no table entry."""
    table = DEFAULT_TIER_MULTIPLIERS if table is None else table
    if not tier:
        return 1.0
    return float(table.get(str(tier).strip().lower(), 1.0))


def compute_country_markup(
    base_amount: float,
    rule: CountryPricingRule,
    tier_multipliers: Optional[dict[str, float]] = None,
) -> float:
    """
    Markup for a country rule.

    percentage → base × markup/100, fixed → markup; then × tier multiplier
    and × (1 + seasonal adjustment/100).
    """
    if rule.markup_type == 'percentage':
        markup = base_amount * rule.default_markup / 100.0
    else:
        markup = rule.default_markup

    markup *= tier_multiplier(rule.tier, tier_multipliers)

    if rule.seasonal_adjustment:
        markup *= 1 + rule.seasonal_adjustment / 100.0

    return markup
