"""
Configuration validation - write-time checks for pricing records.

Run these before a slab, country rule, tax table or exchange rate is saved.
The resolvers never call them; they assume validated input and degrade
gracefully when a bad record slips through.
"""
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .errors import ConfigValidationError
from .models import (
    CountryPricingRule,
    ExchangeRate,
    MARKUP_TYPES,
    MarkupSlab,
    SERVICE_TYPES,
    TaxConfiguration,
)

CURRENCY_CODE = re.compile(r'^[A-Z]{3}$')


@dataclass
class ValidationResult:
    """Result of record validation."""
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def error(self, message: str):
        self.errors.append(message)
        self.valid = False

    def warn(self, message: str):
        self.warnings.append(message)

    def merge(self, other: 'ValidationResult', prefix: str = ''):
        for message in other.errors:
            self.error(f"{prefix}{message}")
        for message in other.warnings:
            self.warn(f"{prefix}{message}")


def ranges_overlap(first: MarkupSlab, second: MarkupSlab) -> bool:
    """Inclusive ranges intersect (touching bounds count as overlap)."""
    return first.min_amount <= second.max_amount and second.min_amount <= first.max_amount


def validate_slab(slab: MarkupSlab, existing_slabs: Optional[Iterable[MarkupSlab]] = None) -> ValidationResult:
    """Validate a slab before saving, including overlap against active slabs."""
    result = ValidationResult()

    if not slab.name or not str(slab.name).strip():
        result.error("Name is required")

    if slab.markup_type not in MARKUP_TYPES:
        result.error(f"Markup type must be one of: {', '.join(MARKUP_TYPES)}")

    if slab.min_amount < 0 or slab.max_amount < 0:
        result.error("Amounts cannot be negative")

    if slab.min_amount >= slab.max_amount:
        result.error("Maximum amount must be greater than minimum amount")

    if slab.markup_value < 0:
        result.error("Markup value cannot be negative")

    if not CURRENCY_CODE.match(str(slab.currency or '').upper()):
        result.error(f"Currency '{slab.currency}' is not a three-letter code")

    if slab.markup_type == 'percentage' and slab.markup_value > 100:
        result.warn(f"Markup of {slab.markup_value:g}% is above 100%")

    # Overlap is only meaningful for a well-formed active slab
    if result.valid and slab.is_active and existing_slabs:
        for existing in existing_slabs:
            if existing.id == slab.id or not existing.is_active:
                continue
            if existing.currency.upper() != slab.currency.upper():
                continue
            if ranges_overlap(slab, existing):
                result.error(
                    f"Price range overlaps with existing slab '{existing.name}' in {existing.currency.upper()}"
                )

    return result


def validate_slab_set(slabs: Iterable[MarkupSlab]) -> ValidationResult:
    """Validate every slab of a set against the others."""
    slabs = list(slabs)
    result = ValidationResult()
    for index, slab in enumerate(slabs):
        # Only compare against earlier slabs so each overlap is reported once
        result.merge(validate_slab(slab, slabs[:index]), prefix=f"Slab '{slab.id}': ")
    return result


def validate_country_rule(rule: CountryPricingRule) -> ValidationResult:
    result = ValidationResult()

    if not rule.country_code or not re.match(r'^[A-Za-z]{2}$', rule.country_code.strip()):
        result.error("Country code must be a two-letter code")

    if rule.markup_type not in MARKUP_TYPES:
        result.error(f"Markup type must be one of: {', '.join(MARKUP_TYPES)}")

    if rule.default_markup < 0:
        result.error("Default markup cannot be negative")

    if rule.conversion_margin < 0:
        result.error("Conversion margin cannot be negative")

    if rule.currency and not CURRENCY_CODE.match(rule.currency.upper()):
        result.error(f"Currency '{rule.currency}' is not a three-letter code")

    if rule.seasonal_adjustment < -100:
        result.error("Seasonal adjustment cannot remove more than the whole markup")

    return result


def validate_tax_configuration(
    config: TaxConfiguration,
    existing: Optional[Iterable[TaxConfiguration]] = None,
) -> ValidationResult:
    """Validate a tax table; at most one active table may exist per country."""
    result = ValidationResult()

    if not config.country_code:
        result.error("Country code is required")

    if not config.tax_type:
        result.error("Tax type is required")

    for rate in config.tax_rates:
        if rate.service_type not in SERVICE_TYPES:
            result.error(f"Rate '{rate.id}': unknown service type '{rate.service_type}'")
        if rate.rate < 0:
            result.error(f"Rate '{rate.id}': rate cannot be negative")

    service_types = {r.service_type for r in config.tax_rates}
    if 'all' in service_types and len(service_types) > 1:
        specific = sorted(service_types - {'all'})
        result.warn(
            "Blanket 'all' rate is added on top of specific rates for: " + ", ".join(specific)
        )

    tds = config.tds_configuration
    if tds is not None:
        if tds.rate < 0 or tds.threshold < 0 or tds.exemption_limit < 0:
            result.error("TDS rate, threshold and exemption limit cannot be negative")
        if tds.is_applicable and tds.exemption_limit > tds.threshold:
            result.warn("TDS exemption limit is above the threshold")

    if config.is_active and existing:
        code = config.country_code.strip().upper()
        for other in existing:
            if other is config or not other.is_active:
                continue
            if other.country_code.strip().upper() == code:
                result.error(f"An active tax configuration already exists for {code}")
                break

    return result


def validate_exchange_rate(rate: ExchangeRate) -> ValidationResult:
    result = ValidationResult()

    source = str(rate.from_currency or '').upper()
    target = str(rate.to_currency or '').upper()
    if not CURRENCY_CODE.match(source) or not CURRENCY_CODE.match(target):
        result.error("Currencies must be three-letter codes")
    elif source == target:
        result.error("From and to currencies must differ")

    if rate.rate <= 0:
        result.error("Rate must be greater than zero")

    if rate.margin < 0:
        result.error("Margin cannot be negative")

    if rate.additional_surcharge < 0:
        result.error("Additional surcharge cannot be negative")

    return result


def ensure_valid(result: ValidationResult, label: str) -> ValidationResult:
    """Raise ConfigValidationError when a validation result has errors."""
    if not result.valid:
        raise ConfigValidationError(label, result.errors)
    return result
