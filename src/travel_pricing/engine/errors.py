"""
Error taxonomy for the pricing engine.

Quote-time errors (rate, pax, service type) abort a single computation.
ConfigValidationError is only raised when configuration records are written.
"""
from typing import Optional


class PricingError(Exception):
    """Base class for all pricing engine errors."""


class RateNotFoundError(PricingError):
    """No stored exchange rate for a currency pair that needs converting."""

    def __init__(self, from_currency: str, to_currency: str):
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(
            f"No exchange rate configured for {from_currency} → {to_currency}. "
            "Add or fetch a rate for this pair."
        )


class InvalidPaxCountError(PricingError):
    """Zero paying passengers (adults + children) or a negative count on a quote."""

    def __init__(self, adults: int, children: int, infants: int = 0):
        self.adults = adults
        self.children = children
        self.infants = infants
        if min(adults, children, infants) < 0:
            reason = "Passenger counts cannot be negative"
        else:
            reason = "At least one adult or child is required"
        super().__init__(f"{reason} (adults={adults}, children={children}, infants={infants})")


class InvalidServiceTypeError(PricingError):
    """Service type token outside the recognized enumeration."""

    def __init__(self, service_type: str, valid_types: Optional[tuple] = None):
        self.service_type = service_type
        self.valid_types = valid_types or ()
        message = f"Unrecognized service type '{service_type}'"
        if self.valid_types:
            message += f", must be one of: {', '.join(self.valid_types)}"
        super().__init__(message)


class ConfigValidationError(PricingError):
    """A configuration record failed write-time validation."""

    def __init__(self, label: str, errors: list[str]):
        self.label = label
        self.errors = list(errors)
        super().__init__(f"Invalid {label}: " + "; ".join(self.errors))


class ConfigLoadError(PricingError):
    """A configuration file could not be parsed into records."""

    def __init__(self, path, errors: list[str]):
        self.path = path
        self.errors = list(errors)
        super().__init__(f"Failed to load {path}: " + "; ".join(self.errors))
