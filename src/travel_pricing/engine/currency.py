"""
Currency Converter - Converts amounts between currencies with agency margin.

converted = amount × rate × (1 + margin/100) + additional_surcharge

The stored rate is the raw mid-market rate; margin and surcharge are always
applied on top of it. Resolved rate records are kept in an injectable
RateCache that never expires on its own.
"""
from dataclasses import replace
from typing import Iterable, Optional

from .errors import RateNotFoundError
from .models import ExchangeRate
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _pair(from_currency: str, to_currency: str) -> tuple[str, str]:
    return (str(from_currency).strip().upper(), str(to_currency).strip().upper())


class RateCache:
    """Explicitly owned cache of resolved rate records keyed by currency pair."""

    def __init__(self):
        self._entries: dict[tuple[str, str], ExchangeRate] = {}

    def get(self, pair: tuple[str, str]) -> Optional[ExchangeRate]:
        return self._entries.get(pair)

    def set(self, pair: tuple[str, str], record: ExchangeRate):
        self._entries[pair] = record

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, pair) -> bool:
        return pair in self._entries


def effective_rate(record: ExchangeRate, margin_override: Optional[float] = None) -> float:
    """Mid rate with the agency margin applied (surcharge excluded)."""
    margin = record.margin if margin_override is None else margin_override
    return record.rate * (1 + margin / 100.0)


class CurrencyConverter:
    """
    Converts amounts using stored exchange rate records.

    Lookup order for a pair: cache, then the record list (first match).
    """

    def __init__(self, rates: Optional[Iterable[ExchangeRate]] = None, cache: Optional[RateCache] = None):
        self.rates = list(rates or [])
        self.cache = cache if cache is not None else RateCache()

    def find_rate(self, from_currency: str, to_currency: str) -> ExchangeRate:
        """Resolve the rate record for a pair, raising RateNotFoundError if none exists."""
        pair = _pair(from_currency, to_currency)

        cached = self.cache.get(pair)
        if cached is not None:
            logger.debug("Rate cache hit for %s→%s", *pair)
            return cached

        for record in self.rates:
            if record.pair == pair:
                self.cache.set(pair, record)
                return record

        raise RateNotFoundError(pair[0], pair[1])

    def convert(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        rate_record: Optional[ExchangeRate] = None,
        margin_override: Optional[float] = None,
    ) -> float:
        """
        Convert an amount from one currency to another.

        Same-currency conversions return the amount unchanged. margin_override
        replaces the record's margin (e.g. a country rule's conversion margin).
        """
        source, target = _pair(from_currency, to_currency)
        if source == target:
            return amount

        record = rate_record or self.find_rate(from_currency, to_currency)
        return amount * effective_rate(record, margin_override) + record.additional_surcharge

    def clear_cache(self):
        """Drop every cached rate; the next lookup reads the record list again."""
        size = len(self.cache)
        self.cache.clear()
        logger.info("Cleared %d cached exchange rates", size)

    def replace_rates(self, rates: Iterable[ExchangeRate]):
        """Swap the record list and drop stale cache entries."""
        self.rates = list(rates)
        self.clear_cache()


def apply_rate_refresh(
    records: Iterable[ExchangeRate],
    fresh_rates: dict[tuple[str, str], float],
    refreshed_at: Optional[str] = None,
) -> list[ExchangeRate]:
    """
    Apply fetched mid rates to stored records.

    Locked records (is_fixed) keep their rate. Margin and surcharge are
    preserved on refreshed records. Returns new records; inputs are untouched.
    """
    fresh = {_pair(*pair): float(rate) for pair, rate in fresh_rates.items()}
    refreshed = []
    for record in records:
        new_rate = fresh.get(record.pair)
        if new_rate is None or record.is_fixed:
            if new_rate is not None:
                logger.info("Skipping refresh of locked rate %s→%s", *record.pair)
            refreshed.append(record)
            continue
        refreshed.append(replace(record, rate=new_rate, last_updated=refreshed_at or record.last_updated))
    return refreshed
