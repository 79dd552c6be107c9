"""
Config Loader - Reads pricing configuration records from disk.

CSV files (slabs, country rules, exchange rates) are read with pandas as
strings and parsed row by row; the tax table is JSON. Malformed rows are
reported with their line number.
"""
import json
from pathlib import Path
from typing import Callable, Optional

import pandas as pd

from ..config.settings import Settings, get_settings, parse_bool
from ..engine.currency import CurrencyConverter
from ..engine.errors import ConfigLoadError
from ..engine.models import (
    CountryPricingRule,
    ExchangeRate,
    MarkupSlab,
    TaxConfiguration,
    TaxRate,
    TdsConfiguration,
)
from ..engine.pricing_engine import PricingEngine
from ..engine.quote import QuoteService
from ..engine.tax_engine import TaxEngine
from ..utils.logger import get_logger

logger = get_logger(__name__)


def parse_optional_float(value) -> Optional[float]:
    """Parse optional float (empty = None)."""
    if value is None or str(value).strip() == '':
        return None
    return float(value)


def parse_float(value, default: float = 0.0) -> float:
    parsed = parse_optional_float(value)
    return default if parsed is None else parsed


def parse_optional_str(value) -> Optional[str]:
    """Parse optional string (empty = None)."""
    if value is None or str(value).strip() == '':
        return None
    return str(value).strip()


def read_csv_rows(path: Path) -> list[dict]:
    """Read a CSV as stripped strings; a missing file yields no rows."""
    if not path.exists():
        logger.info("Configuration file %s not found; using no records", path)
        return []
    df = pd.read_csv(path, dtype=str).fillna('')
    df.columns = [c.strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df.to_dict(orient='records')


def slab_from_row(row: dict) -> MarkupSlab:
    return MarkupSlab(
        id=row['id'],
        name=row.get('name', '') or row['id'],
        min_amount=float(row['min_amount']),
        max_amount=float(row['max_amount']),
        markup_type=row.get('markup_type', '') or 'percentage',
        markup_value=parse_float(row.get('markup_value')),
        currency=(row.get('currency', '') or 'USD').upper(),
        is_active=parse_bool(row.get('is_active', 'true')),
        created_at=parse_optional_str(row.get('created_at')),
        updated_at=parse_optional_str(row.get('updated_at')),
    )


def country_rule_from_row(row: dict) -> CountryPricingRule:
    currency = parse_optional_str(row.get('currency'))
    return CountryPricingRule(
        country_code=row['country_code'].upper(),
        tier=(row.get('tier', '') or 'standard').lower(),
        region=row.get('region', ''),
        default_markup=parse_float(row.get('default_markup')),
        markup_type=row.get('markup_type', '') or 'percentage',
        conversion_margin=parse_float(row.get('conversion_margin')),
        country_name=parse_optional_str(row.get('country_name')),
        currency=currency.upper() if currency else None,
        seasonal_adjustment=parse_float(row.get('seasonal_adjustment')),
        is_active=parse_bool(row.get('is_active', 'true') or 'true'),
    )


def exchange_rate_from_row(row: dict) -> ExchangeRate:
    return ExchangeRate(
        id=parse_optional_str(row.get('id')),
        from_currency=row['from_currency'].upper(),
        to_currency=row['to_currency'].upper(),
        rate=float(row['rate']),
        margin=parse_float(row.get('margin')),
        additional_surcharge=parse_float(row.get('additional_surcharge')),
        is_fixed=parse_bool(row.get('is_fixed', 'false')),
        last_updated=parse_optional_str(row.get('last_updated')),
        is_custom=parse_bool(row.get('is_custom', 'false')),
    )


def _parse_rows(path: Path, parser: Callable[[dict], object]) -> list:
    records = []
    errors = []
    for line_num, row in enumerate(read_csv_rows(path), start=2):  # +2 for 1-indexed header row
        try:
            records.append(parser(row))
        except (KeyError, ValueError) as e:
            errors.append(f"Line {line_num}: {e}")
    if errors:
        raise ConfigLoadError(path, errors)
    return records


def load_markup_slabs(path: Path) -> list[MarkupSlab]:
    return _parse_rows(path, slab_from_row)


def load_country_rules(path: Path) -> list[CountryPricingRule]:
    return _parse_rows(path, country_rule_from_row)


def load_exchange_rates(path: Path) -> list[ExchangeRate]:
    return _parse_rows(path, exchange_rate_from_row)


def tax_configuration_from_dict(data: dict) -> TaxConfiguration:
    tds = data.get('tds_configuration')
    return TaxConfiguration(
        country_code=str(data['country_code']).upper(),
        tax_type=data.get('tax_type', 'TAX'),
        tax_rates=[
            TaxRate(
                id=str(r.get('id', i)),
                service_type=r.get('service_type', 'all'),
                rate=float(r.get('rate', 0)),
                description=r.get('description', ''),
                is_default=bool(r.get('is_default', False)),
            )
            for i, r in enumerate(data.get('tax_rates', []), start=1)
        ],
        tds_configuration=TdsConfiguration(
            is_applicable=bool(tds.get('is_applicable', False)),
            rate=float(tds.get('rate', 0)),
            threshold=float(tds.get('threshold', 0)),
            exemption_limit=float(tds.get('exemption_limit', 0)),
        ) if tds else None,
        is_active=bool(data.get('is_active', True)),
        updated_at=data.get('updated_at'),
    )


def load_tax_configurations(path: Path) -> list[TaxConfiguration]:
    if not path.exists():
        logger.info("Tax configuration file %s not found; all countries tax at zero", path)
        return []
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    configs = []
    errors = []
    for index, entry in enumerate(data.get('configurations', [])):
        try:
            configs.append(tax_configuration_from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            errors.append(f"Configuration {index}: {e}")
    if errors:
        raise ConfigLoadError(path, errors)
    return configs


class ConfigRepository:
    """
    Loads every configuration record and wires the engines.

    Engines are rebuilt on reload(); the rate cache belongs to the converter
    and is cleared with it.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.reload()

    def reload(self):
        """Reload all configuration files from disk."""
        s = self.settings
        self.slabs = load_markup_slabs(s.markup_slabs)
        self.country_rules = load_country_rules(s.country_rules)
        self.exchange_rates = load_exchange_rates(s.exchange_rates)
        self.tax_configurations = load_tax_configurations(s.tax_configurations)

        self.converter = CurrencyConverter(self.exchange_rates)
        self.pricing_engine = PricingEngine(
            config=s.pricing,
            slabs=self.slabs,
            country_rules=self.country_rules,
            converter=self.converter,
        )
        self.tax_engine = TaxEngine(self.tax_configurations)
        self.quote_service = QuoteService(self.pricing_engine, self.tax_engine)

        logger.info(
            "Loaded %d slabs, %d country rules, %d exchange rates, %d tax tables from %s",
            len(self.slabs), len(self.country_rules), len(self.exchange_rates),
            len(self.tax_configurations), s.data_dir,
        )

    def get_stats(self) -> dict:
        """Counts of loaded configuration records."""
        return {
            'slabs': len(self.slabs),
            'active_slabs': sum(1 for s in self.slabs if s.is_active),
            'country_rules': len(self.country_rules),
            'exchange_rates': len(self.exchange_rates),
            'locked_rates': sum(1 for r in self.exchange_rates if r.is_fixed),
            'tax_configurations': len(self.tax_configurations),
            'cached_rates': len(self.converter.cache),
        }
