"""
Centralized settings and path configuration for the pricing engine.
"""
import json
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


SLAB_MODE_PER_PERSON = 'per-person'
SLAB_MODE_TOTAL = 'total'
SLAB_APPLICATION_MODES = (SLAB_MODE_PER_PERSON, SLAB_MODE_TOTAL)

DEFAULT_TIER_MULTIPLIERS = {
    'budget': 0.8,
    'standard': 1.0,
    'premium': 1.2,
    'luxury': 1.5,
}

DATA_DIR_ENV = 'TRAVEL_PRICING_DATA_DIR'


def parse_bool(value) -> bool:
    """Parse a boolean from a CSV or JSON value ('false' and '0' are False)."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class PricingConfig:
    """
    Strategy switches for the pricing orchestrator.

    Precedence is fixed: country-based, then slabs, then the flat default.
    """
    enable_country_based_pricing: bool = False
    use_slab_pricing: bool = True
    slab_application_mode: str = SLAB_MODE_TOTAL
    default_markup_percentage: float = 15.0
    tier_multipliers: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_TIER_MULTIPLIERS)
    )

    def __post_init__(self):
        if self.slab_application_mode not in SLAB_APPLICATION_MODES:
            raise ValueError(
                f"slab_application_mode must be one of {SLAB_APPLICATION_MODES}, "
                f"got '{self.slab_application_mode}'"
            )

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingConfig':
        """Build from a JSON mapping, ignoring unknown keys."""
        tiers = dict(DEFAULT_TIER_MULTIPLIERS)
        tiers.update({str(k).lower(): float(v) for k, v in (data.get('tier_multipliers') or {}).items()})
        return cls(
            enable_country_based_pricing=parse_bool(data.get('enable_country_based_pricing', False)),
            use_slab_pricing=parse_bool(data.get('use_slab_pricing', True)),
            slab_application_mode=data.get('slab_application_mode', SLAB_MODE_TOTAL),
            default_markup_percentage=float(data.get('default_markup_percentage', 15.0)),
            tier_multipliers=tiers,
        )


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Configuration record files
    markup_slabs: Path
    country_rules: Path
    exchange_rates: Path
    tax_configurations: Path
    pricing_config_file: Path

    # Strategy switches
    pricing: PricingConfig = field(default_factory=PricingConfig)

    # Country used when a caller omits the destination
    default_country: str = 'TH'

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the data directory (env override, then package data)."""
        root = get_project_root()
        if data_dir is None:
            env_dir = os.environ.get(DATA_DIR_ENV)
            data_dir = Path(env_dir) if env_dir else Path(__file__).resolve().parent.parent / 'data'
        data_dir = Path(data_dir)

        config_file = data_dir / 'pricing_config.json'
        pricing = PricingConfig()
        default_country = 'TH'
        if config_file.exists():
            with open(config_file, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            pricing = PricingConfig.from_dict(raw)
            default_country = raw.get('default_country', default_country)

        return cls(
            project_root=root,
            data_dir=data_dir,
            markup_slabs=data_dir / 'markup_slabs.csv',
            country_rules=data_dir / 'country_rules.csv',
            exchange_rates=data_dir / 'exchange_rates.csv',
            tax_configurations=data_dir / 'tax_configurations.json',
            pricing_config_file=config_file,
            pricing=pricing,
            default_country=default_country,
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next get_settings() re-reads disk."""
    global _settings
    _settings = None
