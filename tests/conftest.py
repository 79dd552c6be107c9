import shutil
import sys
import os
from pathlib import Path

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from travel_pricing.engine.models import (
    CountryPricingRule,
    ExchangeRate,
    MarkupSlab,
    TaxConfiguration,
    TaxRate,
    TdsConfiguration,
)

PACKAGE_DATA = Path(src_path) / 'travel_pricing' / 'data'


def make_slab(slab_id, min_amount, max_amount, value, currency='THB', markup_type='percentage', is_active=True, name=None):
    return MarkupSlab(
        id=slab_id,
        name=name or slab_id,
        min_amount=min_amount,
        max_amount=max_amount,
        markup_type=markup_type,
        markup_value=value,
        currency=currency,
        is_active=is_active,
    )


def make_tax_config(country_code, rates, tax_type='GST', tds=None, is_active=True):
    """rates: list of (service_type, rate) tuples."""
    return TaxConfiguration(
        country_code=country_code,
        tax_type=tax_type,
        tax_rates=[
            TaxRate(id=f"{country_code}-{i}", service_type=service, rate=rate, description=f"{tax_type} {service}")
            for i, (service, rate) in enumerate(rates, start=1)
        ],
        tds_configuration=tds,
        is_active=is_active,
    )


@pytest.fixture
def thb_slabs():
    return [
        make_slab('budget', 0, 4999.99, 12),
        make_slab('mid', 5000, 10000, 10),
        make_slab('premium', 10000.01, 50000, 8),
        make_slab('group', 50000.01, 1000000, 4500, markup_type='fixed'),
    ]


@pytest.fixture
def country_rules():
    return [
        CountryPricingRule(country_code='TH', tier='standard', region='Southeast Asia',
                           default_markup=8, markup_type='percentage', conversion_margin=2, currency='THB'),
        CountryPricingRule(country_code='SG', tier='luxury', region='Southeast Asia',
                           default_markup=15, markup_type='percentage', conversion_margin=1.8),
        CountryPricingRule(country_code='AE', tier='premium', region='Middle East',
                           default_markup=500, markup_type='fixed', conversion_margin=1.5),
    ]


@pytest.fixture
def exchange_rates():
    return [
        ExchangeRate(id='1', from_currency='USD', to_currency='THB', rate=35.0, margin=2, additional_surcharge=0),
        ExchangeRate(id='2', from_currency='THB', to_currency='INR', rate=2.5, margin=0, additional_surcharge=50),
        ExchangeRate(id='3', from_currency='USD', to_currency='AED', rate=3.67, margin=1.5, is_fixed=True),
    ]


@pytest.fixture
def india_gst():
    return make_tax_config(
        'IN', [('all', 5), ('hotel', 12)],
        tds=TdsConfiguration(is_applicable=True, rate=2, threshold=30000, exemption_limit=10000),
    )


@pytest.fixture
def data_dir(tmp_path):
    """Writable copy of the packaged configuration files."""
    target = tmp_path / 'data'
    shutil.copytree(PACKAGE_DATA, target)
    return target
