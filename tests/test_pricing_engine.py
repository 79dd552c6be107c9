import pytest

from travel_pricing.config.settings import PricingConfig
from travel_pricing.engine import CurrencyConverter, PaxCount, PricingEngine
from travel_pricing.engine.errors import InvalidPaxCountError, RateNotFoundError
from travel_pricing.engine.models import CountryPricingRule

from conftest import make_slab


def slab_config(**overrides):
    fields = dict(
        enable_country_based_pricing=False,
        use_slab_pricing=True,
        slab_application_mode='total',
        default_markup_percentage=15,
    )
    fields.update(overrides)
    return PricingConfig(**fields)


@pytest.fixture
def engine(thb_slabs, country_rules, exchange_rates):
    return PricingEngine(
        config=slab_config(),
        slabs=thb_slabs,
        country_rules=country_rules,
        converter=CurrencyConverter(exchange_rates),
    )


def test_slab_match_scenario(engine):
    """8000 THB hits the 5000-10000 slab at 10% → markup 800, final 8800."""
    result = engine.price(8000, PaxCount(adults=2), 'TH', 'THB')
    assert result.strategy == 'slab'
    assert result.slab_id == 'mid'
    assert result.base_price == 8000
    assert result.markup == pytest.approx(800.0)
    assert result.final_price == pytest.approx(8800.0)
    assert result.tier_multiplier == 1.0
    assert result.currency == 'THB'


def test_no_slab_falls_back_to_default(thb_slabs):
    """USD has no slabs here, so the flat 15% default applies."""
    engine = PricingEngine(config=slab_config(), slabs=thb_slabs)
    result = engine.price(1000, 1, None, 'USD')
    assert result.strategy == 'default'
    assert result.slab_id is None
    assert result.markup == pytest.approx(150.0)
    assert result.final_price == pytest.approx(1150.0)


def test_slab_pricing_disabled_uses_default(engine):
    engine.config = slab_config(use_slab_pricing=False, default_markup_percentage=20)
    result = engine.price(8000, 1, 'TH', 'THB')
    assert result.strategy == 'default'
    assert result.markup == pytest.approx(1600.0)


def test_fallback_chain_matches_flat_default_exactly(country_rules):
    """Country pricing off and no matching slab gives exactly the flat-default result."""
    slabs = [make_slab('tiny', 0, 10, 50)]
    engine = PricingEngine(config=slab_config(default_markup_percentage=12.5), slabs=slabs,
                           country_rules=country_rules)
    flat = PricingEngine(config=slab_config(use_slab_pricing=False, default_markup_percentage=12.5))

    slab_result = engine.price(4000, 2, 'TH', 'THB')
    flat_result = flat.price(4000, 2, 'TH', 'THB')
    assert slab_result.strategy == flat_result.strategy == 'default'
    assert slab_result.markup == flat_result.markup
    assert slab_result.final_price == flat_result.final_price


def test_country_pricing_takes_precedence_over_slab(engine):
    """Even though 8000 THB matches a slab, the TH country rule wins."""
    engine.config = slab_config(enable_country_based_pricing=True)
    result = engine.price(8000, 2, 'TH', 'THB')
    assert result.strategy == 'country'
    assert result.slab_id is None
    assert result.markup == pytest.approx(640.0)  # 8% × standard 1.0
    assert result.final_price == pytest.approx(8640.0)


def test_country_tier_scenario(country_rules):
    """luxury → 1.2: 10000 × 15% × 1.2 = 1800, final 11800."""
    config = slab_config(enable_country_based_pricing=True, tier_multipliers={'luxury': 1.2})
    engine = PricingEngine(config=config, country_rules=country_rules)
    result = engine.price(10000, 2, 'SG', 'SGD')
    assert result.strategy == 'country'
    assert result.tier_multiplier == 1.2
    assert result.markup == pytest.approx(1800.0)
    assert result.final_price == pytest.approx(11800.0)


def test_country_without_rule_falls_through_to_slab(engine):
    engine.config = slab_config(enable_country_based_pricing=True)
    result = engine.price(8000, 1, 'FR', 'THB')
    assert result.strategy == 'slab'
    assert result.tier_multiplier == 1.0


def test_per_person_mode_compares_per_person_amount(thb_slabs):
    """24000 THB for 4 pax is 6000 each → mid slab at 10% applied to the full 24000."""
    engine = PricingEngine(config=slab_config(slab_application_mode='per-person'), slabs=thb_slabs)
    result = engine.price(24000, PaxCount(adults=2, children=2), 'TH', 'THB')
    assert result.slab_id == 'mid'
    assert result.markup == pytest.approx(2400.0)
    assert result.final_price == pytest.approx(26400.0)


def test_total_mode_compares_full_amount(thb_slabs):
    engine = PricingEngine(config=slab_config(slab_application_mode='total'), slabs=thb_slabs)
    result = engine.price(24000, PaxCount(adults=2, children=2), 'TH', 'THB')
    assert result.slab_id == 'premium'
    assert result.markup == pytest.approx(1920.0)


def test_infants_are_excluded_from_pax(thb_slabs):
    """18000 / 3 paying pax = 6000 → mid slab; counting the infant would give 4500 → budget."""
    engine = PricingEngine(config=slab_config(slab_application_mode='per-person'), slabs=thb_slabs)
    result = engine.price(18000, PaxCount(adults=2, children=1, infants=1), 'TH', 'THB')
    assert result.total_pax == 3
    assert result.slab_id == 'mid'
    assert result.per_person_price == pytest.approx(19800.0 / 3)


@pytest.mark.parametrize("pax_count", [1, 2, 3, 5, 8, 13])
def test_per_person_slab_stable_as_group_grows(thb_slabs, pax_count):
    """Holding the per-person cost fixed, the same slab is selected for any group size."""
    engine = PricingEngine(config=slab_config(slab_application_mode='per-person'), slabs=thb_slabs)
    result = engine.price(7000 * pax_count, PaxCount(adults=pax_count), 'TH', 'THB')
    assert result.slab_id == 'mid'


@pytest.mark.parametrize("pax", [PaxCount(adults=1), PaxCount(adults=3), PaxCount(adults=2, children=5)])
def test_per_person_split_consistency(engine, pax):
    result = engine.price(12345.67, pax, 'TH', 'THB')
    assert result.per_person_price * pax.total == pytest.approx(result.final_price)
    assert engine.per_person(result.final_price, pax) == pytest.approx(result.per_person_price)


def test_zero_paying_pax_raises(engine):
    with pytest.raises(InvalidPaxCountError):
        engine.price(1000, PaxCount(adults=0, children=0, infants=2), 'TH', 'THB')
    with pytest.raises(InvalidPaxCountError):
        engine.per_person(1000, 0)


@pytest.mark.parametrize("pax", [
    PaxCount(adults=2, children=-1),
    PaxCount(adults=-1, children=3),
    PaxCount(adults=1, infants=-1),
])
def test_negative_pax_counts_raise(engine, pax):
    with pytest.raises(InvalidPaxCountError):
        engine.price(8000, pax, 'TH', 'THB')
    with pytest.raises(InvalidPaxCountError):
        engine.per_person(8000, pax)


def test_int_pax_is_read_as_adults(engine):
    result = engine.price(8000, 4, 'TH', 'THB')
    assert result.total_pax == 4
    assert result.per_person_price == pytest.approx(2200.0)


def test_source_currency_is_converted_before_markup(thb_slabs, exchange_rates):
    """200 USD × 35 × 1.02 = 7140 THB → mid slab at 10%."""
    engine = PricingEngine(config=slab_config(), slabs=thb_slabs, converter=CurrencyConverter(exchange_rates))
    result = engine.price(200, 2, 'TH', 'THB', source_currency='USD')
    assert result.base_price == pytest.approx(7140.0)
    assert result.source_currency == 'USD'
    assert result.conversion_rate == pytest.approx(35.7)
    assert result.markup == pytest.approx(714.0)
    assert result.final_price == pytest.approx(7854.0)


def test_country_currency_uses_rule_conversion_margin(exchange_rates):
    """A THB cost quoted in INR converts at the rule's 2% margin instead of the record's 0%."""
    rules = [CountryPricingRule(country_code='TH', tier='standard', default_markup=10,
                                markup_type='percentage', conversion_margin=2, currency='THB')]
    engine = PricingEngine(config=slab_config(enable_country_based_pricing=True), country_rules=rules,
                           converter=CurrencyConverter(exchange_rates))
    result = engine.price(1000, 1, 'TH', 'INR', source_currency='THB')
    expected_base = 1000 * 2.5 * 1.02 + 50
    assert result.base_price == pytest.approx(expected_base)
    assert result.source_amount == 1000
    assert result.markup == pytest.approx(expected_base * 0.10)
    assert result.final_price == pytest.approx(expected_base * 1.10)


def test_rule_currency_alone_does_not_convert(exchange_rates):
    """Without a source currency the caller's amount is the base, whatever the rule's currency."""
    rules = [
        CountryPricingRule(country_code='AE', tier='premium', default_markup=10, currency='AED'),
        CountryPricingRule(country_code='MY', tier='budget', default_markup=7, currency='MYR'),
    ]
    engine = PricingEngine(config=slab_config(enable_country_based_pricing=True), country_rules=rules,
                           converter=CurrencyConverter(exchange_rates))

    result = engine.price(10000, 1, 'AE', 'USD')
    assert result.base_price == 10000
    assert result.source_currency is None
    assert result.source_amount is None
    assert result.markup == pytest.approx(1200.0)  # 10% × premium 1.2

    # No MYR→USD rate exists, and none is needed
    assert engine.price(10000, 1, 'MY', 'USD').base_price == 10000


def test_missing_rate_propagates(thb_slabs):
    engine = PricingEngine(config=slab_config(), slabs=thb_slabs)
    with pytest.raises(RateNotFoundError):
        engine.price(100, 1, 'TH', 'THB', source_currency='EUR')


def test_trace_records_each_step(engine):
    result = engine.price(8000, 2, 'TH', 'THB')
    steps = [t.step for t in result.trace]
    assert steps[0] == 'Passengers'
    assert 'Slab Match' in steps
    assert steps[-1] == 'Final Price'
    assert 'mid (5000 <= 8000 <= 10000 THB)' in result.get_trace_text()


def test_invalid_slab_mode_rejected():
    with pytest.raises(ValueError):
        PricingConfig(slab_application_mode='per-night')
