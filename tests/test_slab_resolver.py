import pytest

from travel_pricing.engine.slab_resolver import SlabResolver, compute_markup, resolve_slab
from travel_pricing.engine.validation import validate_slab_set

from conftest import make_slab


@pytest.mark.parametrize("amount", [5000, 7500, 10000])
def test_bounds_are_inclusive(thb_slabs, amount):
    """Both min and max of [5000, 10000] match the mid slab."""
    slab = resolve_slab(amount, 'THB', thb_slabs)
    assert slab is not None
    assert slab.id == 'mid'


def test_gap_between_slabs_returns_none():
    slabs = [make_slab('low', 0, 1000, 10), make_slab('high', 2000, 3000, 5)]
    assert resolve_slab(1500, 'THB', slabs) is None


def test_other_currency_slabs_are_ignored(thb_slabs):
    assert resolve_slab(8000, 'USD', thb_slabs) is None


def test_currency_match_is_case_insensitive(thb_slabs):
    assert resolve_slab(8000, 'thb', thb_slabs).id == 'mid'


def test_inactive_slabs_are_skipped():
    slabs = [
        make_slab('old', 0, 10000, 20, is_active=False),
        make_slab('current', 0, 10000, 10),
    ]
    assert resolve_slab(500, 'THB', slabs).id == 'current'


def test_no_slabs_returns_none():
    assert resolve_slab(100, 'THB', []) is None


def test_overlap_resolves_to_first_in_stored_order():
    """When validation was bypassed, the earlier slab wins deterministically."""
    first = make_slab('first', 0, 10000, 10)
    second = make_slab('second', 5000, 20000, 20)
    slabs = [first, second]

    # The set would have been rejected at write time
    assert not validate_slab_set(slabs).valid

    results = {resolve_slab(7500, 'THB', slabs).id for _ in range(20)}
    assert results == {'first'}

    # Reversing stored order flips the winner
    assert resolve_slab(7500, 'THB', [second, first]).id == 'second'


def test_validated_set_resolves_single_match(thb_slabs):
    """A clean set has exactly one slab for each covered amount."""
    assert validate_slab_set(thb_slabs).valid
    for amount in (0, 4999.99, 5000, 10000, 10000.01, 50000, 1000000):
        matches = [s for s in thb_slabs if s.contains(amount)]
        assert len(matches) == 1
        assert resolve_slab(amount, 'THB', thb_slabs) is matches[0]


def test_percentage_markup():
    slab = make_slab('mid', 5000, 10000, 10)
    assert compute_markup(8000, slab) == pytest.approx(800.0)


def test_fixed_markup_ignores_amount():
    slab = make_slab('group', 0, 100000, 4500, markup_type='fixed')
    assert compute_markup(8000, slab) == 4500
    assert compute_markup(80000, slab) == 4500


def test_resolver_explains_match(thb_slabs):
    resolver = SlabResolver(thb_slabs)
    matched = resolver.find(8000, 'THB')
    assert matched.slab.id == 'mid'
    assert matched.compared_amount == 8000
    assert "5000 <= 8000 <= 10000 THB" in matched.match_reason


def test_resolver_overlapping_pairs():
    slabs = [
        make_slab('a', 0, 1000, 10),
        make_slab('b', 1000, 2000, 10),
        make_slab('c', 5000, 6000, 10),
        make_slab('d', 500, 800, 10, currency='USD'),
    ]
    pairs = SlabResolver(slabs).overlapping_pairs()
    assert [(x.id, y.id) for x, y in pairs] == [('a', 'b')]


def test_resolver_active_slabs_by_currency(thb_slabs):
    slabs = thb_slabs + [make_slab('usd', 0, 100, 5, currency='USD'), make_slab('off', 0, 1, 1, is_active=False)]
    resolver = SlabResolver(slabs)
    assert len(resolver.active_slabs()) == 5
    assert [s.id for s in resolver.active_slabs('usd')] == ['usd']
