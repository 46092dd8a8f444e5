import pytest
from datetime import date, datetime, timedelta, timezone

from app.domain.date_range import DateRange
from app.errors import InvalidRangeError


# ============================================================================
# CONSTRUCTION
# ============================================================================


def test_same_day_range_is_valid():
    r = DateRange(date(2025, 6, 1), date(2025, 6, 1))
    assert r.start == r.end
    assert r.duration_days == 0


def test_end_before_start_fails():
    with pytest.raises(InvalidRangeError, match="cannot precede"):
        DateRange(date(2025, 6, 3), date(2025, 6, 1))


@pytest.mark.parametrize("bad", ["2025-06-01", None, 20250601])
def test_non_date_endpoint_fails(bad):
    with pytest.raises(InvalidRangeError, match="not a valid calendar date"):
        DateRange(bad, date(2025, 6, 1))


def test_naive_datetime_is_normalized_to_calendar_day():
    r = DateRange(datetime(2025, 6, 1, 23, 30), datetime(2025, 6, 3, 0, 15))
    assert r.start == date(2025, 6, 1)
    assert r.end == date(2025, 6, 3)
    assert r.duration_days == 2


def test_aware_datetime_is_normalized_to_local_day():
    moment = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
    r = DateRange(moment, moment + timedelta(days=1))
    assert r.start == moment.astimezone().date()
    assert r.duration_days == 1


# ============================================================================
# OVERLAP
# ============================================================================


def test_range_overlaps_itself():
    r = DateRange(date(2025, 6, 1), date(2025, 6, 5))
    assert r.overlaps(r)


def test_disjoint_ranges_do_not_overlap():
    r1 = DateRange(date(2025, 6, 1), date(2025, 6, 3))
    r2 = DateRange(date(2025, 6, 4), date(2025, 6, 6))
    assert not r1.overlaps(r2)
    assert not r2.overlaps(r1)


def test_shared_boundary_day_overlaps():
    """A contract ending on day D conflicts with one starting on day D."""
    r1 = DateRange(date(2025, 6, 1), date(2025, 6, 3))
    r2 = DateRange(date(2025, 6, 3), date(2025, 6, 6))
    assert r1.overlaps(r2)
    assert r2.overlaps(r1)


def test_contained_range_overlaps():
    outer = DateRange(date(2025, 6, 1), date(2025, 6, 30))
    inner = DateRange(date(2025, 6, 10), date(2025, 6, 10))
    assert outer.overlaps(inner)
    assert inner.overlaps(outer)


# ============================================================================
# DURATION & EXPANSION
# ============================================================================


def test_duration_for_pricing_uses_day_difference():
    assert DateRange(date(2025, 6, 1), date(2025, 6, 3)).duration_days_for_pricing() == 2


def test_same_day_rental_prices_as_one_day():
    assert DateRange(date(2025, 6, 1), date(2025, 6, 1)).duration_days_for_pricing() == 1


def test_expand_inclusive_days_includes_both_ends():
    days = list(DateRange(date(2025, 6, 29), date(2025, 7, 2)).expand_inclusive_days())
    assert days == [
        date(2025, 6, 29),
        date(2025, 6, 30),
        date(2025, 7, 1),
        date(2025, 7, 2),
    ]


def test_expand_inclusive_days_is_restartable():
    r = DateRange(date(2025, 6, 1), date(2025, 6, 3))
    assert list(r.expand_inclusive_days()) == list(r.expand_inclusive_days())


def test_expand_across_leap_day():
    days = list(DateRange(date(2024, 2, 28), date(2024, 3, 1)).expand_inclusive_days())
    assert date(2024, 2, 29) in days
    assert len(days) == 3
