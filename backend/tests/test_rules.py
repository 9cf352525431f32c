from datetime import datetime, timedelta

import pytest

from appointly.services.policy import (
    BookingRules,
    cancellation_deadline,
    is_advance_booking_allowed,
    is_cancellation_allowed,
)

T = datetime(2030, 1, 7, 8, 0)


def test_advance_boundary_is_inclusive():
    assert is_advance_booking_allowed(T, T + timedelta(hours=2), 2)
    assert not is_advance_booking_allowed(T, T + timedelta(hours=2, minutes=-1), 2)


def test_zero_advance_allows_start_at_now():
    assert is_advance_booking_allowed(T, T, 0)


def test_cancellation_boundary_is_inclusive():
    start = T + timedelta(days=3)
    assert is_cancellation_allowed(start - timedelta(hours=24), start, 24)
    assert not is_cancellation_allowed(start - timedelta(hours=24) + timedelta(minutes=1), start, 24)


def test_zero_cancellation_policy_allows_until_start():
    assert is_cancellation_allowed(T, T, 0)
    assert is_cancellation_allowed(T - timedelta(minutes=1), T, 0)


def test_cancellation_deadline():
    assert cancellation_deadline(T, 48) == T - timedelta(hours=48)


def test_rules_reject_out_of_range_values():
    with pytest.raises(ValueError):
        BookingRules(minimum_advance_booking_hours=169)
    with pytest.raises(ValueError):
        BookingRules(cancellation_policy_hours=-1)
    with pytest.raises(ValueError):
        BookingRules(booking_buffer_minutes=121)


def test_rules_from_business_treats_none_as_zero():
    class Row:
        minimum_advance_booking_hours = None
        cancellation_policy_hours = 24
        booking_buffer_minutes = None

    assert BookingRules.from_business(Row()) == BookingRules(cancellation_policy_hours=24)
