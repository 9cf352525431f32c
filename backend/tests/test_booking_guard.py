from datetime import timedelta

import pytest

from appointly.services.booking_guard import (
    AdvanceNoticeRequired,
    BookingInPast,
    BusinessClosed,
    CancellationWindowClosed,
    InvalidInterval,
    NotReschedulable,
    OutsideBusinessHours,
    SlotConflict,
    check_booking_slot,
    check_cancellation,
    check_reschedulable,
)
from appointly.services.policy import BookingRules, Interval, occupied_interval
from appointly.services.slots import SlotsConfig

from conftest import MONDAY, WEEKLY_MON_FRI, at

CONFIG = SlotsConfig()
NOW = at(MONDAY, "08:00")
RULES = BookingRules(minimum_advance_booking_hours=2)


def test_end_to_end_conflict_scenario():
    existing = [Interval(at(MONDAY, "10:00"), at(MONDAY, "10:30"))]
    candidate = Interval(at(MONDAY, "10:15"), at(MONDAY, "10:45"))

    with pytest.raises(SlotConflict) as exc:
        check_booking_slot(candidate, WEEKLY_MON_FRI, RULES, existing, NOW, config=CONFIG)

    error = exc.value
    assert error.status_code == 409
    assert error.conflicts == existing

    response = error.to_response()
    assert response["error"] == "This time slot is no longer available"
    assert response["conflict"] is True
    assert response["conflicting_bookings"] == [{
        "start_time": "2030-01-07T10:00:00",
        "end_time": "2030-01-07T10:30:00",
    }]


def test_conflict_offers_nearest_alternatives():
    existing = [Interval(at(MONDAY, "10:00"), at(MONDAY, "10:30"))]
    candidate = Interval(at(MONDAY, "10:15"), at(MONDAY, "10:45"))

    with pytest.raises(SlotConflict) as exc:
        check_booking_slot(candidate, WEEKLY_MON_FRI, RULES, existing, NOW, config=CONFIG)

    starts = [alt.start for alt in exc.value.alternatives]
    assert starts == [
        at(MONDAY, "10:30"),
        at(MONDAY, "11:00"),
        at(MONDAY, "11:30"),
        at(MONDAY, "12:00"),
        at(MONDAY, "12:30"),
    ]
    first = exc.value.alternatives[0].format()
    assert first["value"] == "2030-01-07T10:30:00"
    assert first["reason"] == "Same time slot, just 15 minutes later"


def test_free_slot_passes():
    existing = [Interval(at(MONDAY, "10:00"), at(MONDAY, "10:30"))]
    candidate = Interval(at(MONDAY, "10:30"), at(MONDAY, "11:00"))
    check_booking_slot(candidate, WEEKLY_MON_FRI, RULES, existing, NOW, config=CONFIG)


def test_invalid_interval_rejected():
    candidate = Interval(at(MONDAY, "11:00"), at(MONDAY, "11:00"))
    with pytest.raises(InvalidInterval):
        check_booking_slot(candidate, WEEKLY_MON_FRI, RULES, [], NOW)


def test_past_is_checked_before_closed_day():
    saturday = MONDAY - timedelta(days=2)
    candidate = Interval(at(saturday, "10:00"), at(saturday, "10:30"))
    with pytest.raises(BookingInPast):
        check_booking_slot(candidate, WEEKLY_MON_FRI, RULES, [], NOW)


def test_closed_day_rejected():
    saturday = MONDAY + timedelta(days=5)
    candidate = Interval(at(saturday, "10:00"), at(saturday, "10:30"))
    with pytest.raises(BusinessClosed):
        check_booking_slot(candidate, WEEKLY_MON_FRI, RULES, [], NOW)


def test_appointment_running_past_close_rejected():
    candidate = Interval(at(MONDAY, "16:45"), at(MONDAY, "17:15"))
    with pytest.raises(OutsideBusinessHours) as exc:
        check_booking_slot(candidate, WEEKLY_MON_FRI, RULES, [], NOW)
    assert exc.value.to_response()["business_hours"] == {"open": "09:00", "close": "17:00"}


def test_advance_notice_rejected_with_earliest_start():
    now = at(MONDAY, "09:00")
    candidate = Interval(at(MONDAY, "10:00"), at(MONDAY, "10:30"))
    with pytest.raises(AdvanceNoticeRequired) as exc:
        check_booking_slot(candidate, WEEKLY_MON_FRI, RULES, [], now)
    assert exc.value.earliest_start == at(MONDAY, "11:00")
    assert exc.value.detail == "Bookings must be made at least 2 hours in advance"


def test_unconfigured_availability_is_bookable_any_time():
    sunday = MONDAY + timedelta(days=6)
    candidate = Interval(at(sunday, "23:00"), at(sunday, "23:30"))
    check_booking_slot(candidate, None, RULES, [], NOW)


def test_unconfigured_availability_still_checks_conflicts():
    existing = [Interval(at(MONDAY, "22:00"), at(MONDAY, "23:00"))]
    candidate = Interval(at(MONDAY, "22:30"), at(MONDAY, "23:30"))
    with pytest.raises(SlotConflict):
        check_booking_slot(candidate, None, RULES, existing, NOW, config=CONFIG)


def test_occupied_interval_drives_conflict_check():
    existing = [Interval(at(MONDAY, "10:00"), at(MONDAY, "10:30"))]
    candidate = Interval(at(MONDAY, "10:30"), at(MONDAY, "11:00"))
    occupied = occupied_interval(candidate.start, candidate.end, buffer_before_minutes=15)

    with pytest.raises(SlotConflict):
        check_booking_slot(
            candidate, WEEKLY_MON_FRI, RULES, existing, NOW,
            occupied=occupied, suggest_alternatives=False,
        )


def test_buffer_widening_does_not_affect_hours_check():
    # Occupied interval starts before opening, the appointment itself does not
    candidate = Interval(at(MONDAY, "11:00"), at(MONDAY, "11:30"))
    occupied = Interval(at(MONDAY, "08:30"), at(MONDAY, "11:30"))
    check_booking_slot(candidate, WEEKLY_MON_FRI, RULES, [], NOW, occupied=occupied)


def test_alternatives_are_widened_like_the_request():
    # 10:00 booking with a 30 minute after-buffer, as loaded for conflicts
    existing = [Interval(at(MONDAY, "10:00"), at(MONDAY, "11:00"))]
    candidate = Interval(at(MONDAY, "10:15"), at(MONDAY, "10:45"))

    def occupied(interval):
        return occupied_interval(interval.start, interval.end, 15, 30)

    with pytest.raises(SlotConflict) as exc:
        check_booking_slot(
            candidate, WEEKLY_MON_FRI, RULES, existing, NOW,
            occupied=occupied(candidate), config=CONFIG,
        )

    alternatives = exc.value.alternatives
    assert alternatives
    starts = [alt.start for alt in alternatives]
    assert at(MONDAY, "10:30") not in starts
    # 11:00 only clears the booking without its 15 minute before-buffer
    assert at(MONDAY, "11:00") not in starts

    for alt in alternatives:
        suggestion = Interval(alt.start, alt.end)
        check_booking_slot(
            suggestion, WEEKLY_MON_FRI, RULES, existing, NOW,
            occupied=occupied(suggestion), config=CONFIG,
        )


# ── Cancellation / reschedule ────────────────────────────────────────────


def test_cancellation_inside_window_rejected():
    rules = BookingRules(cancellation_policy_hours=24)
    start = at(MONDAY, "10:00")
    with pytest.raises(CancellationWindowClosed) as exc:
        check_cancellation("CONFIRMED", "CANCELLED", start, rules, start - timedelta(hours=23))
    assert exc.value.deadline == start - timedelta(hours=24)


def test_cancellation_at_deadline_allowed():
    rules = BookingRules(cancellation_policy_hours=24)
    start = at(MONDAY, "10:00")
    check_cancellation("CONFIRMED", "CANCELLED", start, rules, start - timedelta(hours=24))


def test_recancelling_is_not_checked():
    rules = BookingRules(cancellation_policy_hours=24)
    start = at(MONDAY, "10:00")
    check_cancellation("CANCELLED", "CANCELLED", start, rules, start)


def test_other_status_changes_ignore_cancellation_policy():
    rules = BookingRules(cancellation_policy_hours=24)
    start = at(MONDAY, "10:00")
    check_cancellation("PENDING", "CONFIRMED", start, rules, start)


@pytest.mark.parametrize("status", ["CANCELLED", "COMPLETED", "NO_SHOW"])
def test_finished_bookings_cannot_be_rescheduled(status):
    with pytest.raises(NotReschedulable):
        check_reschedulable(status)


def test_active_bookings_can_be_rescheduled():
    check_reschedulable("PENDING")
    check_reschedulable("CONFIRMED")
