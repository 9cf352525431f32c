from datetime import date, time, timedelta
from types import SimpleNamespace

import pytest

from appointly.models.generated import Bookings, RecurringBookings
from appointly.services.recurring import (
    generate_bookings_from_recurring,
    generate_occurrences,
    parse_start_time,
)

from conftest import MONDAY, at


def template(**fields):
    defaults = dict(
        id=1,
        frequency="WEEKLY",
        day_of_week=None,
        day_of_month=None,
        start_time="10:00",
        start_date=MONDAY,
        end_date=None,
        number_of_occurrences=None,
        last_generated_date=None,
    )
    defaults.update(fields)
    return SimpleNamespace(**defaults)


@pytest.mark.parametrize("raw, expected", [
    ("14:00", time(14, 0)),
    ("9:30", time(9, 30)),
    ("2:00 PM", time(14, 0)),
    ("12:15 pm", time(12, 15)),
    ("12 am", time(0, 0)),
])
def test_parse_start_time(raw, expected):
    assert parse_start_time(raw) == expected


def test_parse_start_time_rejects_garbage():
    with pytest.raises(ValueError):
        parse_start_time("noon")


def test_weekly_occurrences():
    occurrences = generate_occurrences(
        template(frequency="WEEKLY", day_of_week=0),
        up_to=at(MONDAY + timedelta(days=21), "23:59"),
    )
    assert occurrences == [at(MONDAY + timedelta(days=7 * n), "10:00") for n in range(4)]


def test_biweekly_resumes_on_cycle_after_cursor():
    wednesday = MONDAY + timedelta(days=2)
    occurrences = generate_occurrences(
        template(
            frequency="BIWEEKLY",
            day_of_week=2,
            last_generated_date=at(wednesday, "10:00"),
        ),
        up_to=at(date(2030, 2, 10), "00:00"),
    )
    assert occurrences == [at(date(2030, 1, 23), "10:00"), at(date(2030, 2, 6), "10:00")]


def test_monthly_clamps_to_month_end():
    occurrences = generate_occurrences(
        template(frequency="MONTHLY", day_of_month=31, start_date=date(2030, 1, 1)),
        up_to=at(date(2030, 4, 30), "23:59"),
    )
    assert [o.date() for o in occurrences] == [
        date(2030, 1, 31),
        date(2030, 2, 28),
        date(2030, 3, 31),
        date(2030, 4, 30),
    ]


def test_occurrence_limit_counts_existing_bookings():
    occurrences = generate_occurrences(
        template(frequency="DAILY", number_of_occurrences=3),
        up_to=at(MONDAY + timedelta(days=30), "00:00"),
        already_generated=1,
    )
    assert len(occurrences) == 2


def test_end_date_bounds_series():
    occurrences = generate_occurrences(
        template(frequency="DAILY", end_date=MONDAY + timedelta(days=2)),
        up_to=at(MONDAY + timedelta(days=30), "00:00"),
    )
    assert len(occurrences) == 3


def test_weekly_without_weekday_yields_nothing():
    assert generate_occurrences(template(frequency="WEEKLY"), up_to=at(MONDAY, "23:59")) == []


# ── Generation against the database ──────────────────────────────────────


@pytest.fixture
def daily_template(db, make_business, make_service):
    business = make_business()
    service = make_service(business, duration=60)
    obj = RecurringBookings(
        business_id=business.id,
        service_id=service.id,
        customer_name="Regular",
        customer_email="regular@example.com",
        frequency="DAILY",
        start_time="10:00",
        start_date=MONDAY,
    )
    db.add(obj)
    db.commit()
    return obj


def test_generation_skips_closed_days_and_conflicts(db, daily_template, make_booking):
    service = daily_template.service
    wednesday = MONDAY + timedelta(days=2)
    thursday = MONDAY + timedelta(days=3)
    make_booking(service, at(wednesday, "10:30"))
    make_booking(service, at(thursday, "10:00"), status="NO_SHOW")

    result = generate_bookings_from_recurring(
        db,
        now=at(MONDAY - timedelta(days=1), "00:00"),
        up_to=at(MONDAY + timedelta(days=6), "23:59"),
    )

    # Mon, Tue, Thu (no-show slot is free), Fri; Wed conflicts, Sat/Sun closed
    assert result == {"created": 4, "skipped": 3, "errors": 0}

    generated = (
        db.query(Bookings)
        .filter(Bookings.recurring_booking_id == daily_template.id)
        .order_by(Bookings.start_time)
        .all()
    )
    assert [b.start_time.date() for b in generated] == [
        MONDAY,
        MONDAY + timedelta(days=1),
        thursday,
        MONDAY + timedelta(days=4),
    ]
    assert all(b.status == "PENDING" for b in generated)
    assert all(b.end_time - b.start_time == timedelta(hours=1) for b in generated)

    db.refresh(daily_template)
    assert daily_template.last_generated_date == at(MONDAY + timedelta(days=6), "10:00")


def test_generation_resumes_after_cursor(db, daily_template):
    now = at(MONDAY - timedelta(days=1), "00:00")
    first = generate_bookings_from_recurring(db, now=now, up_to=at(MONDAY + timedelta(days=1), "23:59"))
    second = generate_bookings_from_recurring(db, now=now, up_to=at(MONDAY + timedelta(days=1), "23:59"))

    assert first["created"] == 2
    assert second == {"created": 0, "skipped": 0, "errors": 0}


def test_generation_skips_past_occurrences(db, daily_template):
    result = generate_bookings_from_recurring(
        db,
        now=at(MONDAY, "12:00"),
        up_to=at(MONDAY + timedelta(days=1), "23:59"),
    )
    assert result == {"created": 1, "skipped": 1, "errors": 0}


def test_inactive_templates_are_ignored(db, daily_template):
    daily_template.is_active = False
    db.commit()

    result = generate_bookings_from_recurring(
        db,
        now=at(MONDAY - timedelta(days=1), "00:00"),
        up_to=at(MONDAY + timedelta(days=6), "23:59"),
    )
    assert result == {"created": 0, "skipped": 0, "errors": 0}
