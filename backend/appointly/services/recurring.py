# backend/appointly/services/recurring.py
"""
Recurring booking generation.

A RecurringBookings row is a template:
    frequency      DAILY / WEEKLY / BIWEEKLY / MONTHLY
    day_of_week    0 = Monday … 6 = Sunday (WEEKLY, BIWEEKLY)
    day_of_month   1 … 31, clamped to the month's last day (MONTHLY)
    start_time     "14:00" or "2:00 PM"
    start_date / end_date / number_of_occurrences bound the series
    last_generated_date is the cursor; generation resumes after it

Each materialised occurrence goes through the same checks as a booking
created over the API, inside its own reservation. Rejected occurrences
are skipped, not retried.
"""

import calendar
import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Iterator

from redis import Redis
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.generated import Bookings, RecurringBookings
from .booking_guard import BookingRejected, check_booking_slot
from .booking_scope import booking_interval, load_existing_intervals
from .events import emit_event
from .policy import BookingRules, Interval
from .reservation import business_reservation

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000

# Occurrences also skip slots held by no-shows
RECURRING_INACTIVE_STATUSES = ("CANCELLED", "NO_SHOW")

_TIME_RE = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*([AaPp][Mm])?\s*$")


def parse_start_time(value: str) -> time:
    """
    Parse "14:00", "9:30", "2:00 PM" or "12 am".

    Raises:
        ValueError: unrecognised format
    """
    match = _TIME_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid start time: {value!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    meridiem = (match.group(3) or "").lower()

    if meridiem == "pm" and hours != 12:
        hours += 12
    elif meridiem == "am" and hours == 12:
        hours = 0

    return time(hours, minutes)


def _candidate_dates(template, first: date) -> Iterator[date]:
    """Dates matching the template's pattern, on or after `first`."""
    frequency = template.frequency

    if frequency == "DAILY":
        current = first
        while True:
            yield current
            current += timedelta(days=1)

    elif frequency in ("WEEKLY", "BIWEEKLY"):
        if template.day_of_week is None:
            return
        step = 7 if frequency == "WEEKLY" else 14
        # First matching weekday on/after start_date fixes the biweekly cycle
        anchor = template.start_date + timedelta(
            days=(template.day_of_week - template.start_date.weekday()) % 7
        )
        if first <= anchor:
            current = anchor
        else:
            cycles = -(-(first - anchor).days // step)
            current = anchor + timedelta(days=cycles * step)
        while True:
            yield current
            current += timedelta(days=step)

    elif frequency == "MONTHLY":
        if template.day_of_month is None:
            return
        year, month = first.year, first.month
        while True:
            last_day = calendar.monthrange(year, month)[1]
            current = date(year, month, min(template.day_of_month, last_day))
            if current >= first:
                yield current
            month += 1
            if month > 12:
                year, month = year + 1, 1


def generate_occurrences(
    template,
    up_to: datetime,
    already_generated: int = 0,
) -> list[datetime]:
    """
    Occurrence datetimes after the template's cursor, up to `up_to`.

    Args:
        template: RecurringBookings row (or any object with its fields)
        up_to: Latest occurrence start to generate
        already_generated: Bookings already created from this template,
            counted against number_of_occurrences
    """
    start_at = parse_start_time(template.start_time)

    first = template.start_date
    if template.last_generated_date is not None:
        first = max(first, template.last_generated_date.date() + timedelta(days=1))

    remaining = None
    if template.number_of_occurrences:
        remaining = template.number_of_occurrences - already_generated
        if remaining <= 0:
            return []

    occurrences: list[datetime] = []
    for iteration, day in enumerate(_candidate_dates(template, first)):
        if iteration >= MAX_ITERATIONS:
            logger.warning(f"Recurring booking {template.id}: iteration limit reached")
            break
        if remaining is not None and len(occurrences) >= remaining:
            break
        if template.end_date is not None and day > template.end_date:
            break

        occurrence = datetime.combine(day, start_at)
        if occurrence > up_to:
            break
        occurrences.append(occurrence)

    return occurrences


def generate_bookings_from_recurring(
    db: Session,
    now: datetime,
    up_to: datetime,
    recurring_id: int | None = None,
    business_id: int | None = None,
    redis: Redis | None = None,
) -> dict:
    """
    Materialise bookings for active recurring templates.

    Returns:
        {"created": int, "skipped": int, "errors": int}
    """
    result = {"created": 0, "skipped": 0, "errors": 0}

    query = db.query(RecurringBookings).filter(RecurringBookings.is_active.is_(True))
    if recurring_id is not None:
        query = query.filter(RecurringBookings.id == recurring_id)
    if business_id is not None:
        query = query.filter(RecurringBookings.business_id == business_id)

    for template_id in [t.id for t in query.all()]:
        try:
            _generate_for_template(db, template_id, now, up_to, result, redis)
        except (SQLAlchemyError, ValueError):
            db.rollback()
            logger.exception(f"Failed to process recurring booking {template_id}")
            result["errors"] += 1

    logger.info(
        f"Recurring generation: created={result['created']} "
        f"skipped={result['skipped']} errors={result['errors']}"
    )
    return result


def _generate_for_template(
    db: Session,
    template_id: int,
    now: datetime,
    up_to: datetime,
    result: dict,
    redis: Redis | None,
) -> None:
    template = db.get(RecurringBookings, template_id)
    already_generated = (
        db.query(func.count(Bookings.id))
        .filter(Bookings.recurring_booking_id == template_id)
        .scalar()
    )
    occurrences = generate_occurrences(template, up_to, already_generated)
    if not occurrences:
        return

    service = template.service
    duration = timedelta(minutes=service.duration)

    for occurrence in occurrences:
        try:
            with business_reservation(db, template.business_id) as business:
                candidate = Interval(occurrence, occurrence + duration)
                occupied = booking_interval(candidate.start, candidate.end, service)
                existing = load_existing_intervals(
                    db,
                    business.id,
                    template.location_id,
                    occupied.start,
                    occupied.end,
                    inactive_statuses=RECURRING_INACTIVE_STATUSES,
                )
                check_booking_slot(
                    candidate,
                    business.availability,
                    BookingRules.from_business(business),
                    existing,
                    now,
                    occupied=occupied,
                    suggest_alternatives=False,
                )
                booking = Bookings(
                    business_id=template.business_id,
                    location_id=template.location_id,
                    service_id=template.service_id,
                    recurring_booking_id=template.id,
                    customer_name=template.customer_name,
                    customer_email=template.customer_email,
                    customer_phone=template.customer_phone,
                    start_time=occurrence,
                    end_time=occurrence + duration,
                    status="PENDING",
                    notes=template.notes,
                )
                db.add(booking)
        except BookingRejected as e:
            logger.info(f"Recurring {template_id}: skipped {occurrence:%Y-%m-%d %H:%M} ({e.detail})")
            result["skipped"] += 1
            continue
        except SQLAlchemyError:
            logger.exception(f"Recurring {template_id}: failed to create booking for {occurrence}")
            result["errors"] += 1
            continue

        result["created"] += 1
        emit_event(redis, "booking_created", {
            "booking_id": booking.id,
            "recurring_booking_id": template_id,
        })

    template.last_generated_date = occurrences[-1]
    db.commit()
