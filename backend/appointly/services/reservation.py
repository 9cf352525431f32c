# backend/appointly/services/reservation.py
"""
Reserve-or-fail transactions around booking writes.

The conflict check only sees a snapshot. Two concurrent requests can both
pass it and both insert unless the read-check-write runs atomically. Every
booking mutation therefore runs inside business_reservation(), which:

- writes to the business row before reading anything. On PostgreSQL this
  takes the row lock; on SQLite the write opens the transaction and takes
  the database RESERVED lock, so a second writer waits (busy timeout) until
  the first commits instead of reading a stale snapshot
- re-reads the business with SELECT ... FOR UPDATE
- commits when the block completes
- rolls back and re-raises on any error, including BookingRejected
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..models.generated import Business

logger = logging.getLogger(__name__)


class BusinessNotFound(LookupError):
    pass


def _lock_business_row(db: Session, business_id: int) -> bool:
    # No-op write: pysqlite only emits BEGIN before DML
    result = db.execute(
        update(Business)
        .where(Business.id == business_id)
        .values(timezone=Business.timezone)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


@contextmanager
def business_reservation(db: Session, business_id: int) -> Iterator[Business]:
    """
    Hold the business lock for one read-check-write sequence.

    Usage:
        with business_reservation(db, business_id) as business:
            existing = load_existing_intervals(db, ...)
            check_booking_slot(candidate, ..., existing, now)
            db.add(booking)
    """
    try:
        if not _lock_business_row(db, business_id):
            raise BusinessNotFound(f"Business {business_id} not found")

        business = (
            db.query(Business)
            .filter(Business.id == business_id)
            .with_for_update()
            .populate_existing()
            .one()
        )

        yield business
        db.commit()
    except Exception:
        db.rollback()
        logger.debug(f"Reservation rolled back for business={business_id}")
        raise
