import threading
import time
from datetime import timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from appointly.database import enable_sqlite_fk
from appointly.models import Base
from appointly.models.generated import Availability, Bookings, Business, Services
from appointly.services.booking_guard import SlotConflict, check_booking_slot
from appointly.services.booking_scope import load_existing_intervals
from appointly.services.policy import BookingRules, Interval
from appointly.services.reservation import BusinessNotFound, business_reservation

from conftest import MONDAY, WEEKLY_MON_FRI, at

NOW = at(MONDAY, "07:00")
SLOT = Interval(at(MONDAY, "10:00"), at(MONDAY, "10:30"))


def file_engine(path, timeout):
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False, "timeout": timeout},
    )
    event.listen(engine, "connect", enable_sqlite_fk)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def shared_db(tmp_path):
    engine = file_engine(tmp_path / "booking.db", timeout=0.2)
    yield engine
    engine.dispose()


def seed(engine) -> tuple[int, int]:
    with sessionmaker(bind=engine)() as session:
        business = Business(business_name="Studio")
        session.add(business)
        session.flush()
        session.add(Availability(business_id=business.id, **WEEKLY_MON_FRI))
        service = Services(business_id=business.id, name="Consultation", duration=30)
        session.add(service)
        session.commit()
        return business.id, service.id


def check_and_add(db, business, service_id, candidate):
    existing = load_existing_intervals(db, business.id, None, candidate.start, candidate.end)
    check_booking_slot(
        candidate,
        business.availability,
        BookingRules.from_business(business),
        existing,
        NOW,
        suggest_alternatives=False,
    )
    db.add(Bookings(
        business_id=business.id,
        service_id=service_id,
        customer_name="Customer",
        customer_email="customer@example.com",
        start_time=candidate.start,
        end_time=candidate.end,
        status="PENDING",
    ))


def count_bookings(engine) -> int:
    with sessionmaker(bind=engine)() as session:
        return session.query(Bookings).count()


def test_second_reservation_waits_for_the_first(shared_db):
    business_id, service_id = seed(shared_db)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=shared_db)
    first, second = factory(), factory()

    try:
        with business_reservation(first, business_id) as business:
            check_and_add(first, business, service_id, SLOT)

            # Same business while the first is still open: cannot even read
            with pytest.raises(OperationalError):
                with business_reservation(second, business_id) as other:
                    check_and_add(second, other, service_id, SLOT)

        # First committed: the retry sees its booking
        with pytest.raises(SlotConflict):
            with business_reservation(second, business_id) as other:
                check_and_add(second, other, service_id, SLOT)
    finally:
        first.close()
        second.close()

    assert count_bookings(shared_db) == 1


def test_concurrent_reservations_leave_one_booking(tmp_path):
    engine = file_engine(tmp_path / "booking.db", timeout=5)
    business_id, service_id = seed(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    outcome = {}
    started = threading.Event()

    def second_request():
        session = factory()
        started.set()
        try:
            with business_reservation(session, business_id) as business:
                check_and_add(session, business, service_id, SLOT)
            outcome["second"] = "created"
        except SlotConflict:
            outcome["second"] = "conflict"
        finally:
            session.close()

    first = factory()
    worker = threading.Thread(target=second_request)
    try:
        with business_reservation(first, business_id) as business:
            check_and_add(first, business, service_id, SLOT)
            worker.start()
            started.wait(timeout=2)
            time.sleep(0.3)
    finally:
        first.close()
    worker.join(timeout=10)

    assert outcome == {"second": "conflict"}
    assert count_bookings(engine) == 1
    engine.dispose()


def test_other_business_is_not_blocked(shared_db):
    business_id, service_id = seed(shared_db)
    other_id, other_service_id = seed(shared_db)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=shared_db)
    first = factory()
    try:
        with business_reservation(first, business_id) as business:
            check_and_add(first, business, service_id, SLOT)
    finally:
        first.close()

    second = factory()
    try:
        with business_reservation(second, other_id) as business:
            check_and_add(second, business, other_service_id, SLOT)
    finally:
        second.close()

    assert count_bookings(shared_db) == 2


def test_missing_business_rolls_back(shared_db):
    seed(shared_db)
    session = sessionmaker(bind=shared_db)()
    try:
        with pytest.raises(BusinessNotFound):
            with business_reservation(session, 999):
                pass
        # Lock released: a new write goes through
        session.add(Business(business_name="Other"))
        session.commit()
    finally:
        session.close()


def test_rejected_booking_releases_the_lock(shared_db):
    business_id, service_id = seed(shared_db)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=shared_db)
    first, second = factory(), factory()
    try:
        with pytest.raises(SlotConflict):
            with business_reservation(first, business_id) as business:
                check_and_add(first, business, service_id, SLOT)
                first.flush()
                check_and_add(first, business, service_id, SLOT.shifted(timedelta(minutes=15)))

        with business_reservation(second, business_id) as business:
            check_and_add(second, business, service_id, SLOT)
    finally:
        first.close()
        second.close()

    assert count_bookings(shared_db) == 1
