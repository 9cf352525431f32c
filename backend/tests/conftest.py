from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from appointly.database import enable_sqlite_fk, get_db
from appointly.main import app
from appointly.models import Base
from appointly.models.generated import Availability, Bookings, Business, Services
from appointly.redis_client import get_redis

OPEN_9_TO_5 = {"open": "09:00", "close": "17:00", "isOpen": True}
CLOSED_DAY = {"open": "09:00", "close": "17:00", "isOpen": False}

WEEKLY_MON_FRI = {
    "monday": OPEN_9_TO_5,
    "tuesday": OPEN_9_TO_5,
    "wednesday": OPEN_9_TO_5,
    "thursday": OPEN_9_TO_5,
    "friday": OPEN_9_TO_5,
    "saturday": CLOSED_DAY,
    "sunday": None,
}

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)


def at(day: date, hhmm: str) -> datetime:
    hours, minutes = hhmm.split(":")
    return datetime.combine(day, datetime.min.time()).replace(hour=int(hours), minute=int(minutes))


def next_weekday(weekday: int, weeks_ahead: int = 1) -> date:
    """A date with the given weekday (0 = Monday), at least a week from today."""
    today = date.today()
    return today + timedelta(days=(weekday - today.weekday()) % 7 + 7 * weeks_ahead)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_fk)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_business(db):
    def _make(weekly=WEEKLY_MON_FRI, **rules):
        business = Business(business_name="Studio", **rules)
        db.add(business)
        db.flush()
        if weekly is not None:
            db.add(Availability(business_id=business.id, **weekly))
        db.commit()
        return business
    return _make


@pytest.fixture
def make_service(db):
    def _make(business, duration=30, **fields):
        service = Services(business_id=business.id, name="Consultation", duration=duration, **fields)
        db.add(service)
        db.commit()
        return service
    return _make


@pytest.fixture
def make_booking(db):
    def _make(service, start, end=None, status="CONFIRMED", location_id=None):
        booking = Bookings(
            business_id=service.business_id,
            service_id=service.id,
            location_id=location_id,
            customer_name="Existing Customer",
            customer_email="existing@example.com",
            start_time=start,
            end_time=end or start + timedelta(minutes=service.duration),
            status=status,
        )
        db.add(booking)
        db.commit()
        return booking
    return _make
