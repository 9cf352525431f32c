from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    JSON,
    Text,
    text,
    true,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata

BOOKING_STATUSES = ("PENDING", "CONFIRMED", "CANCELLED", "COMPLETED", "NO_SHOW")
PAYMENT_STATUSES = ("UNPAID", "PENDING", "PAID", "REFUNDED", "FAILED")
RECURRING_FREQUENCIES = ("DAILY", "WEEKLY", "BIWEEKLY", "MONTHLY")


class Business(Base):
    __tablename__ = 'business'

    id = Column(Integer, primary_key=True)
    business_name = Column(Text, nullable=False)
    timezone = Column(Text, nullable=False, server_default=text("'UTC'"))
    minimum_advance_booking_hours = Column(Integer, nullable=False, server_default=text('0'))
    cancellation_policy_hours = Column(Integer, nullable=False, server_default=text('0'))
    booking_buffer_minutes = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    availability = relationship('Availability', uselist=False, back_populates='business')
    locations = relationship('Locations', back_populates='business')
    services = relationship('Services', back_populates='business')
    bookings = relationship('Bookings', back_populates='business')
    recurring_bookings = relationship('RecurringBookings', back_populates='business')


class Availability(Base):
    __tablename__ = 'availability'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False, unique=True)
    monday = Column(JSON)
    tuesday = Column(JSON)
    wednesday = Column(JSON)
    thursday = Column(JSON)
    friday = Column(JSON)
    saturday = Column(JSON)
    sunday = Column(JSON)
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Business', back_populates='availability')


class Locations(Base):
    __tablename__ = 'locations'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    address = Column(Text)
    is_active = Column(Boolean, nullable=False, server_default=true())

    business = relationship('Business', back_populates='locations')
    services = relationship('Services', back_populates='location')
    bookings = relationship('Bookings', back_populates='location')


class Services(Base):
    __tablename__ = 'services'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False)
    location_id = Column(ForeignKey('locations.id', ondelete='SET NULL'))
    name = Column(Text, nullable=False)
    description = Column(Text)
    duration = Column(Integer, nullable=False)
    buffer_time_before = Column(Integer, nullable=False, server_default=text('0'))
    buffer_time_after = Column(Integer, nullable=False, server_default=text('0'))
    price = Column(Float, nullable=False, server_default=text('0'))
    is_active = Column(Boolean, nullable=False, server_default=true())

    business = relationship('Business', back_populates='services')
    location = relationship('Locations', back_populates='services')
    bookings = relationship('Bookings', back_populates='service')
    recurring_bookings = relationship('RecurringBookings', back_populates='service')


class RecurringBookings(Base):
    __tablename__ = 'recurring_bookings'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False)
    location_id = Column(ForeignKey('locations.id', ondelete='SET NULL'))
    service_id = Column(ForeignKey('services.id'), nullable=False)
    customer_name = Column(Text, nullable=False)
    customer_email = Column(Text, nullable=False)
    customer_phone = Column(Text)
    frequency = Column(Enum(*RECURRING_FREQUENCIES, name='recurring_frequency'), nullable=False)
    day_of_week = Column(Integer)
    day_of_month = Column(Integer)
    start_time = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    number_of_occurrences = Column(Integer)
    last_generated_date = Column(DateTime)
    is_active = Column(Boolean, nullable=False, server_default=true())
    notes = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Business', back_populates='recurring_bookings')
    service = relationship('Services', back_populates='recurring_bookings')
    bookings = relationship('Bookings', back_populates='recurring_booking')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        CheckConstraint('end_time > start_time', name='ck_bookings_end_after_start'),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False, index=True)
    location_id = Column(ForeignKey('locations.id', ondelete='SET NULL'))  # NULL = all locations
    service_id = Column(ForeignKey('services.id'), nullable=False)
    recurring_booking_id = Column(ForeignKey('recurring_bookings.id', ondelete='SET NULL'))
    customer_name = Column(Text, nullable=False)
    customer_email = Column(Text, nullable=False)
    customer_phone = Column(Text)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    status = Column(Enum(*BOOKING_STATUSES, name='booking_status'), nullable=False, server_default=text("'PENDING'"))
    payment_status = Column(Enum(*PAYMENT_STATUSES, name='payment_status'), nullable=False, server_default=text("'UNPAID'"))
    notes = Column(Text)
    cancel_reason = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    business = relationship('Business', back_populates='bookings')
    location = relationship('Locations', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')
    recurring_booking = relationship('RecurringBookings', back_populates='bookings')
