from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Inquiry(Base):
    """
    A client's consultation/booking request.

    Status workflow: pending → confirmed → cancelled | rescheduled | completed
    While confirmed or rescheduled, preferred_date/preferred_time mirror the
    timeslot the inquiry owns.
    """

    __tablename__ = "inquiries"

    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_CANCELLED = "cancelled"
    STATUS_RESCHEDULED = "rescheduled"
    STATUS_COMPLETED = "completed"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)
    design = Column(JSON, nullable=False)  # {id, name, price, square_meters}
    preferred_date = Column(Date, nullable=False, index=True)
    preferred_time = Column(String(5), nullable=False)  # HH:MM format
    meeting_type = Column(String(20), nullable=False)  # phone, onsite, video
    status = Column(String(20), default=STATUS_PENDING, nullable=False, index=True)
    notes = Column(Text, nullable=True)  # staff notes
    cancellation_reason = Column(Text, nullable=True)
    reschedule_notes = Column(Text, nullable=True)
    user_id = Column(String(50), nullable=True, index=True)  # Registered account id, null for guests
    submitted_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    timeslots = relationship("Timeslot", back_populates="inquiry")


class Timeslot(Base):
    """
    A bookable (date, time) unit of appointment capacity.
    is_available is true exactly when inquiry_id is null.
    """

    __tablename__ = "timeslots"
    __table_args__ = (UniqueConstraint("date", "time", name="uq_timeslots_date_time"),)

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # HH:MM format
    is_available = Column(Boolean, default=True, nullable=False, index=True)
    inquiry_id = Column(Integer, ForeignKey("inquiries.id", ondelete="SET NULL"), nullable=True)
    meeting_type = Column(String(20), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    inquiry = relationship("Inquiry", back_populates="timeslots")


class Notification(Base):
    """In-app notification shown on the user dashboard or the admin panel"""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(50), nullable=True, index=True)  # Registered recipient
    user_email = Column(String(255), nullable=True)
    target_role = Column(String(50), nullable=True, index=True)  # e.g. "admin" for staff-wide notices
    feature = Column(String(50), nullable=False)  # appointments, procurement
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    channels = Column(JSON, default=list)
    extra_data = Column("metadata", JSON, default=dict)
    related_id = Column(String(64), nullable=True, index=True)
    action_url = Column(String(500), nullable=True)
    event_id = Column(Integer, nullable=True, index=True)  # Outbox event that produced it
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class DomainEvent(Base):
    """
    Outbox row appended in the same transaction as a state change.
    Delivered asynchronously by services.event_dispatcher.
    """

    __tablename__ = "domain_events"

    STATUS_PENDING = "pending"
    STATUS_DELIVERED = "delivered"
    STATUS_FAILED = "failed"

    id = Column(Integer, primary_key=True, index=True)
    event_type = Column(String(50), nullable=False)  # appointment_confirmed, pdc_issued, ...
    aggregate_type = Column(String(50), nullable=False)  # inquiry, pdc
    aggregate_id = Column(String(64), nullable=False, index=True)
    payload = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), default=STATUS_PENDING, nullable=False, index=True)
    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    delivered_at = Column(DateTime, nullable=True)
