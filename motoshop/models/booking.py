"""
SQLAlchemy model for the booking_requests table.
"""

from sqlalchemy import Column, Date, Float, ForeignKey, String, Text, Time

from motoshop.db.session import Base
from motoshop.db.base_model import OwnedRecord


class BookingRequest(Base, OwnedRecord):
    """
    A rider's request for a workshop appointment.
    Status moves on the platform side after creation; riders may only
    cancel or delete while it is still pending.
    """
    __tablename__ = "booking_requests"

    motorcycle_id = Column(
        String(36), ForeignKey("biker_motorcycles.id", ondelete="CASCADE"), nullable=False
    )
    service_type = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    preferred_date = Column(Date, nullable=False)
    preferred_time = Column(Time, nullable=False)
    contact_phone = Column(String)
    contact_method = Column(String, nullable=False, default="email")
    urgency = Column(String, nullable=False, default="normal")
    estimated_budget = Column(Float)
    currency = Column(String, nullable=False, default="EUR")
    status = Column(String, nullable=False, default="pending")
    admin_notes = Column(Text)
    confirmed_date = Column(Date)
    confirmed_time = Column(Time)

    def __repr__(self):
        return f"<BookingRequest {self.id} {self.service_type} [{self.status}]>"
