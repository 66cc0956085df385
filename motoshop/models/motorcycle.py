"""
SQLAlchemy model for the biker_motorcycles table.
"""

from sqlalchemy import Boolean, Column, Date, Integer, String, Text

from motoshop.db.session import Base
from motoshop.db.base_model import OwnedRecord


class BikerMotorcycle(Base, OwnedRecord):
    """A motorcycle in a rider's garage."""
    __tablename__ = "biker_motorcycles"

    brand = Column(String, nullable=False)
    model = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    mileage = Column(Integer)
    mileage_unit = Column(String, nullable=False, default="km")  # 'km' or 'miles'
    engine_size = Column(Integer)  # cc
    color = Column(String)
    license_plate = Column(String)
    vin = Column(String)
    purchase_date = Column(Date)
    current_owner = Column(Boolean, nullable=False, default=True)
    condition = Column(String)  # 'excellent', 'good', 'fair', 'poor'
    notes = Column(Text)

    def __repr__(self):
        return f"<BikerMotorcycle {self.brand} {self.model} ({self.year})>"
