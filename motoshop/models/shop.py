"""
SQLAlchemy model for the motorcycle_shops table.
"""

from sqlalchemy import Column, Float, Integer, String, Text

from motoshop.db.session import Base


class MotorcycleShop(Base):
    """
    Reference to the motorcycle_shops table on the platform.
    Rows are populated by an external ingestion job; this service only reads them.
    """
    __tablename__ = "motorcycle_shops"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, index=True)
    country = Column(String, nullable=False, index=True)
    city = Column(String, nullable=False, index=True)
    address = Column(Text)
    phone = Column(String)
    website = Column(String)
    hours = Column(Text)
    rating = Column(Float)
    reviews_count = Column(Integer)
    latitude = Column(Float)
    longitude = Column(Float)
    place_id = Column(String, unique=True)

    def __repr__(self):
        return f"<MotorcycleShop {self.name} ({self.city}, {self.country})>"
