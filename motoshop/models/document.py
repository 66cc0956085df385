"""
SQLAlchemy model for the service_documents table.
"""

from sqlalchemy import JSON, Boolean, Column, Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY

from motoshop.db.session import Base
from motoshop.db.base_model import OwnedRecord


class ServiceDocument(Base, OwnedRecord):
    """
    Metadata for a file kept in the service-documents storage bucket.
    ``file_path`` is the object key inside the bucket.
    """
    __tablename__ = "service_documents"

    motorcycle_id = Column(
        String(36), ForeignKey("biker_motorcycles.id", ondelete="CASCADE"), nullable=False
    )
    document_type = Column(String, nullable=False)  # photo, invoice, receipt, report, warranty, other
    title = Column(String, nullable=False)
    description = Column(Text)
    service_type = Column(String)
    service_date = Column(Date)
    service_mileage = Column(Integer)
    service_provider = Column(String)
    cost = Column(Float)
    currency = Column(String, nullable=False, default="EUR")
    file_path = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    file_size = Column(Integer)
    file_type = Column(String)
    # text[] on the platform
    tags = Column(JSON().with_variant(ARRAY(String), "postgresql"))
    is_favorite = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<ServiceDocument {self.title} ({self.file_name})>"
