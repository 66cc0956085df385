import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declared_attr


def new_id() -> str:
    return str(uuid.uuid4())


class OwnedRecord:
    """Columns shared by every rider-owned table."""

    # Generate tablename automatically
    @declared_attr
    def __tablename__(cls):
        return cls.__name__.lower()

    # UUID primary key, generated client-side to match the platform's uuid default
    id = Column(String(36), primary_key=True, default=new_id, index=True)
    user_id = Column(String(36), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
