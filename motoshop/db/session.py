from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from motoshop.core.config import settings


def build_engine(db_url: str):
    """Create the engine for the platform's Postgres (or SQLite for local runs)."""
    if db_url.startswith("sqlite"):
        # In-memory SQLite must share one connection across threads
        return create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        db_url,
        pool_pre_ping=True  # Test connections for liveness when checked out from pool
    )


# Create database engine - settings hold the URI as a plain string
engine = build_engine(str(settings.SQLALCHEMY_DATABASE_URI))

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class for declarative class definitions
Base = declarative_base()

