import logging
from sqlalchemy.exc import SQLAlchemyError

from motoshop.db.session import Base, engine

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """
    Create the directory and garage tables.

    The hosted platform already owns these tables; this is for local
    development and tests against a throwaway database.
    """
    # Register all models on the metadata
    import motoshop.models  # noqa: F401

    bind = bind or engine
    try:
        for table in Base.metadata.sorted_tables:
            table.create(bind, checkfirst=True)
            logger.info(f"Table {table.name} created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error creating database tables: {e}")
        raise
