"""
Setup script for creating the directory and garage tables locally.
In production these tables belong to the hosted platform; this is only
for development databases.
"""

import logging
from motoshop.db.init_db import init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def setup_database():
    """Initialize database tables for local development."""
    logger.info("Creating motorcycle shop directory tables...")
    try:
        init_db()
        logger.info("Database tables created successfully!")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise

if __name__ == "__main__":
    setup_database()
