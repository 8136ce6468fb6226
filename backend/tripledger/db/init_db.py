"""
Database initialization script.
"""
import logging

from tripledger.core.logging import configure_logging
from tripledger.db.session import init_db

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    configure_logging()
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized successfully!")
