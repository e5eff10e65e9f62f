"""
Database initialization script.
Creates all tables directly from the models, or with --migrate applies the
Alembic migrations instead.
Run this as: python init_db.py [--migrate]
"""

import argparse
import logging
import sys

from app.core.config import get_settings
from app.db.init_db import create_all_tables, init_db as apply_migrations
from app.db.session import build_engine

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("db-init")


def init_db() -> bool:
    """Initialize the database by creating all tables."""
    logger.info("Initializing database")
    engine = build_engine(get_settings())
    try:
        return create_all_tables(engine)
    finally:
        engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the database schema")
    parser.add_argument("--migrate", action="store_true", help="Apply Alembic migrations instead of create_all")
    args = parser.parse_args()

    logger.info("Starting database initialization")
    if args.migrate:
        apply_migrations()
        success = True
    else:
        success = init_db()
    if success:
        logger.info("Database initialization completed successfully")
    else:
        logger.error("Database initialization failed")
        sys.exit(1)
