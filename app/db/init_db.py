import logging

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from app.db.base import Base

logger = logging.getLogger("app")


def init_db(alembic_ini: str = "alembic.ini") -> None:
    """
    Initialize the database by running Alembic migrations.
    """
    try:
        alembic_cfg = Config(alembic_ini)
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations applied successfully")
    except Exception as e:
        logger.error(f"Error applying database migrations: {e}")
        raise


def create_all_tables(engine: Engine) -> bool:
    try:
        existing_tables = inspect(engine).get_table_names()

        Base.metadata.create_all(bind=engine)

        new_tables = set(inspect(engine).get_table_names()) - set(existing_tables)
        if new_tables:
            logger.info(f"Created new tables: {new_tables}")

        return True
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        return False
