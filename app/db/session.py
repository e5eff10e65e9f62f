from datetime import datetime, timezone
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings

logger = logging.getLogger("app")

# Base class for all SQLAlchemy models
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores UTC without tzinfo"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def build_engine(settings: Settings) -> Engine:
    # Check if DATABASE_URL is properly set
    if not settings.DATABASE_URL:
        logger.error("DATABASE_URL is not set or empty!")
        raise ValueError("DATABASE_URL environment variable is required")

    url = settings.DATABASE_URL
    try:
        if url.startswith("sqlite"):
            # In-memory SQLite must share one connection across threads
            in_memory = url in ("sqlite://", "sqlite:///:memory:")
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool if in_memory else None,
            )
        else:
            engine = create_engine(
                url,
                pool_pre_ping=True,  # Check connection before using from pool
                pool_recycle=3600,   # Recycle connections after 1 hour
            )
        logger.info("Database engine created successfully")
    except Exception as e:
        logger.error(f"Failed to create database engine: {e}")
        raise
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    # Create session factory for database interactions
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
