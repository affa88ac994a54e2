"""Database configuration and session management."""

import logging
from pathlib import Path
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings
from image_vault.models import Base

logger = logging.getLogger(__name__)

# Get settings
settings = get_settings()

# Ensure a data directory exists if using SQLite
if settings.database_url.startswith("sqlite:///"):
    # Extract a path from sqlite URL (sqlite:///path/to/db.sqlite3)
    db_path = settings.database_url.replace("sqlite:///", "")
    if db_path and db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine_options: dict[str, Any] = {
    "echo": settings.database_echo,  # Log SQL statements if configured
    "pool_pre_ping": True,
}
if settings.database_url.startswith("sqlite"):
    engine_options["connect_args"] = {"check_same_thread": False}
else:
    engine_options.update(pool_size=5, max_overflow=10, pool_recycle=3600)

# One engine (and connection pool) per process
engine = create_engine(settings.database_url, **engine_options)

# Create sessionmaker
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def get_db() -> Generator[Session, None, None]:
    """Dependency to get database session.

    Yields a database session and ensures it's closed after use.
    This should be used as a FastAPI dependency.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the image table if it does not exist yet.

    This should be called on application startup.
    """
    logger.info(f"Creating database tables at {engine.url!r}")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")
