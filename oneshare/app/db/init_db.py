"""Database initialization utilities."""

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from oneshare.app.core.logging import get_logger
from oneshare.app.db.base import Base
from oneshare.app.db import models  # noqa: F401 - import to register models

logger = get_logger(__name__)


def create_all_tables(engine: Engine) -> None:
    """Create tables and unique indexes that do not exist yet.

    Safe to call on every startup: existing tables are left untouched.
    """
    Base.metadata.create_all(engine, checkfirst=True)


def list_unique_indexes(engine: Engine, table: str) -> dict[str, list[str]]:
    """Return ``{index_name: columns}`` for the unique indexes of a table."""
    return {
        index["name"]: list(index["column_names"])
        for index in inspect(engine).get_indexes(table)
        if index.get("unique")
    }


def verify_connection(engine: Engine) -> bool:
    """Verify database connection is working.

    Returns:
        True if connection successful, False otherwise.
    """
    try:
        with engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
