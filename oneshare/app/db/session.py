from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from oneshare.app.core.config import settings


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite+pysqlite://") or ":memory:" in url


def create_store_engine(database_url: str | None = None) -> Engine:
    """Create an engine for a share store.

    SQLite connections are shared across request threads; the store
    serializes access itself, so the per-thread check is disabled. An
    in-memory database lives only as long as its single connection, hence
    the static pool.

    Bound parameters carry user and message tokens, so they are kept out of
    error messages and engine logs.
    """
    url = database_url or settings.database_url
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(url):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, future=True, hide_parameters=True, **kwargs)
    return create_engine(url, future=True, hide_parameters=True, pool_pre_ping=True)


def get_session_maker(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )
