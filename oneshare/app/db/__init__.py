"""Database package for the share service.

This package provides:
- Database models (GlobalVar, User, Message)
- Engine/session construction
- The lock-guarded ShareStore with all data operations
- Forward-only schema migrations
"""

from oneshare.app.db.base import Base
from oneshare.app.db.models import GlobalVar, Message, User
from oneshare.app.db.session import create_store_engine, get_session_maker
from oneshare.app.db.store import ConsumedMessage, ShareStore, UserLimits, UserQuota
from oneshare.app.db.migrations import (
    LATEST_VERSION,
    MIGRATIONS,
    MINIMAL_VERSION,
    Migration,
    build_migration_chain,
    update_version,
)

__all__ = [
    # Base
    "Base",
    # Models
    "GlobalVar",
    "Message",
    "User",
    # Session
    "create_store_engine",
    "get_session_maker",
    # Store
    "ConsumedMessage",
    "ShareStore",
    "UserLimits",
    "UserQuota",
    # Migrations
    "LATEST_VERSION",
    "MIGRATIONS",
    "MINIMAL_VERSION",
    "Migration",
    "build_migration_chain",
    "update_version",
]
