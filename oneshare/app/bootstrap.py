"""Startup sequence for the share store."""

from oneshare.app.core.config import Settings, settings as default_settings
from oneshare.app.core.logging import get_logger
from oneshare.app.db.migrations import update_version
from oneshare.app.db.store import ShareStore, UserLimits

logger = get_logger(__name__)


def default_user_limits(cfg: Settings) -> UserLimits:
    return UserLimits(
        retention_limit_minutes=cfg.default_retention_limit_minutes,
        max_size_bytes=cfg.default_max_message_size_bytes,
        message_creation_limit_minutes=cfg.default_message_creation_limit_minutes,
    )


def open_store(cfg: Settings | None = None) -> ShareStore:
    """Connect to the database and make it ready to serve traffic.

    Creates missing tables, migrates the schema to the latest version and
    provisions the default user with the configured limits.

    Raises:
        MigrationChainError: if the schema cannot be migrated. The store is
            closed before the error propagates; the caller must abort.
        StorageError: if the database is unusable.
    """
    cfg = cfg or default_settings
    store = ShareStore.connect(cfg.database_url, sweep_batch_size=cfg.sweep_batch_size)
    try:
        applied = update_version(store)
        store.set_user_limits(cfg.default_user_token, default_user_limits(cfg))
    except Exception:
        store.disconnect()
        raise

    if applied:
        logger.info(f"Schema migrated through versions: {', '.join(applied)}")
    logger.info("Share store ready")
    return store
