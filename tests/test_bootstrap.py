"""Tests for the store startup sequence."""

from unittest.mock import patch

import pytest

from oneshare.app.bootstrap import open_store
from oneshare.app.core.config import Settings
from oneshare.app.db.migrations import LATEST_VERSION
from oneshare.app.db.store import ShareStore, UserLimits
from oneshare.app.exceptions import MigrationChainError


@pytest.fixture
def cfg(db_url, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", db_url)
    return Settings(
        default_user_token="public",
        default_retention_limit_minutes=30,
        default_max_message_size_bytes=2048,
        default_message_creation_limit_minutes=1,
        sweep_batch_size=50,
    )


def test_open_store_prepares_database(cfg):
    store = open_store(cfg)
    try:
        assert store.get_database_version() == LATEST_VERSION
        assert store.get_user_limits("public") == UserLimits(30, 2048, 1)
        assert store.sweep_batch_size == 50
    finally:
        store.disconnect()


def test_reopening_keeps_default_user_history(cfg):
    store = open_store(cfg)
    store.set_user_last_message_creation_time("public", 777)
    store.disconnect()

    store = open_store(cfg)
    try:
        assert store.get_user_last_message_creation_time("public") == 777
    finally:
        store.disconnect()


def test_broken_migration_chain_aborts_startup(cfg):
    store = ShareStore.connect(cfg.database_url)
    store.set_database_version("0.0-unknown")
    store.disconnect()

    with patch.object(ShareStore, "disconnect", autospec=True) as disconnect:
        with pytest.raises(MigrationChainError):
            open_store(cfg)
    disconnect.assert_called_once()
