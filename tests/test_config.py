"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from oneshare.app.core.config import Settings


def test_defaults():
    cfg = Settings()
    assert cfg.default_user_token == "default"
    assert cfg.sweep_interval_seconds == 60
    assert cfg.sweep_batch_size == 500


def test_database_url_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    assert Settings().database_url == "sqlite+pysqlite:///:memory:"


def test_negative_limits_rejected():
    with pytest.raises(ValidationError):
        Settings(default_max_message_size_bytes=-1)


@pytest.mark.parametrize("interval", [0, 3601])
def test_sweep_interval_bounds(interval):
    with pytest.raises(ValidationError):
        Settings(sweep_interval_seconds=interval)


def test_sweep_batch_size_positive():
    with pytest.raises(ValidationError):
        Settings(sweep_batch_size=0)


def test_share_base_url_trailing_slash_removed():
    assert Settings(share_base_url=" https://x.example/ ").share_base_url == "https://x.example"
