"""Core utilities for the share service."""

from oneshare.app.core.config import Settings, settings
from oneshare.app.core.logging import get_logger, setup_logging
from oneshare.app.core.security import generate_token

__all__ = [
    "Settings",
    "settings",
    "get_logger",
    "setup_logging",
    "generate_token",
]
