"""API endpoints package for the share service."""

from oneshare.app.api.shares import router as shares_router

__all__ = [
    "shares_router",
]
