"""Services package for the share service.

This package provides:
- Quota checks for message creation
- Message lifecycle (create, consume once, sweep)
- Periodic background sweeping
"""

from oneshare.app.services.quota import (
    ALLOWED,
    DenialReason,
    QuotaDecision,
    QuotaEngine,
    evaluate_quota,
)
from oneshare.app.services.lifecycle import MessageLifecycle, compute_expire_timestamp
from oneshare.app.services.sweeper import PeriodicSweeper

__all__ = [
    # Quota
    "ALLOWED",
    "DenialReason",
    "QuotaDecision",
    "QuotaEngine",
    "evaluate_quota",
    # Lifecycle
    "MessageLifecycle",
    "compute_expire_timestamp",
    # Sweeper
    "PeriodicSweeper",
]
