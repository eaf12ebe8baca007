"""Quota checks for message creation.

The creation limit is a cooldown: only the user's most recent creation is
compared against the current time, there is no sliding window.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from oneshare.app.core.logging import get_log_context, get_logger
from oneshare.app.db.store import ShareStore, UserQuota
from oneshare.app.exceptions import QuotaDeniedError

logger = get_logger(__name__)


class DenialReason(str, Enum):
    USER_NOT_FOUND = "user_not_found"
    RATE_LIMITED = "rate_limited"
    TOO_LARGE = "too_large"
    RETENTION_TOO_LONG = "retention_too_long"


_DENIAL_STATUS = {
    DenialReason.USER_NOT_FOUND: 404,
    DenialReason.RATE_LIMITED: 400,
    DenialReason.TOO_LARGE: 400,
    DenialReason.RETENTION_TOO_LONG: 400,
}


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of a quota check.

    Attributes:
        reason: Why the request was denied, None when allowed
        minutes_left: Remaining cooldown, only set for RATE_LIMITED
    """
    reason: DenialReason | None = None
    minutes_left: int | None = None

    @property
    def allowed(self) -> bool:
        return self.reason is None

    @property
    def message(self) -> str:
        if self.reason is None:
            return "Allowed"
        if self.reason is DenialReason.USER_NOT_FOUND:
            return "User not found"
        if self.reason is DenialReason.RATE_LIMITED:
            return (
                "Message creation limit reached. "
                f"Wait for {self.minutes_left} minute(s) and repeat"
            )
        if self.reason is DenialReason.TOO_LARGE:
            return "Message is too big"
        return "Requested retention limit is bigger than allowed"

    def raise_for_denial(self) -> None:
        """Raise QuotaDeniedError unless the request was allowed."""
        if self.reason is None:
            return
        raise QuotaDeniedError(
            reason=self.reason.value,
            message=self.message,
            minutes_left=self.minutes_left,
            status_code=_DENIAL_STATUS[self.reason],
        )


ALLOWED = QuotaDecision()


def evaluate_quota(
    quota: UserQuota | None,
    requested_retention_minutes: int,
    decoded_payload_size: int,
    now: int,
) -> QuotaDecision:
    """Decide whether a user may create a message.

    Checks run in order: user existence, creation cooldown, payload size,
    retention. A limit of zero disables the corresponding check.

    Args:
        quota: The user's quota, None if the user does not exist
        requested_retention_minutes: Retention asked for, 0 for "no expiry"
        decoded_payload_size: Payload size in bytes after transport decoding
        now: Current unix time in seconds

    Returns:
        The first failing check as a denial, otherwise ALLOWED
    """
    if quota is None:
        return QuotaDecision(DenialReason.USER_NOT_FOUND)

    limits = quota.limits

    if limits.message_creation_limit_minutes > 0:
        last_creation = quota.last_message_creation_timestamp
        # The first message is never rate limited
        if last_creation:
            elapsed = now - last_creation
            if elapsed < limits.message_creation_limit_minutes * 60:
                minutes_left = limits.message_creation_limit_minutes - int(elapsed // 60)
                return QuotaDecision(DenialReason.RATE_LIMITED, minutes_left=minutes_left)

    if limits.max_size_bytes > 0 and decoded_payload_size > limits.max_size_bytes:
        return QuotaDecision(DenialReason.TOO_LARGE)

    if (
        requested_retention_minutes > 0
        and limits.retention_limit_minutes > 0
        and requested_retention_minutes > limits.retention_limit_minutes
    ):
        return QuotaDecision(DenialReason.RETENTION_TOO_LONG)

    return ALLOWED


class QuotaEngine:
    """Quota checks backed by a share store.

    ``validate`` only reads. After a successful creation the caller records
    it with ``record_creation``; the two calls are separate store
    operations.
    """

    def __init__(self, store: ShareStore):
        self.store = store

    def validate(
        self,
        token: str,
        requested_retention_minutes: int,
        decoded_payload_size: int,
        now: int,
    ) -> QuotaDecision:
        quota = self.store.get_user_quota(token)
        decision = evaluate_quota(
            quota, requested_retention_minutes, decoded_payload_size, int(now)
        )
        if not decision.allowed:
            logger.debug(
                "Quota denied", extra=get_log_context(reason=decision.reason.value)
            )
        return decision

    def record_creation(self, token: str, now: int) -> bool:
        """Persist ``now`` as the user's last message creation time."""
        return self.store.set_user_last_message_creation_time(token, int(now))
