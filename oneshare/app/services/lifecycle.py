"""Message creation, one-time consumption and expiry sweeping."""
from __future__ import annotations

from typing import Callable

from oneshare.app.core.logging import get_log_context, get_logger
from oneshare.app.core.security import generate_token
from oneshare.app.db.store import ConsumedMessage, ShareStore
from oneshare.app.exceptions import MessageConflictError

logger = get_logger(__name__)


def compute_expire_timestamp(retention_minutes: int, now: int) -> int:
    """Absolute expiry for a retention window; 0 means "never expires"."""
    if retention_minutes > 0:
        return int(now) + retention_minutes * 60
    return 0


class MessageLifecycle:
    """Creates, consumes and sweeps messages in a share store.

    Args:
        store: Store to operate on
        token_factory: Source of new message tokens
    """

    def __init__(
        self,
        store: ShareStore,
        token_factory: Callable[[], str] = generate_token,
    ):
        self.store = store
        self.token_factory = token_factory

    def create(self, payload: str, retention_minutes: int, now: int) -> str:
        """Store a payload and return the token that redeems it.

        A token collision is retried once with a fresh token. A second
        collision means the token source is broken and is raised.

        Raises:
            MessageConflictError: if both generated tokens were taken.
            StorageError: on database failure.
        """
        expire_timestamp = compute_expire_timestamp(retention_minutes, now)
        token = self.token_factory()
        try:
            self.store.save_message(token, expire_timestamp, payload)
        except MessageConflictError:
            logger.warning("Message token collision, retrying with a new token")
            token = self.token_factory()
            self.store.save_message(token, expire_timestamp, payload)
        return token

    def consume(self, token: str) -> ConsumedMessage | None:
        """Return the message and delete it, or None if there is none.

        Only the first call for a token ever returns data. Expiry is not
        checked: a message past its expiry that has not been swept yet is
        still returned.
        """
        return self.store.try_consume_message(token)

    def sweep(self, now: int) -> int:
        """Delete every message that expired before ``now``.

        Returns:
            Number of deleted messages.
        """
        deleted = self.store.clear_expired_messages(int(now))
        if deleted:
            logger.info("Expired messages removed", extra=get_log_context(deleted=deleted))
        return deleted
