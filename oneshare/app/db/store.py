"""Durable message and quota store.

All access to the database goes through :class:`ShareStore`. Every public
method runs under one acquisition of a single store-wide lock and inside one
database transaction, so no caller can observe a half-applied change made by
another. In particular ``try_consume_message`` reads and deletes its row
under the same acquisition, which is what makes delivery exactly-once.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from oneshare.app.core.logging import get_logger
from oneshare.app.db.init_db import create_all_tables
from oneshare.app.db.models import GlobalVar, Message, User
from oneshare.app.db.session import create_store_engine, get_session_maker
from oneshare.app.exceptions import MessageConflictError, StorageError

logger = get_logger(__name__)

VERSION_KEY = "version"
DEFAULT_SWEEP_BATCH_SIZE = 500


@dataclass(frozen=True)
class UserLimits:
    """Per-user limits. Zero in any field means "no limit"."""
    retention_limit_minutes: int = 0
    max_size_bytes: int = 0
    message_creation_limit_minutes: int = 0


@dataclass(frozen=True)
class UserQuota:
    """A user's limits together with their creation history."""
    token: str
    limits: UserLimits
    last_message_creation_timestamp: int | None = None


@dataclass(frozen=True)
class ConsumedMessage:
    data: str
    expire_timestamp: int


class ShareStore:
    """Thread-safe handle on the share database.

    Create one per process with :meth:`connect` and inject it into the
    services that need it.

    Example:
        store = ShareStore.connect("sqlite+pysqlite:///./oneshare.db")
        store.save_message(token, expire_timestamp=0, data="aGk=")
        store.try_consume_message(token)
    """

    def __init__(self, engine: Engine, sweep_batch_size: int = DEFAULT_SWEEP_BATCH_SIZE):
        if sweep_batch_size < 1:
            raise ValueError("sweep_batch_size must be at least 1")
        self._engine = engine
        self._session_maker = get_session_maker(engine)
        self._lock = threading.Lock()
        self._opened = True
        self.sweep_batch_size = sweep_batch_size

    @classmethod
    def connect(
        cls,
        database_url: str | None = None,
        sweep_batch_size: int = DEFAULT_SWEEP_BATCH_SIZE,
    ) -> "ShareStore":
        """Open a store and make sure its schema exists.

        Raises:
            StorageError: if the database cannot be reached or initialized.
        """
        try:
            engine = create_store_engine(database_url)
        except SQLAlchemyError as exc:
            raise StorageError("connect", str(exc)) from exc
        store = cls(engine, sweep_batch_size=sweep_batch_size)
        store.init_schema()
        return store

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _operation(self, name: str) -> Iterator[Session]:
        """Run one store operation: lock, transaction, error translation."""
        with self._lock:
            if not self._opened:
                raise StorageError(name, "connection is closed")
            try:
                with self._session_maker() as session, session.begin():
                    yield session
            except SQLAlchemyError as exc:
                logger.exception(f"Storage operation '{name}' failed")
                raise StorageError(name, str(exc)) from exc

    # -- connection -------------------------------------------------------

    def init_schema(self) -> None:
        """Create missing tables and unique indexes; existing data is kept."""
        with self._lock:
            if not self._opened:
                raise StorageError("init_schema", "connection is closed")
            try:
                create_all_tables(self._engine)
            except SQLAlchemyError as exc:
                logger.exception("Storage operation 'init_schema' failed")
                raise StorageError("init_schema", str(exc)) from exc

    def is_connection_opened(self) -> bool:
        with self._lock:
            return self._opened

    def disconnect(self) -> None:
        """Close the store. Safe to call more than once."""
        with self._lock:
            if not self._opened:
                return
            self._opened = False
            self._engine.dispose()
        logger.info("Share store disconnected")

    # -- schema version ---------------------------------------------------

    def get_database_version(self) -> str | None:
        """Return the stored schema version, or None for a fresh database."""
        with self._operation("get_database_version") as session:
            return session.scalar(
                select(GlobalVar.string_value).where(GlobalVar.name == VERSION_KEY)
            )

    def set_database_version(self, version: str) -> None:
        with self._operation("set_database_version") as session:
            session.execute(delete(GlobalVar).where(GlobalVar.name == VERSION_KEY))
            session.add(GlobalVar(name=VERSION_KEY, string_value=version))

    # -- users ------------------------------------------------------------

    def set_user_limits(self, token: str, limits: UserLimits) -> None:
        """Create the user or replace their limits.

        The last message creation timestamp of an existing user is kept.
        """
        with self._operation("set_user_limits") as session:
            user = session.scalar(select(User).where(User.token == token))
            if user is None:
                session.add(
                    User(
                        token=token,
                        retention_limit_minutes=limits.retention_limit_minutes,
                        max_size_bytes=limits.max_size_bytes,
                        message_creation_limit_minutes=limits.message_creation_limit_minutes,
                    )
                )
                return
            user.retention_limit_minutes = limits.retention_limit_minutes
            user.max_size_bytes = limits.max_size_bytes
            user.message_creation_limit_minutes = limits.message_creation_limit_minutes

    def get_user_quota(self, token: str) -> UserQuota | None:
        with self._operation("get_user_quota") as session:
            user = session.scalar(select(User).where(User.token == token))
            if user is None:
                logger.debug("No limits found for user token")
                return None
            return UserQuota(
                token=user.token,
                limits=UserLimits(
                    retention_limit_minutes=user.retention_limit_minutes,
                    max_size_bytes=user.max_size_bytes,
                    message_creation_limit_minutes=user.message_creation_limit_minutes,
                ),
                last_message_creation_timestamp=user.last_message_creation_timestamp,
            )

    def get_user_limits(self, token: str) -> UserLimits | None:
        quota = self.get_user_quota(token)
        return quota.limits if quota is not None else None

    def does_user_exist(self, token: str) -> bool:
        with self._operation("does_user_exist") as session:
            return session.scalar(select(User.id).where(User.token == token)) is not None

    def remove_user_by_token(self, token: str) -> bool:
        """Delete a user. Returns False if there was no such user."""
        with self._operation("remove_user_by_token") as session:
            result = session.execute(delete(User).where(User.token == token))
            return result.rowcount > 0

    def set_user_last_message_creation_time(self, token: str, timestamp: int) -> bool:
        """Record when the user last created a message.

        Returns False if there is no such user.
        """
        with self._operation("set_user_last_message_creation_time") as session:
            user = session.scalar(select(User).where(User.token == token))
            if user is None:
                return False
            user.last_message_creation_timestamp = int(timestamp)
            return True

    def get_user_last_message_creation_time(self, token: str) -> int:
        """Return the last creation timestamp, 0 if unset or the user is unknown."""
        with self._operation("get_user_last_message_creation_time") as session:
            timestamp = session.scalar(
                select(User.last_message_creation_timestamp).where(User.token == token)
            )
            return timestamp or 0

    # -- messages ---------------------------------------------------------

    def save_message(self, message_token: str, expire_timestamp: int, data: str) -> None:
        """Persist a new message.

        Raises:
            MessageConflictError: if the token is already in use.
            StorageError: on any other database failure.
        """
        with self._operation("save_message") as session:
            existing = session.scalar(
                select(Message.id).where(Message.message_token == message_token)
            )
            if existing is not None:
                raise MessageConflictError(message_token)
            session.add(
                Message(
                    message_token=message_token,
                    expire_timestamp=int(expire_timestamp),
                    data=data,
                )
            )

    def try_consume_message(self, message_token: str) -> ConsumedMessage | None:
        """Read and delete a message in one step.

        Expiry is not checked here; an expired message that has not been
        swept yet is still returned once.
        """
        with self._operation("try_consume_message") as session:
            message = session.scalar(
                select(Message).where(Message.message_token == message_token)
            )
            if message is None:
                return None
            consumed = ConsumedMessage(
                data=message.data, expire_timestamp=message.expire_timestamp
            )
            session.delete(message)
            return consumed

    def clear_expired_messages(self, limit_timestamp: int) -> int:
        """Delete messages with ``0 < expire_timestamp < limit_timestamp``.

        Rows are removed in batches of ``sweep_batch_size``, each batch under
        its own lock acquisition, so a large backlog does not hold up
        request handling.

        Returns:
            Number of deleted messages.
        """
        total = 0
        while True:
            deleted = self._clear_expired_batch(int(limit_timestamp))
            total += deleted
            if deleted < self.sweep_batch_size:
                return total

    def _clear_expired_batch(self, limit_timestamp: int) -> int:
        with self._operation("clear_expired_messages") as session:
            ids = list(
                session.scalars(
                    select(Message.id)
                    .where(
                        Message.expire_timestamp != 0,
                        Message.expire_timestamp < limit_timestamp,
                    )
                    .limit(self.sweep_batch_size)
                )
            )
            if not ids:
                return 0
            session.execute(delete(Message).where(Message.id.in_(ids)))
            return len(ids)

    def count_messages(self) -> int:
        with self._operation("count_messages") as session:
            return session.scalar(select(func.count()).select_from(Message)) or 0
