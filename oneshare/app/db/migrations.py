"""Forward-only schema migrations.

Each :class:`Migration` carries the store from the version right before it
to ``migration.version``. Steps are applied strictly in registration order,
so new steps must be appended to :data:`MIGRATIONS` and ``LATEST_VERSION``
bumped to the new step's version in the same change.

There are no steps yet: ``MINIMAL_VERSION`` is the schema created by
:func:`oneshare.app.db.init_db.create_all_tables` and is also the latest one.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from oneshare.app.core.logging import get_logger
from oneshare.app.db.store import ShareStore
from oneshare.app.exceptions import MigrationChainError

logger = get_logger(__name__)

MINIMAL_VERSION = "0.1"
LATEST_VERSION = "0.1"


@dataclass(frozen=True)
class Migration:
    version: str
    apply: Callable[[ShareStore], None]


MIGRATIONS: list[Migration] = []


def build_migration_chain(
    version_from: str,
    version_to: str,
    migrations: Sequence[Migration] = MIGRATIONS,
    minimal_version: str = MINIMAL_VERSION,
) -> list[Migration]:
    """Select the steps that lead from ``version_from`` to ``version_to``.

    The chain starts right after the step producing ``version_from`` (or at
    the first step when ``version_from`` is the minimal version) and stops at
    the step producing ``version_to``.

    Raises:
        MigrationChainError: if the versions differ and the chain does not
            end exactly at ``version_to``. An empty chain counts too: a
            ``version_from`` that no registered step produces is unknown
            (for instance written by newer code) and is never silently
            overwritten.
    """
    chain: list[Migration] = []
    collecting = version_from == minimal_version

    for migration in migrations:
        if collecting:
            chain.append(migration)
            if migration.version == version_to:
                break
        elif migration.version == version_from:
            collecting = True

    if version_from != version_to:
        reached = chain[-1].version if chain else None
        if reached != version_to:
            raise MigrationChainError(version_from, version_to, reached)

    return chain


def update_version(
    store: ShareStore,
    migrations: Sequence[Migration] = MIGRATIONS,
    latest_version: str = LATEST_VERSION,
    minimal_version: str = MINIMAL_VERSION,
) -> list[str]:
    """Bring the store's schema up to ``latest_version``.

    A store without a version record is a fresh install and is treated as
    already being at the latest version. The latest version is written back
    unconditionally, so calling this on every startup is safe.

    Returns:
        Versions of the applied steps, in order.

    Raises:
        MigrationChainError: if the registered steps cannot reach the latest
            version, including when the stored version is unknown to this
            code, so the recorded version never moves backwards. Nothing has
            been applied when this is raised.
    """
    current_version = store.get_database_version()
    if current_version is None:
        current_version = latest_version

    applied: list[str] = []
    if current_version != latest_version:
        chain = build_migration_chain(
            current_version, latest_version, migrations, minimal_version
        )
        for migration in chain:
            logger.info(f"Applying schema migration to version {migration.version}")
            migration.apply(store)
            applied.append(migration.version)

    store.set_database_version(latest_version)
    return applied
