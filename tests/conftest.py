import pytest

from oneshare.app.db.store import ShareStore, UserLimits

MEMORY_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture
def store():
    """Fresh in-memory store, closed after the test."""
    db = ShareStore.connect(MEMORY_URL)
    yield db
    db.disconnect()


@pytest.fixture
def db_url(tmp_path):
    """URL of a file database that survives reconnects within a test."""
    return f"sqlite+pysqlite:///{tmp_path / 'oneshare.db'}"


@pytest.fixture
def limited_user(store):
    """User with a 60 minute retention cap, 1 KiB payloads and a 5 minute cooldown."""
    token = "user-token"
    store.set_user_limits(
        token,
        UserLimits(
            retention_limit_minutes=60,
            max_size_bytes=1024,
            message_creation_limit_minutes=5,
        ),
    )
    return token
