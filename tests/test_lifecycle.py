"""Tests for message creation, one-time consumption and sweeping."""

import threading
import uuid
from unittest.mock import MagicMock

import pytest

from oneshare.app.db.store import ConsumedMessage
from oneshare.app.exceptions import MessageConflictError
from oneshare.app.services.lifecycle import MessageLifecycle, compute_expire_timestamp


def test_expire_timestamp():
    assert compute_expire_timestamp(10, now=1000) == 1600
    assert compute_expire_timestamp(0, now=1000) == 0


def test_generated_tokens_are_random_uuids(store):
    lifecycle = MessageLifecycle(store)
    first = lifecycle.create("a", 0, now=0)
    second = lifecycle.create("b", 0, now=0)

    assert first != second
    assert uuid.UUID(first).version == 4


def test_create_then_consume_once(store):
    lifecycle = MessageLifecycle(store)
    token = lifecycle.create("aGk=", retention_minutes=10, now=1000)

    assert lifecycle.consume(token) == ConsumedMessage("aGk=", 1600)
    assert lifecycle.consume(token) is None


def test_create_without_retention_never_expires(store):
    lifecycle = MessageLifecycle(store)
    token = lifecycle.create("payload", retention_minutes=0, now=1000)

    assert lifecycle.sweep(now=10**10) == 0
    assert lifecycle.consume(token).expire_timestamp == 0


def test_consume_unknown_token(store):
    assert MessageLifecycle(store).consume("never-saved") is None


def test_consume_returns_expired_but_unswept_message(store):
    store.save_message("tokA", 1000, "hi")
    lifecycle = MessageLifecycle(store)

    assert lifecycle.consume("tokA") == ConsumedMessage("hi", 1000)
    assert lifecycle.consume("tokA") is None


def test_sweep_removes_only_expired(store):
    store.save_message("first", 100, "one")
    store.save_message("second", 200, "two")
    lifecycle = MessageLifecycle(store)

    assert lifecycle.sweep(160) == 1
    assert lifecycle.consume("first") is None
    assert lifecycle.consume("second") == ConsumedMessage("two", 200)


def test_create_retries_once_on_token_collision(store):
    store.save_message("taken", 0, "existing")
    tokens = iter(["taken", "free"])
    lifecycle = MessageLifecycle(store, token_factory=lambda: next(tokens))

    assert lifecycle.create("new", 0, now=0) == "free"
    assert lifecycle.consume("taken").data == "existing"
    assert lifecycle.consume("free").data == "new"


def test_create_gives_up_after_second_collision(store):
    store.save_message("taken", 0, "existing")
    factory = MagicMock(return_value="taken")
    lifecycle = MessageLifecycle(store, token_factory=factory)

    with pytest.raises(MessageConflictError):
        lifecycle.create("new", 0, now=0)
    assert factory.call_count == 2


def test_concurrent_consumers_get_message_exactly_once(store):
    store.save_message("race", 0, "secret")
    lifecycle = MessageLifecycle(store)
    results = []
    results_lock = threading.Lock()
    barrier = threading.Barrier(16)

    def consumer():
        barrier.wait()
        result = lifecycle.consume("race")
        with results_lock:
            results.append(result)

    threads = [threading.Thread(target=consumer) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    found = [r for r in results if r is not None]
    assert found == [ConsumedMessage("secret", 0)]
    assert results.count(None) == 15
