"""Tests for the periodic expired message sweeper."""

import time
from unittest.mock import MagicMock

from oneshare.app.exceptions import StorageError
from oneshare.app.services.lifecycle import MessageLifecycle
from oneshare.app.services.sweeper import PeriodicSweeper


def test_start_sweeps_immediately(store):
    store.save_message("old", 100, "x")
    store.save_message("new", 5000, "y")
    sweeper = PeriodicSweeper(MessageLifecycle(store), interval=3600, clock=lambda: 1000)

    sweeper.start()
    try:
        assert sweeper.running
        assert store.try_consume_message("old") is None
        assert store.try_consume_message("new") is not None
    finally:
        sweeper.stop()
    assert not sweeper.running


def test_sweeps_repeat_on_interval(store):
    lifecycle = MagicMock(spec=MessageLifecycle)
    lifecycle.store = store
    lifecycle.sweep.return_value = 0
    sweeper = PeriodicSweeper(lifecycle, interval=0.01, clock=lambda: 42)

    sweeper.start()
    deadline = time.monotonic() + 2
    while lifecycle.sweep.call_count < 3 and time.monotonic() < deadline:
        time.sleep(0.01)
    sweeper.stop()

    assert lifecycle.sweep.call_count >= 3
    lifecycle.sweep.assert_called_with(42)


def test_loop_ends_when_store_is_closed(store):
    sweeper = PeriodicSweeper(MessageLifecycle(store), interval=0.01)
    sweeper.start()
    store.disconnect()

    deadline = time.monotonic() + 2
    while sweeper.running and time.monotonic() < deadline:
        time.sleep(0.01)

    assert not sweeper.running
    sweeper.stop()


def test_storage_failure_does_not_escape():
    lifecycle = MagicMock(spec=MessageLifecycle)
    lifecycle.sweep.side_effect = StorageError("clear_expired_messages", "locked")
    sweeper = PeriodicSweeper(lifecycle, interval=60, clock=lambda: 1)

    assert sweeper.sweep_once() == 0
