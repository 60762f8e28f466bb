"""Tests for cancellation sources and tokens."""

import asyncio
from unittest.mock import Mock

import pytest

from sqlrequest.cancellation import CancellationSource, LinkedCancellationSource
from sqlrequest.exceptions import OperationCancelledError


def test_cancel_runs_callbacks_once() -> None:
    """Test that callbacks run in order, once."""
    source = CancellationSource()
    calls: list[str] = []
    source.token.register(lambda: calls.append("a"))
    source.token.register(lambda: calls.append("b"))

    source.cancel()
    source.cancel()

    assert calls == ["a", "b"]
    assert source.token.is_cancellation_requested
    with pytest.raises(OperationCancelledError, match="The operation was canceled"):
        source.token.throw_if_cancellation_requested()


def test_register_after_cancel_runs_immediately() -> None:
    """Test that late registrations are invoked at once."""
    source = CancellationSource()
    source.cancel()
    callback = Mock()

    source.token.register(callback)

    callback.assert_called_once_with()


def test_disposed_registration_is_not_called() -> None:
    """Test that a disposed registration is removed."""
    source = CancellationSource()
    callback = Mock()
    registration = source.token.register(callback)

    registration.dispose()
    registration.dispose()
    source.cancel()

    callback.assert_not_called()


def test_linked_source_follows_any_parent() -> None:
    """Test that a linked source cancels when any parent cancels."""
    first, second = CancellationSource(), CancellationSource()
    linked = CancellationSource.linked(first.token, second.token)

    assert isinstance(linked, LinkedCancellationSource)
    assert not linked.is_cancellation_requested

    second.cancel()

    assert linked.is_cancellation_requested
    assert not first.is_cancellation_requested


def test_linked_source_starts_cancelled() -> None:
    """Test linking to an already cancelled parent."""
    parent = CancellationSource()
    parent.cancel()

    assert LinkedCancellationSource(parent.token).is_cancellation_requested


def test_disposed_linked_source_detaches() -> None:
    """Test that a disposed linked source no longer follows its parents."""
    parent = CancellationSource()
    linked = LinkedCancellationSource(parent.token)

    linked.dispose()
    parent.cancel()

    assert not linked.is_cancellation_requested


def test_failing_callback_propagates_after_flag() -> None:
    """Test that a failing callback raises once the flag is set."""
    source = CancellationSource()
    source.token.register(Mock(side_effect=RuntimeError("boom")))

    with pytest.raises(RuntimeError, match="boom"):
        source.cancel()

    assert source.is_cancellation_requested


@pytest.mark.asyncio
async def test_cancel_after() -> None:
    """Test deadline scheduling and dropping."""
    source = CancellationSource()
    source.cancel_after(0.01)
    await asyncio.sleep(0.05)
    assert source.is_cancellation_requested

    dropped = CancellationSource()
    handle = dropped.cancel_after(0.01)
    handle.cancel()
    await asyncio.sleep(0.05)
    assert not dropped.is_cancellation_requested
