"""Explicit bridges from blocking code into the async request API."""

import asyncio
from collections.abc import Coroutine
from typing import Any, Optional, TypeVar

__all__ = ("run_blocking",)

T = TypeVar("T")


def run_blocking(coroutine: "Coroutine[Any, Any, T]", loop: "Optional[asyncio.AbstractEventLoop]" = None) -> T:
    """Run a coroutine to completion, blocking the calling thread.

    When ``loop`` is alive in another thread the coroutine is submitted to it
    and this thread waits for the outcome; otherwise a fresh event loop is
    started with :func:`asyncio.run`. Database connections are bound to the
    loop that opened them, so pass the engine's loop whenever one exists.

    Args:
        coroutine: Coroutine to run.
        loop: Event loop that owns the resources the coroutine touches.

    Raises:
        RuntimeError: If called from inside a running event loop; the
            calling thread would block the very loop it waits on.

    Returns:
        The coroutine's result.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        coroutine.close()
        msg = "run_blocking() cannot be called from a running event loop; await the coroutine instead"
        raise RuntimeError(msg)

    if loop is not None and loop.is_running():
        return asyncio.run_coroutine_threadsafe(coroutine, loop).result()
    return asyncio.run(coroutine)
