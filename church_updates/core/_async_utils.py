"""Internal async helpers shared by the engine adapters."""

from __future__ import annotations

import inspect
from typing import Any


async def _maybe_await(value: Any) -> Any:
    """Await awaitables and return non-awaitable values unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def _close_cursor(cursor: Any) -> None:
    """Close a sync or async cursor when it exposes `close()`."""
    close = getattr(cursor, "close", None)
    if callable(close):
        await _maybe_await(close())
