"""Deadline-bounded awaiting of body reads."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class DeadlineExceeded(TimeoutError):
    """The awaited read did not complete before its deadline."""

    def __init__(self, timeout_ms: float) -> None:
        super().__init__(f"Read did not complete within {timeout_ms:g}ms")
        self.timeout_ms = timeout_ms


async def with_deadline(aw: Awaitable[T], timeout_ms: float) -> T:
    """Await ``aw`` for at most ``timeout_ms`` milliseconds.

    The pending read is abandoned on expiry; whatever the underlying
    stream has already consumed stays consumed.
    """
    try:
        return await asyncio.wait_for(aw, timeout_ms / 1000)
    except asyncio.TimeoutError:
        raise DeadlineExceeded(timeout_ms) from None
