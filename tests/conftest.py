"""Shared pytest fixtures for fastapi-request-context tests."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import pytest
from starlette.requests import Request
from starlette.types import Message

from fastapi_request_context.settings import ContextSettings


def _receive_from(chunks: Sequence[bytes], delay: float, fail: Exception | None) -> Any:
    pending = list(chunks)

    async def receive() -> Message:
        if delay:
            await asyncio.sleep(delay)
        if not pending:
            if fail is not None:
                raise fail
            return {"type": "http.disconnect"}
        chunk = pending.pop(0)
        more_body = bool(pending) or fail is not None
        return {"type": "http.request", "body": chunk, "more_body": more_body}

    return receive


@pytest.fixture
def make_request() -> Any:
    """Factory for creating Starlette Request objects backed by a fake ASGI receive.

    ``body`` may be bytes or a list of chunks; ``delay`` stalls every receive
    call and ``fail`` is raised once the chunks run out.
    """

    def _make(
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
        query_string: str = "",
        body: bytes | list[bytes] = b"",
        delay: float = 0.0,
        fail: Exception | None = None,
        client: tuple[str, int] | None = ("10.0.0.1", 5000),
    ) -> Request:
        items = headers.items() if isinstance(headers, dict) else (headers or [])
        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string.encode(),
            "headers": [(k.lower().encode(), v.encode()) for k, v in items],
            "root_path": "",
            "client": client,
        }
        chunks = [body] if isinstance(body, bytes) else body
        return Request(scope, _receive_from(chunks, delay, fail))

    return _make


@pytest.fixture
def fast_settings() -> ContextSettings:
    """Settings with deadlines short enough to expire inside a test."""
    return ContextSettings(body_deadline_ms=50, read_deadline_ms=50)
