"""ContextException hierarchy for status-coded request failures."""

from __future__ import annotations

from typing import Any


class ContextException(Exception):
    """Base for all request-context exceptions."""


class ContextAbort(ContextException):
    """Request rejected with an HTTP status code and detail."""

    def __init__(
        self, detail: str, *, status_code: int = 400, errors: Any = None
    ) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.errors = errors


class BadRequest(ContextAbort):
    """Malformed or schema-invalid request data (400)."""

    def __init__(self, detail: str = "Bad request", *, errors: Any = None) -> None:
        super().__init__(detail, status_code=400, errors=errors)


class PayloadTooLarge(ContextAbort):
    """Oversized input or a body read that missed its deadline (413)."""

    def __init__(self, detail: str = "Payload too large") -> None:
        super().__init__(detail, status_code=413)
