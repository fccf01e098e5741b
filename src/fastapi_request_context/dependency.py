"""context_dependency() — FastAPI dependency producing RequestContext objects."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from fastapi_request_context.context import RequestContext
from fastapi_request_context.exceptions import ContextAbort
from fastapi_request_context.schemas import SchemaBundle
from fastapi_request_context.settings import ContextSettings


def context_dependency(
    schemas: SchemaBundle | None = None,
    *,
    settings: ContextSettings | None = None,
) -> Callable[..., Awaitable[RequestContext]]:
    """Return a FastAPI-compatible dependency that builds the request context."""

    async def dependency(request: Request) -> RequestContext:
        query_string = request.scope.get("query_string", b"").decode("latin-1")
        ctx = RequestContext(
            request.path_params,
            query_string or None,
            request,
            schemas,
            settings=settings,
        )
        client = request.client
        ctx.ip = client.host if client is not None else None
        return ctx

    return dependency


async def context_abort_handler(request: Request, exc: ContextAbort) -> Response:
    """Translate a ContextAbort raised by an accessor into a JSON error."""
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the ContextAbort handler on ``app``.

    Call this once after creating the app so accessor failures raised inside
    route handlers become 400/413 responses.
    """
    app.add_exception_handler(ContextAbort, context_abort_handler)  # type: ignore[arg-type]
