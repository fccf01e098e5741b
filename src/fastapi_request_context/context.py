"""RequestContext — lazily parsed, validated and cached view of one request."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from starlette.datastructures import FormData
from starlette.requests import Request
from starlette.types import Message

from fastapi_request_context.deadline import DeadlineExceeded, with_deadline
from fastapi_request_context.exceptions import BadRequest, PayloadTooLarge
from fastapi_request_context.parsers import (
    collect_headers,
    flatten_form,
    parse_cookie_header,
    parse_query_string,
)
from fastapi_request_context.schemas import SchemaBundle, SchemaShape
from fastapi_request_context.settings import ContextSettings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET: Any = object()

_FORM_MEDIA_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


class RequestContext:
    """Per-request accessors over a Starlette request.

    Cookies, headers and query are parsed on first access, validated against
    the matching schema of the bundle and cached for the lifetime of the
    context. The body is a single-use stream: ``body()`` is validated but not
    cached, while ``blob()``, ``buffer()`` and ``form_data()`` are best-effort
    readers that fall back to a duplicated request once the body was read.
    """

    def __init__(
        self,
        params: Mapping[str, str],
        query_string: str | None,
        request: Request,
        schemas: SchemaBundle | None = None,
        *,
        settings: ContextSettings | None = None,
    ) -> None:
        self._params = MappingProxyType(dict(params))
        self._query_string = query_string
        self._request = request
        self._schemas = schemas
        self._settings = settings or get_settings()

        self._cookies: Any = _UNSET
        self._headers: Any = _UNSET
        self._query: Any = _UNSET
        self._ip: Any = _UNSET

        self._body_used = False
        self._buffered: bytes | None = None

    @property
    def ip(self) -> str | None:
        return None if self._ip is _UNSET else self._ip

    @ip.setter
    def ip(self, value: str | None) -> None:
        if self._ip is not _UNSET:
            raise RuntimeError("Client address is already bound")
        self._ip = value

    @property
    def method(self) -> str:
        """The method of the incoming request, e.g. ``'GET'``."""
        return self._request.method.upper()

    def param(self, name: str) -> str | None:
        """Return the path parameter ``name`` or ``None`` if the route has none."""
        return self._params.get(name)

    @property
    def raw(self) -> Request:
        """The original request object."""
        return self._request

    @property
    def schemas(self) -> SchemaBundle | None:
        return self._schemas

    @property
    def body_used(self) -> bool:
        return self._body_used

    @property
    def cookies(self) -> Any:
        """The validated cookies, or ``None`` when no cookie schema is set."""
        if self._cookies is not _UNSET:
            return self._cookies

        schema = self._schemas.cookies if self._schemas else None
        if schema is None:
            return None

        header = self._request.headers.get(self._settings.cookie_header, "")
        if len(header) > self._settings.max_cookie_length:
            raise PayloadTooLarge("Cookie header too large")

        try:
            cookies: dict[str, str | None] = parse_cookie_header(header)
        except Exception:
            logger.debug("Unparseable cookie header, using no cookies", exc_info=True)
            cookies = {}

        result = schema.safe_parse(cookies)
        if not result.success:
            raise BadRequest("Invalid cookies", errors=result.error)

        self._cookies = result.data
        return self._cookies

    @property
    def headers(self) -> Any:
        """The request headers, validated when a header schema is set."""
        if self._headers is not _UNSET:
            return self._headers

        headers = collect_headers(
            self._request.headers.items(), self._settings.max_header_entries
        )

        schema = self._schemas.headers if self._schemas else None
        if schema is not None:
            result = schema.safe_parse(headers)
            if not result.success:
                raise BadRequest("Invalid headers", errors=result.error)
            self._headers = result.data
        else:
            self._headers = headers

        return self._headers

    @property
    def query(self) -> Any:
        """The validated query parameters, or ``None`` when no query schema is set."""
        if self._query is not _UNSET:
            return self._query

        schema = self._schemas.query if self._schemas else None
        if schema is None:
            return None

        query = parse_query_string(self._query_string)

        result = schema.safe_parse(query)
        if not result.success:
            raise BadRequest("Invalid query parameters", errors=result.error)

        self._query = result.data
        return self._query

    async def body(self) -> Any:
        """Read, decode and validate the body.

        The decoder follows the body schema: string-shaped schemas get the
        text, ``transform`` bundles with a ``multipart/form-data`` request get
        a flat mapping of form fields, everything else is parsed as JSON. The
        content type is matched on its media type alone, so parameters such as
        ``boundary`` and letter case are ignored.

        Raises:
            PayloadTooLarge: the read missed ``settings.body_deadline_ms``.
            BadRequest: the body could not be decoded or failed validation.
        """
        bundle = self._schemas
        if bundle is None or bundle.body is None:
            return None

        schema = bundle.body
        decode: Callable[[Request], Awaitable[Any]]
        if schema.shape is SchemaShape.STRING:
            decode = self._read_text
        elif bundle.transform and self._media_type() == "multipart/form-data":
            decode = self._read_form_fields
        else:
            decode = self._read_json

        try:
            raw = await with_deadline(
                decode(self._claim()), self._settings.body_deadline_ms
            )
        except DeadlineExceeded as exc:
            logger.warning(
                "Body of %s %s not read within %gms",
                self.method,
                self._request.url.path,
                exc.timeout_ms,
            )
            raise PayloadTooLarge("Request body not received in time") from exc
        except Exception as exc:
            raise BadRequest("Malformed request body") from exc

        result = schema.safe_parse(raw)
        if not result.success:
            raise BadRequest("Invalid request body", errors=result.error)

        return result.data

    async def blob(self, deadline: float | None = None) -> bytes | None:
        """Read the body as bytes within ``deadline`` milliseconds.

        Returns ``None`` on any failure.
        """
        return await self._read_best_effort(self._read_bytes, deadline)

    async def buffer(self, deadline: float | None = None) -> memoryview | None:
        """Read the body as a ``memoryview`` within ``deadline`` milliseconds.

        Returns ``None`` on any failure.
        """
        data = await self._read_best_effort(self._read_bytes, deadline)
        return None if data is None else memoryview(data)

    async def form_data(self, deadline: float | None = None) -> FormData | None:
        """Parse the body as form data within ``deadline`` milliseconds.

        Returns ``None`` on any failure, and without reading anything when the
        body is neither multipart nor URL-encoded.
        """
        if self._media_type() not in _FORM_MEDIA_TYPES:
            return None
        return await self._read_best_effort(self._read_form, deadline)

    @property
    def stream(self) -> AsyncIterator[bytes]:
        """The raw body stream, without deadline or validation.

        The body counts as consumed once iteration starts.
        """
        return self._iter_stream()

    async def _iter_stream(self) -> AsyncIterator[bytes]:
        self._body_used = True
        async for chunk in self._request.stream():
            yield chunk

    def _media_type(self) -> str:
        content_type = self._request.headers.get("content-type", "")
        return content_type.partition(";")[0].strip().lower()

    def _claim(self) -> Request:
        self._body_used = True
        return self._request

    def _duplicate(self) -> Request:
        """A fresh request over the same scope replaying the buffered body."""
        if self._buffered is None:
            raise RuntimeError("Request body was consumed and cannot be re-read")

        body = self._buffered
        sent = False

        async def receive() -> Message:
            nonlocal sent
            if sent:
                return {"type": "http.disconnect"}
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(self._request.scope, receive)

    async def _read_best_effort(
        self, read: Callable[[Request], Awaitable[T]], deadline: float | None
    ) -> T | None:
        if deadline is None:
            deadline = self._settings.read_deadline_ms
        try:
            request = self._duplicate() if self._body_used else self._claim()
            return await with_deadline(read(request), deadline)
        except Exception:
            logger.debug("Best-effort body read failed", exc_info=True)
            return None

    async def _read_bytes(self, request: Request) -> bytes:
        data = await request.body()
        if request is self._request:
            self._buffered = data
        return data

    async def _read_text(self, request: Request) -> str:
        return (await self._read_bytes(request)).decode("utf-8", errors="replace")

    async def _read_json(self, request: Request) -> Any:
        return json.loads(await self._read_bytes(request))

    async def _read_form(self, request: Request) -> FormData:
        # Buffer first so the parsed stream can be replayed later.
        await self._read_bytes(request)
        return await request.form()

    async def _read_form_fields(self, request: Request) -> dict[str, Any]:
        return flatten_form(await self._read_form(request))
