"""Per-field decoders for cookies, headers, query strings and forms."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import unquote

from starlette.datastructures import FormData

_COOKIE_SEPARATOR = re.compile(r";\s*")


def parse_cookie_header(header: str) -> dict[str, str | None]:
    """Split ``a=1; b=2`` into a mapping.

    Values keep any ``=`` after the first one; a pair without ``=`` maps
    to ``None``. Empty keys are dropped and later duplicates win.
    """
    cookies: dict[str, str | None] = {}
    for pair in _COOKIE_SEPARATOR.split(header):
        key, sep, value = pair.partition("=")
        if not key:
            continue
        cookies[key] = value if sep else None
    return cookies


def collect_headers(
    items: Iterable[tuple[str, str]], limit: int
) -> dict[str, str]:
    """Lower-case header names, keeping the first value seen per name.

    At most ``limit`` entries are inspected, whatever order they come in.
    """
    headers: dict[str, str] = {}
    for num, (key, value) in enumerate(items):
        if num == limit:
            break
        headers.setdefault(key.lower(), value)
    return headers


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def _coerce(value: str) -> Any:
    decoded = unquote(value)
    try:
        return json.loads(decoded, parse_constant=_reject_constant)
    except ValueError:
        return decoded


def parse_query_string(query_string: str | None) -> dict[str, Any]:
    """Decode ``a=1&b=true&c=%22x%22&d`` into ``{a: 1, b: True, c: "x", d: True}``."""
    query: dict[str, Any] = {}
    if not query_string:
        return query

    for segment in query_string.split("&"):
        key, sep, value = segment.partition("=")
        if not key:
            continue
        query[key] = _coerce(value) if sep else True
    return query


def flatten_form(form: FormData) -> dict[str, Any]:
    # Repeated fields keep their last value.
    return dict(form.multi_items())
