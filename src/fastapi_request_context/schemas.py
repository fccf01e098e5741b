"""Schema capability contract and the pydantic adapter."""

from __future__ import annotations

import types
from dataclasses import dataclass
from enum import Enum
from typing import (
    Annotated,
    Any,
    Protocol,
    Union,
    get_args,
    get_origin,
    runtime_checkable,
)

from pydantic import TypeAdapter, ValidationError


class SchemaShape(Enum):
    """Declared value shape, used to pick the body decoding strategy."""

    STRING = "string"
    OTHER = "other"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of ``Schema.safe_parse``."""

    success: bool
    data: Any = None
    error: Any = None


@runtime_checkable
class Schema(Protocol):
    """Anything that can attempt to parse a raw value."""

    shape: SchemaShape

    def safe_parse(self, raw: Any) -> ParseResult: ...


@dataclass(frozen=True)
class SchemaBundle:
    """Optional per-field schemas for one route.

    ``transform`` enables multipart form decoding of the body.
    """

    body: Schema | None = None
    cookies: Schema | None = None
    headers: Schema | None = None
    query: Schema | None = None
    transform: bool = False


def _is_string_type(tp: Any) -> bool:
    if tp is str:
        return True

    origin = get_origin(tp)
    if origin is Annotated:
        return _is_string_type(get_args(tp)[0])
    if origin is Union or origin is types.UnionType:
        return all(_is_string_type(arg) for arg in get_args(tp))
    return False


def infer_shape(tp: Any) -> SchemaShape:
    """Return ``STRING`` for ``str`` and for unions made only of strings.

    ``Literal`` values are ``OTHER`` even when every option is a string;
    pass ``shape=SchemaShape.STRING`` to read such bodies as text.
    """
    return SchemaShape.STRING if _is_string_type(tp) else SchemaShape.OTHER


class PydanticSchema:
    """Schema backed by a pydantic ``TypeAdapter``."""

    def __init__(self, tp: Any, *, shape: SchemaShape | None = None) -> None:
        self._adapter: TypeAdapter[Any] = TypeAdapter(tp)
        self.type = tp
        self.shape = shape if shape is not None else infer_shape(tp)

    def safe_parse(self, raw: Any) -> ParseResult:
        try:
            data = self._adapter.validate_python(raw)
        except ValidationError as exc:
            return ParseResult(success=False, error=exc)
        return ParseResult(success=True, data=data)

    def __repr__(self) -> str:
        return f"PydanticSchema({self.type!r}, shape={self.shape.name})"
