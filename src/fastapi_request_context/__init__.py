"""FastAPI Request Context - lazily validated request accessors for FastAPI."""

from fastapi_request_context.context import RequestContext
from fastapi_request_context.deadline import DeadlineExceeded, with_deadline
from fastapi_request_context.dependency import (
    context_dependency,
    register_exception_handlers,
)
from fastapi_request_context.exceptions import (
    BadRequest,
    ContextAbort,
    ContextException,
    PayloadTooLarge,
)
from fastapi_request_context.schemas import (
    ParseResult,
    PydanticSchema,
    Schema,
    SchemaBundle,
    SchemaShape,
)
from fastapi_request_context.settings import ContextSettings, get_settings

__all__ = [
    "BadRequest",
    "ContextAbort",
    "ContextException",
    "ContextSettings",
    "DeadlineExceeded",
    "ParseResult",
    "PayloadTooLarge",
    "PydanticSchema",
    "RequestContext",
    "Schema",
    "SchemaBundle",
    "SchemaShape",
    "context_dependency",
    "get_settings",
    "register_exception_handlers",
    "with_deadline",
]
