"""ContextSettings — limits and deadlines, overridable from the environment."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ContextSettings(BaseSettings):
    """Request-context limits."""

    body_deadline_ms: float = Field(
        default=3000, gt=0, description="Deadline for the validated body read"
    )
    read_deadline_ms: float = Field(
        default=2500, gt=0, description="Default deadline for raw body readers"
    )
    max_cookie_length: int = Field(
        default=1000, ge=0, description="Longest cookie header accepted"
    )
    max_header_entries: int = Field(
        default=50, ge=0, description="Header entries inspected per request"
    )
    cookie_header: str = Field(
        default="cookies", description="Header the cookie pairs are read from"
    )

    model_config = SettingsConfigDict(env_prefix="REQUEST_CONTEXT_", extra="ignore")


@lru_cache
def get_settings() -> ContextSettings:
    return ContextSettings()
