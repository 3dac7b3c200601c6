"""Pydantic request/response schemas and the continuation cache entry."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from webfetch import settings

# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

def validate_max_chars(value: int) -> int:
    """Return *value* if it lies within the configured character-budget bounds."""
    if not settings.MIN_MAX_CHARS <= value <= settings.MAX_CHARS_LIMIT:
        raise ValueError(
            f"max_chars must be between {settings.MIN_MAX_CHARS} "
            f"and {settings.MAX_CHARS_LIMIT}",
        )
    return value


class FetchRequest(BaseModel):
    """A single fetch-or-continue request.

    Exactly one of ``url`` or ``continuation_token`` is the operative input;
    when a token is given the URL is ignored.  Fields accept both snake_case
    names and the camelCase wire names (``maxChars``, ``continuationToken``,
    ``timeoutMs``, ``userAgent``, ``maxBodySizeBytes``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    url: str | None = None
    continuation_token: str | None = None
    max_chars: int = Field(default_factory=lambda: settings.DEFAULT_MAX_CHARS)
    # Strict so that True is not coerced to heading 1
    headings: list[StrictStr | StrictInt] = Field(default_factory=list)
    timeout_ms: int = Field(default_factory=lambda: settings.DEFAULT_TIMEOUT_MS, gt=0)
    user_agent: str = Field(default_factory=lambda: settings.DEFAULT_USER_AGENT)
    max_body_size_bytes: int = Field(
        default_factory=lambda: settings.DEFAULT_MAX_BODY_SIZE, gt=0,
    )

    @field_validator("url", "continuation_token", mode="before")
    @classmethod
    def strip_blank(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("max_chars")
    @classmethod
    def check_max_chars(cls, v: int) -> int:
        return validate_max_chars(v)

    @field_validator("headings", mode="before")
    @classmethod
    def drop_none_headings(cls, v: Any) -> Any:
        if v is None:
            return []
        return v

    @model_validator(mode="after")
    def require_url_or_token(self) -> FetchRequest:
        if not self.url and not self.continuation_token:
            raise ValueError("URL is required for initial fetch")
        return self


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

class FetchResult(BaseModel):
    """Outcome of one fetch-or-continue call.

    ``toc`` is ``None`` when the extracted fragment had no headings (and on
    every continuation page).  ``continuation_token`` is ``None`` when the
    content fit in the budget or a heading filter was applied.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    url: str
    markdown: str
    toc: str | None = None
    continuation_token: str | None = None
    method: str


# ---------------------------------------------------------------------------
# Continuation cache entry
# ---------------------------------------------------------------------------

class ContinuationEntry(BaseModel):
    """Paused pagination state, owned by :class:`~webfetch.cache.ContinuationStore`.

    Entries are never mutated: advancing a chain stores a copy under a new key.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    full_markdown: str
    offset: int
    source_url: str
    title: str
    method: str
    created_at: float

    @model_validator(mode="after")
    def check_offset(self) -> ContinuationEntry:
        if not 0 <= self.offset <= len(self.full_markdown):
            raise ValueError(
                f"offset {self.offset} outside [0, {len(self.full_markdown)}]",
            )
        return self
