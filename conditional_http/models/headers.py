"""Typed view of a request's conditional headers."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from conditional_http.models.precondition import as_utc


class ConditionalHeaders(BaseModel):
    """Parsed ``If-*`` headers.

    Entity-tag lists hold quoted strong tags (weak prefixes already dropped)
    or the bare wildcard ``*``. Absent or malformed headers are empty/None.
    """

    model_config = ConfigDict(frozen=True)

    if_match: Tuple[str, ...] = ()
    if_none_match: Tuple[str, ...] = ()
    if_modified_since: Optional[datetime] = None
    if_unmodified_since: Optional[datetime] = None

    @field_validator("if_modified_since", "if_unmodified_since")
    @classmethod
    def dates_must_be_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None


__all__ = ["ConditionalHeaders"]
