"""Pydantic models for precondition evaluation.

``VersionDescriptor`` is what the server knows about a resource's current
version; ``PreconditionResult`` is the immutable verdict handed back to the
HTTP layer. All models are frozen so a single instance can be shared across
concurrent evaluations.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from conditional_http.errors import UnsupportedPreconditionError


# Sentinel for "modification time unknown / never recorded"
MIN_TIMESTAMP = datetime(1, 1, 1, tzinfo=timezone.utc)
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class VersionDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_version: Optional[bytes] = None
    modified_on: datetime = MIN_TIMESTAMP

    @field_validator("modified_on")
    @classmethod
    def modified_on_must_be_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def has_row_version(self) -> bool:
        return bool(self.row_version)

    @property
    def has_known_modified_on(self) -> bool:
        return self.modified_on > MIN_TIMESTAMP


class AggregatePrecondition(VersionDescriptor):
    """Version descriptor synthesized from several sub-resources."""

    member_count: int = 0


class PreconditionStatus:
    INDETERMINABLE = "indeterminable"
    PASSED = "passed"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"


_STATUSES = {
    PreconditionStatus.INDETERMINABLE,
    PreconditionStatus.PASSED,
    PreconditionStatus.FAILED,
    PreconditionStatus.UNSUPPORTED,
}


class PreconditionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    status_code: int = 0
    reason_phrase: Optional[str] = None

    @field_validator("status")
    @classmethod
    def status_must_be_known(cls, v: str) -> str:
        if v not in _STATUSES:
            raise ValueError(f"status must be one of {sorted(_STATUSES)}")
        return v

    @property
    def passed(self) -> bool:
        return self.status == PreconditionStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status == PreconditionStatus.FAILED

    @property
    def indeterminable(self) -> bool:
        return self.status == PreconditionStatus.INDETERMINABLE

    @property
    def unsupported(self) -> bool:
        return self.status == PreconditionStatus.UNSUPPORTED

    def raise_for_status(self) -> "PreconditionResult":
        """Raise ``UnsupportedPreconditionError`` for an unsupported verdict, else return self."""
        if self.unsupported:
            raise UnsupportedPreconditionError(self.reason_phrase or "Unsupported precondition")
        return self

    def __str__(self) -> str:
        return f"{self.status} {self.status_code}"


PASSED = PreconditionResult(status=PreconditionStatus.PASSED)

PRECONDITION_FAILED = PreconditionResult(
    status=PreconditionStatus.FAILED,
    status_code=412,
    reason_phrase="Precondition Failed",
)

NOT_MODIFIED = PreconditionResult(
    status=PreconditionStatus.FAILED,
    status_code=304,
    reason_phrase="Not Modified",
)

PRECONDITION_REQUIRED = PreconditionResult(
    status=PreconditionStatus.INDETERMINABLE,
    status_code=428,
    reason_phrase="Unable to determine a mandatory precondition. A header may be missing in the request.",
)

BAD_REQUEST = PreconditionResult(
    status=PreconditionStatus.INDETERMINABLE,
    status_code=400,
    reason_phrase=(
        "Unable to determine a mandatory precondition. A header may be missing in the request "
        "or some server-side information was not available."
    ),
)

WILDCARD_UNSUPPORTED = PreconditionResult(
    status=PreconditionStatus.UNSUPPORTED,
    status_code=400,
    reason_phrase="The wildcard ETag conditional PUT|POST|PATCH|DELETE is not supported.",
)


__all__ = [
    "MIN_TIMESTAMP",
    "UNIX_EPOCH",
    "as_utc",
    "VersionDescriptor",
    "AggregatePrecondition",
    "PreconditionStatus",
    "PreconditionResult",
    "PASSED",
    "PRECONDITION_FAILED",
    "NOT_MODIFIED",
    "PRECONDITION_REQUIRED",
    "BAD_REQUEST",
    "WILDCARD_UNSUPPORTED",
]
