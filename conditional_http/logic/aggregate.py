"""Aggregate version information for responses built from many resources.

Both aggregates are order independent: row versions combine by XOR and
timestamps by max, so re-reading the same members in a different order
yields the same composite tag.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from conditional_http.errors import AggregationError, InvalidArgumentError
from conditional_http.logic.tag_codec import BytesSource, ManySource, derive_tag_bytes
from conditional_http.models.precondition import (
    MIN_TIMESTAMP,
    AggregatePrecondition,
    VersionDescriptor,
    as_utc,
)

logger = logging.getLogger(__name__)


def aggregate_descriptors(descriptors: Iterable[VersionDescriptor]) -> AggregatePrecondition:
    """Combine member descriptors into one ``AggregatePrecondition``.

    The row version is the XOR of every member's row version and is left
    absent when any member has none. ``modified_on`` is the latest member
    timestamp, or ``MIN_TIMESTAMP`` for an empty collection.
    """
    if descriptors is None:
        raise InvalidArgumentError("descriptors must not be None")
    members = list(descriptors)
    if any(m is None for m in members):
        raise InvalidArgumentError("descriptors must not contain None")

    row_version = derive_tag_bytes(ManySource(tuple(BytesSource(m.row_version) for m in members)))
    modified_on = max((m.modified_on for m in members), default=MIN_TIMESTAMP)

    logger.debug(
        "aggregate.descriptors",
        extra={"member_count": len(members), "has_row_version": row_version is not None},
    )
    return AggregatePrecondition(row_version=row_version, modified_on=modified_on, member_count=len(members))


def aggregate_timestamps(timestamps: Iterable[datetime]) -> Optional[AggregatePrecondition]:
    """Build an aggregate from bare timestamps; None when there are none.

    The row version is the tag bytes of the most recent timestamp so the
    aggregate compares the same way as a single timestamped resource.
    """
    if timestamps is None:
        raise InvalidArgumentError("timestamps must not be None")
    stamps = [as_utc(t) for t in timestamps]
    if not stamps:
        return None

    most_recent = max(stamps)
    tag = derive_tag_bytes(most_recent)
    if tag is None:
        raise AggregationError(
            "Cannot create precondition information from the timestamps; timestamp tags are always derivable."
        )
    return AggregatePrecondition(row_version=tag, modified_on=most_recent, member_count=len(stamps))


__all__ = ["aggregate_descriptors", "aggregate_timestamps"]
