"""Exception hierarchy for precondition evaluation.

Caller bugs surface as ``InvalidArgumentError`` (a ``ValueError``). The
wildcard refusal on mutating requests is normally returned as a typed
result and only becomes ``UnsupportedPreconditionError`` when a caller asks
for it via ``PreconditionResult.raise_for_status``.
"""

from __future__ import annotations


class PreconditionError(Exception):
    """Base class for all errors raised by this package."""


class InvalidArgumentError(PreconditionError, ValueError):
    """A required argument was missing, blank or of the wrong shape."""


class TagLengthMismatchError(InvalidArgumentError):
    """Version byte sequences of different lengths cannot be XOR-combined."""

    def __init__(self, lengths: list[int]) -> None:
        self.lengths = lengths
        super().__init__(f"row versions must share one length to be combined, got lengths {sorted(set(lengths))}")


class UnsupportedPreconditionError(PreconditionError):
    """The request asked for precondition semantics this system refuses to honour."""


class AggregationError(PreconditionError, RuntimeError):
    """Aggregation hit a state that should be impossible."""


__all__ = [
    "PreconditionError",
    "InvalidArgumentError",
    "TagLengthMismatchError",
    "UnsupportedPreconditionError",
    "AggregationError",
]
