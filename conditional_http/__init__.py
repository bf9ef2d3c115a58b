"""Conditional HTTP request evaluation.

Entity-tag derivation (`logic.tag_codec`), multi-resource aggregation
(`logic.aggregate`), method classification (`logic.methods`) and the
precondition decision procedure (`logic.evaluator`). The FastAPI adapter
lives in `guards.precondition`; `create_app` wires logging and the
problem+json handlers.
"""

from __future__ import annotations

from conditional_http.errors import (
    AggregationError,
    InvalidArgumentError,
    PreconditionError,
    TagLengthMismatchError,
    UnsupportedPreconditionError,
)
from conditional_http.logic.aggregate import aggregate_descriptors, aggregate_timestamps
from conditional_http.logic.evaluator import PreconditionEvaluator, evaluate_preconditions
from conditional_http.logic.methods import READ_ONLY_METHODS, MethodClassifier, default_result_for_method, is_mutating
from conditional_http.logic.tag_codec import derive_tag, derive_tag_bytes, format_tag, try_parse_tag
from conditional_http.main import create_app
from conditional_http.models.precondition import (
    AggregatePrecondition,
    PreconditionResult,
    PreconditionStatus,
    VersionDescriptor,
)

__all__ = [
    "AggregationError",
    "InvalidArgumentError",
    "PreconditionError",
    "TagLengthMismatchError",
    "UnsupportedPreconditionError",
    "aggregate_descriptors",
    "aggregate_timestamps",
    "PreconditionEvaluator",
    "evaluate_preconditions",
    "READ_ONLY_METHODS",
    "MethodClassifier",
    "default_result_for_method",
    "is_mutating",
    "derive_tag",
    "derive_tag_bytes",
    "format_tag",
    "try_parse_tag",
    "create_app",
    "AggregatePrecondition",
    "PreconditionResult",
    "PreconditionStatus",
    "VersionDescriptor",
]
