"""HTTP method classification for precondition evaluation.

Read-only methods are a fixed, overridable set; every other token,
including unrecognised verbs, is treated as mutating.
"""

from __future__ import annotations

from typing import Iterable, Optional

from conditional_http.errors import InvalidArgumentError
from conditional_http.models.precondition import PASSED, PRECONDITION_FAILED, PreconditionResult

READ_ONLY_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "CONNECT", "TRACE"})


def _require_method(method: Optional[str]) -> str:
    if method is None or not str(method).strip():
        raise InvalidArgumentError("The method name is None or whitespace.")
    return str(method).strip()


class MethodClassifier:
    def __init__(self, read_only_methods: Iterable[str] = READ_ONLY_METHODS) -> None:
        self.read_only_methods = frozenset(str(m).strip().upper() for m in read_only_methods)

    def is_mutating(self, method: Optional[str]) -> bool:
        return _require_method(method) not in self.read_only_methods

    def default_result_for_method(self, method: Optional[str]) -> PreconditionResult:
        """Reads pass by default; mutations fail when nothing can be checked."""
        if self.is_mutating(method):
            return PRECONDITION_FAILED
        return PASSED


DEFAULT_CLASSIFIER = MethodClassifier()


def is_mutating(method: Optional[str]) -> bool:
    return DEFAULT_CLASSIFIER.is_mutating(method)


def default_result_for_method(method: Optional[str]) -> PreconditionResult:
    return DEFAULT_CLASSIFIER.default_result_for_method(method)


__all__ = [
    "READ_ONLY_METHODS",
    "MethodClassifier",
    "DEFAULT_CLASSIFIER",
    "is_mutating",
    "default_result_for_method",
]
