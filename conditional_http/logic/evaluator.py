"""Precondition evaluation for conditional HTTP requests.

Mutating methods check, in order of preference: ``If-Match``,
``If-None-Match``, then ``If-Unmodified-Since``. Read-only methods check
``If-None-Match`` then ``If-Modified-Since``. Entity tags are favoured over
timestamps; when no usable header/version combination exists the caller's
default result is returned unchanged.

Timestamps are compared with a one-second guard because HTTP dates have
one-second resolution:

- ``If-Unmodified-Since`` passes when client and server times are within 1000 ms.
- ``If-Modified-Since`` reports "modified" only when the server time is more
  than 1000 ms after the client time.

A wildcard ``*`` in ``If-Match``/``If-None-Match`` on a mutating request is
refused with the ``WILDCARD_UNSUPPORTED`` result. On reads the wildcard is compared
literally and never matches a formatted tag.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Union

from conditional_http.errors import InvalidArgumentError
from conditional_http.logic.conditional_headers import (
    IF_MATCH,
    IF_MODIFIED_SINCE,
    IF_NONE_MATCH,
    IF_UNMODIFIED_SINCE,
    WILDCARD,
    parse_conditional_headers,
)
from conditional_http.logic.events import (
    PRECONDITION_COMPARE,
    PRECONDITION_DEFAULT_USED,
    PRECONDITION_EVALUATE,
    EventRecorder,
    LoggingEventRecorder,
)
from conditional_http.logic.methods import DEFAULT_CLASSIFIER, MethodClassifier
from conditional_http.logic.tag_codec import DescriptorSource, derive_tag, format_tag
from conditional_http.models.headers import ConditionalHeaders
from conditional_http.models.precondition import (
    NOT_MODIFIED,
    PASSED,
    PRECONDITION_FAILED,
    WILDCARD_UNSUPPORTED,
    PreconditionResult,
    VersionDescriptor,
    as_utc,
)

TIMESTAMP_TOLERANCE = timedelta(milliseconds=1000)

HeadersLike = Union[ConditionalHeaders, Mapping[str, Any], None]


def are_times_almost_equal(first: datetime, second: datetime) -> bool:
    return abs(as_utc(first) - as_utc(second)) < TIMESTAMP_TOLERANCE


def is_time_significantly_greater(base: datetime, possibly_greater: datetime) -> bool:
    return as_utc(possibly_greater) - as_utc(base) > TIMESTAMP_TOLERANCE


class PreconditionEvaluator:
    """Decide whether a conditional request may proceed.

    Holds no per-request state, so one instance can serve concurrent
    requests. Diagnostics go to the injected ``EventRecorder``.
    """

    def __init__(
        self,
        recorder: Optional[EventRecorder] = None,
        classifier: Optional[MethodClassifier] = None,
    ) -> None:
        self.recorder = recorder or LoggingEventRecorder()
        self.classifier = classifier or DEFAULT_CLASSIFIER

    def evaluate(
        self,
        headers: HeadersLike,
        method: str,
        default_result: PreconditionResult,
        local_info: VersionDescriptor,
    ) -> PreconditionResult:
        if default_result is None:
            raise InvalidArgumentError("default_result must not be None")
        if local_info is None:
            raise InvalidArgumentError("local_info must not be None")
        mutating = self.classifier.is_mutating(method)
        conditional = parse_conditional_headers(headers)

        # A descriptor always yields a tag: row version, else the timestamp
        local_tag = format_tag(derive_tag(DescriptorSource(local_info)))

        if mutating:
            result = self._evaluate_mutating(conditional, local_info, local_tag)
        else:
            result = self._evaluate_read(conditional, local_info, local_tag)
        if result is None:
            return self._use_default(method, default_result, "precondition headers not found")

        header, result = result
        self.recorder.record(
            PRECONDITION_EVALUATE,
            method=method,
            mutating=mutating,
            header=header,
            outcome=result.status,
            status_code=result.status_code,
        )
        return result

    def _evaluate_mutating(
        self, conditional: ConditionalHeaders, local_info: VersionDescriptor, local_tag: str
    ) -> Optional[tuple[str, PreconditionResult]]:
        if conditional.if_match:
            if WILDCARD in conditional.if_match:
                return IF_MATCH, WILDCARD_UNSUPPORTED
            if self._any_match(IF_MATCH, conditional.if_match, local_tag):
                return IF_MATCH, PASSED
            return IF_MATCH, PRECONDITION_FAILED

        if conditional.if_none_match:
            if WILDCARD in conditional.if_none_match:
                return IF_NONE_MATCH, WILDCARD_UNSUPPORTED
            if self._any_match(IF_NONE_MATCH, conditional.if_none_match, local_tag):
                return IF_NONE_MATCH, PRECONDITION_FAILED
            return IF_NONE_MATCH, PASSED

        # Note: *un*modified since; the client must hold the server's exact timestamp
        if conditional.if_unmodified_since is not None and local_info.has_known_modified_on:
            self._record_compare(IF_UNMODIFIED_SINCE, conditional.if_unmodified_since, local_info.modified_on)
            if are_times_almost_equal(conditional.if_unmodified_since, local_info.modified_on):
                return IF_UNMODIFIED_SINCE, PASSED
            return IF_UNMODIFIED_SINCE, PRECONDITION_FAILED

        return None

    def _evaluate_read(
        self, conditional: ConditionalHeaders, local_info: VersionDescriptor, local_tag: str
    ) -> Optional[tuple[str, PreconditionResult]]:
        if conditional.if_none_match:
            if self._any_match(IF_NONE_MATCH, conditional.if_none_match, local_tag):
                return IF_NONE_MATCH, NOT_MODIFIED
            return IF_NONE_MATCH, PASSED

        if conditional.if_modified_since is not None and local_info.has_known_modified_on:
            self._record_compare(IF_MODIFIED_SINCE, conditional.if_modified_since, local_info.modified_on)
            if is_time_significantly_greater(conditional.if_modified_since, local_info.modified_on):
                return IF_MODIFIED_SINCE, PASSED
            return IF_MODIFIED_SINCE, NOT_MODIFIED

        return None

    def _any_match(self, header: str, tokens: tuple[str, ...], local_tag: str) -> bool:
        for token in tokens:
            self._record_compare(header, token, local_tag)
            if token == local_tag:
                return True
        return False

    def _record_compare(self, header: str, client: Any, local: Any) -> None:
        self.recorder.record(PRECONDITION_COMPARE, header=header, client=str(client), local=str(local))

    def _use_default(self, method: str, default_result: PreconditionResult, reason: str) -> PreconditionResult:
        self.recorder.record(
            PRECONDITION_DEFAULT_USED,
            method=method,
            reason=reason,
            outcome=default_result.status,
            status_code=default_result.status_code,
        )
        return default_result


def evaluate_preconditions(
    headers: HeadersLike,
    method: str,
    local_info: VersionDescriptor,
    default_result: Optional[PreconditionResult] = None,
    recorder: Optional[EventRecorder] = None,
    classifier: Optional[MethodClassifier] = None,
) -> PreconditionResult:
    """One-shot evaluation; ``default_result`` falls back to the method's default."""
    evaluator = PreconditionEvaluator(recorder=recorder, classifier=classifier)
    if default_result is None:
        default_result = evaluator.classifier.default_result_for_method(method)
    return evaluator.evaluate(headers, method, default_result, local_info)


__all__ = [
    "TIMESTAMP_TOLERANCE",
    "are_times_almost_equal",
    "is_time_significantly_greater",
    "PreconditionEvaluator",
    "evaluate_preconditions",
]
