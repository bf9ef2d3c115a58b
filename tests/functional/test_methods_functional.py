"""Functional tests for HTTP method classification and default results."""

from __future__ import annotations

import pytest

from conditional_http.errors import InvalidArgumentError
from conditional_http.logic.methods import (
    READ_ONLY_METHODS,
    MethodClassifier,
    default_result_for_method,
    is_mutating,
)
from conditional_http.models.precondition import PASSED, PRECONDITION_FAILED, PreconditionStatus


@pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS", "CONNECT", "TRACE"])
def test_read_only_methods_are_not_mutating(method: str) -> None:
    assert is_mutating(method) is False
    assert default_result_for_method(method) == PASSED


@pytest.mark.parametrize("method", ["PUT", "POST", "DELETE", "PATCH", "PROPFIND", "BREW"])
def test_every_other_token_is_mutating(method: str) -> None:
    assert is_mutating(method) is True
    result = default_result_for_method(method)
    assert result == PRECONDITION_FAILED
    assert result.status == PreconditionStatus.FAILED
    assert result.status_code == 412


def test_read_only_set_is_exactly_the_five_safe_methods() -> None:
    assert READ_ONLY_METHODS == frozenset({"GET", "HEAD", "OPTIONS", "CONNECT", "TRACE"})


@pytest.mark.parametrize("blank", [None, "", "  "])
def test_blank_method_is_an_argument_error(blank) -> None:
    with pytest.raises(InvalidArgumentError):
        is_mutating(blank)
    with pytest.raises(InvalidArgumentError):
        default_result_for_method(blank)


def test_classifier_read_only_set_can_be_narrowed() -> None:
    classifier = MethodClassifier(READ_ONLY_METHODS - {"TRACE"})
    assert classifier.is_mutating("TRACE") is True
    assert classifier.is_mutating("GET") is False
    assert classifier.default_result_for_method("TRACE") == PRECONDITION_FAILED


def test_classifier_normalises_configured_methods() -> None:
    classifier = MethodClassifier({"get", " head "})
    assert classifier.read_only_methods == frozenset({"GET", "HEAD"})
    assert classifier.is_mutating("GET") is False
    assert classifier.is_mutating("HEAD") is False
    assert classifier.is_mutating("OPTIONS") is True
