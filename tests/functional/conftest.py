from __future__ import annotations

"""Functional test bootstrap for precondition evaluation tests.

Clears configuration environment variables and runs each test from an empty
working directory so `load_config()` only sees what a test sets up.
"""

import os

import pytest

from conditional_http.logic.events import BufferingEventRecorder
from conditional_http.logic.evaluator import PreconditionEvaluator

_CONFIG_ENV_VARS = (
    "PRECONDITION_MISSING_RESULT",
    "PRECONDITION_READ_ONLY_METHODS",
    "PRECONDITION_RESPONDER_ENABLED",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def recorder() -> BufferingEventRecorder:
    return BufferingEventRecorder()


@pytest.fixture()
def evaluator(recorder: BufferingEventRecorder) -> PreconditionEvaluator:
    return PreconditionEvaluator(recorder=recorder)
