"""Centralised construction of problem+json payloads for precondition outcomes."""

from __future__ import annotations

from typing import Dict
import logging

from conditional_http.http.error_mapping import PRECONDITION_ERROR_MAP
from conditional_http.models.precondition import PreconditionResult

logger = logging.getLogger(__name__)


def error_key_for_result(result: PreconditionResult) -> str:
    """Return the PRECONDITION_ERROR_MAP key for a non-passing result."""
    if result.unsupported:
        return "wildcard_unsupported"
    if result.status_code == 304:
        return "not_modified"
    if result.status_code == 428:
        return "required"
    if result.indeterminable or result.status_code == 400:
        return "bad_request"
    return "failed"


def problem_for_result(result: PreconditionResult) -> Dict[str, object]:
    """Return a problem document for a result that blocks the request.

    The status comes from the result itself so callers may supply custom
    defaults; the code and title come from the central mapping.
    """
    key = error_key_for_result(result)
    mapping = PRECONDITION_ERROR_MAP[key]
    status = int(result.status_code or mapping["status"])
    problem = {
        "title": mapping["title"],
        "status": status,
        "detail": result.reason_phrase or mapping["title"],
        "code": mapping["code"],
        "outcome": result.status,
    }
    logger.info("error_handler.handle", extra={"code": problem["code"], "status": status})
    return problem


__all__ = ["error_key_for_result", "problem_for_result"]
