"""Central error mapping for precondition outcomes.

Single source of truth for mapping precondition results to problem+json
codes and HTTP statuses. The guard and problem factory import from here
instead of hardcoding strings or numbers.
"""

from __future__ import annotations

PRECONDITION_ERROR_MAP = {
    "failed": {"code": "PRE_CONDITION_FAILED", "status": 412, "title": "Precondition Failed"},
    "not_modified": {"code": "PRE_NOT_MODIFIED", "status": 304, "title": "Not Modified"},
    "required": {"code": "PRE_CONDITION_REQUIRED", "status": 428, "title": "Precondition Required"},
    "bad_request": {"code": "PRE_CONDITION_INDETERMINABLE", "status": 400, "title": "Bad Request"},
    "wildcard_unsupported": {"code": "PRE_WILDCARD_UNSUPPORTED", "status": 400, "title": "Bad Request"},
}

__all__ = ["PRECONDITION_ERROR_MAP"]
