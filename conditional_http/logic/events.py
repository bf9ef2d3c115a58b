"""Event recorders for precondition diagnostics.

The evaluator reports each decision through an injected recorder rather than
a process-wide logger reference. ``LoggingEventRecorder`` writes structured
log lines; ``BufferingEventRecorder`` keeps events in memory for tests.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol
import logging

logger = logging.getLogger(__name__)

PRECONDITION_EVALUATE = "precondition.evaluate"
PRECONDITION_COMPARE = "precondition.compare"
PRECONDITION_DEFAULT_USED = "precondition.default_used"


class EventRecorder(Protocol):
    def record(self, event: str, **fields: Any) -> None:
        ...


class LoggingEventRecorder:
    """Record events as structured log lines (message = event name, fields in ``extra``)."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        self.log = log or logger
        self.level = level

    def record(self, event: str, **fields: Any) -> None:
        self.log.log(self.level, event, extra=dict(fields))


class BufferingEventRecorder:
    def __init__(self) -> None:
        self.events: List[Dict[str, Any]] = []

    def record(self, event: str, **fields: Any) -> None:
        self.events.append({"type": event, "fields": fields})

    def names(self) -> List[str]:
        return [e["type"] for e in self.events]

    def drain(self) -> List[Dict[str, Any]]:
        """Return buffered events and clear the buffer."""
        events = list(self.events)
        self.events.clear()
        return events


__all__ = [
    "PRECONDITION_EVALUATE",
    "PRECONDITION_COMPARE",
    "PRECONDITION_DEFAULT_USED",
    "EventRecorder",
    "LoggingEventRecorder",
    "BufferingEventRecorder",
]
