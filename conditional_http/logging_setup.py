"""Central logging configuration for the application.

Modules log event names with structured ``extra`` fields
(``logger.info("etag.emit", extra={...})``). The console formatter here
appends those fields as ``key=value`` pairs so they survive to stdout.
Configuration is applied once; repeated calls are no-ops.
"""
from __future__ import annotations
import logging
import os
from logging.config import dictConfig
from typing import Optional

LOG_LEVEL_ENV = "CONDITIONAL_HTTP_LOG_LEVEL"

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS and not k.startswith("_")}
        if not fields:
            return line
        return line + " " + " ".join(f"{k}={fields[k]!r}" for k in sorted(fields))


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
        "loggers": {
            "conditional_http": {"level": level},
        },
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Configure package logging once.

    ``level`` defaults to ``$CONDITIONAL_HTTP_LOG_LEVEL`` or INFO. If the root
    logger already has handlers (reloaders, test runners, a host application)
    nothing is changed.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    chosen = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").strip().upper()
    dictConfig(_dict_config(chosen))


__all__ = ["LOG_LEVEL_ENV", "StructuredFormatter", "configure_logging"]
