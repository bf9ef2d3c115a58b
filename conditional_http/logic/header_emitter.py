"""Centralised validator header emitter.

Derives ``ETag`` and ``Last-Modified`` from a version descriptor (single or
aggregate) and applies them to outgoing responses, for successful responses
as well as 304/412 outcomes.
"""

from __future__ import annotations

import logging
from email.utils import format_datetime
from typing import Dict

from fastapi import Response

from conditional_http.logic.tag_codec import DescriptorSource, formatted_tag
from conditional_http.models.precondition import VersionDescriptor

logger = logging.getLogger(__name__)

ETAG_HEADER = "ETag"
LAST_MODIFIED_HEADER = "Last-Modified"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"


def format_http_date(descriptor: VersionDescriptor) -> str:
    """Render ``modified_on`` as an IMF-fixdate (second resolution)."""
    return format_datetime(descriptor.modified_on.replace(microsecond=0), usegmt=True)


def validator_headers(descriptor: VersionDescriptor) -> Dict[str, str]:
    """Return the validator headers for ``descriptor``.

    ``Last-Modified`` is omitted when the modification time is unknown.
    """
    headers: Dict[str, str] = {}
    tag = formatted_tag(DescriptorSource(descriptor))
    if tag:
        headers[ETAG_HEADER] = tag
    if descriptor.has_known_modified_on:
        headers[LAST_MODIFIED_HEADER] = format_http_date(descriptor)
    return headers


def _merge_expose_headers(existing: str, names: list[str]) -> str:
    merged: list[str] = []
    seen: set[str] = set()
    for t in [t.strip() for t in str(existing or "").split(",")] + names:
        if t and t.lower() not in seen:
            merged.append(t)
            seen.add(t.lower())
    return ", ".join(merged)


def emit_validator_headers(response: Response, descriptor: VersionDescriptor) -> Dict[str, str]:
    """Set ``ETag``/``Last-Modified`` on ``response`` and expose them to CORS clients."""
    headers = validator_headers(descriptor)
    for name, value in headers.items():
        response.headers[name] = value
    if headers:
        response.headers[EXPOSE_HEADERS] = _merge_expose_headers(
            response.headers.get(EXPOSE_HEADERS, ""), list(headers)
        )
    logger.info("etag.emit", extra={"headers_applied": sorted(headers), "etag": headers.get(ETAG_HEADER)})
    return headers


__all__ = [
    "ETAG_HEADER",
    "LAST_MODIFIED_HEADER",
    "format_http_date",
    "validator_headers",
    "emit_validator_headers",
]
