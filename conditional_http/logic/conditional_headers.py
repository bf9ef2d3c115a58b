"""Parse raw ``If-*`` request headers into ``ConditionalHeaders``.

Malformed input never raises: an unparseable date is treated as absent and
an invalid entity-tag token is skipped. Weak validators (``W/"x"``) are
compared as their strong form.
"""

from __future__ import annotations

import logging
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Optional

from conditional_http.models.headers import ConditionalHeaders

logger = logging.getLogger(__name__)

IF_MATCH = "If-Match"
IF_NONE_MATCH = "If-None-Match"
IF_MODIFIED_SINCE = "If-Modified-Since"
IF_UNMODIFIED_SINCE = "If-Unmodified-Since"
WILDCARD = "*"


def _split_quoted(value: str) -> Optional[list[str]]:
    """Split on commas outside quotes; None when quotes are unbalanced."""
    in_quote = False
    buf: list[str] = []
    parts: list[str] = []
    for ch in value:
        if ch == '"':
            in_quote = not in_quote
            buf.append(ch)
        elif ch == "," and not in_quote:
            parts.append("".join(buf).strip())
            buf.clear()
        else:
            buf.append(ch)
    if in_quote:
        return None
    parts.append("".join(buf).strip())
    return parts


def parse_entity_tags(value: Optional[str]) -> tuple[str, ...]:
    """Return the quoted entity tags (or ``*``) listed in a header value."""
    if value is None:
        return ()
    s = str(value).strip()
    if not s:
        return ()
    parts = _split_quoted(s)
    if parts is None:
        logger.info("conditional_headers.unbalanced_quotes", extra={"raw": s})
        return ()

    tokens: list[str] = []
    for raw in parts:
        t = raw.strip()
        if not t:
            continue
        if t == WILDCARD:
            tokens.append(t)
            continue
        if t[:2].upper() == "W/":
            t = t[2:].lstrip()
        if not (len(t) >= 2 and t.startswith('"') and t.endswith('"')):
            # Unquoted tokens are not entity tags
            continue
        inner = t[1:-1]
        if not inner or '"' in inner:
            continue
        tokens.append(t)
    return tuple(tokens)


def parse_http_date(value: Optional[str]):
    """Parse an HTTP-date into an aware UTC datetime; None when absent or malformed."""
    if value is None or not str(value).strip():
        return None
    try:
        return parsedate_to_datetime(str(value).strip())
    except (TypeError, ValueError, IndexError, OverflowError):
        logger.info("conditional_headers.bad_date", extra={"raw": str(value)})
        return None


def _header(headers: Mapping[str, Any], name: str) -> Optional[str]:
    getlist = getattr(headers, "getlist", None)
    if callable(getlist):
        values = getlist(name)
        return ", ".join(values) if values else None
    wanted = name.lower()
    for key, val in headers.items():
        if str(key).lower() == wanted:
            if isinstance(val, (list, tuple)):
                return ", ".join(str(v) for v in val)
            return None if val is None else str(val)
    return None


def parse_conditional_headers(headers: Optional[Mapping[str, Any]]) -> ConditionalHeaders:
    """Build ``ConditionalHeaders`` from any case-insensitive or plain header mapping."""
    if headers is None:
        return ConditionalHeaders()
    if isinstance(headers, ConditionalHeaders):
        return headers
    return ConditionalHeaders(
        if_match=parse_entity_tags(_header(headers, IF_MATCH)),
        if_none_match=parse_entity_tags(_header(headers, IF_NONE_MATCH)),
        if_modified_since=parse_http_date(_header(headers, IF_MODIFIED_SINCE)),
        if_unmodified_since=parse_http_date(_header(headers, IF_UNMODIFIED_SINCE)),
    )


__all__ = [
    "IF_MATCH",
    "IF_NONE_MATCH",
    "IF_MODIFIED_SINCE",
    "IF_UNMODIFIED_SINCE",
    "WILDCARD",
    "parse_entity_tags",
    "parse_http_date",
    "parse_conditional_headers",
]
