"""Entity tag derivation, formatting and parsing.

A tag is derived from a *tag source*: raw row-version bytes, a modification
timestamp, a version descriptor, or a homogeneous collection of one of those.
Collections of byte versions combine by XOR; collections of timestamps keep
the most recent. The canonical tag is raw bytes; the wire form is the
upper-case hex rendering wrapped in double quotes (always a strong validator).

Timestamps encode as signed 8-byte little-endian milliseconds since the Unix
epoch, so ``2017-09-29T14:32:10Z`` renders as ``10460DCE5E010000``.
"""

from __future__ import annotations

import base64
import binascii
import logging
import string
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import reduce
from typing import Iterable, Optional, Union

from conditional_http.errors import InvalidArgumentError, TagLengthMismatchError
from conditional_http.models.precondition import UNIX_EPOCH, VersionDescriptor, as_utc

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.hexdigits)
_ONE_MS = timedelta(milliseconds=1)


@dataclass(frozen=True)
class BytesSource:
    value: Optional[bytes]


@dataclass(frozen=True)
class TimestampSource:
    value: datetime


@dataclass(frozen=True)
class DescriptorSource:
    descriptor: VersionDescriptor


@dataclass(frozen=True)
class ManySource:
    items: tuple


TagSource = Union[BytesSource, TimestampSource, DescriptorSource, ManySource]
_SOURCE_TYPES = (BytesSource, TimestampSource, DescriptorSource, ManySource)


def tag_source(value: object) -> TagSource:
    """Wrap a plain value (bytes, datetime, descriptor or iterable of those) as a tag source."""
    if isinstance(value, _SOURCE_TYPES):
        return value
    if value is None:
        raise InvalidArgumentError("tag source must not be None")
    if isinstance(value, VersionDescriptor):
        return DescriptorSource(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesSource(bytes(value))
    if isinstance(value, datetime):
        return TimestampSource(value)
    if isinstance(value, str):
        # Strings are ambiguous (hex? base64? text?) and never a version source
        raise InvalidArgumentError("tag source must not be a string; parse it with try_parse_tag first")
    if isinstance(value, Iterable):
        return ManySource(tuple(None if item is None else tag_source(item) for item in value))
    raise InvalidArgumentError(f"cannot derive an entity tag from {type(value).__name__}")


def encode_timestamp(timestamp: datetime) -> bytes:
    """Encode ``timestamp`` as 8-byte little-endian signed milliseconds since the epoch."""
    millis = (as_utc(timestamp) - UNIX_EPOCH) // _ONE_MS
    return int(millis).to_bytes(8, "little", signed=True)


def decode_timestamp(tag: bytes) -> datetime:
    if tag is None or len(tag) != 8:
        raise InvalidArgumentError("a timestamp tag is exactly 8 bytes")
    millis = int.from_bytes(tag, "little", signed=True)
    return UNIX_EPOCH + millis * _ONE_MS


def to_hex(data: bytes) -> str:
    return data.hex().upper()


def xor_combine(versions: Iterable[bytes]) -> bytes:
    """XOR equal-length byte sequences together.

    Raises ``TagLengthMismatchError`` rather than truncating or padding when
    the lengths differ, and ``InvalidArgumentError`` for an empty input.
    """
    items = [bytes(v) for v in versions]
    if not items:
        raise InvalidArgumentError("at least one row version is required")
    lengths = [len(v) for v in items]
    if len(set(lengths)) != 1:
        raise TagLengthMismatchError(lengths)
    return reduce(lambda acc, nxt: bytes(a ^ b for a, b in zip(acc, nxt)), items[1:], items[0])


def _derive_many(items: tuple) -> Optional[bytes]:
    items = tuple(None if item is None else tag_source(item) for item in items)
    if not items or any(item is None for item in items):
        return None
    kinds = {type(item) for item in items}
    if len(kinds) != 1:
        raise InvalidArgumentError("a tag collection must hold a single kind of source")
    kind = kinds.pop()

    if kind is TimestampSource:
        # Only the most recent modification matters in a collection
        return encode_timestamp(max(as_utc(item.value) for item in items))

    if kind is BytesSource:
        versions = [item.value for item in items]
    elif kind is DescriptorSource:
        versions = [item.descriptor.row_version for item in items]
    else:
        raise InvalidArgumentError("nested tag collections are not supported")

    if any(not v for v in versions):
        return None
    return xor_combine(versions)


def derive_tag_bytes(source: object) -> Optional[bytes]:
    """Return the canonical tag bytes for ``source`` or None when no tag can be derived."""
    src = tag_source(source)
    if isinstance(src, BytesSource):
        if src.value is None:
            raise InvalidArgumentError("row_version must not be None")
        return src.value or None
    if isinstance(src, TimestampSource):
        return encode_timestamp(src.value)
    if isinstance(src, DescriptorSource):
        descriptor = src.descriptor
        if descriptor.has_row_version:
            return descriptor.row_version
        return encode_timestamp(descriptor.modified_on)
    return _derive_many(src.items)


def derive_tag(source: object) -> Optional[str]:
    """Return the upper-case hex tag for ``source`` or None when no tag can be derived."""
    tag = derive_tag_bytes(source)
    return to_hex(tag) if tag is not None else None


def format_tag(tag: Optional[str]) -> str:
    """Wrap a tag in double quotes for the ETag/If-Match wire form."""
    if tag is None or not str(tag).strip():
        raise InvalidArgumentError("the entity tag is None or whitespace")
    return f'"{tag}"'


def formatted_tag(source: object) -> Optional[str]:
    """Derive and quote the tag for ``source`` in one step."""
    tag = derive_tag(source)
    return format_tag(tag) if tag is not None else None


def try_parse_tag(value: Optional[str]) -> Optional[bytes]:
    """Decode a quoted or raw tag string: hex first, base64 as fallback.

    Returns None for anything that is neither; never raises.
    """
    if value is None:
        return None
    s = str(value).strip()
    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        s = s[1:-1]
    if not s.strip() or len(s) % 2:
        return None
    if all(c in _HEX_DIGITS for c in s):
        return bytes.fromhex(s)
    try:
        return base64.b64decode(s, validate=True)
    except (binascii.Error, ValueError):
        logger.debug("etag.parse_failed", extra={"length": len(s)})
        return None


__all__ = [
    "BytesSource",
    "TimestampSource",
    "DescriptorSource",
    "ManySource",
    "TagSource",
    "tag_source",
    "encode_timestamp",
    "decode_timestamp",
    "to_hex",
    "xor_combine",
    "derive_tag_bytes",
    "derive_tag",
    "format_tag",
    "formatted_tag",
    "try_parse_tag",
]
