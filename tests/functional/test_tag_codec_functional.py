"""Functional tests for entity-tag derivation, formatting and parsing.

Covers the timestamp wire encoding, XOR aggregation of row versions, the
hex-then-base64 parse fallback and the argument checks on formatting.
"""

from __future__ import annotations

import base64
from datetime import datetime, timedelta, timezone

import pytest

from conditional_http.errors import InvalidArgumentError, TagLengthMismatchError
from conditional_http.logic.tag_codec import (
    BytesSource,
    DescriptorSource,
    ManySource,
    TimestampSource,
    decode_timestamp,
    derive_tag,
    derive_tag_bytes,
    encode_timestamp,
    format_tag,
    formatted_tag,
    tag_source,
    try_parse_tag,
    xor_combine,
)
from conditional_http.models.precondition import MIN_TIMESTAMP, VersionDescriptor

STATIC_TIMESTAMP = datetime(2017, 9, 29, 14, 32, 10, tzinfo=timezone.utc)
ROW_VERSION = bytes([1, 2, 3, 4, 5, 6, 7, 8])


def test_static_timestamp_produces_fixed_tag() -> None:
    assert derive_tag(STATIC_TIMESTAMP) == "10460DCE5E010000"
    # Pure function: no dependency on the system clock
    assert derive_tag(STATIC_TIMESTAMP) == derive_tag(STATIC_TIMESTAMP)


def test_timestamp_encoding_is_little_endian_epoch_milliseconds() -> None:
    encoded = encode_timestamp(STATIC_TIMESTAMP)
    assert len(encoded) == 8
    assert int.from_bytes(encoded, "little", signed=True) == 1506695530000
    assert decode_timestamp(encoded) == STATIC_TIMESTAMP


def test_naive_timestamp_is_read_as_utc() -> None:
    naive = datetime(2017, 9, 29, 14, 32, 10)
    assert derive_tag(naive) == "10460DCE5E010000"


def test_offset_timestamp_is_normalised_before_encoding() -> None:
    plus_two = STATIC_TIMESTAMP.astimezone(timezone(timedelta(hours=2)))
    assert derive_tag(plus_two) == derive_tag(STATIC_TIMESTAMP)


def test_minimum_sentinel_still_encodes() -> None:
    assert derive_tag(MIN_TIMESTAMP) == "0028D3ED7CC7FFFF"


@pytest.mark.parametrize("step", [timedelta(milliseconds=1), timedelta(seconds=1), timedelta(days=365)])
def test_distinct_timestamps_give_distinct_tags(step: timedelta) -> None:
    earlier = STATIC_TIMESTAMP
    later = STATIC_TIMESTAMP + step
    assert derive_tag(earlier) != derive_tag(later)


def test_sub_millisecond_changes_share_a_tag() -> None:
    assert derive_tag(STATIC_TIMESTAMP) == derive_tag(STATIC_TIMESTAMP + timedelta(microseconds=900))


def test_row_version_renders_as_upper_hex() -> None:
    assert derive_tag(ROW_VERSION) == "0102030405060708"
    assert derive_tag(bytes([0xAB, 0x0F])) == "AB0F"


def test_descriptor_prefers_row_version_over_timestamp() -> None:
    descriptor = VersionDescriptor(row_version=ROW_VERSION, modified_on=STATIC_TIMESTAMP)
    assert derive_tag(descriptor) == "0102030405060708"


@pytest.mark.parametrize("row_version", [None, b""])
def test_descriptor_without_row_version_falls_back_to_timestamp(row_version) -> None:
    descriptor = VersionDescriptor(row_version=row_version, modified_on=STATIC_TIMESTAMP)
    assert derive_tag(DescriptorSource(descriptor)) == "10460DCE5E010000"


def test_descriptor_without_any_information_still_derives() -> None:
    assert derive_tag(VersionDescriptor()) == "0028D3ED7CC7FFFF"


def test_collection_of_row_versions_is_xor_combined() -> None:
    a = bytes([0b1010, 0xFF])
    b = bytes([0b0110, 0x0F])
    c = bytes([0b0001, 0x00])
    assert derive_tag_bytes([a, b, c]) == bytes([0b1101, 0xF0])
    assert derive_tag([a]) == a.hex().upper()


def test_collection_of_row_versions_is_order_independent() -> None:
    a, b, c = ROW_VERSION, bytes(range(10, 18)), bytes(range(100, 108))
    assert derive_tag([a, b, c]) == derive_tag([c, a, b]) == derive_tag([b, c, a])


@pytest.mark.parametrize("versions", [[], [ROW_VERSION, None], [None]])
def test_collection_of_row_versions_without_full_information_has_no_tag(versions) -> None:
    assert derive_tag(versions) is None


def test_collection_of_unequal_row_versions_is_rejected() -> None:
    with pytest.raises(TagLengthMismatchError) as excinfo:
        derive_tag([ROW_VERSION, bytes([1, 2, 3])])
    assert excinfo.value.lengths == [8, 3]


def test_xor_combine_requires_input() -> None:
    with pytest.raises(InvalidArgumentError):
        xor_combine([])


def test_collection_of_timestamps_uses_most_recent() -> None:
    stamps = [STATIC_TIMESTAMP - timedelta(days=3), STATIC_TIMESTAMP, STATIC_TIMESTAMP - timedelta(hours=1)]
    assert derive_tag(stamps) == "10460DCE5E010000"


def test_empty_collection_of_timestamps_has_no_tag() -> None:
    assert derive_tag(ManySource(())) is None


def test_collection_of_descriptors_combines_row_versions() -> None:
    first = VersionDescriptor(row_version=ROW_VERSION)
    second = VersionDescriptor(row_version=bytes(8))
    assert derive_tag([first, second]) == "0102030405060708"


def test_mixed_collections_are_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        derive_tag([ROW_VERSION, STATIC_TIMESTAMP])


def test_tag_source_wraps_plain_values() -> None:
    assert tag_source(ROW_VERSION) == BytesSource(ROW_VERSION)
    assert tag_source(bytearray(ROW_VERSION)) == BytesSource(ROW_VERSION)
    assert tag_source(STATIC_TIMESTAMP) == TimestampSource(STATIC_TIMESTAMP)
    assert isinstance(tag_source([ROW_VERSION]), ManySource)


@pytest.mark.parametrize("bad", [None, "0102", 42])
def test_tag_source_rejects_unusable_values(bad) -> None:
    with pytest.raises(InvalidArgumentError):
        tag_source(bad)


def test_single_none_row_version_is_an_argument_error() -> None:
    with pytest.raises(InvalidArgumentError):
        derive_tag(BytesSource(None))


def test_format_wraps_in_quotes() -> None:
    assert format_tag("0102030405060708") == '"0102030405060708"'
    assert formatted_tag(ROW_VERSION) == '"0102030405060708"'


@pytest.mark.parametrize("blank", [None, "", "   "])
def test_format_rejects_blank_tags(blank) -> None:
    with pytest.raises(InvalidArgumentError):
        format_tag(blank)


@pytest.mark.parametrize(
    "version",
    [ROW_VERSION, bytes([0]), bytes([0xFF] * 16), encode_timestamp(STATIC_TIMESTAMP)],
)
def test_parse_inverts_format(version: bytes) -> None:
    assert try_parse_tag(format_tag(derive_tag(version))) == version


def test_parse_accepts_lower_case_hex_and_unquoted_values() -> None:
    assert try_parse_tag("0a0b") == bytes([10, 11])


def test_parse_falls_back_to_base64() -> None:
    encoded = base64.b64encode(b"hello world!").decode("ascii")
    assert try_parse_tag(encoded) == b"hello world!"
    assert try_parse_tag(f'"{encoded}"') == b"hello world!"


@pytest.mark.parametrize("bad", [None, "", "   ", '""', "abc", "zz!!", "not base64 at all!!"])
def test_parse_reports_failure_without_raising(bad) -> None:
    assert try_parse_tag(bad) is None


def test_hand_built_collection_of_plain_values_is_normalised() -> None:
    assert derive_tag(ManySource((b"\x01\x02", b"\x03\x00"))) == "0202"
    assert derive_tag(ManySource((STATIC_TIMESTAMP,))) == "10460DCE5E010000"


def test_hand_built_collection_names_the_unusable_item() -> None:
    with pytest.raises(InvalidArgumentError, match="int"):
        derive_tag(ManySource((42,)))
