from __future__ import annotations

import pytest

from sls_avro.core.framing import MAGIC_BIG_ENDIAN, MAGIC_LITTLE_ENDIAN, parse_frame
from sls_avro.core.types import Frame, SkipReason, Skipped


def test_magic_zero_reads_big_endian_schema_id() -> None:
    frame = parse_frame(b"\x00\x01\x02\x03\x04payload")

    assert isinstance(frame, Frame)
    assert frame.magic == MAGIC_BIG_ENDIAN
    assert frame.schema_id == 0x01020304
    assert frame.payload_offset == 5


def test_magic_255_reads_little_endian_schema_id() -> None:
    frame = parse_frame(b"\xff\x01\x02\x03\x04payload")

    assert isinstance(frame, Frame)
    assert frame.magic == MAGIC_LITTLE_ENDIAN
    assert frame.schema_id == 0x04030201
    assert frame.payload_offset == 5


def test_both_byte_orders_resolve_same_id() -> None:
    big = parse_frame(b"\x00\x00\x00\x01\x02")
    little = parse_frame(b"\xff\x02\x01\x00\x00")

    assert isinstance(big, Frame) and isinstance(little, Frame)
    assert big.schema_id == little.schema_id == 258


def test_schema_id_is_unsigned() -> None:
    frame = parse_frame(b"\x00\xff\xff\xff\xff")

    assert isinstance(frame, Frame)
    assert frame.schema_id == 0xFFFFFFFF


@pytest.mark.parametrize("magic", [1, 2, 0x7F, 0x80, 0xFE])
def test_unrecognized_magic_is_rejected(magic: int) -> None:
    result = parse_frame(bytes([magic]) + b"\x00\x00\x00\x01payload")

    assert isinstance(result, Skipped)
    assert result.reason is SkipReason.FRAMING_REJECT


@pytest.mark.parametrize("blob", [b"", b"\x00", b"\x00\x00\x01", b"\xff\x01\x02\x03"])
def test_truncated_header_is_rejected(blob: bytes) -> None:
    result = parse_frame(blob)

    assert isinstance(result, Skipped)
    assert result.reason is SkipReason.FRAMING_REJECT


def test_header_without_payload_is_a_valid_frame() -> None:
    frame = parse_frame(b"\x00\x00\x00\x00\x07")

    assert isinstance(frame, Frame)
    assert frame.schema_id == 7


def test_custom_schema_id_size_moves_payload_offset() -> None:
    big = parse_frame(b"\x00\x01\x02rest", schema_id_size=2)
    little = parse_frame(b"\xff\x01\x02rest", schema_id_size=2)

    assert isinstance(big, Frame) and isinstance(little, Frame)
    assert big.schema_id == 0x0102
    assert little.schema_id == 0x0201
    assert big.payload_offset == little.payload_offset == 3


def test_zero_schema_id_size_means_no_schema() -> None:
    result = parse_frame(b"\x00\x00\x00\x00\x01", schema_id_size=0)

    assert isinstance(result, Skipped)
    assert result.reason is SkipReason.FRAMING_REJECT


def test_accepts_bytearray_and_memoryview() -> None:
    raw = b"\x00\x00\x00\x00\x09abc"

    for blob in (bytearray(raw), memoryview(raw)):
        frame = parse_frame(blob)
        assert isinstance(frame, Frame)
        assert frame.schema_id == 9
