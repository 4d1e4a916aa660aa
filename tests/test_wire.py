"""Tests for the varint / length-delimited field reader."""

from __future__ import annotations

import pytest

from services.errors import TruncatedField
from services.wire import WIRE_LEN, WIRE_VARINT, iter_fields


class TestIterFields:
    def test_varint(self):
        assert list(iter_fields(bytes([0x08, 0x96, 0x01]))) == [(1, WIRE_VARINT, 150)]

    def test_length_delimited(self):
        assert list(iter_fields(bytes([0x12, 0x03]) + b"abc")) == [(2, WIRE_LEN, b"abc")]

    def test_fixed_width_fields_skipped(self):
        data = bytes([0x1D]) + b"\x00" * 4 + bytes([0x21]) + b"\x00" * 8 + bytes([0x08, 0x01])
        assert list(iter_fields(data)) == [(1, WIRE_VARINT, 1)]

    def test_empty_buffer(self):
        assert list(iter_fields(b"")) == []

    def test_truncated_length_delimited(self):
        with pytest.raises(TruncatedField):
            list(iter_fields(bytes([0x12, 0x05]) + b"a"))

    def test_missing_length_byte(self):
        with pytest.raises(TruncatedField):
            list(iter_fields(bytes([0x12])))

    def test_truncated_varint(self):
        with pytest.raises(TruncatedField):
            list(iter_fields(bytes([0x08, 0x96])))


class TestSingleByteLength:
    def test_length_up_to_255_read_from_one_byte(self):
        data = bytes([0x0A, 200]) + b"x" * 200
        assert list(iter_fields(data)) == [(1, WIRE_LEN, b"x" * 200)]

    def test_multi_byte_length_misparses(self):
        # a 300-byte field with a two-byte varint length (0xAC 0x02)
        data = bytes([0x0A, 0xAC, 0x02]) + b"x" * 300
        field_number, wire_type, value = next(iter_fields(data))
        assert (field_number, wire_type) == (1, WIRE_LEN)
        assert len(value) == 0xAC
        assert value.startswith(b"\x02")
