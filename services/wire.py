from typing import Iterator, Tuple, Union

from services.errors import TruncatedField

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LEN = 2
WIRE_FIXED32 = 5

# bytes to skip for wire types that are neither varint nor length-delimited
_SKIP = {WIRE_FIXED64: 8, WIRE_FIXED32: 4}

Field = Tuple[int, int, Union[int, bytes]]


def _read_varint(data: bytes, pos: int) -> Tuple[int, int]:
    value = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise TruncatedField("Varint runs past end of buffer")
        b = data[pos]
        pos += 1
        value |= (b & 0x7F) << shift
        if not b & 0x80:
            return value, pos
        shift += 7


def iter_fields(data: bytes) -> Iterator[Field]:
    """Yield ``(field_number, wire_type, value)`` for varint and length-delimited fields.

    The length prefix of a length-delimited field is read as ONE unsigned byte,
    so fields longer than 255 bytes are not representable and mis-parse.
    Other wire types are skipped without being yielded.
    """
    pos = 0
    while pos < len(data):
        tag, pos = _read_varint(data, pos)
        field_number = tag >> 3
        wire_type = tag & 0x07

        if wire_type == WIRE_VARINT:
            value, pos = _read_varint(data, pos)
            yield field_number, wire_type, value
        elif wire_type == WIRE_LEN:
            if pos >= len(data):
                raise TruncatedField(f"Missing length for field {field_number}")
            length = data[pos]
            pos += 1
            if pos + length > len(data):
                raise TruncatedField(f"Field {field_number} runs past end of buffer")
            yield field_number, wire_type, data[pos:pos + length]
            pos += length
        else:
            pos += _SKIP.get(wire_type, 0)
