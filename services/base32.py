"""Lenient RFC 4648 Base32 conversion without padding.

Unlike ``base64.b32decode`` this never fails: unknown characters are skipped
and bits that do not complete a byte (or a 5-bit group when encoding) are
dropped. Byte strings whose length is a multiple of 5 round-trip exactly.
"""

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_LOOKUP = {c: i for i, c in enumerate(ALPHABET)}


def decode_to_bytes(text: str) -> bytes:
    out = bytearray()
    buffer = 0
    bits = 0
    for ch in text.rstrip("=").upper():
        val = _LOOKUP.get(ch)
        if val is None:
            continue
        buffer = (buffer << 5) | val
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1
    return bytes(out)


def encode_from_bytes(data: bytes) -> str:
    out = []
    buffer = 0
    bits = 0
    for byte in data:
        buffer = (buffer << 8) | byte
        bits += 8
        while bits >= 5:
            bits -= 5
            out.append(ALPHABET[(buffer >> bits) & 0x1F])
        buffer &= (1 << bits) - 1
    return "".join(out)
