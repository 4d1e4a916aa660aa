"""Shared test fixtures."""

from __future__ import annotations

import base64
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

import pytest

_DB_DIR = Path(tempfile.mkdtemp(prefix="totp-sync-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_DB_DIR / 'app.db'}")
os.environ.setdefault("DEVICE_URL", "http://device.invalid/messages")

from services.errors import TransportFailure  # noqa: E402
from services.storage import KeyValueStore  # noqa: E402
from services.transport import Transport  # noqa: E402


# ---------------------------------------------------------------------------
#  Migration blob builder
# ---------------------------------------------------------------------------
def _varint(n: int) -> bytes:
    out = bytearray()
    while True:
        to_write = n & 0x7F
        n >>= 7
        if n:
            out.append(to_write | 0x80)
        else:
            out.append(to_write)
            return bytes(out)


def _len_delimited(tag: int, payload: bytes) -> bytes:
    assert len(payload) < 128, "test records must fit a one-byte length"
    return _varint((tag << 3) | 2) + bytes([len(payload)]) + payload


def _varint_field(tag: int, value: int) -> bytes:
    return _varint(tag << 3) + _varint(value)


def otp_record(secret: bytes = b"Hello!\xde\xad\xbe\xef", name: str = "alice@example.com",
               issuer: str = "Example", algorithm: int = 1, digits: int = 1,
               otp_type: int | None = 2) -> bytes:
    """Serialise one account record (field numbers as in authenticator exports)."""
    parts = []
    if secret:
        parts.append(_len_delimited(1, secret))
    if name:
        parts.append(_len_delimited(2, name.encode()))
    if issuer:
        parts.append(_len_delimited(3, issuer.encode()))
    parts.append(_varint_field(4, algorithm))
    parts.append(_varint_field(5, digits))
    if otp_type is not None:
        parts.append(_varint_field(6, otp_type))
    return b"".join(parts)


def migration_uri(*records: bytes, batch_id: int = 123_456_789) -> str:
    payload = b"".join(_len_delimited(1, r) for r in records)
    payload += _varint_field(2, 1) + _varint_field(3, 1) + _varint_field(4, 0) + _varint_field(5, batch_id)
    data = base64.b64encode(payload).decode()
    return f"otpauth-migration://offline?data={quote(data, safe='')}"


def totp_uri(secret: str, label: str = "Example:user", **params) -> str:
    query = "&".join(f"{k}={v}" for k, v in {"secret": secret, **params}.items())
    return f"otpauth://totp/{label}?{query}"


# ---------------------------------------------------------------------------
#  Collaborator fakes
# ---------------------------------------------------------------------------
class RecordingTransport(Transport):
    """Records every message; fails the message with index ``fail_at`` (0-based call count)."""

    def __init__(self, fail_at: int | None = None):
        self.sent: list[dict] = []
        self.fail_at = fail_at

    async def send_message(self, fields: dict) -> None:
        call = len(self.sent)
        self.sent.append(dict(fields))
        if call == self.fail_at:
            raise TransportFailure("nack")


class MemoryStore(KeyValueStore):
    def __init__(self, data: dict | None = None):
        self.data = dict(data or {})

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def store():
    return MemoryStore()
