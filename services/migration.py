"""Decoder for ``otpauth-migration://offline?data=...`` export blobs.

Only the handful of fields an authenticator export actually uses are read; the
payload is walked with :mod:`services.wire` instead of a generated protobuf class.
"""
import base64
import binascii
import logging
import re
from typing import Iterator, List, Optional
from urllib.parse import unquote

from constants import AppConstants
from services.base32 import encode_from_bytes
from services.entries import Entry, make_entry, split_label
from services.errors import Base64DecodeFailure, MalformedMigrationUrl
from services.wire import WIRE_LEN, WIRE_VARINT, iter_fields

logger = logging.getLogger(__name__)

_migration_re = re.compile(re.escape(AppConstants.MIGRATION_PREFIX) + r"offline\?data=([^&\s]+)")

FIELD_OTP_PARAMETERS = 1

FIELD_SECRET = 1
FIELD_NAME = 2
FIELD_ISSUER = 3
FIELD_ALGORITHM = 4
FIELD_DIGITS = 5
FIELD_TYPE = 6

ALG_MAP = {1: 0, 2: 1, 3: 2}
DIGITS_EIGHT = 2
TYPE_TOTP = 2


def is_migration_uri(line: str) -> bool:
    return line.startswith(AppConstants.MIGRATION_PREFIX)


def _b64decode(data: str) -> bytes:
    data = data.strip().replace("-", "+").replace("_", "/")
    data += "=" * (-len(data) % 4)
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeFailure(f"Invalid migration data: {e}") from e


def iter_account_records(text: str) -> Iterator[bytes]:
    """Yield the raw bytes of each account record in a migration URI."""
    match = _migration_re.search(text)
    if not match:
        raise MalformedMigrationUrl("No migration data in URI.")
    raw = _b64decode(unquote(match.group(1)))

    for field_number, wire_type, value in iter_fields(raw):
        if field_number == FIELD_OTP_PARAMETERS and wire_type == WIRE_LEN:
            yield value


def decode_account_record(record: bytes) -> Optional[Entry]:
    """Turn one account record into an Entry, or None for HOTP / secret-less records."""
    secret = ""
    name = ""
    issuer = ""
    algorithm = 0
    digits = AppConstants.DEFAULT_DIGITS
    otp_type = TYPE_TOTP

    for field_number, wire_type, value in iter_fields(record):
        if wire_type == WIRE_LEN:
            if field_number == FIELD_SECRET:
                secret = encode_from_bytes(value)
            elif field_number == FIELD_NAME:
                name = value.decode("utf-8", errors="replace")
            elif field_number == FIELD_ISSUER:
                issuer = value.decode("utf-8", errors="replace")
        elif wire_type == WIRE_VARINT:
            if field_number == FIELD_ALGORITHM:
                algorithm = ALG_MAP.get(value, 0)
            elif field_number == FIELD_DIGITS:
                digits = 8 if value == DIGITS_EIGHT else 6
            elif field_number == FIELD_TYPE:
                otp_type = value

    if not secret or otp_type != TYPE_TOTP:
        logger.debug("Skipping migration record (type=%s, has_secret=%s)", otp_type, bool(secret))
        return None

    label, account_name = split_label(name, issuer)
    return make_entry(label, account_name, secret, AppConstants.DEFAULT_PERIOD, digits, algorithm)


def decode_migration_uri(text: str) -> List[Entry]:
    """Decode every TOTP account of a migration URI in record order."""
    entries = []
    for record in iter_account_records(text):
        entry = decode_account_record(record)
        if entry is not None:
            entries.append(entry)
    return entries
