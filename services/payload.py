from typing import Iterable, List, Tuple

from constants import AppConstants
from services.entries import Entry

FIELD_SEP = AppConstants.FIELD_SEPARATOR
RECORD_SEP = AppConstants.RECORD_SEPARATOR


def encode_entry(entry: Entry) -> str:
    algorithm = entry.algorithm if entry.algorithm is not None else 0
    return FIELD_SEP.join([
        entry.label,
        entry.account_name,
        entry.secret,
        str(entry.period),
        str(entry.digits),
        str(int(algorithm)),
    ])


def encode(entries: Iterable[Entry]) -> str:
    # label/account_name are separator-free by construction, see utils.sanitize_field
    return RECORD_SEP.join(encode_entry(e) for e in entries)


def split_records(payload: str) -> List[str]:
    """Records of a payload in order, blank segments dropped."""
    return [record for record in payload.split(RECORD_SEP) if record.strip()]


def decode(payload: str) -> List[Tuple[str, ...]]:
    return [tuple(record.split(FIELD_SEP)) for record in split_records(payload)]
