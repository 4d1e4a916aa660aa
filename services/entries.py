from dataclasses import dataclass, asdict
from enum import IntEnum
from typing import Iterable, Optional, Tuple

from constants import AppConstants
from utils import sanitize_field


class Algorithm(IntEnum):
    SHA1 = 0
    SHA256 = 1
    SHA512 = 2


@dataclass(frozen=True)
class Entry:
    label: str
    account_name: str
    secret: str
    period: int = AppConstants.DEFAULT_PERIOD
    digits: int = AppConstants.DEFAULT_DIGITS
    algorithm: Algorithm = Algorithm.SHA1

    def to_dict(self) -> dict:
        data = asdict(self)
        data["algorithm"] = int(self.algorithm)
        return data


def coerce_algorithm(value) -> Algorithm:
    try:
        return Algorithm(int(value))
    except (TypeError, ValueError):
        return Algorithm.SHA1


def coerce_digits(value: Optional[int]) -> int:
    if not value or value < AppConstants.MIN_DIGITS or value > AppConstants.MAX_DIGITS:
        return AppConstants.DEFAULT_DIGITS
    return value


def coerce_period(value: Optional[int]) -> int:
    if not value or value < AppConstants.MIN_PERIOD or value > AppConstants.MAX_PERIOD:
        return AppConstants.DEFAULT_PERIOD
    return value


def make_entry(label: str, account_name: str, secret: str, period: Optional[int] = None,
               digits: Optional[int] = None, algorithm=None) -> Entry:
    """Build an Entry with out-of-range values corrected and separators removed from text fields."""
    return Entry(
        label=sanitize_field(label),
        account_name=sanitize_field(account_name),
        secret=secret,
        period=coerce_period(period),
        digits=coerce_digits(digits),
        algorithm=coerce_algorithm(algorithm),
    )


def split_label(name: str, issuer: str) -> Tuple[str, str]:
    """Split ``issuer:account`` on the first colon. An explicit issuer wins over the prefix."""
    if ":" in name:
        prefix, account = name.split(":", 1)
        return issuer or prefix, account
    return issuer, name


def is_duplicate(candidate: Entry, existing: Iterable[Entry]) -> bool:
    return any(entry.secret == candidate.secret for entry in existing)
