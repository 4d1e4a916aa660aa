import re
from typing import Optional

from constants import AppConstants

_non_base32_re = re.compile(r"[^A-Z2-7]")
_leading_int_re = re.compile(r"\s*([+-]?\d+)")


def normalize_secret(secret: str) -> str:
    """Uppercase and drop everything outside the Base32 alphabet"""
    return _non_base32_re.sub("", (secret or "").upper())


def is_valid_base32(secret: str) -> bool:
    """Check if string is non-empty unpadded Base32"""
    return bool(secret) and not _non_base32_re.search(secret)


def sanitize_input(text: str, max_length: Optional[int] = None) -> str:
    """Sanitize user input"""
    if not text:
        return ""

    # Remove leading/trailing whitespace
    text = text.strip()

    # Limit length if specified
    if max_length:
        text = text[:max_length]

    return text


def sanitize_field(text: str) -> str:
    """Replace payload separators with spaces so a field can travel unescaped"""
    if not text:
        return ""
    for sep in (AppConstants.FIELD_SEPARATOR, AppConstants.RECORD_SEPARATOR):
        text = text.replace(sep, " ")
    return text.strip()


def parse_leading_int(value: Optional[str]) -> Optional[int]:
    """Parse the integer prefix of a string ("8abc" -> 8), None when there is none"""
    if value is None:
        return None
    match = _leading_int_re.match(value)
    if not match:
        return None
    return int(match.group(1))
