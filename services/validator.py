from typing import Optional
from constants import AppConstants
from utils import is_valid_base32, sanitize_input


def validate_labels(label: str, account_name: str) -> Optional[str]:
    label = sanitize_input(label)
    account_name = sanitize_input(account_name)

    if not label:
        return "Label is required."
    if len(label) > AppConstants.MAX_LABEL_LENGTH:
        return f"Label is too long (max {AppConstants.MAX_LABEL_LENGTH} characters)."

    if len(account_name) > AppConstants.MAX_ACCOUNT_LENGTH:
        return f"Account is too long (max {AppConstants.MAX_ACCOUNT_LENGTH} characters)."

    return None


def validate_manual_entry(label: str, account_name: str, secret: str) -> Optional[str]:
    error_msg = validate_labels(label, account_name)
    if error_msg:
        return error_msg

    secret = sanitize_input(secret)
    if not secret:
        return "Secret is required."
    if len(secret) > AppConstants.MAX_SECRET_LENGTH:
        return f"Secret is too long (max {AppConstants.MAX_SECRET_LENGTH} characters)."
    if not is_valid_base32(secret):
        return "Secret must be a valid Base32 string."

    return None
