# Application constants
import os
from dotenv import load_dotenv

load_dotenv()

class AppConstants:
    # Entry list
    MAX_ENTRIES = 100
    MAX_LABEL_LENGTH = 32
    MAX_ACCOUNT_LENGTH = 32
    MAX_SECRET_LENGTH = 64

    # TOTP parameters
    DEFAULT_PERIOD = 30
    MIN_PERIOD = 1
    MAX_PERIOD = 120
    DEFAULT_DIGITS = 6
    MIN_DIGITS = 6
    MAX_DIGITS = 8

    # Import formats
    OTP_SCHEME = "otpauth"
    OTP_TYPE_TOTP = "totp"
    MIGRATION_SCHEME = "otpauth-migration"
    MIGRATION_PREFIX = MIGRATION_SCHEME + "://"

    # Wire payload
    FIELD_SEPARATOR = "|"
    RECORD_SEPARATOR = ";"

    # Device message keys
    MESSAGE_KEY_COUNT = "AppKeyCount"
    MESSAGE_KEY_ENTRY_ID = "AppKeyEntryId"
    MESSAGE_KEY_ENTRY = "AppKeyEntry"
    MESSAGE_KEY_REQUEST = "AppKeyRequest"
    MESSAGE_KEY_STATUS = "AppKeyStatus"
    DEVICE_STATUS_OK = 1

    # Transfer pacing (seconds)
    SETTLE_DELAY = int(os.getenv("SETTLE_DELAY_MS", "200")) / 1000
    PACING_DELAY = int(os.getenv("PACING_DELAY_MS", "100")) / 1000

    # Storage keys
    STORAGE_KEY_ENTRIES = "config_entries"
    STORAGE_KEY_PAYLOAD = "config_payload"
