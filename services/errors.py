class OtpImportError(ValueError):
    """A single pasted line or migration record could not be decoded."""


class InvalidOtpUri(OtpImportError):
    pass


class UnsupportedOtpType(OtpImportError):
    pass


class MissingSecret(OtpImportError):
    pass


class MalformedMigrationUrl(OtpImportError):
    pass


class Base64DecodeFailure(OtpImportError):
    pass


class TruncatedField(OtpImportError):
    pass


class EditingError(ValueError):
    """A direct edit of the entry list was rejected; the message is user-facing."""


class TransportFailure(Exception):
    """The transport reported a failed send. ``error`` carries its reason untouched."""

    def __init__(self, error):
        super().__init__(str(error))
        self.error = error
