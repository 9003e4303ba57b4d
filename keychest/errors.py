"""
keychest.errors
Exception hierarchy shared by the generator, the vault and the record services.
"""


class KeychestError(Exception):
    """Base class for every error raised by keychest."""


class ConfigurationError(KeychestError, ValueError):
    """A password configuration the generator cannot satisfy."""

    kind = "configuration"


class EmptyCharsetError(ConfigurationError):
    """No character class survived enabling and filtering."""

    kind = "empty_charset"

    def __init__(self, message: str = "At least one character type must be selected"):
        super().__init__(message)


class LengthTooShortError(ConfigurationError):
    """Requested length cannot hold one character from every enabled class."""

    kind = "length_too_short"

    def __init__(self, length: int, required: int):
        self.length = length
        self.required = required
        super().__init__(
            f"Length must be at least {required} to include every selected character type "
            f"(got {length})"
        )


class VaultError(KeychestError):
    """The vault file is missing, unreadable or malformed."""


class VaultAuthError(VaultError):
    """Wrong master password or tampered ciphertext."""


class RecordNotFoundError(KeychestError, KeyError):
    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(record_id)

    def __str__(self) -> str:
        return f"No record with id {self.record_id!r}"
