"""Keychest: password generator, strength scorer and encrypted credential vault."""

from .errors import (
    ConfigurationError,
    EmptyCharsetError,
    KeychestError,
    LengthTooShortError,
    RecordNotFoundError,
    VaultAuthError,
    VaultError,
)
from .evaluator import StrengthReport, score_password
from .generator import GenerationResult, PasswordConfiguration, generate, try_generate

__version__ = "0.1.0"
