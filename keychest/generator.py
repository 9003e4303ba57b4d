"""
keychest.generator
Secure password generator using Python's secrets module.

A PasswordConfiguration selects character classes and exclusion rules;
generate() guarantees one character from every enabled class, fills the rest
from the combined pool and shuffles the result.
"""

import logging
import string
from dataclasses import asdict, dataclass
from secrets import SystemRandom
from typing import Any, List, Mapping, Optional, Tuple

from .errors import ConfigurationError, EmptyCharsetError, LengthTooShortError

logger = logging.getLogger(__name__)

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
NUMBERS = string.digits
DEFAULT_SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

# visually confusable letters/digits, only stripped from the letter and number classes
SIMILAR_CHARS = "ILil10"
# syntax-ambiguous symbols, only stripped from the symbol class
AMBIGUOUS_CHARS = "{}[]()/\\'\"`~,;.<>"

_sysrand = SystemRandom()


@dataclass(frozen=True)
class PasswordConfiguration:
    length: int = 16
    include_uppercase: bool = True
    include_lowercase: bool = True
    include_numbers: bool = True
    include_symbols: bool = True
    exclude_similar: bool = False
    exclude_ambiguous: bool = False

    # accepted spellings when building from loosely typed input
    _ALIASES = {
        "length": "length",
        "include_uppercase": "include_uppercase",
        "includeUppercase": "include_uppercase",
        "upper": "include_uppercase",
        "include_lowercase": "include_lowercase",
        "includeLowercase": "include_lowercase",
        "lower": "include_lowercase",
        "include_numbers": "include_numbers",
        "includeNumbers": "include_numbers",
        "digits": "include_numbers",
        "include_symbols": "include_symbols",
        "includeSymbols": "include_symbols",
        "symbols": "include_symbols",
        "exclude_similar": "exclude_similar",
        "excludeSimilar": "exclude_similar",
        "exclude_ambiguous": "exclude_ambiguous",
        "excludeAmbiguous": "exclude_ambiguous",
    }

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]], base: Optional["PasswordConfiguration"] = None) -> "PasswordConfiguration":
        """
        Build a configuration from a dict (JSON body, config file section).
        Unknown keys are ignored; missing keys keep the values of `base`.
        """
        values = asdict(base or cls())
        for key, value in (data or {}).items():
            field_name = cls._ALIASES.get(key)
            if field_name is None:
                continue
            if field_name == "length":
                try:
                    values["length"] = int(value)
                except (TypeError, ValueError) as e:
                    raise ConfigurationError(f"length must be an integer, got {value!r}") from e
            else:
                values[field_name] = _as_flag(field_name, value)
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_CONFIGURATION = PasswordConfiguration()

_TRUE_STRINGS = ("true", "1")
_FALSE_STRINGS = ("false", "0")


def _as_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ConfigurationError(f"{name} must be true or false, got {value!r}")


@dataclass(frozen=True)
class GenerationResult:
    """Either a password or the configuration error that prevented one."""

    password: Optional[str] = None
    error: Optional[ConfigurationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _strip(chars: str, remove: str) -> str:
    return "".join(c for c in chars if c not in remove)


def effective_alphabets(config: PasswordConfiguration) -> List[Tuple[str, str]]:
    """
    Return (class name, filtered alphabet) for every enabled class,
    in the fixed order uppercase, lowercase, numbers, symbols.
    """
    alphabets = []
    if config.include_uppercase:
        chars = _strip(UPPERCASE, SIMILAR_CHARS) if config.exclude_similar else UPPERCASE
        alphabets.append(("uppercase", chars))
    if config.include_lowercase:
        chars = _strip(LOWERCASE, SIMILAR_CHARS) if config.exclude_similar else LOWERCASE
        alphabets.append(("lowercase", chars))
    if config.include_numbers:
        chars = _strip(NUMBERS, SIMILAR_CHARS) if config.exclude_similar else NUMBERS
        alphabets.append(("numbers", chars))
    if config.include_symbols:
        chars = _strip(DEFAULT_SYMBOLS, AMBIGUOUS_CHARS) if config.exclude_ambiguous else DEFAULT_SYMBOLS
        alphabets.append(("symbols", chars))
    return alphabets


def validate(config: PasswordConfiguration) -> None:
    """
    Raise the error generate() would raise for this configuration, without
    consuming any randomness.
    """
    pools = [chars for _, chars in effective_alphabets(config) if chars]
    if not pools:
        raise EmptyCharsetError()
    if config.length < len(pools):
        raise LengthTooShortError(config.length, len(pools))


def generate(config: Optional[PasswordConfiguration] = None, rng=None) -> str:
    """
    Generate a password satisfying every enabled character class.

    `rng` must provide choice() and shuffle(); it defaults to a SystemRandom
    instance. Only inject a seeded generator for testing.

    Raises EmptyCharsetError or LengthTooShortError on an unsatisfiable
    configuration.
    """
    config = config or DEFAULT_CONFIGURATION
    rng = rng or _sysrand

    charset = ""
    required = []
    for _, chars in effective_alphabets(config):
        if not chars:
            continue
        # duplicates across classes are kept; they weight the filler draw
        charset += chars
        required.append(rng.choice(chars))

    if not charset:
        raise EmptyCharsetError()
    if config.length < len(required):
        raise LengthTooShortError(config.length, len(required))

    password_chars = required
    for _ in range(config.length - len(required)):
        password_chars.append(rng.choice(charset))

    rng.shuffle(password_chars)
    logger.debug(
        "generated password: length=%d classes=%d charset=%d",
        config.length, len(required), len(charset),
    )
    return "".join(password_chars)


def try_generate(config: Optional[PasswordConfiguration] = None, rng=None) -> GenerationResult:
    """Like generate() but returns the configuration error instead of raising it."""
    try:
        return GenerationResult(password=generate(config, rng=rng))
    except ConfigurationError as e:
        return GenerationResult(error=e)
