"""
keychest.messages
Display text for strength levels and feedback, keyed by stable codes.
"""

from typing import Dict, Optional

DEFAULT_LOCALE = "en"

LABELS: Dict[str, Dict[str, str]] = {
    "en": {
        "very_weak": "Very Weak",
        "weak": "Weak",
        "moderate": "Moderate",
        "strong": "Strong",
        "very_strong": "Very Strong",
    },
    "es": {
        "very_weak": "Muy Débil",
        "weak": "Débil",
        "moderate": "Moderada",
        "strong": "Fuerte",
        "very_strong": "Muy Fuerte",
    },
}

FEEDBACK: Dict[str, Dict[str, str]] = {
    "en": {
        "min_length": "Use at least 8 characters",
        "uppercase": "Include uppercase letters",
        "lowercase": "Include lowercase letters",
        "numbers": "Include numbers",
        "symbols": "Include special symbols",
        "repeated": "Avoid repeating characters",
    },
    "es": {
        "min_length": "Usa al menos 8 caracteres",
        "uppercase": "Incluye letras mayúsculas",
        "lowercase": "Incluye letras minúsculas",
        "numbers": "Incluye números",
        "symbols": "Incluye símbolos especiales",
        "repeated": "Evita repetir caracteres",
    },
}


def _table(tables: Dict[str, Dict[str, str]], locale: Optional[str]) -> Dict[str, str]:
    # "es-MX" -> "es"; anything unknown falls back to English
    lang = (locale or DEFAULT_LOCALE).split("-")[0].split("_")[0].lower()
    return tables.get(lang, tables[DEFAULT_LOCALE])


def label_for(level: str, locale: Optional[str] = None) -> str:
    return _table(LABELS, locale)[level]


def feedback_for(code: str, locale: Optional[str] = None) -> str:
    return _table(FEEDBACK, locale)[code]


def available_locales():
    return sorted(LABELS)
