"""
keychest.suggestions

Turn evaluator output into a suggestion object and produce example
replacement passwords (using generator) to demonstrate stronger choices.
"""

from typing import Dict, List, Optional
from dataclasses import replace

from .evaluator import score_password
from .generator import DEFAULT_CONFIGURATION, PasswordConfiguration, generate

# levels that already meet the bar; no replacement examples offered
GOOD_LEVELS = ("strong", "very_strong")


def suggest_improvements(
    password: str,
    config: Optional[PasswordConfiguration] = None,
    locale: Optional[str] = None,
    count: int = 1,
) -> Dict:
    """
    Return a suggestion object derived from the evaluator plus examples.
    {
        "password": str,
        "score": int,
        "level": str,
        "label": str,
        "color": str,
        "suggestions": [str],  # the report's feedback, in rubric order
        "examples": [str],     # generated replacements using the caller's configuration
    }
    A configuration error in `config` propagates to the caller.
    """
    report = score_password(password, locale=locale)
    examples: List[str] = []

    if report.level not in GOOD_LEVELS:
        base = config or DEFAULT_CONFIGURATION
        example_config = replace(base, length=max(base.length, 16, len(password) + 4))
        examples = [generate(example_config) for _ in range(count)]

    return {
        "password": password,
        "score": report.score,
        "level": report.level,
        "label": report.label,
        "color": report.color,
        "suggestions": list(report.feedback),
        "examples": examples,
    }
