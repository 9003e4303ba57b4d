"""
keychest.evaluator

Rule-based password strength scorer:
- length: +25 for 12+ characters, +15 for 8-11
- one +15 each for uppercase, lowercase, digits and symbols
- +15 when at least 70% of the characters are distinct

score_password(password) returns a StrengthReport with score (0..100),
level/label, a color tag for the UI and one feedback entry per unmet rule.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .messages import feedback_for, label_for

MIN_LENGTH = 8
GOOD_LENGTH = 12
UNIQUE_RATIO = 0.7

# (threshold, level, color), checked top-down
LEVELS: Tuple[Tuple[int, str, str], ...] = (
    (85, "very_strong", "success"),
    (70, "strong", "primary"),
    (50, "moderate", "warning"),
    (30, "weak", "danger"),
    (0, "very_weak", "danger"),
)


@dataclass(frozen=True)
class StrengthReport:
    score: int
    level: str
    label: str
    color: str
    feedback: Tuple[str, ...] = ()
    feedback_codes: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "level": self.level,
            "label": self.label,
            "color": self.color,
            "feedback": list(self.feedback),
            "feedback_codes": list(self.feedback_codes),
        }


def level_for(score: int) -> Tuple[str, str]:
    """Map a score to its (level, color) pair."""
    for threshold, level, color in LEVELS:
        if score >= threshold:
            return level, color
    return LEVELS[-1][1], LEVELS[-1][2]


def has_repeats(password: str) -> bool:
    """True when fewer than 70% of the characters are distinct."""
    return len(set(password)) < len(password) * UNIQUE_RATIO


def score_password(password: str, locale: Optional[str] = None) -> StrengthReport:
    """
    Score the strength of a password on a scale of 0-100.

    Total over every string: "" scores 0 with five feedback entries.
    """
    score = 0
    codes: List[str] = []

    # --- Length ---
    length = len(password)
    if length >= GOOD_LENGTH:
        score += 25
    elif length >= MIN_LENGTH:
        score += 15
    else:
        codes.append("min_length")

    # --- Character variety ---
    if re.search(r"[A-Z]", password):
        score += 15
    else:
        codes.append("uppercase")
    if re.search(r"[a-z]", password):
        score += 15
    else:
        codes.append("lowercase")
    if re.search(r"[0-9]", password):
        score += 15
    else:
        codes.append("numbers")
    if re.search(r"[^A-Za-z0-9]", password):
        score += 15
    else:
        codes.append("symbols")

    # --- Distinct characters ---
    # an empty password has nothing repeated but earns nothing either
    if has_repeats(password):
        codes.append("repeated")
    elif password:
        score += 15

    score = min(score, 100)
    level, color = level_for(score)

    return StrengthReport(
        score=score,
        level=level,
        label=label_for(level, locale),
        color=color,
        feedback=tuple(feedback_for(c, locale) for c in codes),
        feedback_codes=tuple(codes),
    )
