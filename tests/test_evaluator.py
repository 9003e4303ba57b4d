import pytest

from keychest.evaluator import has_repeats, level_for, score_password
from keychest.generator import PasswordConfiguration, generate


def test_empty_password():
    result = score_password("")
    assert result.score == 0
    assert result.label == "Very Weak"
    assert result.color == "danger"
    assert result.feedback_codes == ("min_length", "uppercase", "lowercase", "numbers", "symbols")
    assert result.feedback == (
        "Use at least 8 characters",
        "Include uppercase letters",
        "Include lowercase letters",
        "Include numbers",
        "Include special symbols",
    )


def test_ten_chars_all_classes():
    # 15 (length) + 4 * 15 (classes) + 15 (distinct)
    result = score_password("Abcdefgh1!")
    assert result.score == 90
    assert result.score >= 70
    assert result.label == "Very Strong"
    assert result.color == "success"
    assert result.feedback == ()


def test_long_password_hits_maximum():
    result = score_password("X7f!9Lq@2Vb#tR4sYp")
    assert result.score == 100
    assert result.level == "very_strong"


def test_repeated_characters_flagged():
    result = score_password("aaaaaaaa")
    # 15 (length) + 15 (lowercase)
    assert result.score == 30
    assert result.label == "Weak"
    assert result.feedback_codes == ("uppercase", "numbers", "symbols", "repeated")


def test_feedback_order_is_fixed():
    result = score_password("aa")
    assert result.feedback_codes == ("min_length", "uppercase", "numbers", "symbols", "repeated")


def test_unique_ratio_boundary():
    # 7 distinct out of 10 is exactly 0.7: no repeat penalty
    assert not has_repeats("abcdefgaaa")
    # 6 distinct out of 10 is below
    assert has_repeats("abcdefaaaa")


def test_non_ascii_counts_as_symbol():
    result = score_password("Contraseña12")
    assert "symbols" not in result.feedback_codes


@pytest.mark.parametrize("score,level,color", [
    (100, "very_strong", "success"),
    (85, "very_strong", "success"),
    (84, "strong", "primary"),
    (70, "strong", "primary"),
    (69, "moderate", "warning"),
    (50, "moderate", "warning"),
    (49, "weak", "danger"),
    (30, "weak", "danger"),
    (29, "very_weak", "danger"),
    (0, "very_weak", "danger"),
])
def test_level_thresholds(score, level, color):
    assert level_for(score) == (level, color)


def test_moderate_password():
    # 15 + 15 + 15 + 15 (length, upper, lower, distinct), no digit or symbol
    result = score_password("Abcdefgh")
    assert result.score == 60
    assert result.label == "Moderate"
    assert result.color == "warning"


def test_spanish_locale():
    result = score_password("", locale="es")
    assert result.label == "Muy Débil"
    assert result.feedback[0] == "Usa al menos 8 caracteres"
    # codes do not depend on locale
    assert result.feedback_codes == score_password("").feedback_codes


def test_unknown_locale_falls_back_to_english():
    assert score_password("aa", locale="xx").label == "Very Weak"
    assert score_password("aa", locale="es-MX").label == "Muy Débil"


def test_scoring_is_deterministic():
    for pw in ("", "password", "Tr0ub4dor&3", "correct horse battery staple"):
        assert score_password(pw) == score_password(pw)


def test_generated_passwords_score_strong():
    # length and class points alone reach 85
    for _ in range(50):
        pw = generate(PasswordConfiguration(length=16))
        assert score_password(pw).score >= 85


def test_to_dict():
    d = score_password("abc").to_dict()
    assert set(d) == {"score", "level", "label", "color", "feedback", "feedback_codes"}
    assert isinstance(d["feedback"], list)
