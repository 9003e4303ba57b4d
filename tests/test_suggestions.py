import pytest

from keychest.errors import EmptyCharsetError
from keychest.generator import DEFAULT_SYMBOLS, PasswordConfiguration
from keychest.suggestions import suggest_improvements


def test_suggest_for_weak_password():
    s = suggest_improvements("password")
    assert isinstance(s, dict)
    assert s["label"] in ("Very Weak", "Weak")
    joined = " ".join(s["suggestions"]).lower()
    assert "uppercase" in joined and "numbers" in joined


def test_examples_produced():
    s = suggest_improvements("weak")
    assert s.get("examples")
    assert len(s["examples"]) >= 1
    # example passwords should be strings and not equal to the original weak input
    assert isinstance(s["examples"][0], str)
    assert s["examples"][0] != "weak"
    assert len(s["examples"][0]) >= 16


def test_examples_follow_callers_configuration():
    config = PasswordConfiguration(length=20, include_symbols=False)
    s = suggest_improvements("weak", config=config, count=3)
    assert len(s["examples"]) == 3
    for ex in s["examples"]:
        assert len(ex) == 20
        assert not any(c in DEFAULT_SYMBOLS for c in ex)


def test_strong_password_gets_no_examples():
    s = suggest_improvements("X7f!9Lq@2Vb#tR4sYp")
    assert s["examples"] == []
    assert s["suggestions"] == []


def test_bad_configuration_propagates():
    config = PasswordConfiguration(
        include_uppercase=False, include_lowercase=False,
        include_numbers=False, include_symbols=False,
    )
    with pytest.raises(EmptyCharsetError):
        suggest_improvements("weak", config=config)
