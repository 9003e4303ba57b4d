import json
import logging

from keychest.config import DEFAULTS, config_path, generator_defaults, load_config, save_config
from keychest.generator import PasswordConfiguration
from keychest.logging_config import setup_logging


def test_defaults_when_missing():
    cfg = load_config()
    assert cfg["clipboard_clear_seconds"] == DEFAULTS["clipboard_clear_seconds"]
    assert generator_defaults(cfg) == PasswordConfiguration()


def test_save_and_merge():
    save_config({"locale": "es", "generator": {"length": 24, "excludeSimilar": True}})
    cfg = load_config()
    assert cfg["locale"] == "es"
    assert cfg["clipboard_clear_seconds"] == 20
    config = generator_defaults(cfg)
    assert config.length == 24
    assert config.exclude_similar is True
    assert config.include_symbols is True


def test_unreadable_config_falls_back():
    with open(config_path(), "w", encoding="utf-8") as f:
        f.write("{not json")
    assert load_config()["locale"] == "en"


def test_defaults_not_mutated():
    cfg = load_config()
    cfg["generator"]["length"] = 99
    assert DEFAULTS["generator"]["length"] == 16


def test_setup_logging_sets_level():
    setup_logging("debug")
    assert logging.getLogger("keychest").level == logging.DEBUG
    setup_logging("WARNING")
    assert logging.getLogger("keychest").level == logging.WARNING
    assert len(logging.getLogger("keychest").handlers) == 1


def test_non_object_config_falls_back():
    with open(config_path(), "w", encoding="utf-8") as f:
        json.dump(["not", "a", "mapping"], f)
    assert load_config()["generator"] == DEFAULTS["generator"]


def test_non_object_generator_section_ignored():
    save_config({"locale": "es", "generator": "strong"})
    cfg = load_config()
    assert cfg["locale"] == "es"
    assert generator_defaults(cfg) == PasswordConfiguration()
