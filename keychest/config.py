# keychest/config.py
"""
Simple settings persistence for Keychest.
Settings saved as JSON in %APPDATA%/Keychest/config.json (Windows) or ~/.keychest/config.json (fallback).
KEYCHEST_CONFIG overrides the file location.
"""

import os
import json
import logging
from typing import Dict, Any

from .generator import PasswordConfiguration
from .storage import CONFIG_FILE, app_file, decode_json, encode_json, read_file, write_file

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "clipboard_clear_seconds": 20,
    "vault_path": None,  # if None, storage.default_vault_path() should be used
    "locale": "en",
    "log_level": "WARNING",
    "generator": PasswordConfiguration().to_dict(),
}


def config_path() -> str:
    override = os.getenv("KEYCHEST_CONFIG")
    if override:
        return override
    return app_file(CONFIG_FILE)


def _defaults() -> Dict[str, Any]:
    out = DEFAULTS.copy()
    out["generator"] = dict(DEFAULTS["generator"])
    return out


def load_config() -> Dict[str, Any]:
    p = config_path()
    if not os.path.exists(p):
        return _defaults()
    try:
        data = decode_json(read_file(p))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("ignoring unreadable config %s: %s", p, e)
        return _defaults()
    if not isinstance(data, dict):
        logger.warning("ignoring config %s: expected a JSON object", p)
        return _defaults()
    # merge defaults
    out = _defaults()
    generator = data.pop("generator", None) or {}
    if not isinstance(generator, dict):
        logger.warning("ignoring generator section of %s: expected a JSON object", p)
        generator = {}
    out.update(data)
    out["generator"].update(generator)
    return out


def save_config(cfg: Dict[str, Any]) -> None:
    write_file(config_path(), encode_json(cfg, indent=2))


def generator_defaults(cfg: Dict[str, Any]) -> PasswordConfiguration:
    """Build the default PasswordConfiguration from the stored settings."""
    return PasswordConfiguration.from_mapping(cfg.get("generator"))
