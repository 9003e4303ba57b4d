"""
keychest.storage
On-disk locations and crash-safe writes shared by the vault and the settings file.
"""

import os
import json
import tempfile
from typing import Any

APP_DIR_NAME = "Keychest"
FALLBACK_DIR_NAME = ".keychest"
VAULT_FILE = "vault.bin"
CONFIG_FILE = "config.json"


def app_data_dir() -> str:
    """
    Windows %APPDATA%/Keychest; fallback to ~/.keychest elsewhere.
    """
    appdata = os.getenv("APPDATA")
    if appdata:
        return os.path.join(appdata, APP_DIR_NAME)
    return os.path.join(os.path.expanduser("~"), FALLBACK_DIR_NAME)


def app_file(name: str) -> str:
    return os.path.join(app_data_dir(), name)


def default_vault_path() -> str:
    return app_file(VAULT_FILE)


def write_file(path: str, data: bytes) -> None:
    """
    Replace `path` with `data` in one step. The bytes go to a private temp file
    in the same directory, are fsynced, then renamed over the target.
    """
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".keychest-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except OSError:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def encode_json(obj: Any, indent=None) -> bytes:
    return json.dumps(obj, ensure_ascii=False, indent=indent).encode("utf-8")


def decode_json(raw: bytes) -> Any:
    return json.loads(raw.decode("utf-8"))
