"""
keychest.vault
Argon2id KDF + AES-GCM encrypted local vault.

The decrypted payload is {"api_keys": [...], "passwords": [...]}, each list
holding CredentialRecord dicts.
"""

import os
import json
import base64
import binascii
import logging
from typing import Any, Dict, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from argon2 import low_level
from argon2.exceptions import HashingError

from .errors import VaultAuthError, VaultError
from .storage import decode_json, default_vault_path, encode_json, read_file, write_file

logger = logging.getLogger(__name__)

# Default KDF params (tunable). Balance security/performance.
DEFAULT_KDF_PARAMS = {
    "time_cost": 3,        # iterations
    "memory_cost_kb": 65536,  # 64 MB
    "parallelism": 2,
    "hash_len": 32
}

VAULT_VERSION = 2
COLLECTIONS = ("api_keys", "passwords")


def empty_payload() -> Dict[str, Any]:
    return {name: [] for name in COLLECTIONS}


def _derive_key(password: str, salt: bytes, params: Dict[str, int]) -> bytes:
    """
    Derive a raw key using Argon2id low-level API.
    """
    return low_level.hash_secret_raw(
        secret=password.encode("utf-8"),
        salt=salt,
        time_cost=int(params.get("time_cost", DEFAULT_KDF_PARAMS["time_cost"])),
        memory_cost=int(params.get("memory_cost_kb", DEFAULT_KDF_PARAMS["memory_cost_kb"])),
        parallelism=int(params.get("parallelism", DEFAULT_KDF_PARAMS["parallelism"])),
        hash_len=int(params.get("hash_len", DEFAULT_KDF_PARAMS["hash_len"])),
        type=low_level.Type.ID
    )


def _seal(master_password: str, data: Dict[str, Any], kdf: Dict[str, int]) -> Dict[str, Any]:
    salt = os.urandom(16)
    key = _derive_key(master_password, salt, kdf)
    nonce = os.urandom(12)
    ciphertext = AESGCM(key).encrypt(nonce, encode_json(data), None)
    return {
        "version": VAULT_VERSION,
        "kdf": {
            "type": "argon2id",
            "time_cost": kdf["time_cost"],
            "memory_cost_kb": kdf["memory_cost_kb"],
            "parallelism": kdf["parallelism"],
            "salt": base64.b64encode(salt).decode("ascii")
        },
        "cipher": {
            "nonce": base64.b64encode(nonce).decode("ascii"),
            "ciphertext": base64.b64encode(ciphertext).decode("ascii")
        }
    }


def _load_wrapper(path: str) -> Dict[str, Any]:
    try:
        raw = read_file(path)
    except FileNotFoundError as e:
        raise VaultError(f"Vault not found at {path}") from e
    try:
        return decode_json(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise VaultError(f"Invalid vault format: {path}") from e


def _b64field(value, name: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, TypeError, ValueError) as e:
        raise VaultError(f"Invalid vault format: bad {name} encoding") from e


def create_vault(master_password: str, path: Optional[str] = None, kdf_params: Optional[Dict[str, int]] = None) -> str:
    """
    Create a new empty vault and save to path. Returns path used.
    """
    if path is None:
        path = default_vault_path()
    if not master_password:
        raise ValueError("Master password must not be empty")
    save_vault(master_password, empty_payload(), path, kdf_params)
    logger.info("created vault at %s", path)
    return path


def open_vault(master_password: str, path: Optional[str] = None) -> Dict[str, Any]:
    """
    Decrypt and return the vault plaintext dict.
    Raises VaultAuthError on incorrect password or tampered ciphertext,
    VaultError when the file is missing or malformed.
    """
    if path is None:
        path = default_vault_path()
    wrapper = _load_wrapper(path)
    if not isinstance(wrapper, dict):
        raise VaultError(f"Invalid vault format: {path}")
    kdf = wrapper.get("kdf") or {}
    if not isinstance(kdf, dict):
        raise VaultError("Invalid vault format: kdf section")
    salt_b64 = kdf.get("salt")
    if not salt_b64:
        raise VaultError("Invalid vault format: missing salt")
    salt = _b64field(salt_b64, "salt")
    params = {
        "time_cost": kdf.get("time_cost", DEFAULT_KDF_PARAMS["time_cost"]),
        "memory_cost_kb": kdf.get("memory_cost_kb", DEFAULT_KDF_PARAMS["memory_cost_kb"]),
        "parallelism": kdf.get("parallelism", DEFAULT_KDF_PARAMS["parallelism"]),
        "hash_len": DEFAULT_KDF_PARAMS["hash_len"]
    }
    cipher = wrapper.get("cipher") or {}
    if not isinstance(cipher, dict):
        raise VaultError("Invalid vault format: cipher section")
    nonce = _b64field(cipher.get("nonce", ""), "nonce")
    ciphertext = _b64field(cipher.get("ciphertext", ""), "ciphertext")
    try:
        key = _derive_key(master_password, salt, params)
    except (HashingError, TypeError, ValueError) as e:
        raise VaultError("Invalid vault format: bad kdf parameters") from e
    try:
        plaintext_bytes = AESGCM(key).decrypt(nonce, ciphertext, None)
    except (InvalidTag, ValueError) as e:
        # Could be wrong password, tampered ciphertext, or bad params
        logger.warning("failed to decrypt vault at %s", path)
        raise VaultAuthError("Incorrect master password or corrupted vault") from e
    data = decode_json(plaintext_bytes)
    # version 1 vaults held a single "entries" list of passwords
    if "entries" in data and "passwords" not in data:
        data["passwords"] = data.pop("entries")
    for name in COLLECTIONS:
        data.setdefault(name, [])
    return data


def save_vault(master_password: str, data: Dict[str, Any], path: Optional[str] = None, kdf_params: Optional[Dict[str, int]] = None) -> str:
    """
    Encrypt the provided plaintext dict and write to path atomically.
    A fresh salt and nonce are drawn on every save.
    """
    if path is None:
        path = default_vault_path()
    kdf = kdf_params or DEFAULT_KDF_PARAMS.copy()
    write_file(path, encode_json(_seal(master_password, data, kdf)))
    logger.debug(
        "saved vault at %s (%s)", path,
        ", ".join(f"{name}={len(data.get(name, []))}" for name in COLLECTIONS),
    )
    return path


def change_master_password(old_password: str, new_password: str, path: Optional[str] = None, kdf_params: Optional[Dict[str, int]] = None) -> str:
    """Decrypt with the old password and re-encrypt with the new one."""
    if not new_password:
        raise ValueError("Master password must not be empty")
    data = open_vault(old_password, path)
    path = save_vault(new_password, data, path, kdf_params)
    logger.info("changed master password for %s", path)
    return path
