import base64
import json

import pytest

from keychest.errors import VaultAuthError, VaultError
from keychest.storage import decode_json, encode_json, read_file, write_file
from keychest.vault import change_master_password, create_vault, open_vault, save_vault


def test_vault_create_and_open(tmp_path, fast_kdf):
    path = str(tmp_path / "vault.bin")
    master = "CorrectHorseBatteryStaple!23"
    create_vault(master, path)
    data = open_vault(master, path)
    assert data == {"api_keys": [], "passwords": []}


def test_save_and_reopen(tmp_path, fast_kdf):
    path = str(tmp_path / "vault.bin")
    master = "S3cureMaster!"
    create_vault(master, path)
    save_vault(master, {"api_keys": [{"name": "k"}], "passwords": []}, path)
    assert open_vault(master, path)["api_keys"] == [{"name": "k"}]


def test_wrong_password_fails(tmp_path, fast_kdf):
    path = str(tmp_path / "vault.bin")
    create_vault("abc123!", path)
    with pytest.raises(VaultAuthError):
        open_vault("wrongpass", path)


def test_tamper_detection(tmp_path, fast_kdf):
    path = str(tmp_path / "vault.bin")
    master = "TamperTest!"
    create_vault(master, path)
    # read raw wrapper bytes and modify ciphertext
    j = decode_json(read_file(path))
    ct = bytearray(base64.b64decode(j["cipher"]["ciphertext"]))
    ct[0] ^= 0xFF
    j["cipher"]["ciphertext"] = base64.b64encode(bytes(ct)).decode("ascii")
    with open(path, "wb") as f:
        f.write(json.dumps(j).encode("utf-8"))
    with pytest.raises(VaultAuthError):
        open_vault(master, path)


def test_missing_vault(tmp_path):
    with pytest.raises(VaultError):
        open_vault("x", str(tmp_path / "nope.bin"))


def test_malformed_vault(tmp_path):
    path = str(tmp_path / "vault.bin")
    write_file(path, b"not json")
    with pytest.raises(VaultError):
        open_vault("x", path)


def test_empty_master_password_rejected(tmp_path, fast_kdf):
    with pytest.raises(ValueError):
        create_vault("", str(tmp_path / "vault.bin"))


def test_change_master_password(tmp_path, fast_kdf):
    path = str(tmp_path / "vault.bin")
    create_vault("old-master", path)
    save_vault("old-master", {"api_keys": [], "passwords": [{"name": "p"}]}, path)
    change_master_password("old-master", "new-master", path)
    assert open_vault("new-master", path)["passwords"] == [{"name": "p"}]
    with pytest.raises(VaultAuthError):
        open_vault("old-master", path)


def test_fresh_salt_on_every_save(tmp_path, fast_kdf):
    path = str(tmp_path / "vault.bin")
    create_vault("m", path)
    salt1 = decode_json(read_file(path))["kdf"]["salt"]
    save_vault("m", open_vault("m", path), path)
    salt2 = decode_json(read_file(path))["kdf"]["salt"]
    assert salt1 != salt2


def test_kdf_params_recorded_in_file(tmp_path, fast_kdf):
    path = str(tmp_path / "vault.bin")
    create_vault("m", path)
    kdf = decode_json(read_file(path))["kdf"]
    assert kdf["type"] == "argon2id"
    assert kdf["memory_cost_kb"] == fast_kdf["memory_cost_kb"]


def test_json_helpers_round_trip_unicode():
    assert decode_json(encode_json({"name": "contraseña"})) == {"name": "contraseña"}


def _rewrite_wrapper(path, section, field, value):
    wrapper = decode_json(read_file(path))
    wrapper[section][field] = value
    write_file(path, encode_json(wrapper))


@pytest.mark.parametrize("section,field", [
    ("cipher", "nonce"),
    ("cipher", "ciphertext"),
    ("kdf", "salt"),
])
def test_corrupted_encoding_is_vault_error(tmp_path, fast_kdf, section, field):
    path = str(tmp_path / "vault.bin")
    create_vault("m", path)
    _rewrite_wrapper(path, section, field, "abc")
    with pytest.raises(VaultError) as exc:
        open_vault("m", path)
    assert not isinstance(exc.value, VaultAuthError)
    assert "Invalid vault format" in str(exc.value)


def test_bad_kdf_parameters_are_vault_error(tmp_path, fast_kdf):
    path = str(tmp_path / "vault.bin")
    create_vault("m", path)
    _rewrite_wrapper(path, "kdf", "time_cost", "three")
    with pytest.raises(VaultError):
        open_vault("m", path)


def test_wrapper_must_be_an_object(tmp_path):
    path = str(tmp_path / "vault.bin")
    write_file(path, b"[1, 2]")
    with pytest.raises(VaultError):
        open_vault("m", path)


def test_write_file_leaves_no_temp_files(tmp_path):
    path = str(tmp_path / "sub" / "data.bin")
    write_file(path, b"one")
    write_file(path, b"two")
    assert read_file(path) == b"two"
    assert sorted(p.name for p in (tmp_path / "sub").iterdir()) == ["data.bin"]
