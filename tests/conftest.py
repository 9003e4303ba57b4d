import pytest

from keychest import vault

FAST_KDF = {"time_cost": 1, "memory_cost_kb": 8, "parallelism": 1, "hash_len": 32}


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    # never read or write the real user settings
    monkeypatch.setenv("KEYCHEST_CONFIG", str(tmp_path / "config.json"))


@pytest.fixture
def fast_kdf(monkeypatch):
    for key, value in FAST_KDF.items():
        monkeypatch.setitem(vault.DEFAULT_KDF_PARAMS, key, value)
    return dict(FAST_KDF)
