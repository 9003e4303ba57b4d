import re

import pytest

from keychest import cli
from keychest.config import save_config
from keychest.storage import decode_json, encode_json, read_file, write_file
from keychest.vault import create_vault, open_vault


@pytest.fixture
def vault_file(tmp_path, fast_kdf, monkeypatch):
    path = str(tmp_path / "vault.bin")
    create_vault("master", path)
    monkeypatch.setattr(cli, "getpass", lambda prompt="": "master")
    return path


def test_generate(capsys):
    assert cli.main(["generate", "--length", "12", "--copies", "3", "--no-symbols"]) == 0
    out = capsys.readouterr().out
    passwords = re.findall(r"Password #\d+: (\S+)", out)
    assert len(passwords) == 3
    for pw in passwords:
        assert len(pw) == 12
        assert pw.isalnum()


def test_generate_exclusions(capsys):
    assert cli.main(["generate", "--length", "40", "--exclude-similar", "--no-symbols"]) == 0
    pw = re.findall(r"Password #1: (\S+)", capsys.readouterr().out)[0]
    assert not any(c in "ILil10" for c in pw)


def test_generate_with_strength(capsys):
    assert cli.main(["generate", "--length", "16", "--show-strength"]) == 0
    assert "strength:" in capsys.readouterr().out


def test_generate_bad_configuration(capsys):
    code = cli.main(["generate", "--no-upper", "--no-lower", "--no-digits", "--no-symbols"])
    assert code == cli.EXIT_CONFIG_ERROR
    assert "Invalid generator settings" in capsys.readouterr().out


def test_generate_too_short(capsys):
    assert cli.main(["generate", "--length", "2"]) == cli.EXIT_CONFIG_ERROR


def test_score(capsys):
    assert cli.main(["score", "aaaaaaaa"]) == 0
    out = capsys.readouterr().out
    assert "30 / 100" in out
    assert "Avoid repeating characters" in out


def test_score_spanish(capsys):
    assert cli.main(["score", "", "--locale", "es"]) == 0
    assert "Muy Débil" in capsys.readouterr().out


def test_add_and_list_keys(vault_file, capsys):
    code = cli.main([
        "keys", "add", "--file", vault_file, "--name", "Prod", "--service", "Stripe",
        "--secret", "sk_live_abcdef123456", "--category", "Payment",
    ])
    assert code == 0
    assert open_vault("master", vault_file)["api_keys"][0]["name"] == "Prod"

    capsys.readouterr()
    assert cli.main(["keys", "list", "--file", vault_file]) == 0
    out = capsys.readouterr().out
    assert "Prod" in out
    assert "sk_live_abcdef123456" not in out


def test_add_generated_password(vault_file):
    code = cli.main(["passwords", "add", "--file", vault_file, "--name", "Mail", "--service", "Gmail", "--generate"])
    assert code == 0
    secret = open_vault("master", vault_file)["passwords"][0]["secret"]
    assert len(secret) == 16


def test_add_invalid_record(vault_file, capsys):
    code = cli.main(["passwords", "add", "--file", vault_file, "--name", " ", "--service", "Gmail", "--secret", "pw"])
    assert code == cli.EXIT_CONFIG_ERROR


def test_search_edit_remove(vault_file, capsys):
    cli.main(["passwords", "add", "--file", vault_file, "--name", "Mail", "--service", "Gmail", "--secret", "pw12345678"])
    record_id = open_vault("master", vault_file)["passwords"][0]["id"]

    capsys.readouterr()
    assert cli.main(["passwords", "search", "--file", vault_file, "gmail"]) == 0
    assert "Mail" in capsys.readouterr().out

    assert cli.main(["passwords", "edit", "--file", vault_file, record_id[:8], "--description", "personal"]) == 0
    assert open_vault("master", vault_file)["passwords"][0]["description"] == "personal"

    assert cli.main(["passwords", "remove", "--file", vault_file, record_id[:8], "--yes"]) == 0
    assert open_vault("master", vault_file)["passwords"] == []


def test_show_unknown_record(vault_file, capsys):
    assert cli.main(["passwords", "show", "--file", vault_file, "deadbeef"]) == cli.EXIT_VAULT_ERROR


def test_stats(vault_file, capsys):
    for name, category in [("a", "AI"), ("b", "AI"), ("c", "Cloud")]:
        cli.main(["keys", "add", "--file", vault_file, "--name", name, "--service", "s", "--secret", "k", "--category", category])
    capsys.readouterr()
    assert cli.main(["keys", "stats", "--file", vault_file]) == 0
    out = capsys.readouterr().out
    assert "Total: 3" in out
    assert "AI" in out and "Cloud" in out


def test_wrong_master_password(vault_file, monkeypatch, capsys):
    monkeypatch.setattr(cli, "getpass", lambda prompt="": "wrong")
    assert cli.main(["keys", "list", "--file", vault_file]) == cli.EXIT_VAULT_ERROR
    assert "Incorrect master password" in capsys.readouterr().out


def test_score_with_broken_generator_settings(capsys):
    save_config({"generator": {
        "include_uppercase": False, "include_lowercase": False,
        "include_numbers": False, "include_symbols": False,
    }})
    assert cli.main(["score", "hunter2"]) == cli.EXIT_CONFIG_ERROR
    out = capsys.readouterr().out
    # the score is still reported before the settings error
    assert "/ 100" in out
    assert "Invalid generator settings" in out


def test_score_with_non_integer_length_setting(capsys):
    save_config({"generator": {"length": "long"}})
    assert cli.main(["score", "hunter2"]) == cli.EXIT_CONFIG_ERROR
    assert "length must be an integer" in capsys.readouterr().out


def test_list_damaged_vault(vault_file, capsys):
    wrapper = decode_json(read_file(vault_file))
    wrapper["cipher"]["nonce"] = "abc"
    write_file(vault_file, encode_json(wrapper))
    assert cli.main(["passwords", "list", "--file", vault_file]) == cli.EXIT_VAULT_ERROR
    assert "Invalid vault format" in capsys.readouterr().out
