"""
Tests for the command line interface (cli/app.py).
"""

from __future__ import annotations

import json
import logging

import pytest
import yaml
from typer.testing import CliRunner

from wallet_keeper.cli.app import app

runner = CliRunner()


def _out(result) -> str:
    # Rich wraps long lines; compare on collapsed whitespace
    return " ".join(result.output.split())


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging.getLogger("wallet_keeper").handlers.clear()


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "wallet-keeper.yaml"
    result = runner.invoke(app, ["--config", str(path), "init"])
    assert result.exit_code == 0, result.output
    # Fast keys for tests
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data["keystore"] = {"passphrase": "test-pass", "light_kdf": True}
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "wallet-keeper" in _out(result)


def test_init_creates_layout(config_path):
    base = config_path.parent
    assert (base / "data" / "wallet").is_dir()
    assert json.loads((base / "data" / "accounts.json").read_text(encoding="utf-8")) == {}


def test_init_refuses_to_overwrite(config_path):
    result = runner.invoke(app, ["--config", str(config_path), "init"])
    assert result.exit_code == 1
    assert "already exists" in _out(result)


def test_create_account_and_lookup(config_path):
    result = runner.invoke(app, ["-c", str(config_path), "create-account", "alice"])
    assert result.exit_code == 0, result.output
    assert "created" in _out(result)

    bindings = json.loads(
        (config_path.parent / "data" / "accounts.json").read_text(encoding="utf-8")
    )
    assert list(bindings) == ["alice"]

    result = runner.invoke(app, ["-c", str(config_path), "address", "alice"])
    assert result.exit_code == 0
    assert bindings["alice"] in _out(result)

    result = runner.invoke(app, ["-c", str(config_path), "accounts"])
    assert result.exit_code == 0
    assert "alice" in _out(result)
    assert "OK" in _out(result)


def test_create_duplicate_account_fails(config_path):
    runner.invoke(app, ["-c", str(config_path), "create-account", "alice"])
    result = runner.invoke(app, ["-c", str(config_path), "create-account", "alice"])
    assert result.exit_code == 1
    assert "already exists" in _out(result)


def test_unknown_account(config_path):
    result = runner.invoke(app, ["-c", str(config_path), "address", "nobody"])
    assert result.exit_code == 1
    assert "does not exist" in _out(result)


def test_empty_account_listing(config_path):
    result = runner.invoke(app, ["-c", str(config_path), "accounts"])
    assert result.exit_code == 0
    assert "No accounts" in _out(result)


def test_missing_config(tmp_path):
    result = runner.invoke(app, ["-c", str(tmp_path / "absent.yaml"), "accounts"])
    assert result.exit_code == 1
    assert "wallet-keeper init" in _out(result)


def test_logs_are_json_lines(config_path):
    runner.invoke(app, ["-c", str(config_path), "create-account", "alice"])
    log_file = config_path.parent / "logs" / "eth.log"
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert any("alice" in r["msg"] for r in records)
    assert all({"ts", "level", "logger", "msg"} <= set(r) for r in records)
