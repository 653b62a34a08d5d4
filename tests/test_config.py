"""
Tests for configuration loading (config.py).
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from wallet_keeper.config import (
    DEFAULT_PASSPHRASE,
    KeeperConfig,
    load_config,
    save_config,
)
from wallet_keeper.errors import ConfigError


def _write(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestDefaults:
    def test_defaults(self):
        cfg = KeeperConfig()
        assert cfg.eth.host == "http://127.0.0.1:8545"
        assert cfg.eth.rpc_timeout == 10.0
        assert cfg.keystore.passphrase == DEFAULT_PASSPHRASE
        assert cfg.keystore.uses_default_passphrase
        assert cfg.log_file == Path("logs") / "eth.log"

    def test_resolve_paths_keeps_absolute(self, tmp_path):
        cfg = KeeperConfig(wallet_dir=tmp_path / "w").resolve_paths(Path("/base"))
        assert cfg.wallet_dir == tmp_path / "w"
        assert cfg.account_path == Path("/base/data/accounts.json")


class TestLoad:
    def test_load_and_resolve_relative_paths(self, tmp_path):
        path = _write(tmp_path / "keeper.yaml", {
            "eth": {"host": "http://node:8545", "rpc_timeout": 2.5},
            "wallet_dir": "keys",
            "account_path": "/srv/accounts.json",
        })
        cfg = load_config(path)
        assert cfg.eth.host == "http://node:8545"
        assert cfg.eth.rpc_timeout == 2.5
        assert cfg.wallet_dir == tmp_path.resolve() / "keys"
        assert cfg.account_path == Path("/srv/accounts.json")

    def test_env_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WALLET_KEEPER_PASSPHRASE", "from-env")
        path = _write(tmp_path / "keeper.yaml", {
            "keystore": {"passphrase": "${WALLET_KEEPER_PASSPHRASE}"},
        })
        cfg = load_config(path)
        assert cfg.keystore.passphrase == "from-env"
        assert not cfg.keystore.uses_default_passphrase

    def test_unset_env_var_left_as_is(self, tmp_path, monkeypatch):
        monkeypatch.delenv("WK_UNSET_VAR", raising=False)
        path = _write(tmp_path / "keeper.yaml", {"eth": {"host": "${WK_UNSET_VAR}"}})
        assert load_config(path).eth.host == "${WK_UNSET_VAR}"

    def test_unset_passphrase_variable_is_rejected(self, tmp_path, monkeypatch):
        monkeypatch.delenv("WALLET_KEEPER_PASSPHRASE", raising=False)
        path = _write(tmp_path / "keeper.yaml", {
            "keystore": {"passphrase": "${WALLET_KEEPER_PASSPHRASE}"},
        })
        with pytest.raises(ConfigError, match="WALLET_KEEPER_PASSPHRASE is not set"):
            load_config(path)

    def test_partially_expanded_passphrase_is_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WK_PREFIX", "abc")
        monkeypatch.delenv("WK_SUFFIX", raising=False)
        path = _write(tmp_path / "keeper.yaml", {
            "keystore": {"passphrase": "${WK_PREFIX}-${WK_SUFFIX}"},
        })
        with pytest.raises(ConfigError, match="WK_SUFFIX"):
            load_config(path)

    def test_empty_passphrase_is_rejected(self, tmp_path):
        path = _write(tmp_path / "keeper.yaml", {"keystore": {"passphrase": ""}})
        with pytest.raises(ConfigError, match="passphrase"):
            load_config(path)

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "keeper.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path).server.port == 8000

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "keeper.yaml"
        path.write_text("eth: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="parse"):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        path = _write(tmp_path / "keeper.yaml", ["a", "b"])
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_validation_error(self, tmp_path):
        path = _write(tmp_path / "keeper.yaml", {"server": {"port": "not-a-port"}})
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)


def test_save_then_load(tmp_path):
    cfg = KeeperConfig(log_level="DEBUG")
    cfg.server.port = 9999
    path = tmp_path / "nested" / "keeper.yaml"
    save_config(cfg, path)
    loaded = load_config(path)
    assert loaded.log_level == "DEBUG"
    assert loaded.server.port == 9999
    assert loaded.wallet_dir == path.parent.resolve() / "data" / "wallet"
