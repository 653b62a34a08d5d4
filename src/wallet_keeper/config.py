"""Configuration system for wallet-keeper.

Loads keeper settings from a YAML file (``wallet-keeper.yaml`` by default),
supports environment variable expansion, and resolves relative paths against
the directory holding the config file.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from wallet_keeper.errors import ConfigError

DEFAULT_CONFIG_NAME = "wallet-keeper.yaml"

# Legacy fixed passphrase used for every generated key. Kept as the default so
# existing keystores stay decryptable; override it via the config file.
DEFAULT_PASSPHRASE = "password"


# ---------------------------------------------------------------------------
# Environment-variable expansion helper
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with their environment values.

    If the variable is not set the placeholder is left as-is.
    """

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_env_recursive(obj: object) -> object:
    """Walk an arbitrary nested structure and expand env vars in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _expand_env_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# Pydantic v2 models
# ---------------------------------------------------------------------------


class EthConfig(BaseModel):
    """Ethereum node connection settings."""

    host: str = "http://127.0.0.1:8545"
    rpc_timeout: float = 10.0  # seconds, applied to every JSON-RPC call


class KeystoreConfig(BaseModel):
    """Key generation settings."""

    passphrase: str = DEFAULT_PASSPHRASE  # ${WALLET_KEEPER_PASSPHRASE}
    light_kdf: bool = False  # cheap scrypt parameters, for tests and dev nodes

    @field_validator("passphrase")
    @classmethod
    def _reject_unexpanded(cls, value: str) -> str:
        match = _ENV_VAR_RE.search(value)
        if match:
            raise ValueError(
                f"environment variable {match.group(1)} is not set"
            )
        if not value:
            raise ValueError("passphrase must not be empty")
        return value

    @property
    def uses_default_passphrase(self) -> bool:
        return self.passphrase == DEFAULT_PASSPHRASE


class ServerConfig(BaseModel):
    """HTTP surface settings."""

    host: str = "127.0.0.1"
    port: int = 8000


class KeeperConfig(BaseModel):
    """Root configuration object."""

    eth: EthConfig = Field(default_factory=EthConfig)
    wallet_dir: Path = Path("data/wallet")
    account_path: Path = Path("data/accounts.json")
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    keystore: KeystoreConfig = Field(default_factory=KeystoreConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    def resolve_paths(self, base: Path) -> KeeperConfig:
        """Return a copy with relative paths anchored at *base*."""
        updates = {}
        for name in ("wallet_dir", "account_path", "log_dir"):
            value: Path = getattr(self, name)
            if not value.is_absolute():
                updates[name] = base / value
        return self.model_copy(update=updates)

    @property
    def log_file(self) -> Path:
        return self.log_dir / "eth.log"


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def load_config(path: Path) -> KeeperConfig:
    """Load and validate a keeper configuration from a YAML file.

    Environment variable placeholders (``${VAR}``) are expanded before
    validation. Relative paths are resolved against the config file's
    directory.

    Raises
    ------
    ConfigError
        If the file is missing, is not valid YAML, or fails validation.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"{path} is not a valid config file")
    try:
        raw_data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(raw_data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    expanded = _expand_env_recursive(raw_data)
    try:
        config = KeeperConfig.model_validate(expanded)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}: {exc}") from exc
    return config.resolve_paths(path.resolve().parent)


def save_config(config: KeeperConfig, path: Path) -> None:
    """Serialize a :class:`KeeperConfig` to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json", exclude_none=True)
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)
