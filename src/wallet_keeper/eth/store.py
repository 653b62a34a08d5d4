"""Durable account -> address directory.

Ethereum has no notion of wallet accounts, so the keeper maintains its own
mapping from account names to keystore addresses. The mapping lives in memory
and is backed by a JSON file that is rewritten wholesale on every mutation.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from wallet_keeper.errors import (
    AccountExistsError,
    AccountNotFoundError,
    ConfigError,
    PersistError,
)

logger = logging.getLogger("wallet_keeper.eth.store")


def _encode(bindings: dict[str, str]) -> str:
    # Sorted keys keep repeated writes of the same map byte-identical
    return json.dumps(bindings, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def _fsync_dir(directory: Path) -> None:
    """Flush the directory entry of a freshly renamed file (POSIX only)."""
    if os.name != "posix":
        return
    fd = os.open(str(directory), os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class AddressStore:
    """Thread-safe account -> address map backed by a JSON file.

    All access goes through one lock. :meth:`insert` holds it across the
    existence check, the file write and the in-memory update, so concurrent
    creators of the same account cannot both succeed and the file never lags
    behind memory.
    """

    def __init__(self, path: Path, bindings: dict[str, str] | None = None) -> None:
        self.path = Path(path)
        self._bindings: dict[str, str] = dict(bindings or {})
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path) -> AddressStore:
        """Read the binding file at *path* into a new store.

        Raises
        ------
        ConfigError
            If *path* does not exist, is not a regular file, or does not
            hold a JSON object of string keys to non-empty string values.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"{path} does not exist")
        if not path.is_file():
            raise ConfigError(f"{path} is not a valid file")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Failed to read {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a JSON object")
        for account, address in data.items():
            if not isinstance(address, str) or not address:
                raise ConfigError(
                    f"{path}: account '{account}' has an invalid address {address!r}"
                )

        logger.info(f"Loaded {len(data)} account binding(s) from {path}")
        return cls(path, data)

    @staticmethod
    def initialize(path: Path) -> bool:
        """Create an empty binding file at *path* unless one exists.

        Returns *True* if a file was written.
        """
        path = Path(path)
        if path.exists():
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_encode({}), encoding="utf-8")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def lookup(self, account: str) -> str:
        """Return the address bound to *account*.

        Raises :class:`AccountNotFoundError` if the account is unknown.
        """
        with self._lock:
            address = self._bindings.get(account)
        if address is None:
            raise AccountNotFoundError(account)
        return address

    def accounts(self) -> list[str]:
        """Sorted snapshot of the bound account names."""
        with self._lock:
            return sorted(self._bindings)

    def snapshot(self) -> dict[str, str]:
        """Copy of the current bindings."""
        with self._lock:
            return dict(self._bindings)

    def __contains__(self, account: object) -> bool:
        with self._lock:
            return account in self._bindings

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, account: str, address: str) -> None:
        """Bind *account* to *address* and flush the map to disk.

        The file write is the commit point: memory is only updated once the
        new map is on disk.

        Raises
        ------
        AccountExistsError
            If *account* is already bound. Nothing is changed.
        PersistError
            If the binding file could not be written. Nothing is changed.
        """
        if not address:
            raise ValueError("address must be a non-empty string")

        with self._lock:
            if account in self._bindings:
                raise AccountExistsError(account)

            updated = dict(self._bindings)
            updated[account] = address
            try:
                self._write(updated)
            except OSError as exc:
                logger.error(f"Failed to persist binding {account} -> {address}: {exc}")
                raise PersistError(str(exc), account, address) from exc
            self._bindings = updated

        logger.info(f"Bound account '{account}' to {address}")

    def persist(self) -> None:
        """Rewrite the binding file from the in-memory map.

        Raises :class:`PersistError` if the write fails.
        """
        with self._lock:
            try:
                self._write(self._bindings)
            except OSError as exc:
                raise PersistError(str(exc)) from exc

    def _write(self, bindings: dict[str, str]) -> None:
        """Atomically replace the binding file with *bindings*."""
        directory = self.path.parent
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(_encode(bindings))
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        _fsync_dir(directory)
