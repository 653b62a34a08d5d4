"""Encrypted keystore management using eth-account.

Keys are written one per file in the go-ethereum keystore layout
(``UTC--<timestamp>--<address>``) so that a geth node pointed at the same
directory can unlock them.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from eth_account import Account
from web3 import Web3

from wallet_keeper.errors import ConfigError, KeyGenError

logger = logging.getLogger("wallet_keeper.eth.keystore")

# go-ethereum keystore scrypt parameters
STANDARD_SCRYPT_N = 1 << 18
LIGHT_SCRYPT_N = 1 << 12


class KeyProvider(Protocol):
    """Source of new key material."""

    def generate_key(self, passphrase: str) -> str:
        """Create a keypair encrypted under *passphrase* and return its address."""
        ...


def keystore_filename(address: str, now: datetime | None = None) -> str:
    """Return the geth-style file name for *address*."""
    if now is None:
        now = datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S.%f") + "000Z"
    return f"UTC--{stamp}--{address.lower().removeprefix('0x')}"


class KeystoreKeyProvider:
    """Generates keys into an on-disk keystore directory.

    Parameters
    ----------
    wallet_dir:
        Existing directory that holds the keystore files.
    light_kdf:
        Use cheap scrypt parameters. Only suitable for tests and dev nodes.

    Raises
    ------
    ConfigError
        If *wallet_dir* does not exist or is not a directory.
    """

    def __init__(self, wallet_dir: Path, light_kdf: bool = False) -> None:
        wallet_dir = Path(wallet_dir)
        if not wallet_dir.exists():
            raise ConfigError(f"{wallet_dir} does not exist")
        if not wallet_dir.is_dir():
            raise ConfigError(f"{wallet_dir} is not a directory")
        self.wallet_dir = wallet_dir
        self.scrypt_n = LIGHT_SCRYPT_N if light_kdf else STANDARD_SCRYPT_N

    def generate_key(self, passphrase: str) -> str:
        """Generate a new keypair, save it encrypted, and return the address.

        Raises :class:`KeyGenError` if the key cannot be created or written.
        """
        try:
            acct = Account.create()
            encrypted = Account.encrypt(
                acct.key, passphrase, kdf="scrypt", iterations=self.scrypt_n
            )
            keystore_path = self.wallet_dir / keystore_filename(acct.address)
            keystore_path.write_text(json.dumps(encrypted), encoding="utf-8")
        except (OSError, ValueError, TypeError) as exc:
            raise KeyGenError(f"Failed to generate key: {exc}") from exc

        logger.info(f"New key {acct.address} written to {keystore_path.name}")
        return acct.address

    def list_addresses(self) -> list[str]:
        """Read the addresses of all keystore files without decrypting."""
        addresses = []
        for path in sorted(self.wallet_dir.glob("UTC--*")):
            if not path.is_file():
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning(f"Skipping unreadable keystore file {path.name}: {exc}")
                continue
            raw_address = data.get("address", "")
            if not raw_address:
                continue
            if not raw_address.startswith("0x"):
                raw_address = "0x" + raw_address
            addresses.append(Web3.to_checksum_address(raw_address))
        return addresses
