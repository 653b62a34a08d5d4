"""Ethereum backend for the keeper contract.

Ethereum is account-based: there are no wallet accounts, no change
addresses and no unspent outputs. The keeper keeps its own account -> address
directory and reports UTXO-only calls as unsupported.
"""

from __future__ import annotations

import logging

from wallet_keeper.config import KeeperConfig
from wallet_keeper.errors import AccountExistsError, AccountNotFoundError, UnsupportedOperationError
from wallet_keeper.eth.keystore import KeyProvider, KeystoreKeyProvider
from wallet_keeper.eth.store import AddressStore
from wallet_keeper.eth.transport import LedgerTransport, Web3Transport, decode_quantity
from wallet_keeper.keeper import Keeper
from wallet_keeper.models import AccountRecord, UnspentOutput

logger = logging.getLogger("wallet_keeper.eth.client")


class EthKeeper(Keeper):
    """Keeper backed by an Ethereum node and a local keystore."""

    def __init__(
        self,
        store: AddressStore,
        key_provider: KeyProvider,
        transport: LedgerTransport,
        passphrase: str,
    ) -> None:
        self.store = store
        self.key_provider = key_provider
        self.transport = transport
        self._passphrase = passphrase

    @classmethod
    def from_config(cls, config: KeeperConfig) -> EthKeeper:
        """Build a keeper from configuration.

        Loads the binding file and opens the keystore directory; either
        failing raises :class:`~wallet_keeper.errors.ConfigError`.
        """
        store = AddressStore.load(config.account_path)
        key_provider = KeystoreKeyProvider(config.wallet_dir, light_kdf=config.keystore.light_kdf)
        transport = Web3Transport(config.eth.host, timeout=config.eth.rpc_timeout)
        if config.keystore.uses_default_passphrase:
            logger.warning(
                "Keystore passphrase is the built-in default; set keystore.passphrase "
                "to protect newly generated keys"
            )
        logger.info(f"Ethereum keeper ready (node {config.eth.host}, {len(store)} accounts)")
        return cls(store, key_provider, transport, config.keystore.passphrase)

    # ------------------------------------------------------------------
    # Node
    # ------------------------------------------------------------------

    def ping(self) -> None:
        return None

    def get_block_count(self, timeout: float | None = None) -> int:
        """Current block number reported by the node."""
        return decode_quantity(self.transport.call("eth_blockNumber", timeout=timeout))

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def get_address(self, account: str) -> str:
        """Default address of *account*."""
        return self.store.lookup(account)

    def create_account(self, account: str) -> AccountRecord:
        """Generate a key for *account* and record the binding.

        Raises AccountExistsError, KeyGenError or PersistError.
        """
        try:
            self.store.lookup(account)
        except AccountNotFoundError:
            pass
        else:
            logger.info(f"Refused to create '{account}': already exists")
            raise AccountExistsError(account)

        address = self.key_provider.generate_key(self._passphrase)
        try:
            self.store.insert(account, address)
        except AccountExistsError:
            # Lost a race with a concurrent creator; the new key stays unused
            logger.warning(f"Account '{account}' created concurrently; key {address} left unbound")
            raise

        logger.info(f"Created account '{account}' with address {address}")
        return AccountRecord(account=account, balance=0, addresses=[address])

    def get_account_info(self, address: str, min_conf: int) -> AccountRecord:
        # Not implemented for Ethereum yet
        return AccountRecord()

    def get_new_address(self, account: str) -> str:
        raise UnsupportedOperationError(
            "getnewaddress", "not a valid operation for ethereum"
        )

    def get_addresses_by_account(self, account: str) -> list[str]:
        return [self.get_address(account)]

    def list_accounts_min_conf(self, min_conf: int) -> dict[str, float]:
        return {}

    # ------------------------------------------------------------------
    # Transfers (accepted without touching the ledger)
    # ------------------------------------------------------------------

    def send_to_address(self, address: str, amount: float) -> None:
        logger.warning(f"sendtoaddress {amount} to {address} accepted but not executed")

    def send_from(self, account: str, address: str, amount: float) -> None:
        # TODO check that the account exists and has sufficient balance
        logger.warning(f"sendfrom {account} {amount} to {address} accepted but not executed")

    def list_unspent_min(self, min_conf: int) -> list[UnspentOutput]:
        raise UnsupportedOperationError("listunspent", "ethereum does not support UTXO")

    def move(self, from_account: str, to_account: str, amount: float) -> bool:
        logger.warning(f"move {amount} from {from_account} to {to_account} accepted but not executed")
        return True
