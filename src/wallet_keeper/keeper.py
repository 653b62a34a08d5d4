"""The capability contract every ledger backend implements.

The surface mirrors the bitcoind wallet RPCs so that upstream services can
drive UTXO and account-based ledgers the same way. Backends raise
:class:`~wallet_keeper.errors.UnsupportedOperationError` for calls that have
no equivalent on their ledger model instead of faking a result.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from wallet_keeper.models import AccountRecord, UnspentOutput


class Keeper(ABC):
    """Abstract wallet backend."""

    @abstractmethod
    def ping(self) -> None:
        """Liveness check."""

    @abstractmethod
    def get_block_count(self, timeout: float | None = None) -> int:
        """Return the current chain height.

        *timeout* bounds the ledger round trip in seconds; ``None`` uses the
        backend default.
        """

    @abstractmethod
    def get_address(self, account: str) -> str:
        """Return the default address of *account*."""

    @abstractmethod
    def create_account(self, account: str) -> AccountRecord:
        """Create *account* with a freshly generated address."""

    @abstractmethod
    def get_account_info(self, address: str, min_conf: int) -> AccountRecord:
        """Return the account owning *address*."""

    @abstractmethod
    def get_new_address(self, account: str) -> str:
        """Generate an additional address for *account*."""

    @abstractmethod
    def get_addresses_by_account(self, account: str) -> list[str]:
        """Return every address bound to *account*."""

    @abstractmethod
    def list_accounts_min_conf(self, min_conf: int) -> dict[str, float]:
        """Map account names to balances with at least *min_conf* confirmations."""

    @abstractmethod
    def send_to_address(self, address: str, amount: float) -> None:
        """Send *amount* to *address*."""

    @abstractmethod
    def send_from(self, account: str, address: str, amount: float) -> None:
        """Send *amount* from *account* to *address*."""

    @abstractmethod
    def list_unspent_min(self, min_conf: int) -> list[UnspentOutput]:
        """List unspent outputs with at least *min_conf* confirmations."""

    @abstractmethod
    def move(self, from_account: str, to_account: str, amount: float) -> bool:
        """Move *amount* between two accounts of this wallet."""
