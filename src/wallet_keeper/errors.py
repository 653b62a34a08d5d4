"""Exception hierarchy shared by every keeper backend."""

from __future__ import annotations


class KeeperError(Exception):
    """Base class for all wallet-keeper errors."""


class ConfigError(KeeperError):
    """Startup configuration is missing or malformed."""


class AccountNotFoundError(KeeperError, KeyError):
    """No address is bound to the requested account."""

    def __init__(self, account: str) -> None:
        self.account = account
        super().__init__(f"account '{account}' does not exist")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class AccountExistsError(KeeperError):
    """An account with the same name is already bound."""

    def __init__(self, account: str) -> None:
        self.account = account
        super().__init__(f"account '{account}' already exists")


class UnsupportedOperationError(KeeperError):
    """The operation has no meaning for this ledger model."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        super().__init__(f"{operation}: {reason}")


class TransportError(KeeperError):
    """The remote ledger call failed."""


class DecodeError(KeeperError):
    """The remote ledger returned a payload that could not be decoded."""

    def __init__(self, value: object, reason: str) -> None:
        self.value = value
        super().__init__(f"cannot decode {value!r}: {reason}")


class KeyGenError(KeeperError):
    """The key provider failed to produce a new keypair."""


class PersistError(KeeperError):
    """The binding file could not be written.

    When raised for a new binding, the key for ``address`` already exists in
    the keystore but the binding for ``account`` is not recorded anywhere and
    the in-memory map is unchanged.
    """

    def __init__(
        self,
        reason: str,
        account: str | None = None,
        address: str | None = None,
    ) -> None:
        self.account = account
        self.address = address
        if account is None:
            message = f"binding file is not durable: {reason}"
        else:
            message = f"binding {account} -> {address} is not durable: {reason}"
        super().__init__(message)
