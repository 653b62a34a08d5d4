"""Ethereum backend: address directory, keystore, JSON-RPC transport."""

from wallet_keeper.eth.client import EthKeeper
from wallet_keeper.eth.keystore import KeyProvider, KeystoreKeyProvider
from wallet_keeper.eth.store import AddressStore
from wallet_keeper.eth.transport import LedgerTransport, Web3Transport, decode_quantity

__all__ = [
    "EthKeeper",
    "KeyProvider",
    "KeystoreKeyProvider",
    "AddressStore",
    "LedgerTransport",
    "Web3Transport",
    "decode_quantity",
]
