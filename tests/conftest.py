"""
Shared pytest fixtures for the wallet-keeper test suite.
"""

import itertools
import json
import threading

import pytest

from wallet_keeper.errors import KeyGenError, TransportError
from wallet_keeper.eth.client import EthKeeper
from wallet_keeper.eth.store import AddressStore


class FakeKeyProvider:
    """Hands out deterministic, unique addresses."""

    def __init__(self, fail=False):
        self.fail = fail
        self.passphrases = []
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def generate_key(self, passphrase):
        if self.fail:
            raise KeyGenError("keystore unavailable")
        with self._lock:
            self.passphrases.append(passphrase)
            n = next(self._counter)
        return "0x" + format(n, "040x")


class FakeTransport:
    """Returns canned results per method, or raises a canned error."""

    def __init__(self, results=None, error=None):
        self.results = results or {}
        self.error = error
        self.calls = []
        self.timeouts = []

    def call(self, method, *params, timeout=None):
        self.calls.append((method, params))
        self.timeouts.append(timeout)
        if self.error is not None:
            raise TransportError(self.error)
        return self.results[method]


@pytest.fixture
def bindings_path(tmp_path):
    """Binding file holding the alice account."""
    path = tmp_path / "accounts.json"
    path.write_text(json.dumps({"alice": "0xABC"}), encoding="utf-8")
    return path


@pytest.fixture
def store(bindings_path):
    return AddressStore.load(bindings_path)


@pytest.fixture
def key_provider():
    return FakeKeyProvider()


@pytest.fixture
def transport():
    return FakeTransport(results={"eth_blockNumber": "0x1b4"})


@pytest.fixture
def keeper(store, key_provider, transport):
    return EthKeeper(store, key_provider, transport, passphrase="s3cret")
