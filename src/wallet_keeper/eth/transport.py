"""JSON-RPC transport to an Ethereum node."""

from __future__ import annotations

import logging
import re
from typing import Any, Protocol

from web3 import Web3

from wallet_keeper.errors import DecodeError, TransportError

logger = logging.getLogger("wallet_keeper.eth.transport")

_QUANTITY_RE = re.compile(r"0x(0|[1-9a-fA-F][0-9a-fA-F]*)")


class LedgerTransport(Protocol):
    """Executes remote procedure calls against a ledger node."""

    def call(self, method: str, *params: Any, timeout: float | None = None) -> Any:
        """Invoke *method* and return the raw ``result`` member.

        *timeout* bounds this call in seconds; ``None`` uses the transport default.
        """
        ...


def decode_quantity(value: Any) -> int:
    """Decode an Ethereum JSON-RPC hex quantity (``"0x1b4"``) to an ``int``.

    Quantities must carry the ``0x`` prefix and have no leading zeros.
    Raises :class:`DecodeError` otherwise.
    """
    if not isinstance(value, str):
        raise DecodeError(value, "expected a hex string")
    if not value.startswith(("0x", "0X")):
        raise DecodeError(value, "missing 0x prefix")
    if value in ("0x", "0X"):
        raise DecodeError(value, "empty hex string")
    if not _QUANTITY_RE.fullmatch("0x" + value[2:]):
        if value[2] == "0":
            raise DecodeError(value, "hex number with leading zero digits")
        raise DecodeError(value, "invalid hex digits")
    return Web3.to_int(hexstr=value)


class Web3Transport:
    """Raw JSON-RPC access to a node through web3's HTTP provider.

    Every request is bounded by a timeout: *timeout* seconds unless the call
    passes its own.
    """

    def __init__(self, host: str, timeout: float = 10.0) -> None:
        self.host = host
        self.timeout = timeout
        self.w3 = self._connect(timeout)

    def _connect(self, timeout: float) -> Web3:
        return Web3(Web3.HTTPProvider(self.host, request_kwargs={"timeout": timeout}))

    def get_web3(self, timeout: float) -> Web3:
        """Return a Web3 instance whose requests time out after *timeout*.

        The default-timeout instance is shared; other deadlines get their own.
        """
        if timeout == self.timeout:
            return self.w3
        return self._connect(timeout)

    def call(self, method: str, *params: Any, timeout: float | None = None) -> Any:
        """Invoke *method* on the node and return its ``result``.

        Raises :class:`TransportError` on connection failures, timeouts and
        JSON-RPC error responses.
        """
        if timeout is None:
            timeout = self.timeout
        if timeout <= 0:
            raise TransportError(f"{method} failed: deadline already expired")
        w3 = self.get_web3(timeout)
        try:
            response = w3.provider.make_request(method, list(params))
        except Exception as exc:
            logger.warning(f"{method} to {self.host} failed: {exc}")
            raise TransportError(f"{method} failed: {exc}") from exc

        error = response.get("error")
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            logger.warning(f"{method} to {self.host} returned error: {message}")
            raise TransportError(f"{method} failed: {message}")
        if "result" not in response:
            raise TransportError(f"{method} failed: response has no result")
        return response["result"]
