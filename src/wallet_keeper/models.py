"""Pydantic models returned by the keeper contract."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AccountRecord(BaseModel):
    """Caller-facing summary of an account."""

    account: str = ""
    balance: float = 0
    addresses: list[str] = Field(default_factory=list)


class UnspentOutput(BaseModel):
    """One row of a bitcoind ``listunspent`` result.

    Only UTXO backends produce these; account-based ledgers reject the call.
    """

    txid: str
    vout: int
    address: str = ""
    account: str = ""
    script_pub_key: str = ""
    amount: float = 0
    confirmations: int = 0
    spendable: bool = False
