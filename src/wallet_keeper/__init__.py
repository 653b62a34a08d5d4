"""wallet-keeper: a bitcoind-style wallet service over account-based ledgers.

Upstream services talk to every backend through the same
:class:`~wallet_keeper.keeper.Keeper` contract. The Ethereum backend keeps
its own account -> address directory and rejects UTXO-only calls explicitly.
"""

__version__ = "0.1.0"
