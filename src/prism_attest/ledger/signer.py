"""Transaction signer: the one signing identity behind every write.

Every write call made by this process is signed by the same account, so
they all draw from one nonce sequence. Two writers that read the same
pending count would broadcast two transactions with one nonce and the
ledger would drop one of them. The signer is therefore the single
serialization point for writes: nonce assignment, signing and broadcast
all happen under its lock. Waiting for inclusion does not, so a slow
block does not stall other writers.

Read calls never touch the signer.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import Web3

from prism_attest.config import AttestationConfig
from prism_attest.errors import ConfigurationError
from prism_attest.ledger.gas import GasStrategy, build_gas_strategy

logger = logging.getLogger(__name__)


class TransactionSigner:
    """Signs and broadcasts contract calls for one account.

    Usage:
        signer = TransactionSigner.from_config(config)
        tx_hash = signer.send(w3, contract.functions.revoke(wallet))
    """

    def __init__(
        self,
        account: LocalAccount,
        gas_strategy: GasStrategy,
        chain_id: Optional[int] = None,
    ) -> None:
        self._account = account
        self._gas_strategy = gas_strategy
        self._chain_id = chain_id
        self._lock = threading.Lock()
        self._next_nonce: Optional[int] = None

    @classmethod
    def from_config(cls, config: AttestationConfig) -> TransactionSigner:
        if not config.private_key:
            raise ConfigurationError("Missing configuration: PRISM_PRIVATE_KEY")
        return cls(
            account=Account.from_key(config.private_key),
            gas_strategy=build_gas_strategy(config),
            chain_id=config.chain_id,
        )

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def gas_strategy(self) -> GasStrategy:
        return self._gas_strategy

    def send(self, w3: Web3, call: Any) -> HexBytes:
        """Sign and broadcast a contract call. Returns the transaction hash.

        Does not wait for inclusion. Any failure before the node accepts
        the transaction discards the cached nonce, so the next send
        re-derives it from the ledger.
        """
        sender = self._account.address
        with self._lock:
            try:
                nonce = self._reserve_nonce(w3)
                tx_params: dict[str, Any] = {
                    "from": sender,
                    "nonce": nonce,
                    "chainId": self._resolve_chain_id(w3),
                }
                tx_params.update(self._gas_strategy.params(w3, call, sender))
                tx = call.build_transaction(tx_params)
                signed = self._account.sign_transaction(tx)
                tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
            except Exception:
                self._next_nonce = None
                raise
            self._next_nonce = nonce + 1

        logger.info("Broadcast tx %s from %s (nonce %d)", Web3.to_hex(tx_hash), sender, nonce)
        return tx_hash

    def _reserve_nonce(self, w3: Web3) -> int:
        pending = int(w3.eth.get_transaction_count(self._account.address, "pending"))
        if self._next_nonce is None:
            return pending
        # The node may not have indexed our last broadcast yet.
        return max(pending, self._next_nonce)

    def _resolve_chain_id(self, w3: Web3) -> int:
        if self._chain_id is None:
            self._chain_id = int(w3.eth.chain_id)
        return self._chain_id
