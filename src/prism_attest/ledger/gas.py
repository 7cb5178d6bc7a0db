"""Gas strategies for outgoing write calls.

A strategy turns a pending contract call into the gas fields of its
transaction. The signer asks the strategy; neither the minter nor the
ledger client knows which one is in use.

- FixedGasStrategy: legacy ``gasPrice`` and a fixed gas limit.
- DynamicGasStrategy: EIP-1559 fees from the latest base fee and the
  node's suggested tip, gas limit from ``estimate_gas`` with headroom.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Protocol

from web3 import Web3

from prism_attest.config import AttestationConfig
from prism_attest.errors import ConfigurationError


class GasStrategy(Protocol):
    def params(self, w3: Web3, call: Any, sender: str) -> dict[str, int]:
        """Return the gas fields to merge into the transaction."""
        ...


class FixedGasStrategy:
    """Same price and limit for every transaction."""

    def __init__(self, gas_price_gwei: Decimal, gas_limit: int) -> None:
        self._gas_price_wei = int(Web3.to_wei(gas_price_gwei, "gwei"))
        self._gas_limit = gas_limit

    def params(self, w3: Web3, call: Any, sender: str) -> dict[str, int]:
        return {"gas": self._gas_limit, "gasPrice": self._gas_price_wei}


class DynamicGasStrategy:
    """EIP-1559 pricing estimated per transaction.

    ``maxFeePerGas`` is twice the latest base fee plus the tip, which
    keeps the transaction valid through several full blocks. The tip is
    floored at ``min_priority_fee_gwei``; Polygon nodes reject tips
    below their minimum.
    """

    def __init__(
        self,
        multiplier: Decimal = Decimal("1.2"),
        min_priority_fee_gwei: Decimal = Decimal("0"),
    ) -> None:
        self._multiplier = multiplier
        self._min_priority_fee_wei = int(Web3.to_wei(min_priority_fee_gwei, "gwei"))

    def params(self, w3: Web3, call: Any, sender: str) -> dict[str, int]:
        base_fee = w3.eth.get_block("latest").get("baseFeePerGas")
        if base_fee is None:
            raise ConfigurationError(
                "dynamic gas strategy needs EIP-1559 blocks; use the fixed strategy on this chain"
            )
        base_fee = int(base_fee)
        priority_fee = max(int(w3.eth.max_priority_fee), self._min_priority_fee_wei)
        estimate = int(call.estimate_gas({"from": sender}))
        return {
            "gas": int(Decimal(estimate) * self._multiplier),
            "maxFeePerGas": 2 * base_fee + priority_fee,
            "maxPriorityFeePerGas": priority_fee,
        }


def build_gas_strategy(config: AttestationConfig) -> GasStrategy:
    if config.gas_strategy == "dynamic":
        return DynamicGasStrategy(
            multiplier=config.gas_multiplier,
            min_priority_fee_gwei=config.min_priority_fee_gwei,
        )
    return FixedGasStrategy(config.gas_price_gwei, config.gas_limit)
