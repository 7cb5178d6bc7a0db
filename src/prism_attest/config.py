"""Typed configuration for the attestation workflow.

Values come from the process environment, optionally seeded from a
dotenv file. Everything is parsed and checked once, at load time:
malformed values fail immediately with ConfigurationError.

Signing key and contract address are allowed to be absent at load so
that read-only use (status queries, offline hashing) works without
them. Their absence is raised when a write is attempted, via
``require_write_access``. Key material never has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values
from eth_account import Account
from web3 import Web3

from prism_attest.errors import ConfigurationError


DEFAULT_RPC_URL = "https://rpc-amoy.polygon.technology"
DEFAULT_TTL_SECONDS = 604_800  # seven days
GAS_STRATEGIES = ("fixed", "dynamic")

ENV_PREFIX = "PRISM_"


@dataclass(frozen=True)
class AttestationConfig:
    """Settings for one signing identity against one registry contract."""
    rpc_url: str = DEFAULT_RPC_URL
    contract_address: Optional[str] = None
    private_key: Optional[str] = field(default=None, repr=False)
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    chain_id: Optional[int] = None
    gas_strategy: str = "fixed"
    gas_price_gwei: Decimal = Decimal("30")
    gas_limit: int = 300_000
    gas_multiplier: Decimal = Decimal("1.2")
    min_priority_fee_gwei: Decimal = Decimal("30")
    receipt_timeout_seconds: int = 120
    request_timeout_seconds: int = 30

    def __post_init__(self) -> None:
        if not self.rpc_url:
            raise ConfigurationError("rpc_url must not be empty")
        if self.ttl_seconds <= 0:
            raise ConfigurationError(
                f"ttl_seconds must be positive, got {self.ttl_seconds}"
            )
        if self.contract_address and not Web3.is_address(self.contract_address):
            raise ConfigurationError(
                f"contract_address is not a valid address: {self.contract_address!r}"
            )
        if self.private_key:
            try:
                Account.from_key(self.private_key)
            except Exception as exc:  # eth_keys raises its own ValidationError
                # Never echo the key back.
                raise ConfigurationError("private_key is not a valid signing key") from exc
        if self.gas_strategy not in GAS_STRATEGIES:
            raise ConfigurationError(
                f"gas_strategy must be one of {GAS_STRATEGIES}, got {self.gas_strategy!r}"
            )
        if self.chain_id is not None and self.chain_id <= 0:
            raise ConfigurationError(f"chain_id must be positive, got {self.chain_id}")
        if self.gas_limit <= 0:
            raise ConfigurationError("gas_limit must be positive")
        if self.gas_multiplier < 1:
            raise ConfigurationError("gas_multiplier must be >= 1")
        if self.receipt_timeout_seconds <= 0 or self.request_timeout_seconds <= 0:
            raise ConfigurationError("timeouts must be positive")

    @property
    def can_sign(self) -> bool:
        return bool(self.private_key)

    def require_write_access(self) -> None:
        """Raise ConfigurationError unless a signed write can be attempted."""
        missing = []
        if not self.private_key:
            missing.append(f"{ENV_PREFIX}PRIVATE_KEY")
        if not self.contract_address:
            missing.append(f"{ENV_PREFIX}CONTRACT_ADDRESS")
        if missing:
            raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_file: Optional[Path] = None,
    ) -> AttestationConfig:
        """Load configuration from an environment mapping.

        If ``env_file`` is given, its values are used as a fallback for
        any variable not already set in ``environ``.
        """
        values: dict[str, str] = {}
        if env_file is not None:
            if not env_file.exists():
                raise ConfigurationError(f"env file not found: {env_file}")
            values.update(
                {k: v for k, v in dotenv_values(env_file).items() if v is not None}
            )
        values.update(os.environ if environ is None else environ)

        def get(name: str) -> Optional[str]:
            raw = values.get(ENV_PREFIX + name)
            if raw is None or not raw.strip():
                return None
            return raw.strip()

        kwargs: dict[str, object] = {}
        rpc_url = get("RPC_URL")
        if rpc_url is not None:
            kwargs["rpc_url"] = rpc_url
        kwargs["contract_address"] = get("CONTRACT_ADDRESS")
        kwargs["private_key"] = get("PRIVATE_KEY")
        gas_strategy = get("GAS_STRATEGY")
        if gas_strategy is not None:
            kwargs["gas_strategy"] = gas_strategy.lower()

        for name, attr in (
            ("ATTESTATION_TTL_SECONDS", "ttl_seconds"),
            ("CHAIN_ID", "chain_id"),
            ("GAS_LIMIT", "gas_limit"),
            ("RECEIPT_TIMEOUT_SECONDS", "receipt_timeout_seconds"),
            ("REQUEST_TIMEOUT_SECONDS", "request_timeout_seconds"),
        ):
            raw = get(name)
            if raw is not None:
                kwargs[attr] = _parse_int(ENV_PREFIX + name, raw)

        for name, attr in (
            ("GAS_PRICE_GWEI", "gas_price_gwei"),
            ("GAS_MULTIPLIER", "gas_multiplier"),
            ("GAS_MIN_PRIORITY_GWEI", "min_priority_fee_gwei"),
        ):
            raw = get(name)
            if raw is not None:
                kwargs[attr] = _parse_decimal(ENV_PREFIX + name, raw)

        return cls(**kwargs)  # type: ignore[arg-type]


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _parse_decimal(name: str, raw: str) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if not value.is_finite() or value < 0:
        raise ConfigurationError(f"{name} must be a non-negative number, got {raw!r}")
    return value
