import os

import pytest

from fakes import CONTRACT, FIXED_NOW, PRIVATE_KEY, FakeLedger
from prism_attest.config import AttestationConfig
from prism_attest.minter import AttestationMinter


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("PRISM_"):
            monkeypatch.delenv(name)


@pytest.fixture
def config() -> AttestationConfig:
    return AttestationConfig(contract_address=CONTRACT, private_key=PRIVATE_KEY)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def minter(config: AttestationConfig, ledger: FakeLedger) -> AttestationMinter:
    return AttestationMinter(config, ledger, clock=lambda: FIXED_NOW)
