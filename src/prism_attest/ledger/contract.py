"""PRISMRegistry contract surface consumed by the minter.

Hand-written rather than compiled: only the five functions the workflow
calls are listed.
"""

from __future__ import annotations

from typing import Any


def _address_input(name: str = "user") -> dict[str, str]:
    return {"name": name, "type": "address", "internalType": "address"}


PRISM_REGISTRY_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "mintAttestation",
        "stateMutability": "nonpayable",
        "inputs": [
            _address_input(),
            {"name": "proofHash", "type": "bytes32", "internalType": "bytes32"},
            {"name": "confidenceBps", "type": "uint16", "internalType": "uint16"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "revoke",
        "stateMutability": "nonpayable",
        "inputs": [_address_input()],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "isHuman",
        "stateMutability": "view",
        "inputs": [_address_input()],
        "outputs": [{"name": "", "type": "bool", "internalType": "bool"}],
    },
    {
        "type": "function",
        "name": "tokenIdFor",
        "stateMutability": "view",
        "inputs": [_address_input()],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
    },
    {
        "type": "function",
        "name": "storeVerification",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "hash", "type": "bytes32", "internalType": "bytes32"}],
        "outputs": [],
    },
]
