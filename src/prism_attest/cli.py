"""PRISM attestation CLI.

Usage:
    python -m prism_attest.cli mint --wallet 0xAbC... --confidence 0.87 --session s-1
    python -m prism_attest.cli mint --wallet 0xAbC... --confidence 0.92 --force
    python -m prism_attest.cli status --wallet 0xAbC...
    python -m prism_attest.cli store-proof --data "legacy payload"
    python -m prism_attest.cli hash --wallet 0xAbC... --confidence 0.87 --expires-at 1760000000

Configuration comes from PRISM_* environment variables, optionally
seeded from a dotenv file given with --env-file. ``hash`` runs offline.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from prism_attest.config import AttestationConfig
from prism_attest.crypto.proof_hasher import compute_commitment, confidence_to_bps, to_hex
from prism_attest.errors import AttestationError
from prism_attest.minter import validate_wallet
from prism_attest.models.attestation import ProofMaterial
from prism_attest.service import AttestationService, ServiceResult


def _make_service(args: argparse.Namespace) -> AttestationService:
    config = AttestationConfig.from_env(env_file=args.env_file)
    return AttestationService.from_config(config)


def _emit(result: ServiceResult) -> int:
    if result.success:
        print(json.dumps(result.data, indent=2))
        return 0
    payload = {
        "errors": result.errors,
        "errorKind": result.error_kind,
        "failedStep": result.failed_step,
        "completedSteps": result.completed_steps,
        "retryable": result.retryable,
    }
    payload.update(result.data)
    print(json.dumps(payload, indent=2), file=sys.stderr)
    return 1


def cmd_mint(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _emit(service.mint(
        wallet=args.wallet,
        confidence_score=args.confidence,
        session_id=args.session,
        force=args.force,
    ))


def cmd_status(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _emit(service.status(args.wallet))


def cmd_store_proof(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _emit(service.store_legacy_proof(args.data))


def cmd_hash(args: argparse.Namespace) -> int:
    """Recompute a commitment offline, for checking a minted proof hash."""
    material = ProofMaterial.build(
        wallet=validate_wallet(args.wallet),
        confidence_bps=confidence_to_bps(args.confidence),
        expires_at_epoch_sec=args.expires_at,
        session_id=args.session,
    )
    print(json.dumps({
        "proofMaterial": material.canonical_string(),
        "proofHashHex": "0x" + to_hex(compute_commitment(material)),
    }, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prism-attest",
        description="PRISM on-chain attestation minting",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="dotenv file with PRISM_* settings",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    # mint
    p_mint = sub.add_parser("mint", help="Mint an attestation for a verified wallet")
    p_mint.add_argument("--wallet", required=True, help="Wallet address")
    p_mint.add_argument("--confidence", required=True, type=float, help="Confidence score in [0, 1]")
    p_mint.add_argument("--session", help="Verification session ID")
    p_mint.add_argument("--force", action="store_true", help="Revoke any live attestation first")

    # status
    p_status = sub.add_parser("status", help="Show a wallet's on-chain attestation state")
    p_status.add_argument("--wallet", required=True, help="Wallet address")

    # store-proof
    p_store = sub.add_parser("store-proof", help="Record a hash via the legacy storeVerification call")
    p_store.add_argument("--data", required=True, help="Text to hash and store")

    # hash
    p_hash = sub.add_parser("hash", help="Compute a proof commitment offline")
    p_hash.add_argument("--wallet", required=True, help="Wallet address")
    p_hash.add_argument("--confidence", required=True, type=float, help="Confidence score in [0, 1]")
    p_hash.add_argument("--expires-at", required=True, type=int, help="Expiry, epoch seconds")
    p_hash.add_argument("--session", help="Verification session ID")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "mint": cmd_mint,
        "status": cmd_status,
        "store-proof": cmd_store_proof,
        "hash": cmd_hash,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except AttestationError as exc:
        return _emit(ServiceResult.failed(exc))


if __name__ == "__main__":
    raise SystemExit(main())
