"""
CLI Verify Command

Verify a proof envelope offline against a data item, and optionally
against a root hash other than the one recorded in the envelope.

Usage:
    fixmerkle verify proof.json "data2" [--root 0x...] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path

from fixmerkle.crypto.hashing import from_hex
from fixmerkle.merkle import ProofEnvelope
from fixmerkle.schemas.errors import ProofFormatException
from fixmerkle_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    wants_json,
)


logger = logging.getLogger(__name__)


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    proof_path: str = ""
    root_hash: str = ""
    leaf_index: int = 0
    height: int = 0
    backend: str = ""
    valid: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def load_envelope(path: Path) -> ProofEnvelope:
    logger.info(f"Loading proof from: {path}")
    return ProofEnvelope.from_json(path.read_text(encoding="utf-8"))


def verify_cmd(args: Namespace) -> int:
    """Handle verify command."""
    proof_path = Path(args.proof)
    if not proof_path.exists():
        print(f"Error: Proof file not found: {proof_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        envelope = load_envelope(proof_path)
    except ProofFormatException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        for msg in e.details.get("errors", []):
            print(f"  - {msg}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    root_hash = envelope.root_hash
    if args.root:
        try:
            from_hex(args.root)
        except ValueError as e:
            print(f"Error: Invalid --root value: {e}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        root_hash = args.root

    valid = envelope.verify(args.data, root_hash=from_hex(root_hash))
    summary = VerifySummary(
        proof_path=str(proof_path),
        root_hash=root_hash,
        leaf_index=envelope.leaf_index,
        height=envelope.height,
        backend=envelope.backend,
        valid=valid,
    )

    if wants_json(args):
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        status = "VALID" if valid else "INVALID"
        print(f"{status}: leaf {summary.leaf_index} against root {summary.root_hash}")

    return EXIT_SUCCESS if valid else EXIT_VERIFICATION_FAILED
