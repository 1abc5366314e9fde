"""
CLI Root and Prove Commands

Build a tree from items given on the command line (or one per line in a
file) and print its root hash, or an inclusion proof for one item.

Usage:
    fixmerkle root data1 data2 data3 [--json]
    fixmerkle prove --index 1 data1 data2 data3 [--out proof.json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path

from fixmerkle.crypto.hashing import to_hex
from fixmerkle.merkle import MerkleProver, MerkleTree, ProofEnvelope
from fixmerkle_cli.commands.common import (
    EXIT_SUCCESS,
    resolve_backend,
    resolve_height,
    wants_json,
)


logger = logging.getLogger(__name__)


def collect_items(args: Namespace) -> list[str]:
    """Items from positional arguments followed by --from-file lines."""
    items = list(args.items or [])
    if getattr(args, "from_file", None):
        path = Path(args.from_file)
        with open(path, "r", encoding="utf-8") as f:
            items.extend(line.rstrip("\r\n") for line in f if line.strip())
        logger.info(f"Read {len(items)} items including {path}")
    if not items:
        raise ValueError("No items given")
    return items


def build_tree(args: Namespace) -> MerkleTree:
    items = collect_items(args)
    tree = MerkleProver.build(
        items,
        height=resolve_height(args),
        backend=resolve_backend(args),
    )
    logger.info(f"Built tree with {tree.size}/{tree.capacity} leaves")
    return tree


def root_cmd(args: Namespace) -> int:
    """Handle root command."""
    tree = build_tree(args)
    root_hex = to_hex(tree.get_root_hash(), tree.backend.width_bits)

    if wants_json(args):
        print(json.dumps({
            "root_hash": root_hex,
            "size": tree.size,
            "capacity": tree.capacity,
            "height": tree.height,
            "backend": tree.backend.name,
        }, indent=2))
    else:
        print(root_hex)
    return EXIT_SUCCESS


def prove_cmd(args: Namespace) -> int:
    """Handle prove command."""
    tree = build_tree(args)
    envelope = ProofEnvelope.from_tree(tree, args.index)
    payload = envelope.to_json()

    if args.out:
        out_path = Path(args.out)
        out_path.write_text(payload + "\n", encoding="utf-8")
        logger.info(f"Wrote proof for leaf {args.index} to {out_path}")
        if not wants_json(args):
            print(f"Proof written to {out_path}")
    else:
        print(payload)
    return EXIT_SUCCESS
