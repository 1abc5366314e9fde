"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m fixmerkle_cli root ITEM... [--height N] [--backend NAME] [--json]
    python -m fixmerkle_cli prove --index I ITEM... [--out PATH] [--json]
    python -m fixmerkle_cli verify PROOF_PATH DATA [--root 0x...] [--json]
    python -m fixmerkle_cli config --init|--show

Environment Variables:
    FIXMERKLE_TREE_HEIGHT       Tree height (default: 5, capacity 32)
    FIXMERKLE_HASH_BACKEND      Hash backend: sha256, blake2b (default: sha256)
    FIXMERKLE_LOG_LEVEL         Log level (default: WARNING)
    FIXMERKLE_LOG_FILE          Also log to this file
    FIXMERKLE_OUTPUT_FORMAT     human or json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from fixmerkle.crypto.hashing import available_backends
from fixmerkle_cli import __version__
from fixmerkle_cli.commands import build, verify
from fixmerkle_cli.commands.common import EXIT_RUNTIME_ERROR, EXIT_SUCCESS
from fixmerkle_cli.config import DEFAULT_CONFIG_NAME, get_default_config_template, load_config


def setup_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def _add_tree_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "items",
        nargs="*",
        help="Data items to insert, in order",
    )
    parser.add_argument(
        "--from-file", "-f",
        type=str,
        default=None,
        help="Read additional items from a file, one per line",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Tree height; capacity is 2**height (default: from config or 5)",
    )
    parser.add_argument(
        "--backend",
        type=str,
        choices=available_backends(),
        default=None,
        help="Hash backend (default: from config or sha256)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on error",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="fixmerkle",
        description="Build fixed-capacity Merkle trees, generate and verify inclusion proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help=f"Path to configuration file (default: ./{DEFAULT_CONFIG_NAME} or ~/.config/fixmerkle/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- root command ---
    root_parser = subparsers.add_parser(
        "root",
        help="Print the root hash of a tree built from items",
        description="Insert the items into an empty tree and print its root hash.",
    )
    _add_tree_arguments(root_parser)
    root_parser.set_defaults(func=build.root_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate an inclusion proof for one item",
        description="Insert the items into an empty tree and emit a proof for one leaf.",
    )
    _add_tree_arguments(prove_parser)
    prove_parser.add_argument(
        "--index", "-i",
        type=int,
        required=True,
        help="Leaf index (0-based insertion order) to prove",
    )
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the proof JSON to this path instead of stdout",
    )
    prove_parser.set_defaults(func=build.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify an inclusion proof",
        description="Check a data item against a proof file. Exit code 2 if invalid.",
    )
    verify_parser.add_argument(
        "proof",
        type=str,
        help="Path to a proof JSON file produced by 'prove'",
    )
    verify_parser.add_argument(
        "data",
        type=str,
        help="The data item claimed to be in the tree",
    )
    verify_parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Root hash (0x hex) to verify against instead of the one in the proof",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    verify_parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on error",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default=DEFAULT_CONFIG_NAME,
        help=f"Path for config file (default: {DEFAULT_CONFIG_NAME})",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (FIXMERKLE_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: fixmerkle config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
        setup_logging(level=args.log_level or config.log_level, log_file=config.log_file)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
