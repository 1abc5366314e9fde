"""
Helpers shared by CLI commands.
"""

from __future__ import annotations

from argparse import Namespace

from fixmerkle.crypto.hashing import HashBackend, get_backend
from fixmerkle.merkle.merkle_tree import DEFAULT_TREE_HEIGHT, validate_height


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def resolve_height(args: Namespace) -> int:
    """--height if given, else the configured height."""
    if getattr(args, "height", None) is not None:
        return validate_height(args.height)
    cli_config = getattr(args, "cli_config", None)
    if cli_config is not None:
        return validate_height(cli_config.height)
    return DEFAULT_TREE_HEIGHT


def resolve_backend(args: Namespace) -> HashBackend:
    """--backend if given, else the configured backend."""
    name = getattr(args, "backend", None)
    if name is None:
        cli_config = getattr(args, "cli_config", None)
        if cli_config is not None:
            name = cli_config.backend
    return get_backend(name) if name else get_backend()


def wants_json(args: Namespace) -> bool:
    if getattr(args, "json", False):
        return True
    cli_config = getattr(args, "cli_config", None)
    return cli_config is not None and cli_config.default_output_format == "json"
