"""
CLI command modules.
"""

from fixmerkle_cli.commands import build, verify

__all__ = ["build", "verify"]
