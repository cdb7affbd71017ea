"""
CLI command modules.
"""

from mptproof_cli.commands import decode, verify

__all__ = ["decode", "verify"]
