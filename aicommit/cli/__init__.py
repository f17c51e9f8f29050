"""The aicommit command."""

from aicommit.cli.main import main

__all__ = ["main"]
