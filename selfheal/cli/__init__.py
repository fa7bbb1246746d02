"""selfheal command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``selfheal`` script).
"""

from selfheal.cli.main import cli

__all__ = ["cli"]
