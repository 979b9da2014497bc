"""Allow ``python -m link_lib`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m link_lib`` behaves identically to the ``link-lib``
console script.
"""

from __future__ import annotations

from link_lib.cli.app import cli

if __name__ == "__main__":
    cli()
