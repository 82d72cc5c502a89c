"""Allow ``python -m sht21ctl`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m sht21ctl`` behaves identically to the ``sht21ctl``
console script.
"""

from __future__ import annotations

from sht21ctl.cli.app import cli

if __name__ == "__main__":
    cli()
