"""CLI console and logging helpers built on Rich.

Two consoles are exposed: :data:`console` writes diagnostics to stderr
and :data:`output` writes measurement results to stdout, so results can
be piped while errors stay on the terminal.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


def get_rich_console(*, stderr: bool = True) -> Console:
	"""Create a Rich console bound to the current stderr or stdout."""
	return Console(stderr=stderr, highlight=False)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy resolving the stream per call."""

	def __init__(self, *, stderr: bool) -> None:
		self._stderr = stderr

	def print(self, *objects: object, **kwargs: Any) -> None:
		get_rich_console(stderr=self._stderr).print(*objects, **kwargs)


console = _ConsoleProxy(stderr=True)
output = _ConsoleProxy(stderr=False)


def configure_logging(verbose: bool = False) -> None:
	"""Route log records to stderr through Rich.

	Parameters
	----------
	verbose:
		Log bus traffic at DEBUG level instead of warnings only.
	"""
	logging.captureWarnings(True)
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.WARNING,
		format="%(message)s",
		datefmt="[%X]",
		handlers=[RichHandler(console=get_rich_console(), show_path=False)],
		force=True,
	)
