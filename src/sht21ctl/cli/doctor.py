"""``sht21ctl doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the host can reach the sensor: Python, smbus2, the OS and the
``/dev/i2c-N`` device node.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  It never talks on the bus; it
purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys

from rich.table import Table

from sht21ctl.cli import exit_codes
from sht21ctl.cli.console import console
from sht21ctl.infra.bus_probe import BusStatus, detect_bus
from sht21ctl.version import __version__


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    major, minor = sys.version_info[:2]
    ok = (major, minor) >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _smbus2_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the smbus2 row."""
    try:
        import smbus2
    except ImportError:
        return "smbus2", "NOT INSTALLED", "[red]FAIL[/red]"
    return "smbus2", getattr(smbus2, "__version__", "unknown"), "[green]OK[/green]"


def _bus_check(status_obj: BusStatus) -> tuple[str, str, str]:
    """Return (label, value, status) for the I2C device node row."""
    if not status_obj.found:
        return "I2C bus", f"{status_obj.path} not found", "[red]FAIL[/red]"
    if not status_obj.accessible:
        return "I2C bus", f"{status_obj.path} ({status_obj.status_hint})", "[yellow]WARN[/yellow]"
    return "I2C bus", f"{status_obj.path} ({status_obj.status_hint})", "[green]OK[/green]"


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row."""
    system = platform.system()
    value = f"{system} {platform.release()} ({platform.machine()})"
    if system != "Linux":
        return "OS", value, "[red]FAIL (Linux required)[/red]"
    return "OS", value, "[green]OK[/green]"


def _sht21ctl_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the sht21ctl version row."""
    return "sht21ctl", __version__, "[green]OK[/green]"


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(bus_index: int) -> int:
    """Execute all diagnostic checks and render a Rich summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    bus_status = detect_bus(bus_index)
    checks = [
        _sht21ctl_version_check(),
        _python_version_check(),
        _smbus2_version_check(),
        _os_check(),
        _bus_check(bus_status),
    ]

    has_failure = any("FAIL" in status for _, _, status in checks)

    table = Table(
        title="sht21ctl doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)

    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()

    # Show setup guidance when the device node is missing.
    if not bus_status.found and bus_status.setup_commands:
        console.print(f"[yellow]{bus_status.path} is not available.[/yellow]")
        console.print("Enable I2C using one of the following commands:\n")
        for cmd in bus_status.setup_commands:
            console.print(f"  [bold]{cmd}[/bold]")
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
