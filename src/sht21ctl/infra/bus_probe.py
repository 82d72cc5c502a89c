"""Infrastructure: I2C device-node detection and platform guidance.

This module is responsible for locating ``/dev/i2c-N`` and providing
platform-specific setup guidance when it is missing.

Rules
-----
* Detection via :mod:`os` path checks only — no bus traffic.
* No kernel module loading, no permission changes.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from pathlib import Path


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BusStatus:
    """Result of an I2C device-node probe.

    Attributes
    ----------
    found : bool
        Whether the device node exists.
    path : Path
        The probed device node.
    accessible : bool
        Whether the current user may open it read/write.
    status_hint : str
        Human-readable status string.
    setup_commands : tuple[str, ...]
        Suggested commands for enabling I2C.  Empty when the node exists.
    """

    found: bool
    path: Path
    accessible: bool
    status_hint: str
    setup_commands: tuple[str, ...]


def device_path(bus_index: int) -> Path:
    """Return the device node for *bus_index*."""
    return Path(f"/dev/i2c-{bus_index}")


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_bus(bus_index: int) -> BusStatus:
    """Probe for ``/dev/i2c-<bus_index>``.

    Returns a :class:`BusStatus` regardless of whether the node is
    present — the caller decides whether to abort or merely warn.
    """
    path = device_path(bus_index)

    if path.exists():
        accessible = os.access(path, os.R_OK | os.W_OK)
        return BusStatus(
            found=True,
            path=path,
            accessible=accessible,
            status_hint="read/write" if accessible else "permission denied",
            setup_commands=(),
        )

    return BusStatus(
        found=False,
        path=path,
        accessible=False,
        status_hint="not found",
        setup_commands=_platform_setup_commands(),
    )


def setup_hint() -> str | None:
    """Multi-line guidance for enabling I2C, or ``None`` if there is none."""
    commands = _platform_setup_commands()
    if not commands:
        return None
    lines = ["Enable the I2C bus using one of:"]
    lines.extend(f"  {cmd}" for cmd in commands)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Platform-specific setup guidance
# ---------------------------------------------------------------------------

def _platform_setup_commands() -> tuple[str, ...]:
    """Return setup commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "linux":
        return (
            "sudo raspi-config nonint do_i2c 0",
            "sudo modprobe i2c-dev",
        )
    # I2C device nodes are a Linux interface.
    return ("Run sht21ctl on a Linux host with an I2C adapter.",)
