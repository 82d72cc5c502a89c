"""Runtime settings for sht21ctl.

There is no configuration file and no environment variable lookup.
Defaults live here and the CLI may override the bus index only.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_BUS: int = 1
"""Index ``N`` of the ``/dev/i2c-N`` device node."""

DEVICE_ADDRESS: int = 0x40
"""Fixed 7-bit I2C address of the SHT-21."""


@dataclass(frozen=True, slots=True)
class Timing:
    """Fixed delays (seconds) used by the command dispatcher."""

    no_hold_settle: float = 1.0
    """Wait after a no-hold-master command before the read is issued."""

    inter_measurement: float = 1.0
    """Gap between the temperature and humidity halves of ``readall``."""

    inter_cycle: float = 1.0
    """Gap between cycles in continuous mode."""

    reset_settle: float = 1.0
    """Wait after a soft reset before the sensor accepts commands."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved settings for one invocation."""

    bus: int = DEFAULT_BUS
    address: int = DEVICE_ADDRESS
    timing: Timing = field(default_factory=Timing)
