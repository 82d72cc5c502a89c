"""Domain models for sht21ctl.

All models are **frozen** dataclasses or enums — immutable value
objects with no behaviour beyond data access and validation.  They
carry zero I/O and zero dependencies on external packages.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from sht21ctl.exceptions import ArgumentError


# ---------------------------------------------------------------------------
# Closed variant types
# ---------------------------------------------------------------------------

class Operation(enum.Enum):
    """Top-level operation requested on the command line."""

    MEASURE = "measure"
    READ_CONFIG = "read_config"
    WRITE_CONFIG = "write_config"
    RESET = "reset"


class MeasurementKind(enum.Enum):
    """Physical quantity to measure."""

    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    BOTH = "both"

    @property
    def parts(self) -> tuple[MeasurementKind, ...]:
        """Single kinds measured for this kind, in sensor order."""
        if self is MeasurementKind.BOTH:
            return (MeasurementKind.TEMPERATURE, MeasurementKind.HUMIDITY)
        return (self,)


class ConfigField(enum.Enum):
    """Writable field of the user register."""

    RESOLUTION = "resolution"
    HEATER = "heater"
    OTP_RELOAD = "otp_reload"


class Resolution(enum.Enum):
    """Measurement resolution mode (1–4) and its register bit pattern."""

    RH12_T14 = (1, 0x00, "RH: 12-bit & Temp: 14-bit (Default)")
    RH8_T12 = (2, 0x01, "RH: 8-bit & Temp: 12-bit")
    RH10_T13 = (3, 0x80, "RH: 10-bit & Temp: 13-bit")
    RH11_T11 = (4, 0x81, "RH: 11-bit & Temp: 11-bit")

    def __init__(self, mode: int, bits: int, label: str) -> None:
        self.mode = mode
        self.bits = bits
        self.label = label

    @classmethod
    def from_mode(cls, mode: int) -> Resolution:
        for member in cls:
            if member.mode == mode:
                return member
        raise ValueError(f"Unknown resolution mode: {mode}")

    @classmethod
    def from_bits(cls, bits: int) -> Resolution:
        for member in cls:
            if member.bits == bits:
                return member
        raise ValueError(f"Not a resolution bit pattern: 0x{bits:02x}")


class SensorCommand(enum.IntEnum):
    """One-byte command codes understood by the SHT-21."""

    TRIGGER_T_HOLD = 0xE3
    TRIGGER_RH_HOLD = 0xE5
    TRIGGER_T_NO_HOLD = 0xF3
    TRIGGER_RH_NO_HOLD = 0xF5
    WRITE_USER_REGISTER = 0xE6
    READ_USER_REGISTER = 0xE7
    SOFT_RESET = 0xFE


MEASUREMENT_FRAME_LENGTH: int = 3
"""Two data bytes followed by one CRC byte."""

REGISTER_FRAME_LENGTH: int = 1


def measurement_command(kind: MeasurementKind, no_hold_master: bool) -> SensorCommand:
    """Return the trigger command for a single measurement *kind*."""
    if kind is MeasurementKind.TEMPERATURE:
        return (
            SensorCommand.TRIGGER_T_NO_HOLD if no_hold_master
            else SensorCommand.TRIGGER_T_HOLD
        )
    if kind is MeasurementKind.HUMIDITY:
        return (
            SensorCommand.TRIGGER_RH_NO_HOLD if no_hold_master
            else SensorCommand.TRIGGER_RH_HOLD
        )
    raise ValueError(f"No single trigger command for {kind.name}")


# ---------------------------------------------------------------------------
# Command request
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandRequest:
    """Immutable request built by the CLI and consumed by the dispatcher."""

    operation: Operation

    measurement_kind: MeasurementKind = MeasurementKind.TEMPERATURE
    """Only meaningful for :attr:`Operation.MEASURE`."""

    no_hold_master: bool = False
    """Select the no-hold-master command variant and delayed read."""

    continuous: bool = False
    """Repeat the measurement cycle until interrupted."""

    config_field: ConfigField | None = None
    """Only meaningful for :attr:`Operation.WRITE_CONFIG`."""

    config_value: Resolution | bool | None = None
    """A :class:`Resolution` for the resolution field, else on/off."""

    def __post_init__(self) -> None:
        if self.operation is not Operation.WRITE_CONFIG:
            return
        if self.config_field is None or self.config_value is None:
            raise ArgumentError("writeuser requires exactly one field and a value.")
        if self.config_field is ConfigField.RESOLUTION:
            if not isinstance(self.config_value, Resolution):
                raise ArgumentError("Resolution must be one of modes 1, 2, 3 or 4.")
        elif not isinstance(self.config_value, bool):
            raise ArgumentError(f"{self.config_field.value} must be 'on' or 'off'.")


# ---------------------------------------------------------------------------
# Decoded results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Measurement:
    """A single decoded temperature or humidity reading."""

    kind: MeasurementKind
    raw: int
    """16-bit sensor value with the status bits cleared."""

    value: float
    unit: str


@dataclass(frozen=True, slots=True)
class ConfigRegister:
    """Decoded view of the user register byte."""

    raw: int
    resolution: Resolution
    battery_low: bool
    heater_on: bool
    otp_disabled: bool
    """Inverted sense: bit set means OTP reload is disabled."""


@dataclass(frozen=True, slots=True)
class CycleEnd:
    """Marker emitted after each complete measurement cycle."""

    cycle: int
