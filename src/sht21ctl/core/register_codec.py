"""Pure conversions between raw SHT-21 bytes and semantic values.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.

User register layout
--------------------
======  ==========================================================
Bit     Meaning
======  ==========================================================
7, 0    Resolution (see :class:`~sht21ctl.core.models.Resolution`)
6       End of battery, read-only (1 = VDD below 2.25 V)
5–3     Reserved, must be preserved
2       On-chip heater enable
1       Disable OTP reload (inverted sense)
======  ==========================================================
"""

from __future__ import annotations

from collections.abc import Sequence

from sht21ctl.core.models import (
    ConfigField,
    ConfigRegister,
    Measurement,
    MeasurementKind,
    Resolution,
)

STATUS_BITS_MASK: int = 0xFFFC
"""The two low bits of a measurement are status flags, not data."""

RESOLUTION_MASK: int = 0x81
BATTERY_MASK: int = 0x40
HEATER_MASK: int = 0x04
OTP_DISABLE_MASK: int = 0x02

CRC_POLYNOMIAL: int = 0x131
"""x^8 + x^5 + x^4 + 1"""

_FIELD_MASKS: dict[ConfigField, int] = {
    ConfigField.RESOLUTION: RESOLUTION_MASK,
    ConfigField.HEATER: HEATER_MASK,
    ConfigField.OTP_RELOAD: OTP_DISABLE_MASK,
}


# ---------------------------------------------------------------------------
# Measurements
# ---------------------------------------------------------------------------

def decode_raw(data: Sequence[int]) -> int:
    """Combine the first two bytes big-endian and clear the status bits."""
    if len(data) < 2:
        raise ValueError(f"Measurement needs 2 data bytes, got {len(data)}")
    return ((data[0] << 8) | data[1]) & STATUS_BITS_MASK


def temperature_from_raw(raw: int) -> float:
    """T [degC] = -46.85 + 175.72 * raw / 2^16"""
    return -46.85 + 175.72 * (raw / 65536)


def humidity_from_raw(raw: int) -> float:
    """RH [%] = -6 + 125 * raw / 2^16"""
    return -6.0 + 125.0 * (raw / 65536)


def decode_measurement(data: Sequence[int], kind: MeasurementKind) -> Measurement:
    """Decode a measurement frame for a single *kind*.

    Only the two data bytes are used; a trailing CRC byte is ignored
    here and checked separately by :func:`verify_checksum`.
    """
    raw = decode_raw(data)
    if kind is MeasurementKind.TEMPERATURE:
        return Measurement(kind=kind, raw=raw, value=temperature_from_raw(raw), unit="degC")
    if kind is MeasurementKind.HUMIDITY:
        return Measurement(kind=kind, raw=raw, value=humidity_from_raw(raw), unit="%RH")
    raise ValueError(f"Cannot decode a single frame as {kind.name}")


# ---------------------------------------------------------------------------
# Checksum
# ---------------------------------------------------------------------------

def crc8(data: Sequence[int]) -> int:
    """Sensirion CRC-8 over *data* (initial value 0)."""
    crc = 0
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x80:
                crc = (crc << 1) ^ CRC_POLYNOMIAL
            else:
                crc <<= 1
    return crc


def verify_checksum(frame: Sequence[int]) -> bool:
    """Return ``True`` when ``frame[2]`` is the CRC of ``frame[:2]``."""
    if len(frame) < 3:
        return False
    return crc8(frame[:2]) == frame[2]


# ---------------------------------------------------------------------------
# User register
# ---------------------------------------------------------------------------

def decode_config_register(value: int) -> ConfigRegister:
    """Split the user register byte into its fields."""
    return ConfigRegister(
        raw=value,
        resolution=Resolution.from_bits(value & RESOLUTION_MASK),
        battery_low=bool(value & BATTERY_MASK),
        heater_on=bool(value & HEATER_MASK),
        otp_disabled=bool(value & OTP_DISABLE_MASK),
    )


def field_mask(field: ConfigField) -> int:
    """Return the register bits owned by *field*."""
    return _FIELD_MASKS[field]


def extract_field(value: int, field: ConfigField) -> int:
    """Return the bits of *value* owned by *field*, unshifted."""
    return value & field_mask(field)


def encode_field_value(field: ConfigField, setting: Resolution | bool) -> int:
    """Translate a semantic setting into pre-shifted register bits.

    * resolution → the mode's bit pattern
    * heater on → bit 2 set
    * OTP reload on → bit 1 **clear** (the bit disables reload)
    """
    if field is ConfigField.RESOLUTION:
        if not isinstance(setting, Resolution):
            raise ValueError(f"Resolution field needs a Resolution, got {setting!r}")
        return setting.bits
    if field is ConfigField.HEATER:
        return HEATER_MASK if setting else 0x00
    if field is ConfigField.OTP_RELOAD:
        return 0x00 if setting else OTP_DISABLE_MASK
    raise ValueError(f"Unknown field: {field!r}")


def merge_config_field(current: int, field: ConfigField, new_bits: int) -> int:
    """Replace the bits of *field* in *current* with *new_bits*.

    All other bits pass through unchanged, so
    ``merge_config_field(b, f, extract_field(b, f)) == b`` for every
    byte ``b``.
    """
    mask = field_mask(field)
    if new_bits & ~mask:
        raise ValueError(
            f"Bits 0x{new_bits:02x} fall outside the {field.value} mask 0x{mask:02x}"
        )
    return (current & ~mask & 0xFF) | new_bits


def writable_register(value: int) -> int:
    """Clear the read-only battery bit before a register write."""
    return value & ~BATTERY_MASK & 0xFF
