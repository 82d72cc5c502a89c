"""Rendering of dispatcher results for the terminal.

This module is responsible for:

* Formatting single measurements as ``Temp [degC]: 23.446960`` lines.
* Formatting the user register as a labelled field report.
* Writing both to stdout through the Rich output console.

All display-related logic lives here — no bus access, no decoding.
"""

from __future__ import annotations

from rich.markup import escape

from sht21ctl.cli.console import output
from sht21ctl.core.models import ConfigRegister, CycleEnd, Measurement, MeasurementKind


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms, no I/O)
# ---------------------------------------------------------------------------

_MEASUREMENT_LABELS: dict[MeasurementKind, str] = {
    MeasurementKind.TEMPERATURE: "Temp [degC]",
    MeasurementKind.HUMIDITY: "Humid [%]",
}


def format_measurement(measurement: Measurement) -> str:
    """Render one reading with six decimals."""
    return f"{_MEASUREMENT_LABELS[measurement.kind]}: {measurement.value:f}"


def format_config_register(register: ConfigRegister) -> list[str]:
    """Render the user register as ``label : value`` lines."""
    battery = "Low (<2.5V)" if register.battery_low else "Good (>2.5V)"
    heater = "Enabled" if register.heater_on else "Disabled (Default)"
    otp = "Disabled (Default)" if register.otp_disabled else "Enabled"
    return [
        f"User Reg    : 0x{register.raw:04x}",
        f"Resolution  : {register.resolution.label}",
        f"Src Voltage : {battery}",
        f"Chip Heater : {heater}",
        f"OTP Reload  : {otp}",
    ]


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def render_result(result: Measurement | ConfigRegister | CycleEnd) -> None:
    """Print a dispatcher result to stdout.

    Usable directly as the dispatcher's ``emit`` callback.
    """
    if isinstance(result, Measurement):
        output.print(escape(format_measurement(result)))
    elif isinstance(result, ConfigRegister):
        for line in format_config_register(result):
            output.print(escape(line))
    elif isinstance(result, CycleEnd):
        # Blank line between measurement cycles.
        output.print()
