"""Custom exception hierarchy for sht21ctl.

All exceptions that cross layer boundaries must inherit from
:class:`Sht21Error`.  Raw OS and smbus2 exceptions must NEVER propagate
beyond the infrastructure layer — they must be caught and re-raised as
a typed subclass defined here.

Hierarchy
---------
Sht21Error
├── ArgumentError
├── TransportError
│   ├── BusOpenError
│   ├── DeviceAddressError
│   └── BusIOError
│       └── ChecksumError
└── EnvironmentError
"""

from __future__ import annotations


class Sht21Error(Exception):
    """Base exception for all sht21ctl errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command line ----------------------------------------------------------

class ArgumentError(Sht21Error):
    """Raised for an unrecognised command, flag or value, or wrong arity."""


# --- Bus transport ---------------------------------------------------------

class TransportError(Sht21Error):
    """Base class for failures talking to the I2C bus."""


class BusOpenError(TransportError):
    """Raised when the ``/dev/i2c-N`` device node cannot be opened."""


class DeviceAddressError(TransportError):
    """Raised when the sensor address cannot be selected on the bus."""


class BusIOError(TransportError):
    """Raised when a bus read or write fails or transfers too few bytes."""

    def __init__(
        self,
        message: str,
        *,
        expected: int | None = None,
        actual: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.expected: int | None = expected
        self.actual: int | None = actual


class ChecksumError(BusIOError):
    """Raised when a measurement frame fails its CRC-8 check."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(Sht21Error):
    """Raised when a required runtime dependency is not available."""


def append_permission_suggestion(hint: str) -> str:
    """Append I2C permission guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "If the device exists, check permissions:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    sudo usermod -aG i2c $USER",
        )
    )
