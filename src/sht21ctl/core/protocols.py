"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from typing import Protocol


class BusTransport(Protocol):
    """Contract for raw two-wire bus access.

    Any object that implements these methods with the correct
    signatures satisfies this protocol structurally (no explicit
    inheritance required).  Implementations must map all backend
    exceptions to :class:`~sht21ctl.exceptions.TransportError`
    subclasses.
    """

    def open(self, bus_index: int) -> None:
        """Open ``/dev/i2c-<bus_index>``.

        Raises
        ------
        BusOpenError
            When the device node cannot be opened.
        """
        ...  # pragma: no cover

    def select_device(self, address: int) -> None:
        """Target all subsequent transfers at the 7-bit *address*.

        Raises
        ------
        DeviceAddressError
            When the address is invalid or cannot be selected.
        """
        ...  # pragma: no cover

    def write_bytes(self, data: bytes) -> int:
        """Write *data* in a single transfer and return the byte count.

        A short write must be reported as
        :class:`~sht21ctl.exceptions.BusIOError`, never returned.
        """
        ...  # pragma: no cover

    def read_bytes(self, count: int) -> bytes:
        """Read exactly *count* bytes.

        In hold-master mode the call blocks while the sensor stretches
        the clock during conversion.

        Raises
        ------
        BusIOError
            When the transfer fails or returns fewer than *count* bytes.
        """
        ...  # pragma: no cover

    def close(self) -> None:
        """Release the bus handle.  Safe to call more than once."""
        ...  # pragma: no cover
