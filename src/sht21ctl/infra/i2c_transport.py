"""smbus2 backed implementation of :class:`~sht21ctl.core.protocols.BusTransport`.

This module is the **only** place in the codebase that touches the
``/dev/i2c-N`` device node.  Every ``OSError`` raised by smbus2 or the
kernel is caught here and re-raised as a
:class:`~sht21ctl.exceptions.TransportError` subclass.

Raw transfers go through ``i2c_rdwr`` with a single message each, so a
command write and the following read are two separate bus
transactions, as the SHT-21 expects.
"""

from __future__ import annotations

import fcntl
import logging
from types import TracebackType

from smbus2 import SMBus, i2c_msg

from sht21ctl.exceptions import (
    BusIOError,
    BusOpenError,
    DeviceAddressError,
    append_permission_suggestion,
)
from sht21ctl.infra.bus_probe import device_path, setup_hint

logger = logging.getLogger(__name__)

I2C_SLAVE: int = 0x0703
"""ioctl request from ``linux/i2c-dev.h``."""

_MIN_ADDRESS: int = 0x03
_MAX_ADDRESS: int = 0x77


class SMBusTransport:
    """Concrete :class:`BusTransport` backed by smbus2.

    This class satisfies the :class:`~sht21ctl.core.protocols.BusTransport`
    protocol structurally — no explicit inheritance required.  Use it as
    a context manager so the handle is closed on every exit path::

        with SMBusTransport() as transport:
            transport.open(1)
            transport.select_device(0x40)
            ...
    """

    def __init__(self) -> None:
        self._bus: SMBus | None = None
        self._bus_index: int | None = None
        self._address: int | None = None

    def __enter__(self) -> SMBusTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def open(self, bus_index: int) -> None:
        """Open ``/dev/i2c-<bus_index>``.

        Raises
        ------
        BusOpenError
            When the device node is missing or not accessible.
        """
        path = device_path(bus_index)
        try:
            self._bus = SMBus(bus_index)
        except PermissionError as exc:
            raise BusOpenError(
                f"Permission denied opening {path}.",
                hint=append_permission_suggestion("Run as root or join the 'i2c' group."),
            ) from exc
        except OSError as exc:
            raise BusOpenError(
                f"Failed to open I2C bus {bus_index} ({path}): {exc.strerror or exc}",
                hint=setup_hint(),
            ) from exc
        self._bus_index = bus_index
        logger.debug("opened %s", path)

    def select_device(self, address: int) -> None:
        """Bind the handle to *address* (``I2C_SLAVE`` ioctl).

        Raises
        ------
        DeviceAddressError
            When *address* is outside the 7-bit range or the kernel
            refuses it (e.g. a driver already owns the device).
        """
        bus = self._require_bus()
        if not _MIN_ADDRESS <= address <= _MAX_ADDRESS:
            raise DeviceAddressError(f"Invalid 7-bit I2C address 0x{address:02x}.")
        try:
            fcntl.ioctl(bus.fd, I2C_SLAVE, address)
        except OSError as exc:
            raise DeviceAddressError(
                f"Failed to set the I2C address 0x{address:02x}: {exc.strerror or exc}",
                hint="Check that no kernel driver is bound to the sensor.",
            ) from exc
        self._address = address
        logger.debug("selected device 0x%02x", address)

    def write_bytes(self, data: bytes) -> int:
        """Write *data* as one I2C message and return the byte count.

        Raises
        ------
        BusIOError
            When the transfer fails or fewer bytes were sent.
        """
        bus, address = self._require_device()
        msg = i2c_msg.write(address, data)
        try:
            bus.i2c_rdwr(msg)
        except OSError as exc:
            raise BusIOError(
                f"I2C write failed: {exc.strerror or exc}",
                expected=len(data),
                actual=0,
            ) from exc
        if msg.len != len(data):
            raise BusIOError(
                f"Short I2C write: {msg.len} of {len(data)} bytes",
                expected=len(data),
                actual=msg.len,
            )
        return msg.len

    def read_bytes(self, count: int) -> bytes:
        """Read exactly *count* bytes as one I2C message.

        Raises
        ------
        BusIOError
            When the transfer fails or fewer bytes arrived.
        """
        bus, address = self._require_device()
        msg = i2c_msg.read(address, count)
        try:
            bus.i2c_rdwr(msg)
        except OSError as exc:
            raise BusIOError(
                f"Failed to read I2C data: {exc.strerror or exc}",
                expected=count,
                actual=0,
                hint="In no-hold mode the sensor NACKs until the conversion is done.",
            ) from exc
        data = bytes(msg)
        if len(data) != count:
            raise BusIOError(
                f"Short I2C read: {len(data)} of {count} bytes",
                expected=count,
                actual=len(data),
            )
        return data

    def close(self) -> None:
        """Close the handle.  Calling it again is a no-op."""
        if self._bus is None:
            return
        bus, self._bus = self._bus, None
        self._address = None
        bus.close()
        logger.debug("closed I2C bus %s", self._bus_index)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_bus(self) -> SMBus:
        if self._bus is None:
            raise BusIOError("I2C bus is not open.")
        return self._bus

    def _require_device(self) -> tuple[SMBus, int]:
        bus = self._require_bus()
        if self._address is None:
            raise BusIOError("No I2C device address selected.")
        return bus, self._address
