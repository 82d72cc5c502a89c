"""Infrastructure layer — external system integration.

This layer wraps all interaction with smbus2 and the ``/dev/i2c-N``
device node.  Every raw ``OSError`` must be caught here and re-raised
as a :class:`~sht21ctl.exceptions.Sht21Error` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
* ``i2c_transport`` imports smbus2 and is not re-exported here, so the
  device-node probe stays importable without it.
"""

from sht21ctl.infra.bus_probe import BusStatus, detect_bus, device_path

__all__: list[str] = [
    "BusStatus",
    "detect_bus",
    "device_path",
]
