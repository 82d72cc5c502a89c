"""Core / service layer — pure protocol logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem or bus I/O except through an injected transport.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from sht21ctl.core.dispatcher import CommandDispatcher
from sht21ctl.core.models import (
    CommandRequest,
    ConfigField,
    ConfigRegister,
    CycleEnd,
    Measurement,
    MeasurementKind,
    Operation,
    Resolution,
    SensorCommand,
)
from sht21ctl.core.protocols import BusTransport

__all__: list[str] = [
    "BusTransport",
    "CommandDispatcher",
    "CommandRequest",
    "ConfigField",
    "ConfigRegister",
    "CycleEnd",
    "Measurement",
    "MeasurementKind",
    "Operation",
    "Resolution",
    "SensorCommand",
]
