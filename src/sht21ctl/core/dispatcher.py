"""Core command dispatcher — drives the SHT-21 bus sequences.

The dispatcher turns a :class:`~sht21ctl.core.models.CommandRequest`
into the write/sleep/read sequence the sensor expects and hands every
decoded result to an ``emit`` callback supplied by the caller.

The bus is reached only through a
:class:`~sht21ctl.core.protocols.BusTransport` injected at construction
time.  Sleeping is injected too, so tests run without real delays.

Guarantees
----------
* No ``print()`` — results leave through ``emit`` only.
* Errors are never swallowed; they propagate to the CLI error boundary.
* Register writes always preserve unrelated bits and clear the
  read-only battery bit.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Callable

from sht21ctl.config import Timing
from sht21ctl.core import register_codec
from sht21ctl.core.models import (
    MEASUREMENT_FRAME_LENGTH,
    REGISTER_FRAME_LENGTH,
    CommandRequest,
    ConfigRegister,
    CycleEnd,
    Measurement,
    MeasurementKind,
    Operation,
    SensorCommand,
    measurement_command,
)
from sht21ctl.core.protocols import BusTransport
from sht21ctl.exceptions import ArgumentError, BusIOError, ChecksumError

logger = logging.getLogger(__name__)

Result = Measurement | ConfigRegister | CycleEnd
Emit = Callable[[Result], None]


class CommandDispatcher:
    """Executes one :class:`CommandRequest` against an open transport.

    Parameters
    ----------
    transport:
        An opened transport with the sensor address already selected.
    timing:
        Fixed delays between bus transactions.
    sleep:
        Blocking sleep function, :func:`time.sleep` by default.
    """

    def __init__(
        self,
        transport: BusTransport,
        timing: Timing | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport: BusTransport = transport
        self._timing: Timing = timing if timing is not None else Timing()
        self._sleep: Callable[[float], None] = sleep

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        request: CommandRequest,
        emit: Emit,
        *,
        max_cycles: int | None = None,
    ) -> None:
        """Execute *request*, passing each result to *emit*.

        *max_cycles* bounds continuous mode; ``None`` loops until the
        process is interrupted.
        """
        operation = request.operation
        if operation is Operation.MEASURE:
            self.measure(request, emit, max_cycles=max_cycles)
        elif operation is Operation.READ_CONFIG:
            emit(self.read_config(no_hold_master=request.no_hold_master))
        elif operation is Operation.WRITE_CONFIG:
            emit(self.write_config(request))
        elif operation is Operation.RESET:
            self.reset()
        else:  # pragma: no cover - exhaustive over Operation
            raise ValueError(f"Unhandled operation: {operation!r}")

    def measure(
        self,
        request: CommandRequest,
        emit: Emit,
        *,
        max_cycles: int | None = None,
    ) -> None:
        """Run the measurement cycle once, or forever when continuous."""
        cycles = itertools.count(1) if request.continuous else iter((1,))
        for cycle in cycles:
            for position, kind in enumerate(request.measurement_kind.parts):
                if position:
                    self._pause(self._timing.inter_measurement)
                emit(self.measure_once(kind, no_hold_master=request.no_hold_master))
            emit(CycleEnd(cycle=cycle))

            if not request.continuous:
                break
            if max_cycles is not None and cycle >= max_cycles:
                break
            self._pause(self._timing.inter_cycle)

    def measure_once(self, kind: MeasurementKind, *, no_hold_master: bool) -> Measurement:
        """Trigger, wait for and decode one single-kind measurement."""
        command = measurement_command(kind, no_hold_master)
        self._write(bytes([command]))
        frame = self._read(MEASUREMENT_FRAME_LENGTH, no_hold_master=no_hold_master)
        if not register_codec.verify_checksum(frame):
            raise ChecksumError(
                f"CRC mismatch in {kind.value} frame {frame.hex()}",
                expected=register_codec.crc8(frame[:2]),
                actual=frame[2],
                hint="Check wiring and pull-up resistors, then retry.",
            )
        return register_codec.decode_measurement(frame, kind)

    def read_config(self, *, no_hold_master: bool = False) -> ConfigRegister:
        """Read and decode the user register."""
        return register_codec.decode_config_register(
            self._read_register(no_hold_master=no_hold_master),
        )

    def write_config(self, request: CommandRequest) -> ConfigRegister:
        """Read-modify-write one field of the user register.

        Returns the decoded value that was written.
        """
        field = request.config_field
        setting = request.config_value
        if field is None or setting is None:
            raise ArgumentError("writeuser requires exactly one field and a value.")

        current = self._read_register(no_hold_master=request.no_hold_master)
        new_bits = register_codec.encode_field_value(field, setting)
        merged = register_codec.writable_register(
            register_codec.merge_config_field(current, field, new_bits),
        )
        logger.debug(
            "user register 0x%02x -> 0x%02x (%s)",
            current, merged, field.value,
        )
        self._write(bytes([SensorCommand.WRITE_USER_REGISTER, merged]))
        return register_codec.decode_config_register(merged)

    def reset(self) -> None:
        """Issue a soft reset and wait for the sensor to come back."""
        self._write(bytes([SensorCommand.SOFT_RESET]))
        self._pause(self._timing.reset_settle)

    # ------------------------------------------------------------------
    # Bus sequencing
    # ------------------------------------------------------------------

    def _read_register(self, *, no_hold_master: bool) -> int:
        self._write(bytes([SensorCommand.READ_USER_REGISTER]))
        return self._read(REGISTER_FRAME_LENGTH, no_hold_master=no_hold_master)[0]

    def _write(self, data: bytes) -> None:
        logger.debug("write %s", data.hex())
        written = self._transport.write_bytes(data)
        if written != len(data):
            raise BusIOError(
                f"Short I2C write: {written} of {len(data)} bytes",
                expected=len(data),
                actual=written,
            )

    def _read(self, count: int, *, no_hold_master: bool) -> bytes:
        # The sensor NACKs reads issued before conversion has finished.
        if no_hold_master:
            self._pause(self._timing.no_hold_settle)
        data = self._transport.read_bytes(count)
        logger.debug("read %s", data.hex())
        if len(data) != count:
            raise BusIOError(
                f"Short I2C read: {len(data)} of {count} bytes",
                expected=count,
                actual=len(data),
            )
        return data

    def _pause(self, seconds: float) -> None:
        logger.debug("sleep %.3fs", seconds)
        self._sleep(seconds)
