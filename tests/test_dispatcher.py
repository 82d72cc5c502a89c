"""Tests for the command dispatcher (core/dispatcher.py).

All tests run against :class:`FakeTransport` — no I2C hardware and no
real sleeping.

Coverage:
* Measure: hold / no-hold sequencing, ``BOTH`` chaining, continuous mode.
* ReadConfig and WriteConfig read-modify-write.
* Reset settle delay.
* Short transfers and CRC failures are fatal.
"""

from __future__ import annotations

import pytest
from conftest import FakeTransport, frame

from sht21ctl.config import Timing
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
)
from sht21ctl.exceptions import ArgumentError, BusIOError, ChecksumError

TIMING = Timing(no_hold_settle=0.1, inter_measurement=0.2, inter_cycle=0.3, reset_settle=0.4)


def _dispatcher(transport: FakeTransport) -> CommandDispatcher:
    return CommandDispatcher(transport, TIMING, sleep=transport.sleep)


def _run(transport: FakeTransport, request: CommandRequest, **kwargs: object) -> list[object]:
    results: list[object] = []
    _dispatcher(transport).run(request, results.append, **kwargs)  # type: ignore[arg-type]
    return results


def _measure(kind: MeasurementKind, **overrides: object) -> CommandRequest:
    return CommandRequest(operation=Operation.MEASURE, measurement_kind=kind, **overrides)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Measure
# ---------------------------------------------------------------------------

class TestMeasure:
    def test_hold_master_temperature(self) -> None:
        transport = FakeTransport([frame(0x66, 0x66)])
        results = _run(transport, _measure(MeasurementKind.TEMPERATURE))

        assert transport.events == [("write", b"\xe3"), ("read", 3)]
        assert isinstance(results[0], Measurement)
        assert results[0].value == pytest.approx(-46.85 + 175.72 * 0x6664 / 65536)
        assert results[1] == CycleEnd(cycle=1)

    def test_hold_master_humidity(self) -> None:
        transport = FakeTransport([frame(0x63, 0x52)])
        results = _run(transport, _measure(MeasurementKind.HUMIDITY))

        assert transport.writes == [b"\xe5"]
        assert results[0].kind is MeasurementKind.HUMIDITY  # type: ignore[attr-defined]

    def test_no_hold_master_waits_before_read(self) -> None:
        transport = FakeTransport([frame(0x66, 0x66)])
        _run(transport, _measure(MeasurementKind.TEMPERATURE, no_hold_master=True))

        assert transport.events == [("write", b"\xf3"), ("sleep", 0.1), ("read", 3)]

    def test_both_chains_humidity_after_delay(self) -> None:
        transport = FakeTransport([frame(0x66, 0x66), frame(0x63, 0x52)])
        results = _run(transport, _measure(MeasurementKind.BOTH))

        assert transport.events == [
            ("write", b"\xe3"),
            ("read", 3),
            ("sleep", 0.2),
            ("write", b"\xe5"),
            ("read", 3),
        ]
        kinds = [r.kind for r in results if isinstance(r, Measurement)]
        assert kinds == [MeasurementKind.TEMPERATURE, MeasurementKind.HUMIDITY]

    def test_both_no_hold_uses_no_hold_codes(self) -> None:
        transport = FakeTransport([frame(0x66, 0x66), frame(0x63, 0x52)])
        _run(transport, _measure(MeasurementKind.BOTH, no_hold_master=True))

        assert transport.writes == [b"\xf3", b"\xf5"]
        assert transport.sleeps == [0.1, 0.2, 0.1]

    def test_continuous_restarts_from_temperature(self) -> None:
        frames = [frame(0x66, 0x66), frame(0x63, 0x52)] * 3
        transport = FakeTransport(frames)
        results = _run(
            transport,
            _measure(MeasurementKind.BOTH, continuous=True),
            max_cycles=3,
        )

        assert transport.writes == [b"\xe3", b"\xe5"] * 3
        assert transport.sleeps == [0.2, 0.3, 0.2, 0.3, 0.2]
        assert [r for r in results if isinstance(r, CycleEnd)] == [
            CycleEnd(1), CycleEnd(2), CycleEnd(3),
        ]

    def test_continuous_runs_until_interrupted(self) -> None:
        transport = FakeTransport([frame(0x66, 0x66)] * 10)
        calls: list[float] = []

        def sleep(seconds: float) -> None:
            calls.append(seconds)
            if len(calls) == 4:
                raise KeyboardInterrupt

        dispatcher = CommandDispatcher(transport, TIMING, sleep=sleep)
        with pytest.raises(KeyboardInterrupt):
            dispatcher.run(
                _measure(MeasurementKind.TEMPERATURE, continuous=True), lambda _r: None,
            )
        assert len(transport.writes) == 4

    def test_single_shot_never_sleeps_in_hold_mode(self) -> None:
        transport = FakeTransport([frame(0x66, 0x66)])
        _run(transport, _measure(MeasurementKind.TEMPERATURE))
        assert transport.sleeps == []

    def test_bad_crc_raises(self) -> None:
        transport = FakeTransport([bytes([0x66, 0x66, 0x00])])
        with pytest.raises(ChecksumError) as exc_info:
            _run(transport, _measure(MeasurementKind.TEMPERATURE))
        assert exc_info.value.actual == 0x00


# ---------------------------------------------------------------------------
# User register
# ---------------------------------------------------------------------------

class TestReadConfig:
    def test_reads_one_byte(self) -> None:
        transport = FakeTransport([b"\x02"])
        results = _run(transport, CommandRequest(operation=Operation.READ_CONFIG))

        assert transport.events == [("write", b"\xe7"), ("read", 1)]
        assert results == [
            ConfigRegister(
                raw=0x02,
                resolution=Resolution.RH12_T14,
                battery_low=False,
                heater_on=False,
                otp_disabled=True,
            )
        ]

    def test_no_hold_rule_applies(self) -> None:
        transport = FakeTransport([b"\x00"])
        _run(transport, CommandRequest(operation=Operation.READ_CONFIG, no_hold_master=True))
        assert transport.events == [("write", b"\xe7"), ("sleep", 0.1), ("read", 1)]


class TestWriteConfig:
    def _write(self, current: int, field: ConfigField, value: object) -> FakeTransport:
        transport = FakeTransport([bytes([current])])
        _run(
            transport,
            CommandRequest(
                operation=Operation.WRITE_CONFIG,
                config_field=field,
                config_value=value,  # type: ignore[arg-type]
            ),
        )
        return transport

    def test_resolution_preserves_heater(self) -> None:
        transport = self._write(0x04, ConfigField.RESOLUTION, Resolution.RH8_T12)
        assert transport.writes == [b"\xe7", b"\xe6\x05"]

    def test_heater_on(self) -> None:
        transport = self._write(0x02, ConfigField.HEATER, True)
        assert transport.writes[-1] == b"\xe6\x06"

    def test_heater_off_keeps_resolution(self) -> None:
        transport = self._write(0x85, ConfigField.HEATER, False)
        assert transport.writes[-1] == b"\xe6\x81"

    def test_otp_on_clears_disable_bit(self) -> None:
        transport = self._write(0x3A, ConfigField.OTP_RELOAD, True)
        assert transport.writes[-1] == b"\xe6\x38"

    def test_battery_bit_never_written(self) -> None:
        transport = self._write(0x40, ConfigField.HEATER, True)
        assert transport.writes[-1] == b"\xe6\x04"

    def test_emits_written_register(self) -> None:
        transport = FakeTransport([b"\x04"])
        results = _run(
            transport,
            CommandRequest(
                operation=Operation.WRITE_CONFIG,
                config_field=ConfigField.RESOLUTION,
                config_value=Resolution.RH11_T11,
            ),
        )
        assert results[0].raw == 0x85  # type: ignore[attr-defined]
        assert results[0].resolution is Resolution.RH11_T11  # type: ignore[attr-defined]

    def test_request_without_value_is_rejected(self) -> None:
        with pytest.raises(ArgumentError):
            CommandRequest(operation=Operation.WRITE_CONFIG, config_field=ConfigField.HEATER)


# ---------------------------------------------------------------------------
# Reset
# ---------------------------------------------------------------------------

class TestReset:
    def test_writes_reset_then_waits(self) -> None:
        transport = FakeTransport()
        results = _run(transport, CommandRequest(operation=Operation.RESET))

        assert transport.events == [("write", b"\xfe"), ("sleep", 0.4)]
        assert results == []


# ---------------------------------------------------------------------------
# Short transfers
# ---------------------------------------------------------------------------

class _ShortTransport(FakeTransport):
    def write_bytes(self, data: bytes) -> int:
        super().write_bytes(data)
        return len(data) - 1


class TestShortTransfers:
    def test_short_write_is_fatal(self) -> None:
        transport = _ShortTransport([frame(0x66, 0x66)])
        with pytest.raises(BusIOError, match="Short I2C write") as exc_info:
            _run(transport, _measure(MeasurementKind.TEMPERATURE))
        assert exc_info.value.expected == 1
        assert exc_info.value.actual == 0
        assert ("read", 3) not in transport.events

    def test_short_read_is_fatal(self) -> None:
        transport = FakeTransport([b"\x66\x66"])
        with pytest.raises(BusIOError, match="Short I2C read"):
            _run(transport, _measure(MeasurementKind.TEMPERATURE))

    def test_default_timing(self) -> None:
        dispatcher = CommandDispatcher(FakeTransport())
        assert dispatcher._timing == Timing()
