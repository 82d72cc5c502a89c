"""Shared pytest fixtures and configuration for the sht21ctl test suite.

Guidelines
----------
* No I2C hardware in any test.
* smbus2 must be mocked at the infra boundary.
* Core tests run against :class:`FakeTransport` — no real sleeping.
* Tests must not depend on OS state.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

import pytest

from sht21ctl.core.register_codec import crc8


def frame(msb: int, lsb: int) -> bytes:
    """Build a 3-byte measurement frame with a valid CRC."""
    return bytes([msb, lsb, crc8([msb, lsb])])


class FakeTransport:
    """Scripted :class:`~sht21ctl.core.protocols.BusTransport`.

    Every call is appended to :attr:`events`; reads pop the next
    scripted response.  :meth:`sleep` records into the same timeline so
    tests can assert the exact write/sleep/read order.
    """

    def __init__(self, responses: Iterable[bytes] = ()) -> None:
        self.responses: deque[bytes] = deque(bytes(r) for r in responses)
        self.events: list[tuple[object, ...]] = []
        self.writes: list[bytes] = []
        self.bus_index: int | None = None
        self.address: int | None = None
        self.close_count = 0

    def open(self, bus_index: int) -> None:
        self.bus_index = bus_index
        self.events.append(("open", bus_index))

    def select_device(self, address: int) -> None:
        self.address = address
        self.events.append(("select", address))

    def write_bytes(self, data: bytes) -> int:
        self.writes.append(bytes(data))
        self.events.append(("write", bytes(data)))
        return len(data)

    def read_bytes(self, count: int) -> bytes:
        self.events.append(("read", count))
        return self.responses.popleft()

    def close(self) -> None:
        self.close_count += 1
        self.events.append(("close",))

    def sleep(self, seconds: float) -> None:
        self.events.append(("sleep", seconds))

    @property
    def sleeps(self) -> list[float]:
        return [event[1] for event in self.events if event[0] == "sleep"]  # type: ignore[misc]


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()
