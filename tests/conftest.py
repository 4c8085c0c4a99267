"""Shared fixtures: a scripted sensor standing in for psutil."""

from __future__ import annotations

from dataclasses import replace

import pytest

from zemon.metrics import MetricSnapshot, MetricState, SystemInfo


class FakeSensor:
    """Returns queued snapshots (stamped with the read time) and CPU values."""

    def __init__(
        self,
        snapshots: list[MetricSnapshot] | None = None,
        cpu: list[float] | None = None,
    ) -> None:
        self.snapshots = list(snapshots or [])
        self.cpu = list(cpu or [])
        self.reads = 0
        self.cpu_reads = 0
        self._last = MetricSnapshot()

    def read(self, now: float) -> MetricSnapshot:
        self.reads += 1
        if self.snapshots:
            self._last = self.snapshots.pop(0)
        return replace(self._last, timestamp=now)

    def read_cpu_percent(self) -> float:
        self.cpu_reads += 1
        return self.cpu.pop(0) if self.cpu else self._last.cpu_percent

    def system_info(self) -> SystemInfo:
        return SystemInfo(os_name="TestOS", kernel_version="6.1.0", uptime_days=3)


@pytest.fixture
def sensor() -> FakeSensor:
    return FakeSensor()


@pytest.fixture
def state(sensor: FakeSensor) -> MetricState:
    return MetricState.initialize(sensor, now=100.0)
