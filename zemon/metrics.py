"""Metric sampling for zemon.

The sensor reads host counters through psutil; ``MetricState`` keeps the
latest two readings, derives percentages and network rates from them and
feeds the CPU history shown by the sparkline.
"""

from __future__ import annotations

import math
import platform
import time
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

import psutil

DEFAULT_HISTORY_CAPACITY = 200
_GIB = 1024**3


# ── Data types ─────────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class MetricSnapshot:
    """Immutable reading of the host taken at one instant."""

    cpu_percent: float = 0.0
    memory_used_bytes: int = 0
    memory_total_bytes: int = 0
    swap_used_bytes: int = 0
    swap_total_bytes: int = 0
    network_rx_total_bytes: int = 0  # cumulative, may reset to 0
    network_tx_total_bytes: int = 0
    load_avg_1: float = 0.0
    load_avg_5: float = 0.0
    load_avg_15: float = 0.0
    timestamp: float = 0.0  # monotonic seconds


@dataclass(slots=True, frozen=True)
class DerivedMetrics:
    """Percentages and rates computed from two consecutive snapshots."""

    memory_percent: float = 0.0
    swap_percent: float = 0.0
    used_memory_gb: float = 0.0
    used_swap_gb: float = 0.0
    download_kbps: float = 0.0
    upload_kbps: float = 0.0


@dataclass(slots=True, frozen=True)
class SystemInfo:
    """Static host details for the info line."""

    os_name: str = "Unknown"
    kernel_version: str = "Unknown"
    uptime_days: int = 0


class Severity(Enum):
    """Colour bucket of a 0-100 percentage."""

    LOW = "low"
    MEDIUM_LOW = "medium-low"
    MEDIUM_HIGH = "medium-high"
    HIGH = "high"


def severity(percent: float) -> Severity:
    """Classify a percentage into half-open buckets [0,25) [25,50) [50,75) [75,…)."""
    if percent < 25.0:
        return Severity.LOW
    if percent < 50.0:
        return Severity.MEDIUM_LOW
    if percent < 75.0:
        return Severity.MEDIUM_HIGH
    return Severity.HIGH


# ── Derivations ────────────────────────────────────────────────────────────


def percent_of(used: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return used / total * 100.0


def rate_kbps(current: int, previous: int, elapsed: float) -> float:
    """KiB/s between two cumulative counter readings.

    A counter that went backwards (interface re-enumerated) counts as no
    traffic, and so does a non-positive elapsed time.
    """
    if elapsed <= 0:
        return 0.0
    delta = max(current - previous, 0)
    return delta / elapsed / 1024.0


def derive_metrics(
    previous: MetricSnapshot, current: MetricSnapshot, elapsed: float
) -> DerivedMetrics:
    return DerivedMetrics(
        memory_percent=percent_of(current.memory_used_bytes, current.memory_total_bytes),
        swap_percent=percent_of(current.swap_used_bytes, current.swap_total_bytes),
        used_memory_gb=current.memory_used_bytes / _GIB,
        used_swap_gb=current.swap_used_bytes / _GIB,
        download_kbps=rate_kbps(
            current.network_rx_total_bytes, previous.network_rx_total_bytes, elapsed
        ),
        upload_kbps=rate_kbps(
            current.network_tx_total_bytes, previous.network_tx_total_bytes, elapsed
        ),
    )


# ── CPU history ────────────────────────────────────────────────────────────


class CpuHistory:
    """Most-recent-first integer CPU samples, bounded by a mutable capacity."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        self._capacity = max(capacity, 0)
        self._samples: deque[int] = deque([0] * self._capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, value: int) -> None:
        """Insert a sample at the head, evicting from the tail past capacity."""
        self._samples.appendleft(value)
        self._trim()

    def resize(self, capacity: int) -> None:
        """Change the bound. Shrinking drops the oldest samples; growing adds none."""
        self._capacity = max(capacity, 0)
        self._trim()

    def _trim(self) -> None:
        while len(self._samples) > self._capacity:
            self._samples.pop()

    def values(self) -> list[int]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[int]:
        return iter(self._samples)


# ── Sensor ─────────────────────────────────────────────────────────────────


class Sensor(Protocol):
    def read(self, now: float) -> MetricSnapshot: ...

    def read_cpu_percent(self) -> float: ...

    def system_info(self) -> SystemInfo: ...


def _clamp_percent(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 100.0)


def _read_os_name() -> str:
    try:
        release = platform.freedesktop_os_release()
    except OSError:
        return platform.system() or "Unknown"
    return release.get("NAME") or platform.system() or "Unknown"


class PsutilSensor:
    """Reads host counters via psutil.

    Every read degrades to a zero value when the metric is unavailable so a
    missing counter never takes the dashboard down.
    """

    def __init__(self) -> None:
        # Warm-up psutil internal deltas (first call always reports 0.0)
        self.read_cpu_percent()

    def read_cpu_percent(self) -> float:
        try:
            return _clamp_percent(float(psutil.cpu_percent(interval=None)))
        except (OSError, psutil.Error):
            return 0.0

    def _read_memory(self) -> tuple[int, int, int, int]:
        try:
            ram = psutil.virtual_memory()
            mem_used, mem_total = int(ram.used), int(ram.total)
        except (OSError, psutil.Error):
            mem_used, mem_total = 0, 0
        try:
            swap = psutil.swap_memory()
            swap_used, swap_total = int(swap.used), int(swap.total)
        except (OSError, psutil.Error):
            swap_used, swap_total = 0, 0
        return mem_used, mem_total, swap_used, swap_total

    def _read_network(self) -> tuple[int, int]:
        try:
            per_nic = psutil.net_io_counters(pernic=True)
        except (OSError, psutil.Error):
            return 0, 0
        rx = sum(nic.bytes_recv for nic in per_nic.values())
        tx = sum(nic.bytes_sent for nic in per_nic.values())
        return rx, tx

    def _read_load(self) -> tuple[float, float, float]:
        try:
            la = psutil.getloadavg()
        except (OSError, AttributeError):
            return 0.0, 0.0, 0.0
        return float(la[0]), float(la[1]), float(la[2])

    def read(self, now: float) -> MetricSnapshot:
        mem_used, mem_total, swap_used, swap_total = self._read_memory()
        rx, tx = self._read_network()
        load1, load5, load15 = self._read_load()
        return MetricSnapshot(
            cpu_percent=self.read_cpu_percent(),
            memory_used_bytes=mem_used,
            memory_total_bytes=mem_total,
            swap_used_bytes=swap_used,
            swap_total_bytes=swap_total,
            network_rx_total_bytes=rx,
            network_tx_total_bytes=tx,
            load_avg_1=load1,
            load_avg_5=load5,
            load_avg_15=load15,
            timestamp=now,
        )

    def system_info(self) -> SystemInfo:
        try:
            uptime_days = int((time.time() - psutil.boot_time()) // 86400)
        except (OSError, psutil.Error):
            uptime_days = 0
        return SystemInfo(
            os_name=_read_os_name(),
            kernel_version=platform.release() or "Unknown",
            uptime_days=max(uptime_days, 0),
        )


# ── Metric state ───────────────────────────────────────────────────────────


class MetricState:
    """Latest and previous readings plus everything derived from them."""

    def __init__(
        self,
        sensor: Sensor,
        snapshot: MetricSnapshot,
        system_info: SystemInfo,
        history: CpuHistory,
    ) -> None:
        self._sensor = sensor
        self._previous = snapshot
        self._current = snapshot
        self._derived = derive_metrics(snapshot, snapshot, 0.0)
        self._system_info = system_info
        self._history = history
        self._last_update = snapshot.timestamp

    @classmethod
    def initialize(
        cls,
        sensor: Sensor,
        now: float,
        history_capacity: int = DEFAULT_HISTORY_CAPACITY,
    ) -> MetricState:
        """Take the first reading; previous and current start out identical."""
        return cls(
            sensor,
            sensor.read(now),
            sensor.system_info(),
            CpuHistory(history_capacity),
        )

    @property
    def current(self) -> MetricSnapshot:
        return self._current

    @property
    def previous(self) -> MetricSnapshot:
        return self._previous

    @property
    def derived(self) -> DerivedMetrics:
        return self._derived

    @property
    def system_info(self) -> SystemInfo:
        return self._system_info

    @property
    def history(self) -> CpuHistory:
        return self._history

    @property
    def last_update(self) -> float:
        return self._last_update

    @property
    def cpu_percent(self) -> float:
        return self._current.cpu_percent

    def maybe_refresh(self, now: float, refresh_interval: float, lite: bool = False) -> bool:
        """Re-sample if at least ``refresh_interval`` seconds passed since the last update.

        ``lite`` only refreshes CPU usage and history. Memory, load and the
        network counter baseline are left alone, so the next full refresh
        measures traffic over the whole span since the counters were last read.

        Returns True when a refresh happened.
        """
        if now - self._last_update < refresh_interval:
            return False

        if lite:
            cpu = self._sensor.read_cpu_percent()
            self._current = replace(self._current, cpu_percent=cpu)
        else:
            snapshot = self._sensor.read(now)
            elapsed = now - self._current.timestamp
            self._previous = self._current
            self._current = snapshot
            self._derived = derive_metrics(self._previous, snapshot, elapsed)

        self._history.push(int(max(self._current.cpu_percent, 0.0)))
        self._last_update = now
        return True

    def resize_history(self, new_capacity: int) -> None:
        self._history.resize(new_capacity)
