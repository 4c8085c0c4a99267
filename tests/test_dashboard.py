"""Tests for the dashboard drawing helpers and screen layout."""

from __future__ import annotations

import curses
from collections.abc import Iterator
from datetime import datetime
from unittest.mock import MagicMock, call, patch

import pytest

from conftest import FakeSensor
from zemon.app import App, Tab
from zemon.dashboard import (
    C_CLOCK_BG,
    C_CLOCK_FG,
    C_DIM,
    C_HIGH,
    C_LOW,
    C_MEDIUM_HIGH,
    C_MEDIUM_LOW,
    _init_colors,
    _put,
    cpu_title,
    draw_screen,
    gauge_fill,
    info_text,
    network_text,
    severity_pair,
    sparkline_rows,
)
from zemon.metrics import DerivedMetrics, MetricSnapshot, MetricState, SystemInfo

# ── Formatting helpers ────────────────────────────────────────────────────


def test_cpu_title() -> None:
    snap = MetricSnapshot(load_avg_1=1.5, load_avg_5=0.25, load_avg_15=0.0)
    assert cpu_title(snap) == " CPU (1.50 0.25 0.00) "


def test_network_text() -> None:
    d = DerivedMetrics(download_kbps=0.9765625, upload_kbps=12.34)
    assert network_text(d) == "↓ 1.0 ↑ 12.3 KB/s"


def test_info_text() -> None:
    info = SystemInfo(os_name="Fedora Linux", kernel_version="6.8.0", uptime_days=12)
    assert info_text(info) == "OS: Fedora Linux | Kernel: 6.8.0 | Uptime: 12 days"


def test_info_text_unknown() -> None:
    assert info_text(SystemInfo()) == "OS: Unknown | Kernel: Unknown | Uptime: 0 days"


@pytest.mark.parametrize(
    ("width", "pct", "expected"),
    [
        (10, 0.0, 0),
        (10, 55.0, 5),
        (10, 100.0, 10),
        (10, 250.0, 10),
        (10, -4.0, 0),
        (10, float("nan"), 0),
        (0, 50.0, 0),
    ],
)
def test_gauge_fill(width: int, pct: float, expected: int) -> None:
    assert gauge_fill(width, pct) == expected


@pytest.mark.parametrize(
    ("pct", "pair"),
    [(10.0, C_LOW), (25.0, C_MEDIUM_LOW), (60.0, C_MEDIUM_HIGH), (75.0, C_HIGH)],
)
def test_severity_pair(pct: float, pair: int) -> None:
    assert severity_pair(pct) == pair


# ── sparkline_rows ────────────────────────────────────────────────────────


class TestSparklineRows:
    def test_full_column(self) -> None:
        assert sparkline_rows([100], 1) == ["█", "█", "█"]

    def test_half_column(self) -> None:
        assert sparkline_rows([50], 1) == [" ", "▄", "█"]

    def test_low_values_are_floored(self) -> None:
        assert sparkline_rows([0], 1) == sparkline_rows([10], 1) == [" ", " ", "▂"]

    def test_newest_on_the_right(self) -> None:
        rows = sparkline_rows([100, 0], 2)
        assert rows[-1] == "▂█"
        assert rows[0] == " █"

    def test_short_history_is_right_aligned(self) -> None:
        rows = sparkline_rows([100], 4)
        assert rows == ["   █"] * 3

    def test_only_width_samples_used(self) -> None:
        rows = sparkline_rows([100] * 10, 4)
        assert all(len(r) == 4 for r in rows)

    def test_values_over_max_are_capped(self) -> None:
        assert sparkline_rows([400], 1) == sparkline_rows([100], 1)

    def test_zero_width(self) -> None:
        assert sparkline_rows([50, 60], 0) == []


# ── _put clipping ─────────────────────────────────────────────────────────


class TestPut:
    def _win(self) -> MagicMock:
        win = MagicMock()
        win.getmaxyx.return_value = (5, 10)
        return win

    def test_clips_right_edge(self) -> None:
        win = self._win()
        _put(win, 0, 8, "hello")
        win.addstr.assert_called_once_with(0, 8, "he", 0)

    def test_clips_left_edge(self) -> None:
        win = self._win()
        _put(win, 1, -2, "hello", 7)
        win.addstr.assert_called_once_with(1, 0, "llo", 7)

    @pytest.mark.parametrize(("y", "x"), [(5, 0), (-1, 0), (0, 10)])
    def test_off_screen_dropped(self, y: int, x: int) -> None:
        win = self._win()
        _put(win, y, x, "x")
        win.addstr.assert_not_called()

    def test_curses_error_swallowed(self) -> None:
        win = self._win()
        win.addstr.side_effect = curses.error("bottom-right")
        _put(win, 4, 9, "x")


# ── Colour pairs ──────────────────────────────────────────────────────────


@pytest.fixture
def fake_curses() -> Iterator[MagicMock]:
    with patch("zemon.dashboard.curses") as mock_curses:
        mock_curses.has_colors.return_value = True
        mock_curses.COLOR_WHITE = curses.COLOR_WHITE
        yield mock_curses


class TestInitColors:
    def test_eight_color_terminal_folds_bright_codes(self, fake_curses: MagicMock) -> None:
        fake_curses.COLORS = 8
        _init_colors()
        pairs = fake_curses.init_pair.call_args_list
        # "white" is code 15
        assert call(C_CLOCK_BG + 7, -1, 7) in pairs
        assert call(C_CLOCK_FG + 7, 7, -1) in pairs
        assert call(C_DIM, curses.COLOR_WHITE, -1) in pairs

    def test_bright_terminal_keeps_codes(self, fake_curses: MagicMock) -> None:
        fake_curses.COLORS = 256
        _init_colors()
        pairs = fake_curses.init_pair.call_args_list
        assert call(C_CLOCK_BG + 7, -1, 15) in pairs
        assert call(C_CLOCK_BG + 9, -1, 9) in pairs
        assert call(C_DIM, 8, -1) in pairs

    def test_no_color_support(self, fake_curses: MagicMock) -> None:
        fake_curses.has_colors.return_value = False
        _init_colors()
        fake_curses.start_color.assert_not_called()
        fake_curses.init_pair.assert_not_called()


# ── draw_screen ───────────────────────────────────────────────────────────


@pytest.fixture
def app() -> App:
    sensor = FakeSensor([
        MetricSnapshot(
            cpu_percent=42.0,
            memory_used_bytes=4 * 1024**3,
            memory_total_bytes=16 * 1024**3,
        )
    ])
    return App(metrics=MetricState.initialize(sensor, now=0.0), refresh_interval=2.0)


@pytest.fixture
def no_colors() -> Iterator[None]:
    # color_pair() needs an initialised screen
    with patch("zemon.dashboard.curses.color_pair", side_effect=lambda n: n << 8):
        yield


def _screen(rows: int, cols: int) -> MagicMock:
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (rows, cols)
    return stdscr


def _texts(stdscr: MagicMock) -> list[str]:
    return [c.args[2] for c in stdscr.addstr.call_args_list]


@pytest.mark.usefixtures("no_colors")
class TestDrawScreen:
    def test_history_fitted_to_width(self, app: App) -> None:
        draw_screen(_screen(30, 80), app)
        assert app.metrics.history.capacity == 80
        assert len(app.metrics.history) == 80

        draw_screen(_screen(30, 50), app)
        assert len(app.metrics.history) == 50

    def test_wider_terminal_does_not_pad_history(self, app: App) -> None:
        draw_screen(_screen(30, 60), app)
        draw_screen(_screen(30, 300), app)
        assert len(app.metrics.history) == 60
        assert app.metrics.history.capacity == 300

    def test_perf_tab_content(self, app: App) -> None:
        stdscr = _screen(40, 120)
        draw_screen(stdscr, app)
        texts = _texts(stdscr)
        assert "perf(1) TAB" in texts
        assert " CPU (0.00 0.00 0.00) " in texts
        assert " Memory (25.0%) " in texts
        assert "↓ 0.0 ↑ 0.0 KB/s" in texts
        assert "OS: TestOS | Kernel: 6.1.0 | Uptime: 3 days" in texts
        stdscr.erase.assert_called_once()
        stdscr.refresh.assert_called_once()

    def test_info_line_clipped_to_column(self, app: App) -> None:
        # 50 columns: the centre column is 30 wide, 28 inside the margins
        stdscr = _screen(40, 50)
        draw_screen(stdscr, app)
        info = info_text(app.metrics.system_info)
        assert [t for t in _texts(stdscr) if t.startswith("OS:")] == [info[:28]]

    def test_tab_hint_right_aligned(self, app: App) -> None:
        stdscr = _screen(40, 120)
        draw_screen(stdscr, app)
        hint = "perf(1) TAB"
        assert any(
            c.args[:3] == (0, 120 - len(hint), hint) for c in stdscr.addstr.call_args_list
        )

    def test_clock_tab_content(self, app: App) -> None:
        app.switch_tab()
        stdscr = _screen(40, 120)
        draw_screen(stdscr, app, now=datetime(2024, 1, 2, 12, 34, 56))
        texts = _texts(stdscr)
        assert "clock(2) TAB" in texts
        assert "Tuesday, January 02, 2024" in texts
        assert " CPU (0.00 0.00 0.00) " not in texts

        index = app.clock_color.index
        attrs = {c.args[3] for c in stdscr.addstr.call_args_list}
        assert (C_CLOCK_BG + index) << 8 in attrs
        assert (C_CLOCK_FG + index) << 8 in attrs

    def test_sparkline_on_bottom_rows(self, app: App) -> None:
        app.metrics.history.push(100)
        stdscr = _screen(40, 40)
        draw_screen(stdscr, app)
        bottom = [c.args for c in stdscr.addstr.call_args_list if c.args[0] >= 37]
        assert [args[0] for args in bottom] == [37, 38, 39]
        assert all(args[2].endswith("█") for args in bottom)

    def test_tiny_terminal(self, app: App) -> None:
        draw_screen(_screen(2, 5), app)
        assert len(app.metrics.history) == 5

    def test_zero_width(self, app: App) -> None:
        draw_screen(_screen(0, 0), app)
        assert len(app.metrics.history) == 0

    def test_tab_switch_keeps_history(self, app: App) -> None:
        draw_screen(_screen(30, 80), app)
        app.metrics.history.push(33)
        before = app.metrics.history.values()
        app.switch_tab()
        draw_screen(_screen(30, 80), app)
        assert app.tab is Tab.CLOCK
        assert app.metrics.history.values() == before
