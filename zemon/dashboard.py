"""Curses drawing for zemon.

Lays out the perf tab (CPU, memory and swap gauges, network throughput and a
host info line) or the clock tab (large seven-segment time plus the date),
with the tab hint on the top row and the CPU history sparkline along the
bottom of the screen.
"""

from __future__ import annotations

import curses
from datetime import datetime
from typing import TYPE_CHECKING

from zemon.clock import (
    CLOCK_COLORS,
    CLOCK_ROWS,
    DATE_FORMAT,
    TIME_FORMAT,
    render_time,
    row_width,
)
from zemon.metrics import DerivedMetrics, MetricSnapshot, Severity, SystemInfo, severity

if TYPE_CHECKING:
    from zemon.app import App

# ── Constants ──────────────────────────────────────────────────────────────

SPARK = " ▁▂▃▄▅▆▇█"
SPARK_HEIGHT = 3
SPARK_FLOOR = 10
BOX_H, BOX_V = "─", "│"
BOX_TL, BOX_TR, BOX_BL, BOX_BR = "┌", "┐", "└", "┘"

# Curses colour-pair IDs
C_LOW = 1
C_MEDIUM_LOW = 2
C_MEDIUM_HIGH = 3
C_HIGH = 4
C_DIM = 5
C_GRAY = 6
C_CLOCK_BG = 16  # + palette index
C_CLOCK_FG = 32  # + palette index

_SEVERITY_PAIRS: dict[Severity, int] = {
    Severity.LOW: C_LOW,
    Severity.MEDIUM_LOW: C_MEDIUM_LOW,
    Severity.MEDIUM_HIGH: C_MEDIUM_HIGH,
    Severity.HIGH: C_HIGH,
}


# ── Colour helpers ─────────────────────────────────────────────────────────


def _init_colors() -> None:
    if not curses.has_colors():
        return
    curses.start_color()
    curses.use_default_colors()
    bright = curses.COLORS >= 16
    curses.init_pair(C_LOW, curses.COLOR_BLUE, -1)
    curses.init_pair(C_MEDIUM_LOW, curses.COLOR_CYAN, -1)
    curses.init_pair(C_MEDIUM_HIGH, curses.COLOR_YELLOW, -1)
    curses.init_pair(C_HIGH, curses.COLOR_RED, -1)
    curses.init_pair(C_DIM, 8 if bright else curses.COLOR_WHITE, -1)
    curses.init_pair(C_GRAY, curses.COLOR_WHITE, -1)
    for i, color in enumerate(CLOCK_COLORS):
        code = color.code if bright else color.code % 8
        curses.init_pair(C_CLOCK_BG + i, -1, code)
        curses.init_pair(C_CLOCK_FG + i, code, -1)


def setup_screen(stdscr: curses.window) -> None:
    _init_colors()
    curses.curs_set(0)


def severity_pair(percent: float) -> int:
    return _SEVERITY_PAIRS[severity(percent)]


# ── Formatting helpers ─────────────────────────────────────────────────────


def cpu_title(snapshot: MetricSnapshot) -> str:
    return (
        f" CPU ({snapshot.load_avg_1:.2f} {snapshot.load_avg_5:.2f} "
        f"{snapshot.load_avg_15:.2f}) "
    )


def network_text(derived: DerivedMetrics) -> str:
    return f"↓ {derived.download_kbps:.1f} ↑ {derived.upload_kbps:.1f} KB/s"


def info_text(info: SystemInfo) -> str:
    return (
        f"OS: {info.os_name} | Kernel: {info.kernel_version} | "
        f"Uptime: {info.uptime_days} days"
    )


def gauge_fill(width: int, pct: float) -> int:
    """Number of filled cells for ``pct`` in a gauge ``width`` cells wide."""
    if width <= 0 or pct != pct:  # NaN
        return 0
    return int(width * min(max(pct, 0.0), 100.0) / 100.0)


def sparkline_rows(
    values: list[int],
    width: int,
    height: int = SPARK_HEIGHT,
    max_value: int = 100,
) -> list[str]:
    """Render samples as ``height`` rows of block characters, top row first.

    ``values`` are most-recent-first; the newest sample lands in the right
    most column and older ones extend to the left.
    """
    if width <= 0 or height <= 0:
        return []
    steps = len(SPARK) - 1
    levels = [
        min(max(v, SPARK_FLOOR), max_value) * height * steps // max_value
        for v in values[:width]
    ]
    levels.reverse()
    rows: list[str] = []
    for r in range(height):
        base = (height - 1 - r) * steps
        chars = [SPARK[min(max(level - base, 0), steps)] for level in levels]
        rows.append("".join(chars).rjust(width))
    return rows


# ── Curses drawing primitives ──────────────────────────────────────────────


def _put(win: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    """addstr clipped to the window; out-of-bounds writes are dropped."""
    max_y, max_x = win.getmaxyx()
    if y < 0 or y >= max_y or x >= max_x or not text:
        return
    if x < 0:
        text = text[-x:]
        x = 0
    text = text[: max_x - x]
    if not text:
        return
    try:
        win.addstr(y, x, text, attr)
    except curses.error:
        # Writing the bottom-right cell moves the cursor off-screen
        pass


def _centered_x(x: int, w: int, length: int) -> int:
    return x + max((w - length) // 2, 0)


def _draw_box(
    win: curses.window, y: int, x: int, h: int, w: int, title: str = ""
) -> None:
    """Draw a bordered box with ``title`` set into the top edge."""
    if h < 2 or w < 2:
        return
    _put(win, y, x, BOX_TL + BOX_H * (w - 2) + BOX_TR)
    for row in range(y + 1, y + h - 1):
        _put(win, row, x, BOX_V)
        _put(win, row, x + w - 1, BOX_V)
    _put(win, y + h - 1, x, BOX_BL + BOX_H * (w - 2) + BOX_BR)
    if title:
        _put(win, y, x + 1, title[: w - 2])


def _draw_gauge(
    win: curses.window,
    y: int,
    x: int,
    w: int,
    title: str,
    pct: float,
    label: str,
) -> None:
    """Bordered three-row gauge: fill in the severity colour, label centred."""
    _draw_box(win, y, x, 3, w, title)
    inner_w = w - 2
    if inner_w < 1:
        return
    color = curses.color_pair(severity_pair(pct))
    filled = gauge_fill(inner_w, pct)
    text = label.center(inner_w)[:inner_w]
    _put(win, y + 1, x + 1, text[:filled], color | curses.A_REVERSE)
    _put(win, y + 1, x + 1 + filled, text[filled:], color)


def _draw_sparkline(
    win: curses.window,
    y: int,
    x: int,
    width: int,
    history: list[int],
) -> None:
    attr = curses.color_pair(C_DIM)
    for i, line in enumerate(sparkline_rows(history, width)):
        _put(win, y + i, x, line, attr)


# ── Tab renderers ──────────────────────────────────────────────────────────


def draw_perf_tab(
    win: curses.window, app: App, y: int, x: int, h: int, w: int
) -> None:
    # Centre column: 60% wide, starting 20% down, one cell of margin
    col_x = x + w * 20 // 100
    col_w = w * 60 // 100
    inner_x = col_x + 1
    inner_w = col_w - 2
    row = y + h * 20 // 100 + 1
    if inner_w < 4:
        return

    metrics = app.metrics
    snap = metrics.current
    derived = metrics.derived

    _draw_gauge(
        win, row, inner_x, inner_w, cpu_title(snap),
        snap.cpu_percent, f"{snap.cpu_percent:.1f}%",
    )
    row += 3
    _draw_gauge(
        win, row, inner_x, inner_w, f" Memory ({derived.memory_percent:.1f}%) ",
        derived.memory_percent, f"{derived.used_memory_gb:.1f} GB",
    )
    row += 3
    _draw_gauge(
        win, row, inner_x, inner_w, f" Swap ({derived.swap_percent:.1f}%) ",
        derived.swap_percent, f"{derived.used_swap_gb:.1f} GB",
    )
    row += 3

    _draw_box(win, row, inner_x, 3, inner_w, " Network ")
    net = network_text(derived)
    _put(win, row + 1, _centered_x(inner_x + 1, inner_w - 2, len(net)), net)
    row += 3

    info = info_text(metrics.system_info)[:inner_w]
    _put(
        win, row, _centered_x(inner_x, inner_w, len(info)), info,
        curses.color_pair(C_GRAY),
    )


def draw_clock_tab(
    win: curses.window, app: App, y: int, x: int, h: int, w: int, now: datetime
) -> None:
    top = y + h * 25 // 100
    index = app.clock_color.index
    fill_attr = curses.color_pair(C_CLOCK_BG + index)

    for i, cells in enumerate(render_time(now.strftime(TIME_FORMAT))):
        cx = _centered_x(x, w, row_width(cells))
        for cell in cells:
            if cell.filled:
                _put(win, top + i, cx, cell.text, fill_attr)
            cx += len(cell.text)

    date = now.strftime(DATE_FORMAT)
    _put(
        win, top + CLOCK_ROWS + 1, _centered_x(x, w, len(date)), date,
        curses.color_pair(C_CLOCK_FG + index),
    )


def _draw_tab_hint(win: curses.window, app: App, w: int) -> None:
    hint = f"{app.tab.label} TAB"
    _put(win, 0, max(w - len(hint), 0), hint, curses.color_pair(C_DIM))


# ── Screen ─────────────────────────────────────────────────────────────────


def draw_screen(stdscr: curses.window, app: App, now: datetime | None = None) -> None:
    """Redraw the whole screen from ``app``.

    The CPU history is fitted to the current width before anything is drawn.
    """
    max_y, max_x = stdscr.getmaxyx()
    app.set_terminal_width(max_x)

    stdscr.erase()
    _draw_tab_hint(stdscr, app, max_x)

    body_h = max(max_y - 1 - SPARK_HEIGHT, 0)
    if app.showing_clock:
        draw_clock_tab(stdscr, app, 1, 0, body_h, max_x, now or datetime.now())
    else:
        draw_perf_tab(stdscr, app, 1, 0, body_h, max_x)

    _draw_sparkline(
        stdscr, max_y - SPARK_HEIGHT, 0, max_x, app.metrics.history.values()
    )
    stdscr.refresh()

