"""zemon: a small live system monitor for the terminal.

Samples CPU, memory, swap, network and load every few seconds and shows
them as gauges over a CPU history sparkline. Tab switches to a large clock.

Keys:
    q / Q / Esc   quit
    Tab           switch between the perf and clock tabs
    Left / Right  previous / next clock colour (clock tab)

Usage:
    uv run zemon
    uv run zemon --interval 1 --config path/to/config.toml
"""

from __future__ import annotations

import argparse
import curses
import os
import signal
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import FrameType

from zemon.clock import ClockColorSelection
from zemon.config import dump_default_config, load_config
from zemon.dashboard import draw_screen, setup_screen
from zemon.metrics import MetricState, PsutilSensor

INPUT_POLL_MS = 100

KEY_TAB = 9
KEY_ESC = 27
QUIT_KEYS = frozenset({ord("q"), ord("Q"), KEY_ESC})


class Tab(Enum):
    PERF = "perf(1)"
    CLOCK = "clock(2)"

    @property
    def label(self) -> str:
        return self.value

    def next(self) -> Tab:
        return Tab.CLOCK if self is Tab.PERF else Tab.PERF


@dataclass
class App:
    """Everything the loop mutates between ticks."""

    metrics: MetricState
    refresh_interval: float
    tab: Tab = Tab.PERF
    clock_color: ClockColorSelection = field(default_factory=ClockColorSelection)
    terminal_width: int | None = None

    @property
    def showing_clock(self) -> bool:
        return self.tab is Tab.CLOCK

    def update(self, now: float) -> bool:
        # The clock tab only needs CPU for the sparkline
        return self.metrics.maybe_refresh(
            now, self.refresh_interval, lite=self.showing_clock
        )

    def set_terminal_width(self, width: int) -> None:
        if width != self.terminal_width:
            self.terminal_width = width
            self.metrics.resize_history(width)

    def switch_tab(self) -> None:
        self.tab = self.tab.next()

    def handle_key(self, key: int) -> bool:
        """Apply one key press. Returns False when the user asked to quit."""
        if key in QUIT_KEYS:
            return False
        if key == KEY_TAB:
            self.switch_tab()
        elif key == curses.KEY_LEFT and self.showing_clock:
            self.clock_color.previous()
        elif key == curses.KEY_RIGHT and self.showing_clock:
            self.clock_color.next()
        return True


# ── Main loop ──────────────────────────────────────────────────────────────


def run_app(
    stdscr: curses.window,
    app: App,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Sample, draw, wait up to INPUT_POLL_MS for a key; repeat until quit."""
    setup_screen(stdscr)
    stdscr.timeout(INPUT_POLL_MS)

    while True:
        app.update(clock())
        draw_screen(stdscr, app)

        key = stdscr.getch()
        if key == -1:
            continue
        if not app.handle_key(key):
            return


def _raise_exit(signum: int, frame: FrameType | None) -> None:
    """Turn SIGTERM into SystemExit so curses.wrapper restores the terminal."""
    sys.exit(128 + signum)


# ── CLI entry point ────────────────────────────────────────────────────────


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="zemon",
        description="A simple live system monitor for the terminal.",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=int,
        default=None,
        metavar="SECONDS",
        help="Refresh interval in seconds (default: 2)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Path to TOML config file",
    )
    parser.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the default configuration as TOML and exit",
    )
    args = parser.parse_args(argv)
    if args.interval is not None and args.interval < 0:
        parser.error("--interval must be zero or a positive number of seconds")
    return args


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    if args.dump_config:
        print(dump_default_config(), end="")
        return

    config = load_config(args.config)
    interval = args.interval if args.interval is not None else config["interval"]

    metrics = MetricState.initialize(PsutilSensor(), time.monotonic())
    app = App(metrics=metrics, refresh_interval=float(interval))

    # Keep Esc responsive; curses waits a full second for an escape sequence
    os.environ.setdefault("ESCDELAY", "25")
    signal.signal(signal.SIGTERM, _raise_exit)

    try:
        curses.wrapper(run_app, app)
    except KeyboardInterrupt:
        pass
    except curses.error as e:
        print(f"zemon: terminal error: {e}", file=sys.stderr)
        raise SystemExit(1) from e
    except Exception as e:
        print(f"zemon: error: {e}", file=sys.stderr)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
