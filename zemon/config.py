"""Configuration loading for zemon.

Loads settings from a TOML config file with sensible defaults.
Search order: explicit --config path → ~/.config/zemon/config.toml → defaults only.
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path
from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "interval": 2,
}

_DEFAULT_PATH = Path.home() / ".config" / "zemon" / "config.toml"


def _validate(config: dict[str, Any], source: Path) -> None:
    """Reject an interval that is not a whole, non-negative number of seconds."""
    interval = config.get("interval")
    # bool is an int subclass; `interval = true` is still a mistake
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 0:
        raise ValueError(
            f"'interval' must be a non-negative integer in {source}, got {interval!r}"
        )


def _read_toml(path: Path) -> dict[str, Any]:
    merged = {**DEFAULT_CONFIG, **tomllib.loads(path.read_text(encoding="utf-8"))}
    _validate(merged, path)
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration, merging user TOML over defaults.

    Args:
        path: Explicit config file path (from --config). If None, tries the
              default location ~/.config/zemon/config.toml.

    Returns:
        Merged configuration dict.

    Raises:
        SystemExit: If an explicit path doesn't exist, can't be parsed or
                    holds an invalid interval.
    """
    if path is not None:
        if not path.is_file():
            print(f"zemon: config file not found: {path}", file=sys.stderr)
            raise SystemExit(1)
        try:
            return _read_toml(path)
        except tomllib.TOMLDecodeError as e:
            print(f"zemon: invalid TOML in {path}: {e}", file=sys.stderr)
            raise SystemExit(1) from e
        except ValueError as e:
            print(f"zemon: {e}", file=sys.stderr)
            raise SystemExit(1) from e

    # Try default location silently
    if _DEFAULT_PATH.is_file():
        try:
            return _read_toml(_DEFAULT_PATH)
        except tomllib.TOMLDecodeError:
            print(
                f"zemon: warning: ignoring invalid TOML in {_DEFAULT_PATH}",
                file=sys.stderr,
            )
        except ValueError as e:
            print(f"zemon: warning: {e}; using defaults", file=sys.stderr)

    return dict(DEFAULT_CONFIG)


def dump_default_config() -> str:
    """Return the default configuration as a TOML string."""
    lines = [
        "# zemon configuration",
        "# Place this file at ~/.config/zemon/config.toml",
        "",
        "# Seconds between metric refreshes (0 = every screen tick)",
        f"interval = {DEFAULT_CONFIG['interval']}",
    ]
    return "\n".join(lines) + "\n"
