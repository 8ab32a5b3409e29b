"""Configuration loading + normalization for the monitor."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .app.state import DEFAULT_FAILURE_THRESHOLD
from .devices.presence import PresenceReconciler
from .devices.types import Direction
from .devices.usb_sysfs import SYSFS_USB_DEVICES

DIRECTIONS: tuple[str, str] = ("input", "output")
DEFAULT_CONFIG_PATH = Path("config.txt")


@dataclass(slots=True)
class MonitorSettings:
    """Normalized configuration derived from CLI args and config file."""

    poll_interval: float = PresenceReconciler.DEFAULT_POLL_INTERVAL
    direction: str = "input"
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    log_level: str = "info"
    log_file: Path | None = None
    console_output: bool = True
    usb_sysfs_root: Path = SYSFS_USB_DEVICES

    @property
    def audio_direction(self) -> Direction:
        return Direction.parse(self.direction)

    @classmethod
    def from_args(cls, args: Any) -> "MonitorSettings":
        """Create a settings instance from an argparse namespace."""

        defaults = cls()

        poll_interval = float(getattr(args, "poll_interval", defaults.poll_interval))
        if poll_interval <= 0:
            poll_interval = defaults.poll_interval

        log_file = getattr(args, "log_file", None)
        if log_file is not None and not isinstance(log_file, Path):
            log_file = Path(str(log_file))

        sysfs_root = getattr(args, "usb_sysfs_root", None) or defaults.usb_sysfs_root

        return cls(
            poll_interval=poll_interval,
            direction=_normalize_direction(getattr(args, "direction", defaults.direction)),
            failure_threshold=max(
                1, int(getattr(args, "failure_threshold", defaults.failure_threshold))
            ),
            log_level=str(getattr(args, "log_level", defaults.log_level)),
            log_file=log_file,
            console_output=bool(getattr(args, "console_output", defaults.console_output)),
            usb_sysfs_root=Path(str(sysfs_root)),
        )


def read_config_file(path: Path) -> dict[str, object]:
    """Load key/value pairs from ``config.txt`` style files.

    Blank lines and ``#`` comments are skipped; ``true/false``, integers and
    floats are converted, everything else stays a string.
    """

    config: dict[str, object] = {}
    if not path.exists():
        return config

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = [part.strip() for part in line.split("=", 1)]
        if not key:
            continue
        lowered = value.lower()
        if lowered in {"true", "yes", "on"}:
            config[key] = True
        elif lowered in {"false", "no", "off"}:
            config[key] = False
        else:
            try:
                config[key] = float(value) if "." in value else int(value)
            except ValueError:
                config[key] = value
    return config


def _config_value(config: Mapping[str, object], key: str, fallback: Any) -> Any:
    value = config.get(key, fallback)
    if isinstance(value, str) and (key.endswith("_file") or key.endswith("_root")):
        return Path(value)
    return value


def build_arg_parser(config: Mapping[str, object]) -> argparse.ArgumentParser:
    """Create the CLI parser with defaults sourced from the config file."""

    defaults = MonitorSettings()
    parser = argparse.ArgumentParser(
        prog="usb-audio-monitor",
        description="Watch for a USB audio device and show what it is.",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Config file with key = value defaults (default: ./config.txt)",
    )
    parser.add_argument(
        "--interval",
        dest="poll_interval",
        type=float,
        default=_config_value(config, "poll_interval", defaults.poll_interval),
        help="Seconds between device polls",
    )
    parser.add_argument(
        "--direction",
        choices=DIRECTIONS,
        default=_normalize_direction(_config_value(config, "direction", defaults.direction)),
        help="Watch input (capture) or output (playback) endpoints",
    )
    parser.add_argument(
        "--failure-threshold",
        type=int,
        default=_config_value(config, "failure_threshold", defaults.failure_threshold),
        help="Consecutive enumeration failures before detection is reported unavailable",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=_config_value(config, "log_level", defaults.log_level),
        help="Logging verbosity",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=_config_value(config, "log_file", defaults.log_file),
        help="Optional rotating log file",
    )
    parser.add_argument(
        "--usb-sysfs-root",
        type=Path,
        default=_config_value(config, "usb_sysfs_root", defaults.usb_sysfs_root),
        help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Poll a single time, print the result and exit",
    )

    console_group = parser.add_mutually_exclusive_group()
    console_group.add_argument(
        "--console",
        dest="console_output",
        action="store_true",
        default=_config_value(config, "console_output", defaults.console_output),
        help="Enable console logging",
    )
    console_group.add_argument(
        "--no-console",
        dest="console_output",
        action="store_false",
        help="Disable console logging",
    )

    return parser


def parse_cli_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments, taking defaults from the ``--config`` file."""

    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    known, _ = pre_parser.parse_known_args(argv)

    config = read_config_file(known.config)
    parser = build_arg_parser(config)
    return parser.parse_args(argv)


def _normalize_direction(value: Any) -> str:
    text = str(value or "").strip().lower()
    if text in ("capture", "source"):
        return "input"
    if text in ("playback", "sink"):
        return "output"
    if text in DIRECTIONS:
        return text
    return DIRECTIONS[0]


__all__ = [
    "DIRECTIONS",
    "MonitorSettings",
    "build_arg_parser",
    "parse_cli_args",
    "read_config_file",
]
