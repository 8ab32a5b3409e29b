"""
Command-line entry point for the USB audio monitor.

Usage:
    usb-audio-monitor [--interval 1.0] [--direction input] [--once]
    python -m usb_audio_monitor --log-level debug
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

from .app import ConsoleView, MonitorState
from .config import MonitorSettings, parse_cli_args
from .core.logging_config import configure_logging
from .core.logging_utils import get_module_logger
from .devices import PresenceReconciler, SoundDeviceEnumerator
from .devices.enumeration import DeviceEnumerator

logger = get_module_logger("CLI")


def build_reconciler(
    settings: MonitorSettings,
    view: ConsoleView,
    enumerator: Optional[DeviceEnumerator] = None,
) -> PresenceReconciler:
    """Wire an enumerator, the reconciler and the console view together."""
    if enumerator is None:
        enumerator = SoundDeviceEnumerator(usb_sysfs_root=settings.usb_sysfs_root)
    return PresenceReconciler(
        enumerator,
        poll_interval=settings.poll_interval,
        direction=settings.audio_direction,
        on_event=view.handle_event,
        on_tick=view.handle_tick,
    )


async def run_monitor(
    settings: MonitorSettings,
    *,
    once: bool = False,
    enumerator: Optional[DeviceEnumerator] = None,
) -> int:
    """Poll until cancelled (or once). Returns the process exit code."""
    state = MonitorState(failure_threshold=settings.failure_threshold)
    view = ConsoleView(state)
    reconciler = build_reconciler(settings, view, enumerator)

    if once:
        await reconciler.poll_once()
        return 0 if state.consecutive_failures == 0 else 1

    await reconciler.start()
    try:
        # Runs until the task is cancelled (Ctrl+C under asyncio.run).
        await asyncio.Event().wait()
    finally:
        await reconciler.stop()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_cli_args(argv)
    settings = MonitorSettings.from_args(args)

    try:
        configure_logging(
            settings.log_level,
            console=settings.console_output,
            log_file=settings.log_file,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logger.debug("Settings: %s", settings)

    try:
        return asyncio.run(run_monitor(settings, once=args.once))
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
        return 0


if __name__ == "__main__":
    sys.exit(main())
