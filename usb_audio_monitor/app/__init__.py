"""Presentation layer: monitor state and its console rendering."""

from .state import DEFAULT_FAILURE_THRESHOLD, MonitorSnapshot, MonitorState, MonitorStatus
from .view import ConsoleView, render_device_info, render_snapshot

__all__ = [
    "DEFAULT_FAILURE_THRESHOLD",
    "ConsoleView",
    "MonitorSnapshot",
    "MonitorState",
    "MonitorStatus",
    "render_device_info",
    "render_snapshot",
]
