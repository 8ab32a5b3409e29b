"""Text rendering of the monitor state for the console."""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from ..devices.correlator import display_name_hash, format_hex_id
from ..devices.events import EnumerationFailedEvent, PresenceEvent
from ..devices.types import AudioDeviceRecord, CorrelatedIdentity
from .state import MonitorSnapshot, MonitorState, MonitorStatus

MAX_SAMPLE_RATES_SHOWN = 5


def _join(values: tuple[int, ...], limit: Optional[int] = None) -> str:
    shown = values if limit is None else values[:limit]
    text = ", ".join(str(value) for value in shown)
    if limit is not None and len(values) > limit:
        text += "..."
    return text


def render_device_info(
    record: AudioDeviceRecord,
    identity: CorrelatedIdentity,
) -> list[tuple[str, str]]:
    """Label/value rows describing a connected device; absent values are omitted."""
    rows: list[tuple[str, str]] = [
        ("Name", record.display_name),
        ("Platform ID", str(record.id)),
        ("Type", str(record.category)),
    ]

    hardware = identity.matched_hardware
    if hardware is not None:
        rows.append(("Vendor ID", format_hex_id(hardware.vendor_id)))
        rows.append(("Product ID", format_hex_id(hardware.product_id)))
        if hardware.serial_number:
            rows.append(("Serial", hardware.serial_number))
        if hardware.manufacturer_name:
            rows.append(("Manufacturer", hardware.manufacturer_name))

    rows.append(("Hash", display_name_hash(record.display_name)))
    rows.append(("Unique ID", identity.unique_identifier))
    if identity.hardware_identifier:
        rows.append(("Hardware ID", identity.hardware_identifier))
    rows.append(("Match", identity.confidence.value))

    if record.channel_counts:
        rows.append(("Channels", _join(record.channel_counts)))
    if record.sample_rates:
        rows.append(("Sample Rates", _join(record.sample_rates, MAX_SAMPLE_RATES_SHOWN)))
    if record.encodings:
        rows.append(("Encodings", _join(record.encodings)))
    return rows


def render_snapshot(snapshot: MonitorSnapshot) -> str:
    """Render the whole screen for one snapshot."""
    lines = [snapshot.status_text]
    if (
        snapshot.status is MonitorStatus.CONNECTED
        and snapshot.record is not None
        and snapshot.identity is not None
    ):
        rows = render_device_info(snapshot.record, snapshot.identity)
        width = max(len(label) for label, _ in rows)
        lines.extend(f"  {label:<{width}}  {value}" for label, value in rows)
    return "\n".join(lines)


class ConsoleView:
    """Prints the monitor screen whenever the state changes.

    Wire ``handle_event`` and ``handle_tick`` to a PresenceReconciler's
    ``on_event`` and ``on_tick``.
    """

    def __init__(self, state: MonitorState, stream: Optional[TextIO] = None) -> None:
        self.state = state
        self._stream = stream or sys.stdout
        self._last_rendered: Optional[str] = None
        state.subscribe(self._on_snapshot)

    async def handle_event(self, event: PresenceEvent) -> None:
        self.state.apply_event(event)

    async def handle_tick(self, event: Optional[PresenceEvent]) -> None:
        if not isinstance(event, EnumerationFailedEvent):
            self.state.record_success()

    def _on_snapshot(self, snapshot: MonitorSnapshot) -> None:
        rendered = render_snapshot(snapshot)
        if rendered == self._last_rendered:
            return
        self._last_rendered = rendered
        print(rendered, file=self._stream, flush=True)


__all__ = ["ConsoleView", "render_device_info", "render_snapshot"]
