"""Monitor state tracking independent of how it is displayed."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..core.logging_utils import get_module_logger
from ..devices.events import (
    DeviceAppearedEvent,
    DeviceChangedEvent,
    DeviceDisappearedEvent,
    EnumerationFailedEvent,
    PresenceEvent,
)
from ..devices.types import AudioDeviceRecord, CorrelatedIdentity

logger = get_module_logger("MonitorState")

DEFAULT_FAILURE_THRESHOLD = 3


class MonitorStatus(Enum):
    INITIALIZING = "initializing"
    WAITING = "waiting"
    CONNECTED = "connected"
    UNAVAILABLE = "unavailable"


@dataclass(slots=True, frozen=True)
class MonitorSnapshot:
    status: MonitorStatus
    record: Optional[AudioDeviceRecord]
    identity: Optional[CorrelatedIdentity]
    consecutive_failures: int
    last_error: Optional[str]
    status_text: str


class MonitorState:
    """Holds the displayed device and detection health, and notifies observers.

    "No device connected" (WAITING) and "device detection unavailable"
    (UNAVAILABLE) are separate states: a single failed enumeration is
    tolerated, ``failure_threshold`` consecutive failures are not.
    """

    def __init__(self, failure_threshold: int = DEFAULT_FAILURE_THRESHOLD) -> None:
        self.failure_threshold = max(1, int(failure_threshold))
        self.record: AudioDeviceRecord | None = None
        self.identity: CorrelatedIdentity | None = None
        self.consecutive_failures = 0
        self.last_error: str | None = None
        self.status = MonitorStatus.INITIALIZING
        self._observers: list[Callable[[MonitorSnapshot], None]] = []

    # ------------------------------------------------------------------
    # Observer helpers

    def subscribe(self, observer: Callable[[MonitorSnapshot], None]) -> None:
        self._observers.append(observer)
        observer(self.snapshot())

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.debug("Observer notification failed", exc_info=True)

    def snapshot(self) -> MonitorSnapshot:
        return MonitorSnapshot(
            status=self.status,
            record=self.record,
            identity=self.identity,
            consecutive_failures=self.consecutive_failures,
            last_error=self.last_error,
            status_text=self.status_text,
        )

    @property
    def status_text(self) -> str:
        if self.status is MonitorStatus.INITIALIZING:
            return "Initializing..."
        if self.status is MonitorStatus.UNAVAILABLE:
            return f"Device detection unavailable ({self.last_error})"
        if self.status is MonitorStatus.CONNECTED and self.record is not None:
            return f"Device connected: {self.record.display_name or 'unnamed device'}"
        return "Waiting for USB audio device"

    # ------------------------------------------------------------------
    # State mutation

    def apply_event(self, event: PresenceEvent) -> None:
        """Fold one presence event into the state."""
        before = self.snapshot()

        if isinstance(event, (DeviceAppearedEvent, DeviceChangedEvent)):
            self.record = event.record
            self.identity = event.identity
        elif isinstance(event, DeviceDisappearedEvent):
            self.record = None
            self.identity = None
        elif isinstance(event, EnumerationFailedEvent):
            self.consecutive_failures += 1
            self.last_error = event.cause
            if self.consecutive_failures >= self.failure_threshold:
                if self.status is not MonitorStatus.UNAVAILABLE:
                    logger.warning(
                        "Device detection unavailable after %d failures: %s",
                        self.consecutive_failures,
                        event.cause,
                    )
                self.status = MonitorStatus.UNAVAILABLE

        if not isinstance(event, EnumerationFailedEvent):
            self._mark_healthy()

        if self.snapshot() != before:
            self._notify()

    def record_success(self) -> None:
        """Note a tick that enumerated without error, whether or not anything changed."""
        before = self.snapshot()
        self._mark_healthy()
        if self.snapshot() != before:
            self._notify()

    def _mark_healthy(self) -> None:
        if self.consecutive_failures and self.status is MonitorStatus.UNAVAILABLE:
            logger.info("Device detection recovered")
        self.consecutive_failures = 0
        self.last_error = None
        self.status = MonitorStatus.CONNECTED if self.record is not None else MonitorStatus.WAITING


__all__ = [
    "DEFAULT_FAILURE_THRESHOLD",
    "MonitorSnapshot",
    "MonitorState",
    "MonitorStatus",
]
