"""
Presence Reconciler - turns periodic enumeration into connect/change/disconnect events.

The reconciler is a two-state machine:

- IDLE: no qualifying USB audio device observed
- PRESENT(identity): a qualifying device is observed with that identity

Each tick enumerates audio devices, takes the first USB one, correlates it
with the USB hardware list from the same tick and compares the resulting
unique identifier with the previous one. Only edges produce events; a device
that stays put is silent.

Only the first USB audio device is tracked. Any further ones are ignored.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from ..core.asyncio_utils import create_logged_task
from ..core.logging_utils import get_module_logger
from .correlator import correlate, describe
from .enumeration import DeviceEnumerator
from .errors import EnumerationFailed
from .events import (
    DeviceAppearedEvent,
    DeviceChangedEvent,
    DeviceDisappearedEvent,
    EnumerationFailedEvent,
    PresenceEvent,
    PresenceEventHandler,
)
from .types import AudioDeviceRecord, CorrelatedIdentity, Direction, UsbHardwareRecord

logger = get_module_logger("PresenceReconciler")

TickObserver = Callable[[Optional[PresenceEvent]], Awaitable[None]]


class PresenceStatus(Enum):
    IDLE = "idle"
    PRESENT = "present"


@dataclass(slots=True, frozen=True)
class PresenceState:
    """Last observed device. ``identity`` is None while idle."""

    identity: Optional[CorrelatedIdentity] = None
    record: Optional[AudioDeviceRecord] = None

    @property
    def status(self) -> PresenceStatus:
        return PresenceStatus.IDLE if self.identity is None else PresenceStatus.PRESENT

    @property
    def is_present(self) -> bool:
        return self.identity is not None


class PresenceReconciler:
    """
    Polls a DeviceEnumerator and reports USB audio device transitions.

    Ticks never overlap: the timer waits for the previous tick to finish
    before sleeping again, and ``poll_once`` shares a lock with the timer.
    Enumeration failures become ``EnumerationFailedEvent`` and never stop
    the polling loop.

    Usage:
        reconciler = PresenceReconciler(enumerator, on_event=handle_event)
        await reconciler.start()
        # ... later ...
        await reconciler.stop()
    """

    DEFAULT_POLL_INTERVAL = 1.0

    def __init__(
        self,
        enumerator: DeviceEnumerator,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        direction: Direction | str = Direction.INPUT,
        on_event: Optional[PresenceEventHandler] = None,
        on_tick: Optional[TickObserver] = None,
    ) -> None:
        """
        Args:
            enumerator: Source of audio and USB device lists
            poll_interval: Seconds between the end of one tick and the next
            direction: Enumerate input or output endpoints
            on_event: Subscriber for presence events
            on_tick: Called after every tick with that tick's event (or None),
                     including silent steady-state ticks
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self._enumerator = enumerator
        self._poll_interval = poll_interval
        self._direction = Direction.parse(direction)
        self._on_event = on_event
        self._on_tick = on_tick

        self._state = PresenceState()
        self._tick_lock = asyncio.Lock()
        self._poll_task: Optional[asyncio.Task] = None
        self._running = False
        # Bumped by stop(); a tick that started under an older epoch discards its result.
        self._epoch = 0

    @property
    def state(self) -> PresenceState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def set_event_handler(self, handler: Optional[PresenceEventHandler]) -> None:
        """Set the subscriber that receives presence events."""
        self._on_event = handler

    async def start(self) -> None:
        """Start polling. The first tick runs immediately."""
        if self._running:
            return
        self._running = True
        self._poll_task = create_logged_task(
            self._poll_loop(), logger=logger, name="presence-poll"
        )
        logger.info("Presence reconciler started (interval %.2fs)", self._poll_interval)

    async def stop(self) -> None:
        """Stop polling.

        An in-flight enumeration finishes but its result is dropped. An event
        that is already being delivered is delivered in full before this returns.
        """
        if not self._running:
            return
        self._running = False
        self._epoch += 1

        if self._poll_task:
            self._poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poll_task
            self._poll_task = None

        logger.info("Presence reconciler stopped")

    async def poll_once(self) -> Optional[PresenceEvent]:
        """Run one tick now and return the event it emitted, if any."""
        async with self._tick_lock:
            epoch = self._epoch
            failure: Optional[EnumerationFailed] = None
            try:
                record, candidates = await asyncio.to_thread(self._enumerate)
            except EnumerationFailed as exc:
                failure = exc
            except Exception as exc:
                failure = EnumerationFailed(f"{type(exc).__name__}: {exc}")

            if epoch != self._epoch:
                logger.debug("Discarding enumeration result from before stop()")
                return None

            if failure is not None:
                logger.warning("Device enumeration failed: %s", failure.cause)
                event: Optional[PresenceEvent] = EnumerationFailedEvent(failure.cause)
            else:
                event = self._advance(record, candidates)

            # State has advanced; delivery finishes even if this tick is cancelled.
            delivery = asyncio.ensure_future(self._deliver(event))
            try:
                await asyncio.shield(delivery)
            except asyncio.CancelledError:
                await delivery
                raise
            return event

    # ------------------------------------------------------------------
    # Internals

    async def _poll_loop(self) -> None:
        while self._running:
            try:
                await self.poll_once()
                await asyncio.sleep(self._poll_interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in presence poll loop: {e}")
                await asyncio.sleep(self._poll_interval)

    def _enumerate(
        self,
    ) -> tuple[Optional[AudioDeviceRecord], Sequence[UsbHardwareRecord]]:
        devices = self._enumerator.list_audio_devices(self._direction)
        record = next((device for device in devices if device.is_usb), None)
        if record is None:
            return None, ()
        if record.usb_hardware is not None:
            return record, (record.usb_hardware,)
        return record, tuple(self._enumerator.list_usb_hardware())

    def _advance(
        self,
        record: Optional[AudioDeviceRecord],
        candidates: Sequence[UsbHardwareRecord],
    ) -> Optional[PresenceEvent]:
        previous = self._state.identity

        if record is None:
            if previous is None:
                return None
            logger.info("USB audio device disappeared: %s", previous.unique_identifier)
            self._state = PresenceState()
            return DeviceDisappearedEvent()

        identity = correlate(record, candidates)

        if previous is None:
            logger.info("USB audio device appeared: '%s' %s", record.display_name, describe(identity))
            self._state = PresenceState(identity, record)
            return DeviceAppearedEvent(identity, record)

        if previous.unique_identifier != identity.unique_identifier:
            logger.info(
                "USB audio device changed: %s -> %s",
                previous.unique_identifier,
                describe(identity),
            )
            self._state = PresenceState(identity, record)
            return DeviceChangedEvent(identity, record)

        return None

    async def _deliver(self, event: Optional[PresenceEvent]) -> None:
        if event is not None and self._on_event is not None:
            try:
                await self._on_event(event)
            except Exception as e:
                logger.error(f"Error in presence event handler: {e}")
        if self._on_tick is not None:
            try:
                await self._on_tick(event)
            except Exception as e:
                logger.error(f"Error in tick observer: {e}")


__all__ = [
    "PresenceReconciler",
    "PresenceState",
    "PresenceStatus",
    "TickObserver",
]
