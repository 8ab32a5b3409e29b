"""
Presence events - what the reconciler tells its subscriber.

At most one event is emitted per tick, in tick order. A ``changed`` event
means a different physical unit replaced the previous one; subscribers treat
it as a disappear followed by an appear.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable

from .types import AudioDeviceRecord, CorrelatedIdentity


@dataclass(frozen=True)
class DeviceAppearedEvent:
    """A qualifying USB audio device is present where none was before."""
    identity: CorrelatedIdentity
    record: AudioDeviceRecord


@dataclass(frozen=True)
class DeviceChangedEvent:
    """The qualifying device now has a different unique identifier."""
    identity: CorrelatedIdentity
    record: AudioDeviceRecord


@dataclass(frozen=True)
class DeviceDisappearedEvent:
    """The previously present device is gone."""


@dataclass(frozen=True)
class EnumerationFailedEvent:
    """The enumerator failed this tick; presence state was left untouched.

    Attributes:
        cause: Human-readable reason reported by the enumerator
    """
    cause: str


PresenceEvent = (
    DeviceAppearedEvent
    | DeviceChangedEvent
    | DeviceDisappearedEvent
    | EnumerationFailedEvent
)

PresenceEventHandler = Callable[[PresenceEvent], Awaitable[None]]


__all__ = [
    "DeviceAppearedEvent",
    "DeviceChangedEvent",
    "DeviceDisappearedEvent",
    "EnumerationFailedEvent",
    "PresenceEvent",
    "PresenceEventHandler",
]
