"""
Device correlation and presence tracking.

Public API:
- correlate: link an audio endpoint to its USB hardware
- PresenceReconciler: poll an enumerator and emit presence events
- SoundDeviceEnumerator: sounddevice + sysfs enumerator
"""

from .correlator import correlate, describe, display_name_hash, format_hex_id
from .enumeration import DeviceEnumerator, SoundDeviceEnumerator, classify_device
from .errors import EnumerationFailed
from .events import (
    DeviceAppearedEvent,
    DeviceChangedEvent,
    DeviceDisappearedEvent,
    EnumerationFailedEvent,
    PresenceEvent,
    PresenceEventHandler,
)
from .presence import PresenceReconciler, PresenceState, PresenceStatus, TickObserver
from .types import (
    USB_AUDIO_CLASS,
    AudioDeviceCategory,
    AudioDeviceRecord,
    CategoryTag,
    CorrelatedIdentity,
    Direction,
    MatchConfidence,
    UsbHardwareRecord,
)
from .usb_sysfs import list_usb_hardware

__all__ = [
    # Types
    "USB_AUDIO_CLASS",
    "AudioDeviceCategory",
    "AudioDeviceRecord",
    "CategoryTag",
    "CorrelatedIdentity",
    "Direction",
    "MatchConfidence",
    "UsbHardwareRecord",
    # Correlation
    "correlate",
    "describe",
    "display_name_hash",
    "format_hex_id",
    # Enumeration
    "DeviceEnumerator",
    "EnumerationFailed",
    "SoundDeviceEnumerator",
    "classify_device",
    "list_usb_hardware",
    # Presence
    "DeviceAppearedEvent",
    "DeviceChangedEvent",
    "DeviceDisappearedEvent",
    "EnumerationFailedEvent",
    "PresenceEvent",
    "PresenceEventHandler",
    "PresenceReconciler",
    "PresenceState",
    "PresenceStatus",
    "TickObserver",
]
