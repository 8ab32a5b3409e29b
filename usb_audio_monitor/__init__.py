"""
USB Audio Monitor

Watches for a USB audio device, works out which physical USB device backs
it and reports when it is connected, swapped or unplugged.
"""

__version__ = "0.1.0"

from .devices import (
    AudioDeviceRecord,
    CorrelatedIdentity,
    EnumerationFailed,
    MatchConfidence,
    PresenceReconciler,
    SoundDeviceEnumerator,
    UsbHardwareRecord,
    correlate,
)

__all__ = [
    "AudioDeviceRecord",
    "CorrelatedIdentity",
    "EnumerationFailed",
    "MatchConfidence",
    "PresenceReconciler",
    "SoundDeviceEnumerator",
    "UsbHardwareRecord",
    "correlate",
]
