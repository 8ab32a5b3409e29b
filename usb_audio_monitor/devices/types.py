"""Device records shared by the enumerators, the correlator and the reconciler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

USB_AUDIO_CLASS = 1


class AudioDeviceCategory(Enum):
    """Kind of audio endpoint as reported by the audio subsystem."""

    BUILTIN_MIC = "BUILTIN_MIC"
    USB_DEVICE = "USB_DEVICE"
    USB_ACCESSORY = "USB_ACCESSORY"
    USB_HEADSET = "USB_HEADSET"
    WIRED_HEADSET = "WIRED_HEADSET"
    BLUETOOTH_SCO = "BLUETOOTH_SCO"
    UNKNOWN = "UNKNOWN"


USB_CATEGORIES = frozenset({
    AudioDeviceCategory.USB_DEVICE,
    AudioDeviceCategory.USB_ACCESSORY,
    AudioDeviceCategory.USB_HEADSET,
})


class Direction(Enum):
    """Which side of the audio subsystem to enumerate."""

    INPUT = "input"
    OUTPUT = "output"

    @classmethod
    def parse(cls, value: "Direction | str") -> "Direction":
        if isinstance(value, Direction):
            return value
        return cls(str(value).strip().lower())


@dataclass(slots=True, frozen=True)
class CategoryTag:
    """Category plus the raw platform code when the category is unknown.

    ``str(tag)`` is the member name (``USB_DEVICE``) or ``UNKNOWN_<code>``.
    """

    category: AudioDeviceCategory
    raw_code: int | None = None

    @classmethod
    def unknown(cls, raw_code: int) -> "CategoryTag":
        return cls(AudioDeviceCategory.UNKNOWN, raw_code)

    @property
    def is_usb(self) -> bool:
        return self.category in USB_CATEGORIES

    def __str__(self) -> str:
        if self.category is AudioDeviceCategory.UNKNOWN:
            return f"UNKNOWN_{self.raw_code}" if self.raw_code is not None else "UNKNOWN"
        return self.category.value


@dataclass(slots=True, frozen=True)
class UsbHardwareRecord:
    """One device from the USB subsystem, independent of any audio role."""

    vendor_id: int
    product_id: int
    device_class: int = 0
    serial_number: str | None = None
    manufacturer_name: str | None = None
    product_name: str | None = None
    interface_count: int = 0
    bus_path: str | None = None

    @property
    def is_audio_class(self) -> bool:
        return self.device_class == USB_AUDIO_CLASS


@dataclass(slots=True, frozen=True)
class AudioDeviceRecord:
    """One endpoint from the audio subsystem.

    ``id`` is only meaningful inside the current process. ``usb_hardware`` is
    filled in when the platform enumerator could resolve the backing USB
    device itself; otherwise the reconciler correlates against the separate
    USB hardware list.
    """

    id: int
    display_name: str = ""
    category: CategoryTag = CategoryTag(AudioDeviceCategory.UNKNOWN)
    is_source: bool = True
    channel_counts: tuple[int, ...] = ()
    sample_rates: tuple[int, ...] = ()
    encodings: tuple[int, ...] = ()
    address: str | None = None
    usb_hardware: UsbHardwareRecord | None = None

    @property
    def is_usb(self) -> bool:
        return self.category.is_usb


class MatchConfidence(Enum):
    """Which correlation rule produced the match."""

    MATCHED_BY_NAME = "matched-by-name"
    MATCHED_BY_CLASS_HEURISTIC = "matched-by-class-heuristic"
    MATCHED_BY_SOLE_DEVICE = "matched-by-sole-device"
    UNMATCHED = "unmatched"


@dataclass(slots=True, frozen=True)
class CorrelatedIdentity:
    """Identity derived for one audio record during one enumeration tick."""

    unique_identifier: str
    hardware_identifier: str | None
    matched_hardware: UsbHardwareRecord | None
    confidence: MatchConfidence

    @property
    def is_matched(self) -> bool:
        return self.matched_hardware is not None


__all__ = [
    "USB_AUDIO_CLASS",
    "USB_CATEGORIES",
    "AudioDeviceCategory",
    "AudioDeviceRecord",
    "CategoryTag",
    "CorrelatedIdentity",
    "Direction",
    "MatchConfidence",
    "UsbHardwareRecord",
]
