"""
Audio and USB device enumeration.

``DeviceEnumerator`` is the collaborator the presence reconciler polls.
``SoundDeviceEnumerator`` implements it with sounddevice (PortAudio) for
audio endpoints and sysfs for USB hardware. On Linux each ALSA card is
traced back to its USB device node, so USB endpoints come out of
enumeration with their hardware already resolved.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

from ..core.logging_utils import get_module_logger
from .errors import EnumerationFailed
from .types import (
    AudioDeviceCategory,
    AudioDeviceRecord,
    CategoryTag,
    Direction,
    UsbHardwareRecord,
)
from .usb_sysfs import (
    SYSFS_SOUND_CLASS,
    SYSFS_USB_DEVICES,
    alsa_card_bus_path,
    extract_alsa_card,
    list_usb_hardware,
    read_usb_device,
)

logger = get_module_logger("DeviceEnumerator")

# sounddevice is optional so the correlator and reconciler stay importable
# on hosts without PortAudio.
try:
    import sounddevice as sd
    SOUNDDEVICE_AVAILABLE = True
except (ImportError, OSError):
    sd = None
    SOUNDDEVICE_AVAILABLE = False
    logger.warning("sounddevice not available - audio enumeration disabled")


QueryDevices = Callable[[], Sequence[Mapping[str, Any]]]


class DeviceEnumerator(Protocol):
    """What the presence reconciler needs from the platform.

    Both calls may block and both may raise ``EnumerationFailed``.
    """

    def list_audio_devices(
        self, direction: Direction = Direction.INPUT
    ) -> list[AudioDeviceRecord]:
        ...

    def list_usb_hardware(self) -> list[UsbHardwareRecord]:
        ...


def classify_device(name: str, host_api: int, usb_attached: bool) -> CategoryTag:
    """Best-effort category for a PortAudio device.

    ``usb_attached`` comes from sysfs and is authoritative; without it the
    device name is the only hint available.
    """
    lowered = name.lower()
    if usb_attached or "usb" in lowered:
        if "headset" in lowered:
            return CategoryTag(AudioDeviceCategory.USB_HEADSET)
        return CategoryTag(AudioDeviceCategory.USB_DEVICE)
    if "bluetooth" in lowered or "bluez" in lowered:
        return CategoryTag(AudioDeviceCategory.BLUETOOTH_SCO)
    if "headset" in lowered:
        return CategoryTag(AudioDeviceCategory.WIRED_HEADSET)
    if "built-in" in lowered or "internal" in lowered:
        return CategoryTag(AudioDeviceCategory.BUILTIN_MIC)
    return CategoryTag.unknown(host_api)


def _reinitialize_portaudio() -> None:
    # PortAudio snapshots the device list when it initializes; hotplugged
    # devices only show up after a restart of the library.
    sd._terminate()
    sd._initialize()


class SoundDeviceEnumerator:
    """
    Enumerates audio endpoints with sounddevice and USB devices from sysfs.

    Usage:
        enumerator = SoundDeviceEnumerator()
        audio = enumerator.list_audio_devices(Direction.INPUT)
        usb = enumerator.list_usb_hardware()
    """

    def __init__(
        self,
        *,
        usb_sysfs_root: Path = SYSFS_USB_DEVICES,
        sound_sysfs_root: Path = SYSFS_SOUND_CLASS,
        rescan: bool = True,
        query_devices: Optional[QueryDevices] = None,
    ) -> None:
        self._usb_root = Path(usb_sysfs_root)
        self._sound_root = Path(sound_sysfs_root)
        self._rescan = rescan
        self._query_devices = query_devices

    def _query(self) -> Sequence[Mapping[str, Any]]:
        if self._query_devices is not None:
            return self._query_devices()
        if not SOUNDDEVICE_AVAILABLE:
            raise EnumerationFailed("sounddevice is not available")
        try:
            if self._rescan:
                _reinitialize_portaudio()
            return sd.query_devices()
        except sd.PortAudioError as exc:
            raise EnumerationFailed(f"PortAudio query failed: {exc}") from exc

    def list_audio_devices(
        self, direction: Direction = Direction.INPUT
    ) -> list[AudioDeviceRecord]:
        direction = Direction.parse(direction)
        channel_key = (
            "max_input_channels" if direction is Direction.INPUT else "max_output_channels"
        )

        records: list[AudioDeviceRecord] = []
        for index, info in enumerate(self._query()):
            channels = int(info.get(channel_key, 0) or 0)
            if channels <= 0:
                continue

            name = str(info.get("name") or "")
            host_api = int(info.get("hostapi", 0) or 0)
            sample_rate = int(float(info.get("default_samplerate") or 0))

            bus_path = None
            card = extract_alsa_card(name)
            if card is not None:
                bus_path = alsa_card_bus_path(card, self._sound_root)
            usb_hardware = read_usb_device(self._usb_root / bus_path) if bus_path else None

            records.append(
                AudioDeviceRecord(
                    id=int(info.get("index", index)),
                    display_name=name,
                    category=classify_device(name, host_api, bus_path is not None),
                    is_source=direction is Direction.INPUT,
                    channel_counts=(channels,),
                    sample_rates=(sample_rate,) if sample_rate > 0 else (),
                    address=bus_path,
                    usb_hardware=usb_hardware,
                )
            )

        logger.debug("Enumerated %d %s audio device(s)", len(records), direction.value)
        return records

    def list_usb_hardware(self) -> list[UsbHardwareRecord]:
        return list_usb_hardware(self._usb_root)


__all__ = [
    "DeviceEnumerator",
    "SOUNDDEVICE_AVAILABLE",
    "SoundDeviceEnumerator",
    "classify_device",
]
