"""Mock enumerators and a fake sysfs tree for device tests.

Everything here stands in for the operating system; nothing touches real
audio or USB hardware.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from usb_audio_monitor.devices.types import (
    AudioDeviceCategory,
    AudioDeviceRecord,
    CategoryTag,
    Direction,
    UsbHardwareRecord,
)


def make_audio_record(
    id: int = 1,
    display_name: str = "USB Microphone",
    category: Union[AudioDeviceCategory, CategoryTag] = AudioDeviceCategory.USB_DEVICE,
    **kwargs: Any,
) -> AudioDeviceRecord:
    """Build an AudioDeviceRecord with test-friendly defaults."""
    tag = category if isinstance(category, CategoryTag) else CategoryTag(category)
    return AudioDeviceRecord(id=id, display_name=display_name, category=tag, **kwargs)


# =============================================================================
# Enumerators
# =============================================================================

@dataclass
class Tick:
    """What the scripted enumerator reports for one poll."""
    audio: List[AudioDeviceRecord] = field(default_factory=list)
    usb: List[UsbHardwareRecord] = field(default_factory=list)


class ScriptedEnumerator:
    """Replays one scripted step per poll; the last step repeats forever.

    A step is a Tick, or an exception instance that the audio query raises.
    """

    def __init__(self, steps: Iterable[Union[Tick, BaseException]]):
        self._steps = list(steps) or [Tick()]
        self._index = 0
        self._current: Union[Tick, BaseException] = self._steps[0]
        self.audio_calls = 0
        self.usb_calls = 0
        self.directions: List[Direction] = []

    def list_audio_devices(self, direction: Direction = Direction.INPUT) -> List[AudioDeviceRecord]:
        self.audio_calls += 1
        self.directions.append(direction)
        self._current = self._steps[min(self._index, len(self._steps) - 1)]
        self._index += 1
        if isinstance(self._current, BaseException):
            raise self._current
        return list(self._current.audio)

    def list_usb_hardware(self) -> List[UsbHardwareRecord]:
        self.usb_calls += 1
        assert isinstance(self._current, Tick)
        return list(self._current.usb)


class BlockingEnumerator:
    """Audio query blocks until ``release`` is set, tracking concurrency."""

    def __init__(self, audio: Iterable[AudioDeviceRecord] = ()):
        self.audio = list(audio)
        self._lock = threading.Lock()
        self.entered = threading.Event()
        self.release = threading.Event()
        self.active = 0
        self.max_active = 0
        self.calls = 0

    def list_audio_devices(self, direction: Direction = Direction.INPUT) -> List[AudioDeviceRecord]:
        with self._lock:
            self.active += 1
            self.calls += 1
            self.max_active = max(self.max_active, self.active)
        self.entered.set()
        self.release.wait(timeout=5.0)
        with self._lock:
            self.active -= 1
        return list(self.audio)

    def list_usb_hardware(self) -> List[UsbHardwareRecord]:
        return []


class EventRecorder:
    """Async presence event handler that remembers what it received."""

    def __init__(self, fail: bool = False):
        self.events: List[Any] = []
        self._fail = fail

    async def __call__(self, event: Any) -> None:
        self.events.append(event)
        if self._fail:
            raise RuntimeError("subscriber blew up")

    @property
    def kinds(self) -> List[str]:
        return [type(event).__name__ for event in self.events]


# =============================================================================
# Fake sysfs
# =============================================================================

class FakeSysfs:
    """Builds a miniature /sys with USB device nodes and ALSA card links."""

    def __init__(self, root: Path):
        self.root = root
        self.usb_root = root / "bus" / "usb" / "devices"
        self.sound_root = root / "class" / "sound"
        self.controller = root / "devices" / "pci0000:00" / "0000:00:14.0" / "usb1"
        self.onboard = root / "devices" / "pci0000:00" / "0000:00:1f.3"
        for path in (self.usb_root, self.sound_root, self.controller, self.onboard):
            path.mkdir(parents=True, exist_ok=True)

    def add_usb_device(
        self,
        bus_path: str,
        vendor_id: int,
        product_id: int,
        *,
        device_class: int = 0,
        serial: Optional[str] = None,
        manufacturer: Optional[str] = None,
        product: Optional[str] = None,
        interfaces: int = 1,
        interface_classes: Iterable[int] = (),
    ) -> Path:
        node = self.controller / bus_path
        node.mkdir(parents=True, exist_ok=True)
        (node / "idVendor").write_text(f"{vendor_id:04x}\n")
        (node / "idProduct").write_text(f"{product_id:04x}\n")
        (node / "bDeviceClass").write_text(f"{device_class:02x}\n")
        (node / "bNumInterfaces").write_text(f"{interfaces:2d}\n")
        for name, value in (("serial", serial), ("manufacturer", manufacturer), ("product", product)):
            if value is not None:
                (node / name).write_text(f"{value}\n")
        for number, interface_class in enumerate(interface_classes):
            interface = node / f"{bus_path}:1.{number}"
            interface.mkdir(parents=True, exist_ok=True)
            (interface / "bInterfaceClass").write_text(f"{interface_class:02x}\n")
        (self.usb_root / bus_path).symlink_to(node, target_is_directory=True)
        return node

    def add_root_hub(self, name: str = "usb1") -> None:
        hub = self.usb_root / name
        hub.mkdir()
        (hub / "idVendor").write_text("1d6b\n")
        (hub / "idProduct").write_text("0002\n")

    def add_interface_node(self, name: str) -> None:
        (self.usb_root / name).mkdir()

    def add_alsa_card(self, index: int, bus_path: Optional[str] = None) -> None:
        if bus_path is None:
            target = self.onboard / "sound" / f"card{index}"
        else:
            target = self.controller / bus_path / f"{bus_path}:1.0" / "sound" / f"card{index}"
        target.mkdir(parents=True, exist_ok=True)
        card = self.sound_root / f"card{index}"
        card.mkdir()
        (card / "device").symlink_to(target.parent.parent, target_is_directory=True)
