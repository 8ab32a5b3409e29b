"""
USB hardware enumeration through Linux sysfs.

Every USB device the kernel knows about has a node under
``/sys/bus/usb/devices`` named after its bus path (``1-2``, ``1-2.3``).
Root hubs show up as ``usb1``, ``usb2`` and interfaces as ``1-2:1.0``; both
are skipped. Reading sysfs never touches the hardware itself.

ALSA cards link back to the same nodes through
``/sys/class/sound/card<N>/device``, which lets the audio enumerator resolve
the USB device behind a sound card without any name matching.
"""

from __future__ import annotations

import re
from pathlib import Path

from ..core.logging_utils import get_module_logger
from .errors import EnumerationFailed
from .types import USB_AUDIO_CLASS, UsbHardwareRecord

logger = get_module_logger("UsbSysfs")

SYSFS_USB_DEVICES = Path("/sys/bus/usb/devices")
SYSFS_SOUND_CLASS = Path("/sys/class/sound")

_DEVICE_NODE = re.compile(r"^\d+-[\d.]+$")
_ALSA_CARD = re.compile(r"hw:(\d+)")
_INTERFACE_DEFINED_CLASSES = (0x00, 0xEF)


def _read_attr(node: Path, name: str) -> str | None:
    try:
        value = (node / name).read_text(encoding="utf-8", errors="replace").strip()
    except OSError:
        return None
    return value or None


def _read_int(node: Path, name: str, base: int) -> int | None:
    text = _read_attr(node, name)
    if text is None:
        return None
    try:
        return int(text, base)
    except ValueError:
        logger.debug("Unparseable %s in %s: %r", name, node, text)
        return None


def _bus_path_sort_key(name: str) -> tuple[int, ...]:
    return tuple(int(part) for part in re.split(r"[-.]", name) if part.isdigit())


def _device_class(node: Path) -> int:
    """bDeviceClass, or the audio class when it defers to an audio interface.

    Most audio devices report 0x00 (per interface) or 0xEF (composite) at
    device level and declare class 1 on their interfaces.
    """
    device_class = _read_int(node, "bDeviceClass", 16) or 0
    if device_class not in _INTERFACE_DEFINED_CLASSES:
        return device_class
    for interface in sorted(node.glob(f"{node.name}:*")):
        if _read_int(interface, "bInterfaceClass", 16) == USB_AUDIO_CLASS:
            return USB_AUDIO_CLASS
    return device_class


def read_usb_device(node: Path) -> UsbHardwareRecord | None:
    """Build a record from one sysfs device node, or None if it lacks VID/PID."""
    vendor_id = _read_int(node, "idVendor", 16)
    product_id = _read_int(node, "idProduct", 16)
    if vendor_id is None or product_id is None:
        return None

    return UsbHardwareRecord(
        vendor_id=vendor_id,
        product_id=product_id,
        device_class=_device_class(node),
        serial_number=_read_attr(node, "serial"),
        manufacturer_name=_read_attr(node, "manufacturer"),
        product_name=_read_attr(node, "product"),
        interface_count=_read_int(node, "bNumInterfaces", 10) or 0,
        bus_path=node.name,
    )


def list_usb_hardware(root: Path = SYSFS_USB_DEVICES) -> list[UsbHardwareRecord]:
    """Return every attached USB device, ordered by bus path.

    Returns an empty list where sysfs does not exist (non-Linux hosts).

    Raises:
        EnumerationFailed: the sysfs directory exists but cannot be listed.
    """
    if not root.exists():
        logger.debug("No USB sysfs tree at %s", root)
        return []

    try:
        names = [entry.name for entry in root.iterdir() if _DEVICE_NODE.match(entry.name)]
    except OSError as exc:
        raise EnumerationFailed(f"Cannot read {root}: {exc}") from exc

    records: list[UsbHardwareRecord] = []
    for name in sorted(names, key=_bus_path_sort_key):
        record = read_usb_device(root / name)
        if record is not None:
            records.append(record)
    return records


def is_usb_path(sysfs_path: Path) -> bool:
    """True when a resolved sysfs path passes through a USB controller."""
    return any(part.lower().startswith("usb") for part in sysfs_path.parts)


def extract_usb_bus_path(sysfs_path: Path) -> str | None:
    """Walk up a resolved sysfs path to the USB device node.

    ``/sys/devices/pci0000:00/.../usb1/1-2/1-2:1.0/sound/card2`` -> ``1-2``
    """
    current = sysfs_path
    while current.parent != current:
        if _DEVICE_NODE.match(current.name):
            return current.name
        current = current.parent
    return None


def extract_alsa_card(device_name: str) -> int | None:
    """ALSA card index from a PortAudio name such as ``"C920: USB Audio (hw:2,0)"``."""
    match = _ALSA_CARD.search(device_name)
    return int(match.group(1)) if match else None


def alsa_card_bus_path(card_index: int, sound_root: Path = SYSFS_SOUND_CLASS) -> str | None:
    """USB bus path of an ALSA card, or None when the card is not USB attached."""
    link = sound_root / f"card{card_index}" / "device"
    try:
        resolved = link.resolve(strict=True)
    except OSError:
        logger.debug("No sysfs device for ALSA card %d", card_index)
        return None

    if not is_usb_path(resolved):
        return None
    return extract_usb_bus_path(resolved)


__all__ = [
    "SYSFS_SOUND_CLASS",
    "SYSFS_USB_DEVICES",
    "alsa_card_bus_path",
    "extract_alsa_card",
    "extract_usb_bus_path",
    "is_usb_path",
    "list_usb_hardware",
    "read_usb_device",
]
