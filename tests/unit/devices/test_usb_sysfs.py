"""
Tests for sysfs-based USB enumeration.

Tests cover:
- Parsing device nodes into UsbHardwareRecord
- Skipping root hubs, interfaces and incomplete nodes
- Resolving ALSA cards back to their USB device
"""

from pathlib import Path

import pytest

from usb_audio_monitor.devices.usb_sysfs import (
    alsa_card_bus_path,
    extract_alsa_card,
    extract_usb_bus_path,
    is_usb_path,
    list_usb_hardware,
    read_usb_device,
)


class TestListUsbHardware:
    """Tests for list_usb_hardware()."""

    def test_parses_device_attributes(self, fake_sysfs):
        fake_sysfs.add_usb_device(
            "1-2", 0x1235, 0x8210,
            device_class=0, serial="Y8ABC", manufacturer="Focusrite",
            product="Scarlett 2i2 USB", interfaces=4,
        )

        records = list_usb_hardware(fake_sysfs.usb_root)

        assert len(records) == 1
        record = records[0]
        assert record.vendor_id == 0x1235
        assert record.product_id == 0x8210
        assert record.device_class == 0
        assert record.serial_number == "Y8ABC"
        assert record.manufacturer_name == "Focusrite"
        assert record.product_name == "Scarlett 2i2 USB"
        assert record.interface_count == 4
        assert record.bus_path == "1-2"

    def test_missing_strings_are_none(self, fake_sysfs):
        fake_sysfs.add_usb_device("1-1", 0x0D8C, 0x0014, device_class=1)

        record = list_usb_hardware(fake_sysfs.usb_root)[0]

        assert record.serial_number is None
        assert record.product_name is None
        assert record.is_audio_class

    @pytest.mark.parametrize("device_class", [0x00, 0xEF])
    def test_audio_interface_marks_device_audio_class(self, fake_sysfs, device_class):
        fake_sysfs.add_usb_device(
            "1-3", 0x046D, 0x0AB7, device_class=device_class, interface_classes=(0x01, 0x01, 0x03)
        )

        record = list_usb_hardware(fake_sysfs.usb_root)[0]

        assert record.device_class == 1
        assert record.is_audio_class

    def test_non_audio_interfaces_keep_device_class(self, fake_sysfs):
        fake_sysfs.add_usb_device("1-4", 0x046D, 0xC52B, interface_classes=(0x03, 0x03))
        fake_sysfs.add_usb_device("1-5", 0x0BDA, 0x8153, device_class=0xFF, interface_classes=(0x01,))

        records = list_usb_hardware(fake_sysfs.usb_root)

        assert [r.device_class for r in records] == [0x00, 0xFF]

    def test_skips_hubs_and_interfaces(self, fake_sysfs):
        fake_sysfs.add_root_hub("usb1")
        fake_sysfs.add_interface_node("1-2:1.0")
        fake_sysfs.add_usb_device("1-2", 0x046D, 0x0AB7)

        records = list_usb_hardware(fake_sysfs.usb_root)

        assert [r.bus_path for r in records] == ["1-2"]

    def test_orders_by_bus_path(self, fake_sysfs):
        for bus_path in ("1-10", "2-1", "1-2.3", "1-2"):
            fake_sysfs.add_usb_device(bus_path, 0x1000, 0x0001)

        records = list_usb_hardware(fake_sysfs.usb_root)

        assert [r.bus_path for r in records] == ["1-2", "1-2.3", "1-10", "2-1"]

    def test_node_without_ids_is_skipped(self, fake_sysfs):
        (fake_sysfs.usb_root / "3-1").mkdir()
        assert list_usb_hardware(fake_sysfs.usb_root) == []

    def test_missing_root_returns_empty(self, tmp_path):
        assert list_usb_hardware(tmp_path / "does-not-exist") == []

    def test_garbage_vendor_id_is_skipped(self, fake_sysfs):
        node = fake_sysfs.add_usb_device("1-4", 0x1111, 0x2222)
        (node / "idVendor").write_text("zzzz\n")
        assert read_usb_device(fake_sysfs.usb_root / "1-4") is None


class TestAlsaResolution:
    """Tests for ALSA card to USB bus path resolution."""

    @pytest.mark.parametrize("name,expected", [
        ("Scarlett 2i2 USB: Audio (hw:2,0)", 2),
        ("HDA Intel PCH: ALC887 Analog (hw:0,0)", 0),
        ("pulse", None),
        ("default", None),
    ])
    def test_extract_alsa_card(self, name, expected):
        assert extract_alsa_card(name) == expected

    def test_usb_card_resolves_to_bus_path(self, fake_sysfs):
        fake_sysfs.add_usb_device("1-2", 0x1235, 0x8210)
        fake_sysfs.add_alsa_card(2, bus_path="1-2")

        assert alsa_card_bus_path(2, fake_sysfs.sound_root) == "1-2"

    def test_onboard_card_is_not_usb(self, fake_sysfs):
        fake_sysfs.add_alsa_card(0)
        assert alsa_card_bus_path(0, fake_sysfs.sound_root) is None

    def test_missing_card(self, fake_sysfs):
        assert alsa_card_bus_path(7, fake_sysfs.sound_root) is None

    def test_path_helpers(self):
        path = Path("/sys/devices/pci0000:00/0000:00:14.0/usb1/1-2/1-2.4/1-2.4:1.0/sound/card3")
        assert is_usb_path(path)
        assert extract_usb_bus_path(path) == "1-2.4"
        assert not is_usb_path(Path("/sys/devices/pci0000:00/0000:00:1f.3/sound/card0"))
