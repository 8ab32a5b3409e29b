"""Shared pytest configuration and fixtures for the monitor test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring a real USB audio device"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require physical hardware",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def focusrite_record():
    """USB audio endpoint whose name carries the ALSA "USB-Audio" driver tag."""
    from tests.infrastructure.mocks.device_mocks import make_audio_record
    return make_audio_record(id=12, display_name="Focusrite USB-Audio")


@pytest.fixture
def focusrite_hardware():
    """Audio-class USB device with no product string."""
    from usb_audio_monitor.devices.types import UsbHardwareRecord
    return UsbHardwareRecord(vendor_id=0x1235, product_id=0x8210, device_class=1)


@pytest.fixture
def fake_sysfs(tmp_path: Path):
    """Empty fake sysfs tree; see FakeSysfs for helpers."""
    from tests.infrastructure.mocks.device_mocks import FakeSysfs
    return FakeSysfs(tmp_path / "sys")
