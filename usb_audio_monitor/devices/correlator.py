"""
Device Correlator - links an audio endpoint to the USB device behind it.

The audio subsystem and the USB subsystem enumerate devices through
unrelated identifier spaces, so the link has to be inferred:

1. Name match: the USB product name appears in the audio display name.
2. Class heuristic: the audio name contains "USB-Audio" and the USB
   device reports the audio class.
3. Sole device: the USB list holds exactly one device and it is audio class.

Candidates are tried in enumeration order and each one is checked against
the rules in the order above. The first candidate that satisfies any rule
wins, even if a later candidate would satisfy an earlier rule.

A matched identity is keyed on VID/PID (plus serial when the device has
one), so it survives replugging. Two units of the same model without serial
numbers are indistinguishable. An unmatched identity falls back to the
audio subsystem's own id, which is only stable while the platform reuses it.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.logging_utils import get_module_logger

from .types import (
    AudioDeviceRecord,
    CorrelatedIdentity,
    MatchConfidence,
    UsbHardwareRecord,
)

logger = get_module_logger("DeviceCorrelator")

USB_AUDIO_KEYWORD = "usb-audio"


def format_hex_id(value: int) -> str:
    """Render a 16-bit USB id as four uppercase hex digits (``0x1235`` -> ``1235``)."""
    return f"{value & 0xFFFF:04X}"


def display_name_hash(text: str) -> str:
    """Stable 32-bit polynomial hash of ``text``, rendered as a signed decimal.

    Uses ``h = 31 * h + unit`` over UTF-16 code units, so the value does not
    depend on ``PYTHONHASHSEED`` and is the same across runs.
    """
    encoded = text.encode("utf-16-le", errors="surrogatepass")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = (31 * h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return str(h)


def _name_match(name: str, candidate: UsbHardwareRecord) -> bool:
    product = candidate.product_name or ""
    return bool(product) and product.lower() in name.lower()


def _class_heuristic_match(name: str, candidate: UsbHardwareRecord) -> bool:
    return USB_AUDIO_KEYWORD in name.lower() and candidate.is_audio_class


def _find_match(
    audio: AudioDeviceRecord,
    candidates: Sequence[UsbHardwareRecord],
) -> tuple[Optional[UsbHardwareRecord], MatchConfidence]:
    name = audio.display_name or ""
    sole = len(candidates) == 1

    for candidate in candidates:
        if _name_match(name, candidate):
            return candidate, MatchConfidence.MATCHED_BY_NAME
        if _class_heuristic_match(name, candidate):
            return candidate, MatchConfidence.MATCHED_BY_CLASS_HEURISTIC
        if sole and candidate.is_audio_class:
            return candidate, MatchConfidence.MATCHED_BY_SOLE_DEVICE

    return None, MatchConfidence.UNMATCHED


def correlate(
    audio: AudioDeviceRecord,
    usb_candidates: Iterable[UsbHardwareRecord] = (),
) -> CorrelatedIdentity:
    """Derive the identity of ``audio`` from the USB devices enumerated alongside it.

    Never raises: empty inputs yield an ``UNMATCHED`` identity built from the
    audio record alone.
    """
    candidates = tuple(usb_candidates or ())
    matched, confidence = _find_match(audio, candidates)

    if matched is not None:
        vendor = format_hex_id(matched.vendor_id)
        product = format_hex_id(matched.product_id)
        suffix = matched.serial_number or str(audio.id)
        identity = CorrelatedIdentity(
            unique_identifier=f"USB_{vendor}_{product}_{suffix}",
            hardware_identifier=f"{vendor}:{product}",
            matched_hardware=matched,
            confidence=confidence,
        )
    else:
        identity = CorrelatedIdentity(
            unique_identifier=(
                f"{audio.id}_{display_name_hash(audio.display_name or '')}_{audio.category}"
            ),
            hardware_identifier=f"ADDR_{audio.address}" if audio.address else None,
            matched_hardware=None,
            confidence=confidence,
        )

    logger.debug(
        "Correlated '%s' against %d USB device(s): %s",
        audio.display_name,
        len(candidates),
        describe(identity),
    )
    return identity


def describe(identity: CorrelatedIdentity) -> str:
    """One-line summary of an identity for log output."""
    hardware = identity.hardware_identifier or "-"
    return f"{identity.unique_identifier} ({hardware}, {identity.confidence.value})"


__all__ = [
    "USB_AUDIO_KEYWORD",
    "correlate",
    "describe",
    "display_name_hash",
    "format_hex_id",
]
