"""Component-tagged loggers for the USB audio monitor."""

from __future__ import annotations

import logging
from typing import Optional, Union

LOGGER_NAMESPACE = "usb_audio_monitor"


class StructuredLogger:
    """Prefixes every message with ``[Component]``.

    ``get_module_logger("PresenceReconciler").info("Device appeared")`` logs
    ``[PresenceReconciler] Device appeared`` to
    ``usb_audio_monitor.PresenceReconciler``.
    """

    __slots__ = ("_logger", "_prefix")

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        component = logger.name.removeprefix(LOGGER_NAMESPACE).lstrip(".")
        self._prefix = f"[{component or 'Monitor'}]"

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def component(self) -> str:
        return self._prefix[1:-1]

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _log(self, level: int, message: object, args: tuple, **kwargs) -> None:
        if not self._logger.isEnabledFor(level):
            return
        text = str(message)
        if args:
            try:
                text = text % args
            except (TypeError, ValueError):
                text = f"{text} | args={' '.join(str(arg) for arg in args)}"
        self._logger.log(level, f"{self._prefix} {text}", **kwargs)

    def debug(self, message: object, *args, **kwargs) -> None:
        self._log(logging.DEBUG, message, args, **kwargs)

    def info(self, message: object, *args, **kwargs) -> None:
        self._log(logging.INFO, message, args, **kwargs)

    def warning(self, message: object, *args, **kwargs) -> None:
        self._log(logging.WARNING, message, args, **kwargs)

    def error(self, message: object, *args, **kwargs) -> None:
        self._log(logging.ERROR, message, args, **kwargs)


LoggerLike = Union[StructuredLogger, logging.Logger, None]


def get_module_logger(name: Optional[str] = None) -> StructuredLogger:
    """Structured logger under the ``usb_audio_monitor`` namespace."""
    if not name:
        full_name = LOGGER_NAMESPACE
    elif name.startswith(LOGGER_NAMESPACE):
        full_name = name
    else:
        full_name = f"{LOGGER_NAMESPACE}.{name}"
    return StructuredLogger(logging.getLogger(full_name))


def ensure_structured_logger(
    logger: LoggerLike,
    *,
    fallback_name: Optional[str] = None,
) -> StructuredLogger:
    """Wrap a plain logger, pass a structured one through, or build a fallback."""
    if isinstance(logger, StructuredLogger):
        return logger
    if isinstance(logger, logging.Logger):
        return StructuredLogger(logger)
    return get_module_logger(fallback_name)


__all__ = [
    "LoggerLike",
    "StructuredLogger",
    "ensure_structured_logger",
    "get_module_logger",
]
