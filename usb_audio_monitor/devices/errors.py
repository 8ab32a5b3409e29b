"""Errors raised by device enumeration."""


class EnumerationFailed(Exception):
    """The platform could not produce a device list.

    Raised by enumerators for revoked permissions, an unavailable audio
    service or transient I/O problems. The presence reconciler turns it into
    an ``EnumerationFailedEvent`` and keeps polling.
    """

    def __init__(self, cause: str) -> None:
        super().__init__(cause)
        self.cause = cause
