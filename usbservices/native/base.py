"""Native USB driver interfaces."""

from __future__ import annotations

from typing import Protocol

from usbservices.core.model import UsbDevice


class NativeDriver(Protocol):
    """Handle on the native USB subsystem.

    A handle is owned by a single provider and is not safe to call from
    several threads without external locking.
    """

    def open(self) -> None:
        """Initialize the native layer; raise NativeInitError on failure."""

    def list_devices(self) -> list[UsbDevice]:
        """Return the currently attached devices in native order."""

    def set_debug(self, level: int) -> None:
        """Set the native log verbosity for this handle."""

    def close(self) -> None:
        """Release native resources."""
