"""Services provider used by the public API and the CLI."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from types import TracebackType

from usbservices.core.config import resolve_config
from usbservices.core.errors import (
    DeviceEnumerationError,
    NativeInitError,
    ProviderReleasedError,
    ReleaseError,
)
from usbservices.core.model import ResolvedConfig
from usbservices.core.root_hub import RootHubView
from usbservices.native.base import NativeDriver
from usbservices.native.libusb1 import Libusb1Driver, set_trace_calls

API_VERSION = "1.0.1"
IMPL_DESCRIPTION = "Usb for Python"
IMPL_VERSION = "0.1.0"

LOGGER = logging.getLogger(__name__)


class ProviderState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    CONSTRUCTING = "constructing"
    READY = "ready"
    RELEASED = "released"


class UsbServices:
    """Owns one native driver handle and hands out root hub snapshots.

    Release the handle with close() or by using the provider as a context
    manager; nothing releases it implicitly. Not safe for concurrent use.
    """

    def __init__(
        self,
        *,
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
        driver_factory: Callable[[], NativeDriver] | None = None,
    ) -> None:
        self.state = ProviderState.UNINITIALIZED
        self._driver: NativeDriver | None = None
        self.config = ResolvedConfig()

        self.state = ProviderState.CONSTRUCTING
        driver = (driver_factory or Libusb1Driver)()
        try:
            driver.open()
        except NativeInitError:
            self.state = ProviderState.RELEASED
            raise
        except Exception as exc:
            self.state = ProviderState.RELEASED
            raise NativeInitError(f"Native USB layer failed to initialize: {exc}") from exc
        self._driver = driver

        try:
            self.config = resolve_config(config_path, environ)
            set_trace_calls(self.config.trace)
            if self.config.debug_level is not None:
                driver.set_debug(self.config.debug_level)
        except Exception:
            try:
                self.close()
            except ReleaseError as release_exc:
                LOGGER.warning("Releasing native handle after failed startup: %s", release_exc)
            raise

        self.state = ProviderState.READY
        LOGGER.debug("USB services ready (trace=%s, debug=%s)", self.config.trace, self.config.debug_level)

    def __enter__(self) -> UsbServices:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.close()
        except ReleaseError as release_exc:
            if exc is None:
                raise
            LOGGER.warning("Ignoring release failure during error exit: %s", release_exc)

    def get_api_version(self) -> str:
        return API_VERSION

    def get_impl_description(self) -> str:
        return IMPL_DESCRIPTION

    def get_impl_version(self) -> str:
        return IMPL_VERSION

    def get_root_hub(self) -> RootHubView:
        if self.state is not ProviderState.READY or self._driver is None:
            raise ProviderReleasedError(f"USB services are not available (state: {self.state.value})")
        try:
            devices = self._driver.list_devices()
        except DeviceEnumerationError:
            raise
        except Exception as exc:
            raise DeviceEnumerationError(f"Device enumeration failed: {exc}") from exc
        return RootHubView(devices)

    def close(self) -> None:
        """Release the native handle. Calling this again is a no-op."""
        if self.state is ProviderState.RELEASED:
            return
        self.state = ProviderState.RELEASED
        driver, self._driver = self._driver, None
        if driver is None:
            return
        LOGGER.debug("Releasing native USB handle")
        try:
            driver.close()
        except ReleaseError:
            raise
        except Exception as exc:
            raise ReleaseError(f"Native handle release failed: {exc}") from exc
