"""Stable public API for building tooling on top of usbservices.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from types import TracebackType

from usbservices.core.config import resolve_config
from usbservices.core.errors import (
    ConfigurationError,
    DeviceEnumerationError,
    NativeDriverClosedError,
    NativeInitError,
    ProviderReleasedError,
    ReleaseError,
    UsbServicesError,
)
from usbservices.core.model import (
    HUB_CLASSCODE,
    ROOT_DEVICE_DESCRIPTOR,
    DeviceDescriptor,
    ResolvedConfig,
    UsbDevice,
    UsbDeviceLike,
    UsbHubLike,
)
from usbservices.core.root_hub import RootHubView
from usbservices.core.service import ProviderState, UsbServices
from usbservices.native.base import NativeDriver
from usbservices.native.libusb1 import Libusb1Driver, set_trace_calls, trace_calls_enabled

__all__ = [
    "UsbServicesError",
    "ConfigurationError",
    "NativeInitError",
    "DeviceEnumerationError",
    "ReleaseError",
    "NativeDriverClosedError",
    "ProviderReleasedError",
    "HUB_CLASSCODE",
    "ROOT_DEVICE_DESCRIPTOR",
    "DeviceDescriptor",
    "ResolvedConfig",
    "UsbDevice",
    "UsbDeviceLike",
    "UsbHubLike",
    "RootHubView",
    "ProviderState",
    "UsbServices",
    "NativeDriver",
    "Libusb1Driver",
    "resolve_config",
    "set_trace_calls",
    "trace_calls_enabled",
    "Client",
]


class Client:
    """Public client for the USB services provider.

    A `Client` owns a `UsbServices` instance for its whole lifetime and must
    be closed (or used as a context manager) to release the native handle.
    """

    def __init__(
        self,
        *,
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
        driver_factory: Callable[[], NativeDriver] | None = None,
    ) -> None:
        self._service = UsbServices(
            config_path=config_path,
            environ=environ,
            driver_factory=driver_factory,
        )

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._service.__exit__(exc_type, exc, tb)

    @property
    def config(self) -> ResolvedConfig:
        return self._service.config

    @property
    def state(self) -> ProviderState:
        return self._service.state

    def get_api_version(self) -> str:
        return self._service.get_api_version()

    def get_impl_description(self) -> str:
        return self._service.get_impl_description()

    def get_impl_version(self) -> str:
        return self._service.get_impl_version()

    def get_root_hub(self) -> RootHubView:
        return self._service.get_root_hub()

    def list_devices(self) -> tuple[UsbDevice, ...]:
        return self._service.get_root_hub().attached_devices

    def close(self) -> None:
        self._service.close()
