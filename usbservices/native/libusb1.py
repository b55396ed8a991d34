"""libusb-1.0 driver handle built on the python-libusb1 binding."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from usbservices.core.errors import (
    DeviceEnumerationError,
    NativeDriverClosedError,
    NativeInitError,
    ReleaseError,
)
from usbservices.core.model import DeviceDescriptor, UsbDevice

LOGGER = logging.getLogger(__name__)

# Shared by every handle in the process: the last call to set_trace_calls wins.
_trace_calls = False


def set_trace_calls(enabled: bool) -> None:
    """Turn logging of every native call on or off for the whole process."""
    global _trace_calls
    _trace_calls = bool(enabled)


def trace_calls_enabled() -> bool:
    return _trace_calls


def _trace(call: str, *args: Any) -> None:
    if _trace_calls:
        LOGGER.debug("libusb1.%s(%s)", call, ", ".join(repr(a) for a in args))


def _default_context_factory() -> Any:
    try:
        import usb1  # type: ignore
    except Exception as exc:
        raise NativeInitError(
            "libusb support requires the 'libusb1' package and a libusb-1.0 shared library."
        ) from exc
    return usb1.USBContext()


def device_from_native(native: Any) -> UsbDevice:
    """Copy a usb1.USBDevice into a value record that outlives the context."""
    try:
        port_path = tuple(native.getPortNumberList() or ())
    except Exception:
        port_path = ()
    return UsbDevice(
        descriptor=DeviceDescriptor(
            bcd_usb=native.getbcdUSB(),
            device_class=native.getDeviceClass(),
            device_subclass=native.getDeviceSubClass(),
            device_protocol=native.getDeviceProtocol(),
            max_packet_size0=native.getMaxPacketSize0(),
            vendor_id=native.getVendorID(),
            product_id=native.getProductID(),
            bcd_device=native.getbcdDevice(),
            manufacturer_index=native.device_descriptor.iManufacturer,
            product_index=native.device_descriptor.iProduct,
            serial_number_index=native.device_descriptor.iSerialNumber,
            num_configurations=native.getNumConfigurations(),
        ),
        bus_number=native.getBusNumber(),
        device_address=native.getDeviceAddress(),
        port_number=native.getPortNumber() or None,
        port_path=port_path,
        speed=native.getDeviceSpeed(),
    )


class Libusb1Driver:
    def __init__(self, context_factory: Callable[[], Any] | None = None) -> None:
        self._context_factory = context_factory or _default_context_factory
        self._context: Any = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._context is not None

    def open(self) -> None:
        if self._closed:
            raise NativeDriverClosedError("libusb handle was already released")
        if self._context is not None:
            return
        _trace("init")
        try:
            context = self._context_factory()
            context.open()
        except NativeInitError:
            raise
        except Exception as exc:
            raise NativeInitError(f"libusb initialization failed: {exc}") from exc
        self._context = context

    def _require_context(self) -> Any:
        if self._closed:
            raise NativeDriverClosedError("libusb handle was already released")
        if self._context is None:
            raise NativeDriverClosedError("libusb handle is not open")
        return self._context

    def list_devices(self) -> list[UsbDevice]:
        context = self._require_context()
        _trace("get_device_list")
        try:
            return [device_from_native(d) for d in context.getDeviceList(skip_on_error=True)]
        except Exception as exc:
            raise DeviceEnumerationError(f"libusb device enumeration failed: {exc}") from exc

    def set_debug(self, level: int) -> None:
        context = self._require_context()
        _trace("set_debug", level)
        try:
            context.setDebug(level)
        except Exception as exc:
            raise NativeInitError(f"libusb rejected debug level {level}: {exc}") from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        context, self._context = self._context, None
        if context is None:
            return
        _trace("exit")
        try:
            context.close()
        except Exception as exc:
            raise ReleaseError(f"libusb context release failed: {exc}") from exc
