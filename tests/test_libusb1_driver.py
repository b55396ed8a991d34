from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from usbservices.core.errors import (
    DeviceEnumerationError,
    NativeDriverClosedError,
    NativeInitError,
    ReleaseError,
)
from usbservices.native import libusb1 as native_libusb1
from usbservices.native.libusb1 import Libusb1Driver, device_from_native


class FakeNativeDevice:
    def __init__(self, vendor_id: int, product_id: int, address: int) -> None:
        self.vendor_id = vendor_id
        self.product_id = product_id
        self.address = address
        self.device_descriptor = SimpleNamespace(iManufacturer=1, iProduct=2, iSerialNumber=0)

    def getbcdUSB(self) -> int:
        return 0x0210

    def getDeviceClass(self) -> int:
        return 0

    def getDeviceSubClass(self) -> int:
        return 0

    def getDeviceProtocol(self) -> int:
        return 0

    def getMaxPacketSize0(self) -> int:
        return 64

    def getVendorID(self) -> int:
        return self.vendor_id

    def getProductID(self) -> int:
        return self.product_id

    def getbcdDevice(self) -> int:
        return 0x0105

    def getNumConfigurations(self) -> int:
        return 1

    def getBusNumber(self) -> int:
        return 3

    def getDeviceAddress(self) -> int:
        return self.address

    def getPortNumber(self) -> int:
        return 2

    def getPortNumberList(self) -> list[int]:
        return [1, 2]

    def getDeviceSpeed(self) -> int:
        return 3


class FakeContext:
    def __init__(self) -> None:
        self.devices = [FakeNativeDevice(0x046D, 0xC52B, 4), FakeNativeDevice(0x0781, 0x5581, 7)]
        self.debug: list[int] = []
        self.opened = False
        self.closed = False
        self.fail_open = False
        self.fail_list = False
        self.fail_close = False

    def open(self) -> FakeContext:
        if self.fail_open:
            raise OSError("LIBUSB_ERROR_OTHER")
        self.opened = True
        return self

    def getDeviceList(self, skip_on_access_error: bool = False, skip_on_error: bool = False) -> list:
        if self.fail_list:
            raise OSError("LIBUSB_ERROR_NO_DEVICE")
        return list(self.devices)

    def setDebug(self, level: int) -> None:
        self.debug.append(level)

    def close(self) -> None:
        if self.fail_close:
            raise OSError("LIBUSB_ERROR_BUSY")
        self.closed = True


@pytest.fixture(autouse=True)
def _reset_trace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(native_libusb1, "_trace_calls", False)


def _driver(context: FakeContext) -> Libusb1Driver:
    driver = Libusb1Driver(context_factory=lambda: context)
    driver.open()
    return driver


def test_device_record_copies_descriptor() -> None:
    device = device_from_native(FakeNativeDevice(0x046D, 0xC52B, 4))
    assert device.descriptor.vendor_id == 0x046D
    assert device.descriptor.product_id == 0xC52B
    assert device.descriptor.bcd_usb == 0x0210
    assert device.descriptor.manufacturer_index == 1
    assert device.bus_number == 3
    assert device.device_address == 4
    assert device.port_number == 2
    assert device.port_path == (1, 2)
    assert device.parent is None


def test_list_devices_keeps_native_order() -> None:
    driver = _driver(FakeContext())
    assert [d.device_address for d in driver.list_devices()] == [4, 7]


def test_open_failure_raises_native_init_error() -> None:
    context = FakeContext()
    context.fail_open = True
    driver = Libusb1Driver(context_factory=lambda: context)
    with pytest.raises(NativeInitError):
        driver.open()
    assert not driver.is_open


def test_list_failure_raises_enumeration_error() -> None:
    context = FakeContext()
    driver = _driver(context)
    context.fail_list = True
    with pytest.raises(DeviceEnumerationError):
        driver.list_devices()


def test_set_debug_forwards_level() -> None:
    context = FakeContext()
    _driver(context).set_debug(3)
    assert context.debug == [3]


def test_no_calls_after_close() -> None:
    context = FakeContext()
    driver = _driver(context)
    driver.close()

    assert context.closed
    with pytest.raises(NativeDriverClosedError):
        driver.list_devices()
    with pytest.raises(NativeDriverClosedError):
        driver.set_debug(1)
    with pytest.raises(NativeDriverClosedError):
        driver.open()


def test_close_twice_releases_once() -> None:
    context = FakeContext()
    driver = _driver(context)
    driver.close()
    context.fail_close = True
    driver.close()


def test_close_failure_raises_release_error() -> None:
    context = FakeContext()
    context.fail_close = True
    driver = _driver(context)
    with pytest.raises(ReleaseError):
        driver.close()


def test_trace_logs_native_calls(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="usbservices.native.libusb1")
    native_libusb1.set_trace_calls(True)

    driver = _driver(FakeContext())
    driver.set_debug(2)
    driver.list_devices()

    messages = [r.getMessage() for r in caplog.records]
    assert "libusb1.init()" in messages
    assert "libusb1.set_debug(2)" in messages
    assert "libusb1.get_device_list()" in messages


def test_trace_off_logs_nothing(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="usbservices.native.libusb1")
    driver = _driver(FakeContext())
    driver.list_devices()
    assert not [r for r in caplog.records if r.getMessage().startswith("libusb1.")]


def test_context_construction_failure_raises_native_init_error() -> None:
    def broken_factory() -> FakeContext:
        raise OSError("libusb-1.0.so: cannot open shared object file")

    driver = Libusb1Driver(context_factory=broken_factory)
    with pytest.raises(NativeInitError):
        driver.open()
    assert not driver.is_open
