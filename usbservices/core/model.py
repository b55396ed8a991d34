"""Core data models shared by the resolver, provider, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

HUB_CLASSCODE = 0x09


@dataclass(frozen=True)
class ResolvedConfig:
    trace: bool = False
    debug_level: int | None = None
    source: Path | None = None


@dataclass(frozen=True)
class DeviceDescriptor:
    """Standard USB device descriptor fields, stored by value."""

    bcd_usb: int
    device_class: int
    device_subclass: int
    device_protocol: int
    max_packet_size0: int
    vendor_id: int
    product_id: int
    bcd_device: int
    manufacturer_index: int
    product_index: int
    serial_number_index: int
    num_configurations: int


# The virtual root is not a real device: vendor 0x6666 is the "experimental"
# id and the packet size is irrelevant since no transfer reaches it.
ROOT_DEVICE_DESCRIPTOR = DeviceDescriptor(
    bcd_usb=0x0200,
    device_class=HUB_CLASSCODE,
    device_subclass=0,
    device_protocol=2,
    max_packet_size0=8,
    vendor_id=0x6666,
    product_id=0,
    bcd_device=0x0100,
    manufacturer_index=0,
    product_index=0,
    serial_number_index=0,
    num_configurations=1,
)


class UsbDeviceLike(Protocol):
    @property
    def descriptor(self) -> DeviceDescriptor: ...

    @property
    def parent(self) -> UsbHubLike | None: ...

    @property
    def is_usb_hub(self) -> bool: ...

    @property
    def is_root_usb_hub(self) -> bool: ...


class UsbHubLike(UsbDeviceLike, Protocol):
    @property
    def attached_devices(self) -> tuple[UsbDeviceLike, ...]: ...


@dataclass(frozen=True)
class UsbDevice:
    """Snapshot of one attached device as reported by the native layer."""

    descriptor: DeviceDescriptor
    bus_number: int
    device_address: int
    port_number: int | None = None
    port_path: tuple[int, ...] = ()
    speed: int | None = None
    parent: Any = field(default=None, compare=False, repr=False)

    @property
    def is_usb_hub(self) -> bool:
        return self.descriptor.device_class == HUB_CLASSCODE

    @property
    def is_root_usb_hub(self) -> bool:
        return False

    @property
    def id_string(self) -> str:
        return f"{self.descriptor.vendor_id:04x}:{self.descriptor.product_id:04x}"
