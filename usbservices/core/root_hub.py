"""Virtual root hub wrapping a snapshot of the attached device list."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator

from usbservices.core.model import HUB_CLASSCODE, ROOT_DEVICE_DESCRIPTOR, DeviceDescriptor, UsbDevice


class RootHubView:
    """Hub at the top of the enumeration tree.

    Every detected device is attached directly to it. The device tuple is
    fixed at construction; ask the provider for a new view to see changes.
    """

    name = "Virtual Root"

    def __init__(self, devices: Iterable[UsbDevice]) -> None:
        self._devices = tuple(dataclasses.replace(device, parent=self) for device in devices)

    def __repr__(self) -> str:
        return f"RootHubView(attached_devices={len(self._devices)})"

    @property
    def descriptor(self) -> DeviceDescriptor:
        return ROOT_DEVICE_DESCRIPTOR

    @property
    def parent(self) -> None:
        return None

    @property
    def parent_port(self) -> None:
        return None

    @property
    def speed(self) -> None:
        return None

    @property
    def is_usb_hub(self) -> bool:
        return self.descriptor.device_class == HUB_CLASSCODE

    @property
    def is_root_usb_hub(self) -> bool:
        return True

    @property
    def attached_devices(self) -> tuple[UsbDevice, ...]:
        return self._devices

    @property
    def number_of_ports(self) -> int:
        return len(self._devices)

    def iter_tree(self) -> Iterator[tuple[int, RootHubView | UsbDevice]]:
        yield 0, self
        for device in self._devices:
            yield 1, device
