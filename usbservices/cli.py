"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from usbservices.core.config import resolve_config
from usbservices.core.errors import UsbServicesError
from usbservices.core.model import UsbDevice
from usbservices.core.root_hub import RootHubView
from usbservices.core.service import UsbServices

app = typer.Typer(help="Inspect USB devices through the libusb services adapter")

_SPEED_NAMES = {0: "unknown", 1: "low", 2: "full", 3: "high", 4: "super", 5: "super+"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _describe(node: RootHubView | UsbDevice) -> str:
    desc = node.descriptor
    ident = f"ID {desc.vendor_id:04x}:{desc.product_id:04x} class={desc.device_class:02x}"
    if isinstance(node, RootHubView):
        return f"{node.name} {ident} ports={node.number_of_ports}"
    kind = " hub" if node.is_usb_hub else ""
    speed = _SPEED_NAMES.get(node.speed, "unknown") if node.speed is not None else "unknown"
    return f"Bus {node.bus_number:03d} Device {node.device_address:03d}: {ident}{kind} speed={speed}"


@app.command("info")
def info() -> None:
    """Show API and implementation versions."""
    try:
        with UsbServices() as services:
            typer.echo(f"API version: {services.get_api_version()}")
            typer.echo(f"Implementation: {services.get_impl_description()} {services.get_impl_version()}")
    except UsbServicesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("devices")
def list_devices(
    config: Path | None = typer.Option(None, "--config", help="Configuration file path"),
) -> None:
    """List attached USB devices under the virtual root hub."""
    try:
        with UsbServices(config_path=config) as services:
            hub = services.get_root_hub()
            for depth, node in hub.iter_tree():
                typer.echo("  " * depth + _describe(node))
            if not hub.attached_devices:
                typer.echo("No USB devices found")
    except UsbServicesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("config")
def show_config(
    config: Path | None = typer.Option(None, "--config", help="Configuration file path"),
) -> None:
    """Show the resolved trace and debug settings."""
    try:
        resolved = resolve_config(config)
    except UsbServicesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(f"source: {resolved.source or '<none>'}")
    typer.echo(f"trace: {str(resolved.trace).lower()}")
    level = "<native default>" if resolved.debug_level is None else resolved.debug_level
    typer.echo(f"debug: {level}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
