"""Resolve trace/debug settings from the config file and environment overrides."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from usbservices.core.errors import ConfigurationError
from usbservices.core.model import ResolvedConfig

TRACE_KEY = "usb.libusb.trace"
DEBUG_KEY = "usb.libusb.debug"

CONFIG_PATH_ENV = "USBSERVICES_CONFIG"
TRACE_ENV = "USBSERVICES_LIBUSB_TRACE"
DEBUG_ENV = "USBSERVICES_LIBUSB_DEBUG"

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate keys and keeps true/false as text."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: [(tag, regexp) for tag, regexp in value if tag != "tag:yaml.org,2002:bool"]
    for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigurationError(f"Duplicate key '{key}' in configuration file")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _load_schema_validator() -> Any:
    schema_text = resources.files("usbservices.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    explicit = env.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit)
    xdg_config = Path(env.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    return xdg_config / "usbservices" / "usbservices.yaml"


def read_config_file(path: Path) -> dict[str, Any] | None:
    """Load and validate the YAML config file.

    Returns None when the file does not exist. Any other problem (unreadable
    file, invalid YAML, schema violation) raises ConfigurationError.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        LOGGER.debug("No configuration file at %s", path)
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Error while reading configuration file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping at root")

    try:
        _load_schema_validator().validate(loaded)
    except ValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        where = f" ({where})" if where else ""
        raise ConfigurationError(f"Schema validation failed for {path}{where}: {exc.message}") from exc
    return loaded


def _parse_bool(value: Any) -> bool:
    return str(value).strip().lower() == "true"


def _file_debug_level(value: Any, path: Path) -> int | None:
    try:
        level = value if isinstance(value, int) else int(str(value).strip())
    except ValueError:
        LOGGER.warning("Ignoring non-integer %s=%r in %s", DEBUG_KEY, value, path)
        return None
    if level < 0:
        raise ConfigurationError(f"{DEBUG_KEY} in {path} must not be negative, got {level}")
    return level


def _override_debug_level(raw: str) -> int:
    try:
        level = int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{DEBUG_ENV} must be an integer, got {raw!r}") from exc
    if level < 0:
        raise ConfigurationError(f"{DEBUG_ENV} must not be negative, got {level}")
    return level


def resolve_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ResolvedConfig:
    """Merge file values with environment overrides.

    Tracing is on when either source enables it. The debug level comes from
    the environment when set there, otherwise from the file.
    """
    env = os.environ if environ is None else environ
    path = config_path or default_config_path(env)

    trace = False
    debug_level: int | None = None
    doc = read_config_file(path)
    if doc is not None:
        trace = _parse_bool(doc.get(TRACE_KEY, "false"))
        if DEBUG_KEY in doc:
            debug_level = _file_debug_level(doc[DEBUG_KEY], path)

    trace = _parse_bool(env.get(TRACE_ENV, "false")) or trace

    raw_debug = env.get(DEBUG_ENV)
    if raw_debug is not None:
        debug_level = _override_debug_level(raw_debug)

    resolved = ResolvedConfig(
        trace=trace,
        debug_level=debug_level,
        source=path if doc is not None else None,
    )
    LOGGER.debug("Resolved configuration: %s", resolved)
    return resolved
