"""Settings loading and validation for the optional YAML settings file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from meshcfg.core.errors import SettingsError

DEFAULT_PORT = "/dev/tty.usbmodem101"
DEFAULT_ADMIN_URL = "https://meshmanager.svc.rpi.flame.org"
API_KEY_ENV = "MESHMANAGER_API_KEY"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise SettingsError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class Settings:
    port: str = DEFAULT_PORT
    baud: int = 115200
    timeout_s: float = 15.0
    read_timeout_s: float = 0.1
    admin_url: str = DEFAULT_ADMIN_URL
    api_key: str = ""
    mesh_id: str = ""

    def override(self, **values: Any) -> Settings:
        """Return a copy with every non-None value applied."""
        return replace(self, **{k: v for k, v in values.items() if v is not None})


def _load_schema_validator() -> Any:
    schema_text = resources.files("meshcfg.schemas").joinpath("settings.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def settings_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "meshcfg/config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"Could not read settings file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping at root")
    return loaded


def load_settings(path: Path | None = None) -> Settings:
    path = path or settings_path()
    settings = Settings(api_key=os.environ.get(API_KEY_ENV, ""))
    if not path.exists():
        return settings

    doc = _read_yaml(path)
    try:
        _load_schema_validator().validate(doc)
    except ValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        where = f" ({where})" if where else ""
        raise SettingsError(f"Schema validation failed for {path}{where}: {exc.message}") from exc

    known = {f.name for f in fields(Settings)}
    LOGGER.debug("Loaded settings from %s", path)
    return settings.override(**{k: v for k, v in doc.items() if k in known})
