from __future__ import annotations

from pathlib import Path

import pytest

from meshcfg.core.errors import SettingsError
from meshcfg.core.settings import DEFAULT_PORT, Settings, load_settings


def _write_settings(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def config_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.delenv("MESHMANAGER_API_KEY", raising=False)
    return tmp_path / "cfg" / "meshcfg" / "config.yaml"


def test_defaults_without_settings_file(config_home: Path) -> None:
    settings = load_settings()
    assert settings == Settings()
    assert settings.port == DEFAULT_PORT
    assert settings.timeout_s == 15.0


def test_api_key_from_environment(monkeypatch: pytest.MonkeyPatch, config_home: Path) -> None:
    monkeypatch.setenv("MESHMANAGER_API_KEY", "env-key")
    assert load_settings().api_key == "env-key"


def test_settings_file_values_applied(config_home: Path) -> None:
    _write_settings(
        config_home,
        """
port: /dev/ttyUSB0
baud: 921600
timeout_s: 5
mesh_id: mesh-1
""",
    )
    settings = load_settings()
    assert settings.port == "/dev/ttyUSB0"
    assert settings.baud == 921600
    assert settings.timeout_s == 5
    assert settings.mesh_id == "mesh-1"


def test_unknown_key_rejected(config_home: Path) -> None:
    _write_settings(config_home, "prot: /dev/ttyUSB0\n")
    with pytest.raises(SettingsError) as exc:
        load_settings()
    assert "Schema validation failed" in str(exc.value)


def test_invalid_value_rejected(config_home: Path) -> None:
    _write_settings(config_home, "timeout_s: 0\n")
    with pytest.raises(SettingsError):
        load_settings()


def test_duplicate_keys_rejected(config_home: Path) -> None:
    _write_settings(config_home, "port: /dev/a\nport: /dev/b\n")
    with pytest.raises(SettingsError):
        load_settings()


def test_non_mapping_root_rejected(config_home: Path) -> None:
    _write_settings(config_home, "- port\n")
    with pytest.raises(SettingsError):
        load_settings()


def test_empty_settings_file_uses_defaults(config_home: Path) -> None:
    _write_settings(config_home, "")
    assert load_settings() == Settings()


def test_override_ignores_none() -> None:
    settings = Settings(port="/dev/a").override(port=None, baud=9600)
    assert settings.port == "/dev/a"
    assert settings.baud == 9600
