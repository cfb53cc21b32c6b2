"""Configuration: ``cnls.toml`` in the workspace root and client settings."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "cnls.toml"
SETTINGS_SECTION = "cnls"


@dataclass(frozen=True, slots=True)
class Settings:
    """Settings read from a config file. ``scopes`` is None when not configured."""

    scopes: tuple[str, ...] | None = None
    exclude: tuple[str, ...] = ()


def load_config(config_path: Path | None, root: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else root / CONFIG_FILENAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _string_list(value: Any) -> tuple[str, ...] | None:
    if not isinstance(value, list):
        return None
    return tuple(item for item in value if isinstance(item, str))


def settings_from_config(config: dict[str, Any]) -> Settings:
    """Pick the known keys out of a loaded config, ignoring ill-typed values."""
    return Settings(
        scopes=_string_list(config.get("scopes")),
        exclude=_string_list(config.get("exclude")) or (),
    )


def scopes_from_client_settings(settings: Any) -> list[str] | None:
    """Extract ``settings["cnls"]["scopes"]`` sent by the editor.

    Returns None when the value is not an array; non-string items are dropped.
    """
    if not isinstance(settings, dict):
        return None
    section = settings.get(SETTINGS_SECTION)
    if not isinstance(section, dict):
        return None
    scopes = _string_list(section.get("scopes"))
    return list(scopes) if scopes is not None else None
