from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from .schema import Settings

DEFAULT_CONFIG_PATH = Path("config/default.yaml")
OVERRIDES_ENV_VAR = "WORKSHEET_ENGINE_CONFIG_OVERRIDES"


def read_yaml(path: Path) -> Dict[str, Any]:
    """Parse a YAML mapping; a blank file reads as ``{}``."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge `override` onto a copy of `base`; nested mappings merge, everything else replaces."""
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = merge_dicts(current, value)
        merged[key] = value
    return merged


def read_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """JSON object from `WORKSHEET_ENGINE_CONFIG_OVERRIDES`, or ``{}`` when unset."""
    raw = (os.environ if environ is None else environ).get(OVERRIDES_ENV_VAR, "")
    if not raw.strip():
        return {}
    try:
        overrides = json.loads(raw)
    except json.JSONDecodeError as err:
        raise ValueError(f"Failed to parse {OVERRIDES_ENV_VAR} env var as JSON.") from err
    if not isinstance(overrides, dict):
        raise ValueError(f"{OVERRIDES_ENV_VAR} must be a JSON object")
    return overrides


def resolve_config_path(config_path: str | Path | None) -> Optional[Path]:
    """Explicit path if given, else the default file when it exists, else None (built-in defaults)."""
    if config_path:
        return Path(config_path)
    return DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None


def load_settings(config_path: str | Path | None = None) -> Settings:
    """
    Read configuration, apply environment overrides, and return validated Settings.

    An explicit `config_path` must exist. Without one, `config/default.yaml`
    (relative to the working directory) is used when present and the built-in
    defaults otherwise. Overrides from the environment are deep-merged last.

    Raises
    ------
    FileNotFoundError
        If an explicit `config_path` does not exist.
    ValueError
        If the YAML is not a mapping, the overrides are not a JSON object, or
        the merged payload fails `Settings` validation.
    """
    path = resolve_config_path(config_path)
    data = read_yaml(path) if path is not None else {}
    data = merge_dicts(data, read_overrides())

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
