"""Configuration assembly, encoding and file loading for laggy."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from laggy.models import LaggyConfig, Preset
from laggy.presets import ConfigError, UnknownPresetError, get_preset

ENV_VAR = "LAGGY_CONFIG"

DEFAULT_CONFIG = LaggyConfig()


def merge_config(
    base: LaggyConfig | None = None,
    preset: Preset | str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> LaggyConfig:
    """Build a :class:`LaggyConfig` field by field.

    Precedence is *overrides* over *preset* over *base*.  Override values of
    ``None`` count as absent, so unset CLI options can be passed straight
    through.

    Raises:
        UnknownPresetError: If *preset* names a preset that does not exist.
        pydantic.ValidationError: If an override has the wrong type or name.
    """
    values: dict[str, Any] = (base or DEFAULT_CONFIG).model_dump()
    if preset is not None:
        if isinstance(preset, str):
            preset = get_preset(preset)
        values.update(preset.config.model_dump(exclude_none=True))
    if overrides:
        values.update({key: value for key, value in overrides.items() if value is not None})
    return LaggyConfig.model_validate(values)


# ---------------------------------------------------------------------------
# Transport encoding
# ---------------------------------------------------------------------------


def encode_config(config: LaggyConfig) -> str:
    """Serialize *config* for handing to a child process."""
    return config.model_dump_json()


def decode_config(raw: str) -> LaggyConfig:
    """Inverse of :func:`encode_config`.

    Raises:
        ConfigError: If *raw* is not a valid encoded configuration.
    """
    try:
        return LaggyConfig.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid {ENV_VAR} value: {exc}") from exc


def config_from_environ(environ: Mapping[str, str] | None = None) -> LaggyConfig | None:
    """Return the configuration published in ``LAGGY_CONFIG``, or None if unset."""
    env = os.environ if environ is None else environ
    raw = env.get(ENV_VAR)
    if not raw:
        return None
    return decode_config(raw)


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load a mapping of settings from a YAML or JSON file.

    The mapping may carry a ``preset`` key alongside any
    :class:`LaggyConfig` field.

    Raises:
        ConfigError: If the file cannot be read or does not hold a mapping.
    """
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {file_path}: {exc}") from exc
    try:
        if file_path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot parse config file {file_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {file_path} must contain a mapping")
    return data


def resolve_config(
    preset: str | None = None,
    overrides: Mapping[str, Any] | None = None,
    config_file: str | Path | None = None,
) -> LaggyConfig:
    """Assemble the run configuration from a file, a preset and explicit values.

    Settings in *config_file* act as explicit values with lower priority than
    *overrides*.  A *preset* argument replaces a ``preset`` key in the file.

    Raises:
        ConfigError: On unreadable files, unknown presets or invalid values.
    """
    explicit: dict[str, Any] = {}
    if config_file is not None:
        explicit.update(load_config_file(config_file))
    file_preset = explicit.pop("preset", None)
    if file_preset is not None and not isinstance(file_preset, str):
        raise ConfigError(f"preset must be a preset name, got {file_preset!r}")
    preset_name = preset or file_preset
    if overrides:
        explicit.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return merge_config(preset=preset_name, overrides=explicit)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG",
    "ENV_VAR",
    "UnknownPresetError",
    "config_from_environ",
    "decode_config",
    "encode_config",
    "load_config_file",
    "merge_config",
    "resolve_config",
]
