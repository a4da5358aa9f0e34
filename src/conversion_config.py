#!/usr/bin/env python3
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from conversion_errors import ConfigError, FileOpenError


KNOWN_KEYS = {"export_dir", "default_mass"}


@dataclass
class ConversionConfig:
    export_dir: Path
    default_mass: float = 0.0


def parse_mass(value: object, source: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{source}: default_mass must be a number, got {value!r}")
    return float(value)


def load_config_file(config_path: Path) -> dict:
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileOpenError(config_path) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid config "{config_path}": {exc}') from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f'Invalid config "{config_path}": expected a mapping')
    unknown = sorted(str(key) for key in data if key not in KNOWN_KEYS)
    if unknown:
        raise ConfigError(f'Invalid config "{config_path}": unknown keys {", ".join(unknown)}')
    return data


def resolve_config(
    config_path: Path | None = None,
    export_dir: str = "",
    default_mass: float | None = None,
) -> ConversionConfig:
    config = ConversionConfig(export_dir=Path.cwd())

    if config_path is not None:
        data = load_config_file(config_path)
        if "export_dir" in data:
            value = data["export_dir"]
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{config_path}: export_dir must be a non-empty string")
            candidate = Path(value).expanduser()
            if not candidate.is_absolute():
                candidate = config_path.resolve().parent / candidate
            config.export_dir = candidate
        if "default_mass" in data:
            config.default_mass = parse_mass(data["default_mass"], str(config_path))

    if export_dir:
        config.export_dir = Path(export_dir).expanduser()
    if default_mass is not None:
        config.default_mass = float(default_mass)

    config.export_dir = config.export_dir.resolve()
    return config
