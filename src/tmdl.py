#!/usr/bin/env python3
"""Scene descriptor (.tmdl) handling.

The descriptor is a JSON object. Regeneration only sets the fields it owns:
``draw`` entries are always refreshed, while ``name``, ``collision`` and
``mass`` are written only when missing.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from conversion_errors import DescriptorError, FileOpenError


TMDL_SUFFIX = ".tmdl"
COLLISION_FILE_NAME = "collision.ia3"
RENDER_SUFFIX = ".ia8"


def normalize_texture_path(path: str) -> str:
    return path.replace("\\\\", "/")


def mesh_reference(model_name: str, material_name: str) -> str:
    return f"{model_name}/{material_name}{RENDER_SUFFIX}"


def collision_reference(model_name: str) -> str:
    return f"{model_name}/{COLLISION_FILE_NAME}"


def load_descriptor(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileOpenError(path) from exc
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DescriptorError(f'Invalid TMDL "{path}": {exc}') from exc
    if not isinstance(document, dict):
        raise DescriptorError(f'Invalid TMDL "{path}": top level is not an object')
    return document


def merge_descriptor(
    document: dict[str, Any],
    model_name: str,
    material_textures: Mapping[str, str],
    default_mass: float = 0.0,
) -> dict[str, Any]:
    draw = document.setdefault("draw", {})
    if not isinstance(draw, dict):
        raise DescriptorError('TMDL field "draw" is not an object')

    for material_name, texture in material_textures.items():
        entry = draw.setdefault(material_name, {})
        if not isinstance(entry, dict):
            raise DescriptorError(f'TMDL draw entry "{material_name}" is not an object')
        entry["mesh"] = mesh_reference(model_name, material_name)
        entry["texture"] = normalize_texture_path(texture)

    document.setdefault("name", model_name)
    document.setdefault("collision", collision_reference(model_name))
    document.setdefault("mass", float(default_mass))
    return document


def save_descriptor(path: Path, document: Mapping[str, Any]) -> None:
    text = json.dumps(document, indent=4, sort_keys=True, ensure_ascii=False) + "\n"
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FileOpenError(path, "writing") from exc


def update_descriptor(
    path: Path,
    model_name: str,
    material_textures: Mapping[str, str],
    default_mass: float = 0.0,
) -> dict[str, Any]:
    document = load_descriptor(path)
    merge_descriptor(document, model_name, material_textures, default_mass)
    save_descriptor(path, document)
    return document
