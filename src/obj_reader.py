#!/usr/bin/env python3
from __future__ import annotations

import math
from pathlib import Path
from typing import Iterator

from conversion_errors import FileOpenError, MalformedCommand
from indexed_array import Vector, to_float32


FaceCorner = tuple[int, int, int]
Face = tuple[FaceCorner, FaceCorner, FaceCorner]


def iter_commands(path: Path) -> Iterator[tuple[int, str, str]]:
    try:
        handle = path.open("r", encoding="utf-8", errors="ignore")
    except OSError as exc:
        raise FileOpenError(path) from exc

    with handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip() or line.startswith("#"):
                continue
            parts = line.split(None, 1)
            command = parts[0]
            argument = parts[1].strip() if len(parts) > 1 else ""
            yield line_number, command, argument


def parse_floats(command: str, argument: str, count: int) -> Vector:
    tokens = argument.split()
    if len(tokens) < count:
        raise MalformedCommand(command, argument, f"expected {count} values, got {len(tokens)}")
    try:
        values = tuple(to_float32(token) for token in tokens[:count])
    except ValueError as exc:
        raise MalformedCommand(command, argument, "not a number") from exc
    if any(math.isnan(value) for value in values):
        raise MalformedCommand(command, argument, "NaN is not a valid coordinate")
    return values


def parse_face(argument: str) -> Face:
    tokens = argument.split()
    if len(tokens) != 3:
        raise MalformedCommand("f", argument, f"only triangles are supported, got {len(tokens)} corners")

    corners: list[FaceCorner] = []
    for token in tokens:
        fields = token.split("/")
        if len(fields) != 3 or not all(fields):
            raise MalformedCommand("f", argument, f'corner "{token}" is not position/uv/normal')
        try:
            position, uv, normal = (int(field) for field in fields)
        except ValueError as exc:
            raise MalformedCommand("f", argument, f'corner "{token}" has a non-integer index') from exc
        corners.append((position, uv, normal))
    return corners[0], corners[1], corners[2]


def read_material_library(path: Path) -> dict[str, str]:
    textures: dict[str, str] = {}
    current_material = ""
    for _, command, argument in iter_commands(path):
        if command == "newmtl":
            current_material = argument
        elif command == "map_Kd":
            textures[current_material] = argument
    return textures
