#!/usr/bin/env python3
from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

from conversion_errors import ConversionError, IndexOutOfRange, NoActiveMaterial
from indexed_array import IndexedArray, Vector
from obj_reader import iter_commands, parse_face, parse_floats, read_material_library


RENDER_VERTEX_SIZE = 8
COLLISION_VERTEX_SIZE = 3


def dump_path(log: Callable[[str], None], description: str, path: Path) -> None:
    log(f'{description:<20} "{path}"')


def resolve_index(kind: str, index: int, stream: Sequence[Vector]) -> Vector:
    # OBJ indices are 1-based; relative (negative) indices are not supported.
    if index < 1 or index > len(stream):
        raise IndexOutOfRange(kind, index, len(stream))
    return stream[index - 1]


class MeshAssembler:
    def __init__(self, base_dir: Path | None = None, log: Callable[[str], None] | None = None) -> None:
        self.base_dir = base_dir or Path.cwd()
        self.log = log or (lambda message: None)
        self.positions: list[Vector] = []
        self.texcoords: list[Vector] = []
        self.normals: list[Vector] = []
        self.materials: dict[str, IndexedArray] = {}
        self.material_textures: dict[str, str] = {}
        self.collision = IndexedArray(COLLISION_VERTEX_SIZE)
        self.current_material: IndexedArray | None = None
        self.face_count = 0

    def feed(self, command: str, argument: str) -> None:
        if command == "v":
            self.positions.append(parse_floats(command, argument, 3))
        elif command == "vt":
            self.texcoords.append(parse_floats(command, argument, 2))
        elif command == "vn":
            self.normals.append(parse_floats(command, argument, 3))
        elif command == "usemtl":
            self.use_material(argument)
        elif command == "f":
            self.add_face(argument)
        elif command == "mtllib":
            self.load_material_library(argument)

    def load_material_library(self, name: str) -> None:
        mtl_path = self.base_dir / name
        dump_path(self.log, "MtlLib", mtl_path)
        self.material_textures.update(read_material_library(mtl_path))

    def use_material(self, name: str) -> IndexedArray:
        material = self.materials.get(name)
        if material is None:
            material = IndexedArray(RENDER_VERTEX_SIZE)
            self.materials[name] = material
        self.current_material = material
        self.log(f'Compiling material "{name}"')
        return material

    def add_face(self, argument: str) -> None:
        if self.current_material is None:
            raise NoActiveMaterial()

        corners = [
            (
                resolve_index("position", position_index, self.positions),
                resolve_index("uv", uv_index, self.texcoords),
                resolve_index("normal", normal_index, self.normals),
            )
            for position_index, uv_index, normal_index in parse_face(argument)
        ]
        for position, uv, normal in corners:
            self.current_material.submit(position + uv + normal)
            self.collision.submit(position)
        self.face_count += 1


def assemble_obj(obj_path: Path, log: Callable[[str], None] | None = None) -> MeshAssembler:
    assembler = MeshAssembler(base_dir=obj_path.resolve().parent, log=log)
    for line_number, command, argument in iter_commands(obj_path):
        try:
            assembler.feed(command, argument)
        except ConversionError as exc:
            raise exc.at_line(obj_path, line_number)
    return assembler
