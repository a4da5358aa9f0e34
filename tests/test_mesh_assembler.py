#!/usr/bin/env python3
import tempfile
import unittest
from pathlib import Path

import _paths  # noqa: F401

from conversion_errors import FileOpenError, IndexOutOfRange, MalformedCommand, NoActiveMaterial
from mesh_assembler import MeshAssembler, assemble_obj


UNIT_TRIANGLE = """\
v 0 0 0
v 1 0 0
v 0 1 0
vt 0 0
vn 0 0 1
usemtl foo
f 1/1/1 2/1/1 3/1/1
"""


def _feed_lines(assembler: MeshAssembler, text: str) -> None:
    for line in text.splitlines():
        command, _, argument = line.partition(" ")
        assembler.feed(command, argument)


class AssemblerTests(unittest.TestCase):
    def test_unit_triangle(self) -> None:
        assembler = MeshAssembler()
        _feed_lines(assembler, UNIT_TRIANGLE)

        foo = assembler.materials["foo"]
        self.assertEqual(foo.vertex_count, 3)
        self.assertEqual(foo.indices, [0, 1, 2])
        self.assertEqual(foo.vertices[1], (1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0))
        self.assertEqual(assembler.collision.vertex_count, 3)
        self.assertEqual(assembler.collision.indices, [0, 1, 2])
        self.assertEqual(assembler.face_count, 1)

    def test_collision_accumulates_across_materials(self) -> None:
        assembler = MeshAssembler()
        _feed_lines(
            assembler,
            UNIT_TRIANGLE
            + "vt 1 1\n"
            + "usemtl bar\n"
            + "f 1/2/1 2/2/1 3/2/1\n"
            + "usemtl foo\n"
            + "f 3/1/1 2/1/1 1/1/1\n",
        )

        self.assertEqual(sorted(assembler.materials), ["bar", "foo"])
        self.assertEqual(assembler.materials["bar"].indices, [0, 1, 2])
        self.assertEqual(assembler.materials["foo"].indices, [0, 1, 2, 2, 1, 0])
        self.assertEqual(assembler.collision.vertex_count, 3)
        self.assertEqual(assembler.collision.indices, [0, 1, 2, 0, 1, 2, 2, 1, 0])

    def test_face_before_material(self) -> None:
        assembler = MeshAssembler()
        _feed_lines(assembler, "v 0 0 0\nvt 0 0\nvn 0 0 1")
        with self.assertRaises(NoActiveMaterial):
            assembler.feed("f", "1/1/1 1/1/1 1/1/1")

    def _assert_out_of_range(self, face: str, kind: str) -> None:
        assembler = MeshAssembler()
        _feed_lines(assembler, UNIT_TRIANGLE)
        with self.assertRaises(IndexOutOfRange) as caught:
            assembler.feed("f", face)
        self.assertEqual(caught.exception.kind, kind)

    def test_position_out_of_range(self) -> None:
        self._assert_out_of_range("0/1/1 2/1/1 3/1/1", "position")
        self._assert_out_of_range("1/1/1 4/1/1 3/1/1", "position")
        self._assert_out_of_range("-1/1/1 2/1/1 3/1/1", "position")

    def test_uv_out_of_range(self) -> None:
        self._assert_out_of_range("1/0/1 2/1/1 3/1/1", "uv")
        self._assert_out_of_range("1/1/1 2/2/1 3/1/1", "uv")

    def test_normal_out_of_range(self) -> None:
        self._assert_out_of_range("1/1/0 2/1/1 3/1/1", "normal")
        self._assert_out_of_range("1/1/1 2/1/1 3/1/2", "normal")

    def test_last_element_is_in_range(self) -> None:
        assembler = MeshAssembler()
        _feed_lines(assembler, UNIT_TRIANGLE)
        assembler.feed("f", "3/1/1 3/1/1 3/1/1")

        self.assertEqual(assembler.materials["foo"].indices, [0, 1, 2, 2, 2, 2])

    def test_failed_face_submits_nothing(self) -> None:
        assembler = MeshAssembler()
        _feed_lines(assembler, UNIT_TRIANGLE)
        with self.assertRaises(IndexOutOfRange):
            assembler.feed("f", "1/1/1 2/1/1 9/1/1")

        self.assertEqual(assembler.materials["foo"].index_count, 3)
        self.assertEqual(assembler.collision.index_count, 3)

    def test_streams_follow_reference_time_length(self) -> None:
        assembler = MeshAssembler()
        _feed_lines(assembler, "vt 0 0\nvn 0 0 1\nusemtl foo\nv 0 0 0")
        with self.assertRaises(IndexOutOfRange):
            assembler.feed("f", "1/1/1 2/1/1 1/1/1")
        assembler.feed("v", "1 1 1")
        assembler.feed("f", "1/1/1 2/1/1 1/1/1")

        self.assertEqual(assembler.collision.indices, [0, 1, 0])

    def test_unknown_commands_are_ignored(self) -> None:
        assembler = MeshAssembler()
        _feed_lines(assembler, "o ship\ng hull\ns 1\nl 1 2")

        self.assertEqual(assembler.positions, [])
        self.assertEqual(assembler.materials, {})


class AssembleObjTests(unittest.TestCase):
    def test_material_library_is_relative_to_obj(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            model_dir = Path(tmp) / "models"
            model_dir.mkdir()
            (model_dir / "ship.mtl").write_text("newmtl foo\nmap_Kd tex\\\\foo.png\n", encoding="utf-8")
            (model_dir / "ship.obj").write_text("mtllib ship.mtl\n" + UNIT_TRIANGLE, encoding="utf-8")
            messages: list[str] = []

            assembler = assemble_obj(model_dir / "ship.obj", log=messages.append)

        self.assertEqual(assembler.material_textures, {"foo": "tex\\\\foo.png"})
        self.assertEqual(assembler.materials["foo"].indices, [0, 1, 2])
        self.assertIn('Compiling material "foo"', messages)
        self.assertTrue(any(message.startswith("MtlLib") for message in messages))

    def test_errors_name_the_failing_line(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            obj_path = Path(tmp) / "ship.obj"
            obj_path.write_text(UNIT_TRIANGLE + "# broken face\nf 1/1/1 2/1/1 7/1/1\n", encoding="utf-8")
            with self.assertRaises(IndexOutOfRange) as caught:
                assemble_obj(obj_path)

        self.assertEqual(caught.exception.line_number, 9)
        self.assertEqual(caught.exception.kind, "position")
        self.assertEqual(str(caught.exception), f"{obj_path}:9: Position index 7 out of range (1..3)")

    def test_nan_coordinate_is_rejected_with_line(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            obj_path = Path(tmp) / "ship.obj"
            obj_path.write_text("v nan 0 0\nvt 0 0\nvn 0 0 1\nusemtl m\nf 1/1/1 1/1/1 1/1/1\n", encoding="utf-8")
            with self.assertRaises(MalformedCommand) as caught:
                assemble_obj(obj_path)

        self.assertEqual(caught.exception.line_number, 1)

    def test_missing_material_library(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            obj_path = Path(tmp) / "ship.obj"
            obj_path.write_text("mtllib absent.mtl\n", encoding="utf-8")
            with self.assertRaises(FileOpenError):
                assemble_obj(obj_path)


if __name__ == "__main__":
    unittest.main()
