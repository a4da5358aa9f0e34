#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, Sequence

from conversion_config import ConversionConfig, resolve_config
from ia_format import write_indexed_array
from indexed_array import IndexedArray
from mesh_assembler import MeshAssembler, assemble_obj, dump_path
from tmdl import COLLISION_FILE_NAME, RENDER_SUFFIX, TMDL_SUFFIX, update_descriptor


BANNER = "OBJ2TSR3 | OBJ to TSR3 Files Converter\n======================================"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="obj2tsr3",
        description="Convert a Wavefront OBJ model into IA8/IA3 mesh files and a TMDL scene descriptor.",
    )
    parser.add_argument("obj", help="Input OBJ file")
    parser.add_argument(
        "--export-dir",
        default="",
        help="Directory receiving the .tmdl file and the data directory (defaults to the working directory)",
    )
    parser.add_argument("--config", default="", help="Optional YAML config file")
    parser.add_argument(
        "--default-mass",
        type=float,
        default=None,
        help="Mass written to a new TMDL when it has none (default 0.0)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args(argv)


def report_array(log: Callable[[str], None], description: str, path: Path, array: IndexedArray) -> None:
    dump_path(log, description, path)
    log(
        f"{array.vertex_count} vertices, {array.index_count} indices "
        f"(each vertex used {array.reuse_ratio:.1f} times in avg)\n"
    )


def export_meshes(
    assembler: MeshAssembler,
    data_dir: Path,
    log: Callable[[str], None],
) -> list[Path]:
    data_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    for material_name in sorted(assembler.materials):
        array = assembler.materials[material_name]
        output_path = data_dir / f"{material_name}{RENDER_SUFFIX}"
        report_array(log, "Export: ", output_path, array)
        write_indexed_array(output_path, array)
        written.append(output_path)

    collision_path = data_dir / COLLISION_FILE_NAME
    report_array(log, "Collision: ", collision_path, assembler.collision)
    write_indexed_array(collision_path, assembler.collision)
    written.append(collision_path)
    return written


def run_conversion_pipeline(obj_path: Path, config: ConversionConfig, log: Callable[[str], None]) -> int:
    model_name = obj_path.stem
    data_dir = config.export_dir / model_name
    tmdl_path = config.export_dir / f"{model_name}{TMDL_SUFFIX}"

    log(BANNER)
    dump_path(log, "Source file:", obj_path)
    dump_path(log, "Source directory:", obj_path.resolve().parent)
    dump_path(log, "Export directory:", config.export_dir)
    dump_path(log, "Data directory:", data_dir)
    log("")

    assembler = assemble_obj(obj_path, log=log)

    log("\nExporting...\n")
    export_meshes(assembler, data_dir, log)

    log("\nExporting TMDL...\n")
    dump_path(log, "TMDL:", tmdl_path)
    update_descriptor(tmdl_path, model_name, assembler.material_textures, config.default_mass)

    log("\nCompleted.\n")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    config = resolve_config(
        Path(args.config).expanduser() if args.config else None,
        export_dir=args.export_dir,
        default_mass=args.default_mass,
    )
    log: Callable[[str], None] = (lambda message: None) if args.quiet else print
    return run_conversion_pipeline(Path(args.obj), config, log)


def cli() -> int:
    try:
        return main()
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(cli())
