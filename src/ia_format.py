#!/usr/bin/env python3
from __future__ import annotations

import struct
from pathlib import Path

import numpy as np

from conversion_errors import ArrayFormatError, FileOpenError
from indexed_array import IndexedArray


# "IA" + size digit + NUL, then 12 reserved zero bytes.
HEADER_SIZE = 16
RESERVED_SIZE = 12
COUNT_FORMAT = "<I"
COUNT_SIZE = struct.calcsize(COUNT_FORMAT)
FLOAT_DTYPE = np.dtype("<f4")
INDEX_DTYPE = np.dtype("<u4")


def magic_for_size(size: int) -> bytes:
    return b"IA" + str(size).encode("ascii") + b"\x00"


def encode_indexed_array(array: IndexedArray) -> bytes:
    vertices = np.asarray(array.vertices, dtype=FLOAT_DTYPE).reshape(-1, array.size)
    indices = np.asarray(array.indices, dtype=INDEX_DTYPE)
    return b"".join(
        (
            magic_for_size(array.size),
            b"\x00" * RESERVED_SIZE,
            struct.pack(COUNT_FORMAT, vertices.shape[0]),
            vertices.tobytes(),
            struct.pack(COUNT_FORMAT, indices.shape[0]),
            indices.tobytes(),
        )
    )


def write_indexed_array(path: Path, array: IndexedArray) -> int:
    payload = encode_indexed_array(array)
    try:
        with path.open("wb") as handle:
            handle.write(payload)
    except OSError as exc:
        raise FileOpenError(path, "writing") from exc
    return len(payload)


def _read_count(data: bytes, offset: int, what: str) -> int:
    if offset + COUNT_SIZE > len(data):
        raise ArrayFormatError(f"Truncated data: missing {what} count at offset {offset}")
    return int(struct.unpack_from(COUNT_FORMAT, data, offset)[0])


def _array_from(data: bytes, offset: int, length: int, dtype: np.dtype) -> np.ndarray:
    if length == 0:
        return np.zeros(0, dtype=dtype)
    return np.frombuffer(data, dtype=dtype, count=length // dtype.itemsize, offset=offset)


def decode_indexed_array(data: bytes) -> IndexedArray:
    if len(data) < HEADER_SIZE:
        raise ArrayFormatError(f"Truncated header: {len(data)} bytes")
    tag = data[:4]
    if tag[:2] != b"IA" or tag[3:4] != b"\x00" or not tag[2:3].isdigit() or tag[2:3] == b"0":
        raise ArrayFormatError(f"Bad magic tag: {tag!r}")
    size = int(tag[2:3].decode("ascii"))

    offset = HEADER_SIZE
    vertex_count = _read_count(data, offset, "vertex")
    offset += COUNT_SIZE
    vertex_bytes = vertex_count * size * FLOAT_DTYPE.itemsize
    if offset + vertex_bytes > len(data):
        raise ArrayFormatError(f"Truncated data: expected {vertex_count} vertices of {size} floats")
    vertices = _array_from(data, offset, vertex_bytes, FLOAT_DTYPE)
    offset += vertex_bytes

    index_count = _read_count(data, offset, "index")
    offset += COUNT_SIZE
    index_bytes = index_count * INDEX_DTYPE.itemsize
    if offset + index_bytes > len(data):
        raise ArrayFormatError(f"Truncated data: expected {index_count} indices")
    indices = _array_from(data, offset, index_bytes, INDEX_DTYPE)
    offset += index_bytes
    if offset != len(data):
        raise ArrayFormatError(f"Unexpected {len(data) - offset} trailing bytes")

    if index_count and int(indices.max()) >= vertex_count:
        raise ArrayFormatError(f"Index {int(indices.max())} exceeds vertex count {vertex_count}")

    return IndexedArray.from_arrays(
        size,
        vertices.reshape(vertex_count, size).tolist(),
        indices.tolist(),
    )


def read_indexed_array(path: Path) -> IndexedArray:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise FileOpenError(path) from exc
    return decode_indexed_array(data)
