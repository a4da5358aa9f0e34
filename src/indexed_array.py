#!/usr/bin/env python3
from __future__ import annotations

import math
from decimal import Decimal
from typing import Iterable, Sequence

import numpy as np


Vector = tuple[float, ...]

MAX_VERTEX_SIZE = 9


def to_float32(value: str | float) -> float:
    """Round a token or number to IEEE-754 single precision, returned as an exact Python float.

    Parsing goes through a 64-bit float first. That only changes the result when
    the double lands exactly halfway between two float32 values, so the tie is
    settled against the exact decimal value of the token.
    """
    wide = float(value)
    narrow = np.float32(wide)
    if float(narrow) == wide or not math.isfinite(wide) or not np.isfinite(narrow):
        return float(narrow)

    toward = np.float32(np.inf) if wide > float(narrow) else np.float32(-np.inf)
    lower, upper = sorted((float(narrow), float(np.nextafter(narrow, toward))))
    halfway = (lower + upper) / 2
    if wide != halfway:
        return float(narrow)

    exact = Decimal(value) if isinstance(value, str) else Decimal(wide)
    if exact > Decimal(halfway):
        return upper
    if exact < Decimal(halfway):
        return lower
    return float(narrow)


def to_vector(values: Iterable[float]) -> Vector:
    return tuple(to_float32(value) for value in values)


class IndexedArray:
    """Deduplicating builder for an interleaved vertex buffer plus index buffer.

    Every submitted vertex appends exactly one index. Vertices are compared by
    exact component equality and stored in first-seen order.
    """

    def __init__(self, size: int) -> None:
        if not 1 <= size <= MAX_VERTEX_SIZE:
            raise ValueError(f"Vertex size must be in 1..{MAX_VERTEX_SIZE}, got {size}")
        self.size = size
        self._vertices: list[Vector] = []
        self._indices: list[int] = []
        self._lookup: dict[Vector, int] = {}

    @classmethod
    def from_arrays(
        cls,
        size: int,
        vertices: Iterable[Sequence[float]],
        indices: Iterable[int],
    ) -> IndexedArray:
        array = cls(size)
        for vertex in vertices:
            key = array._checked(vertex)
            array._lookup.setdefault(key, len(array._vertices))
            array._vertices.append(key)
        array._indices = [int(index) for index in indices]
        return array

    def _checked(self, vertex: Sequence[float]) -> Vector:
        key = tuple(float(component) for component in vertex)
        if len(key) != self.size:
            raise ValueError(f"Expected {self.size} components, got {len(key)}")
        return key

    def submit(self, vertex: Sequence[float]) -> None:
        key = self._checked(vertex)
        index = self._lookup.get(key)
        if index is None:
            index = len(self._vertices)
            self._lookup[key] = index
            self._vertices.append(key)
        self._indices.append(index)

    @property
    def vertices(self) -> list[Vector]:
        return list(self._vertices)

    @property
    def indices(self) -> list[int]:
        return list(self._indices)

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def index_count(self) -> int:
        return len(self._indices)

    @property
    def reuse_ratio(self) -> float:
        if not self._vertices:
            return 0.0
        return len(self._indices) / len(self._vertices)

    def __repr__(self) -> str:
        return f"IndexedArray(size={self.size}, vertices={self.vertex_count}, indices={self.index_count})"
