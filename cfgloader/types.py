#  -*- coding: utf-8 -*-
"""
Multi-component value types understood by the codec.

These mirror the small geometric and color structs that config documents
commonly carry. Each is written as one value whose components are joined by
the value separator, e.g. ``position = 1 2.5 -3``.
"""

from __future__ import annotations

import numpy

from typing import NamedTuple, Iterable, Self


# ========== ========== ========== ========== ========== ========== vectors
class Vector2(NamedTuple):
    x: float = 0.0
    y: float = 0.0


class Vector3(NamedTuple):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Vector4(NamedTuple):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0


class Vector2Int(NamedTuple):
    x: int = 0
    y: int = 0


class Vector3Int(NamedTuple):
    x: int = 0
    y: int = 0
    z: int = 0


class Quaternion(NamedTuple):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0


class Rect(NamedTuple):
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


# ========== ========== ========== ========== ========== ========== colors
class Color(NamedTuple):
    """RGBA color with float channels in [0, 1]."""

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0

    @classmethod
    def clamped(cls, r: float, g: float, b: float, a: float = 1.0) -> Self:
        """Build a color with every channel clamped to [0, 1]."""
        return cls(*(min(max(float(channel), 0.0), 1.0) for channel in (r, g, b, a)))


class Color32(NamedTuple):
    """RGBA color with byte channels in [0, 255]."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255


# ========== ========== ========== ========== ========== ========== matrix
class Matrix4x4:
    """
    A 4x4 float matrix backed by a numpy array.

    Parameters
    ----------
    values : iterable of float, optional
        Sixteen values in row-major order, or anything ``numpy.asarray`` can
        reshape to (4, 4). Defaults to the identity.

    Examples
    --------
    >>> m = Matrix4x4()
    >>> m[0, 0], m[0, 1]
    (1.0, 0.0)
    """

    __slots__ = ('_values',)

    def __init__(self, values: Iterable[float] | numpy.ndarray | None = None) -> None:

        if values is None:
            array = numpy.identity(4, dtype=numpy.float64)
        else:
            array = numpy.asarray(values, dtype=numpy.float64)

            if array.size != 16:
                raise ValueError(f"Matrix4x4 needs 16 values, {array.size} given")

            array = array.reshape(4, 4).copy()

        self._values: numpy.ndarray = array

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix4x4):
            return NotImplemented

        return bool(numpy.array_equal(self._values, other._values))

    def __hash__(self) -> int:
        return hash(self._values.tobytes())

    def __getitem__(self, index: tuple[int, int]) -> float:
        return float(self._values[index])

    def __iter__(self):
        return iter(self._values.ravel().tolist())

    def __repr__(self) -> str:
        return f"Matrix4x4({self._values.ravel().tolist()})"

    @property
    def values(self) -> numpy.ndarray:
        """A copy of the (4, 4) backing array."""
        return self._values.copy()

    @classmethod
    def identity(cls) -> Self:
        return cls()


__all__ = [
    "Color",
    "Color32",
    "Matrix4x4",
    "Quaternion",
    "Rect",
    "Vector2",
    "Vector2Int",
    "Vector3",
    "Vector3Int",
    "Vector4",
]
