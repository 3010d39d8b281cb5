"""Short vectors (length 1 to 4) for transform math.

Vector arithmetic is implemented here directly; rotations and generic
transforms go through Matrix: a length-N vector is treated as a 1xN row
matrix, multiplied by the transform and turned back into a vector.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Iterator, List, Sequence, Union

import numpy as np

from transform_math.errors import DimensionError, IndexOutOfRange, ShapeError
from transform_math.matrix import Matrix

logger = logging.getLogger(__name__)

VALID_LENGTHS = (1, 2, 3, 4)


def _check_length(length: int) -> int:
    if length not in VALID_LENGTHS:
        raise DimensionError(f"Vector length must be between 1 and 4, got {length}")
    return length


def _check_same_length(a: "Vector", b: "Vector", operation: str) -> None:
    if len(a) != len(b):
        raise DimensionError(
            f"Cannot {operation} vectors of different lengths ({len(a)} and {len(b)})"
        )


class Vector:
    """Fixed-length vector of float64 components.

    Can be built from a length (zero-filled), from a sequence of numbers or
    from a single-row Matrix.
    """

    __hash__ = None

    def __init__(self, length_or_values: Union[int, Sequence[float], np.ndarray, Matrix]):
        if isinstance(length_or_values, (int, np.integer)) and not isinstance(length_or_values, bool):
            self._data = np.zeros(_check_length(int(length_or_values)), dtype=np.float64)
        elif isinstance(length_or_values, Matrix):
            if length_or_values.rows != 1:
                raise ShapeError(
                    f"Only a single-row matrix converts to a vector, got "
                    f"{length_or_values.rows}x{length_or_values.columns}"
                )
            _check_length(length_or_values.columns)
            self._data = np.array(length_or_values.data, dtype=np.float64)
        else:
            data = np.array(length_or_values, dtype=np.float64)
            if data.ndim != 1:
                raise DimensionError(f"Expected a flat sequence of numbers, got shape {data.shape}")
            _check_length(data.size)
            self._data = data

    # ------------------------------------------------------------------
    # Component access
    # ------------------------------------------------------------------

    @property
    def length(self) -> int:
        return self._data.size

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the components."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def _index(self, i: int) -> int:
        if not 0 <= i < self._data.size:
            raise IndexOutOfRange(f"Index {i} out of range for vector of length {self._data.size}")
        return i

    def get(self, i: int) -> float:
        return float(self._data[self._index(i)])

    def set(self, i: int, value: float) -> "Vector":
        """Set component ``i`` and return this vector."""
        self._data[self._index(i)] = value
        return self

    def __getitem__(self, i: int) -> float:
        return self.get(i)

    def __setitem__(self, i: int, value: float) -> None:
        self.set(i, value)

    def __len__(self) -> int:
        return self._data.size

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def dot(self, other: "Vector") -> float:
        return dot(self, other)

    def cross(self, other: "Vector") -> "Vector":
        return cross(self, other)

    def add(self, other: "Vector") -> "Vector":
        return add(self, other)

    def subtract(self, other: "Vector") -> "Vector":
        return subtract(self, other)

    def __add__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        return add(self, other)

    def __sub__(self, other: "Vector") -> "Vector":
        if not isinstance(other, Vector):
            return NotImplemented
        return subtract(self, other)

    def norm(self) -> float:
        """Euclidean norm."""
        return math.sqrt(dot(self, self))

    def normalize(self) -> "Vector":
        """Return this vector divided by its norm.

        A zero vector gives NaN components; no fallback is applied.
        """
        length = self.norm()
        if length == 0.0:
            logger.warning("Normalizing a zero-length vector produces NaN components")
        with np.errstate(divide="ignore", invalid="ignore"):
            return Vector(self._data / length)

    # ------------------------------------------------------------------
    # Matrix bridge
    # ------------------------------------------------------------------

    def to_matrix(self) -> Matrix:
        """Return the vector as a 1xN row matrix."""
        return Matrix(1, self._data.size, self._data)

    def multiply_by_matrix(self, matrix: Matrix) -> "Vector":
        """Transform the vector as a row: ``vector . matrix``.

        The matrix must have as many rows as the vector has components.
        """
        return Vector(Matrix.product(self.to_matrix(), matrix))

    def _rotate_with(self, rotation: Matrix) -> "Vector":
        n = self._data.size
        if n not in (3, 4):
            raise DimensionError(f"Only vectors of length 3 or 4 can be rotated, got {n}")
        if n == 3:
            rotation = rotation.resized(3, 3)
        return self.multiply_by_matrix(rotation)

    def rotate_x(self, angle: float) -> "Vector":
        return self._rotate_with(Matrix.rotation_x(angle))

    def rotate_y(self, angle: float) -> "Vector":
        return self._rotate_with(Matrix.rotation_y(angle))

    def rotate_z(self, angle: float) -> "Vector":
        return self._rotate_with(Matrix.rotation_z(angle))

    def rotate(self, axis: Iterable[float], angle: float) -> "Vector":
        """Rotate about ``axis`` by ``angle`` radians.

        The axis must already be a unit vector, see ``Matrix.rotation``.
        """
        return self._rotate_with(Matrix.rotation(axis, angle))

    # ------------------------------------------------------------------
    # Conversion and comparison
    # ------------------------------------------------------------------

    def to_array(self) -> List[float]:
        return self._data.tolist()

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()

    def allclose(self, other: "Vector", rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        return len(self) == len(other) and bool(
            np.allclose(self._data, other._data, rtol=rtol, atol=atol)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    def __repr__(self) -> str:
        return f"Vector({self._data.tolist()})"


def dot(a: Vector, b: Vector) -> float:
    """Sum of the component-wise products of two equal-length vectors."""
    _check_same_length(a, b, "dot")
    total = 0.0
    for x, y in zip(a, b):
        total += x * y
    return total


def cross(a: Vector, b: Vector) -> Vector:
    """Cross product of two length-3 vectors."""
    if len(a) != 3 or len(b) != 3:
        raise DimensionError(
            f"Cross product is only defined for vectors of length 3, got {len(a)} and {len(b)}"
        )
    a0, a1, a2 = a
    b0, b1, b2 = b
    return Vector([
        a1 * b2 - a2 * b1,
        a2 * b0 - a0 * b2,
        a0 * b1 - a1 * b0,
    ])


def add(a: Vector, b: Vector) -> Vector:
    _check_same_length(a, b, "add")
    return Vector(a.to_numpy() + b.to_numpy())


def subtract(a: Vector, b: Vector) -> Vector:
    _check_same_length(a, b, "subtract")
    return Vector(a.to_numpy() - b.to_numpy())
