"""Dense row-major matrices for transform math.

This module implements the Matrix type used to build and compose 3D
transforms: identity, scale, translation and rotation factories, the matrix
product, transpose, determinant, cofactor expansion and the adjugate inverse.

Transforms follow the row-vector convention: a point is a 1x4 row and is
transformed with ``point.dot(transform)``, so transforms compose left to right.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from transform_math.errors import DimensionError, IndexOutOfRange, ShapeError, SingularMatrixError
from transform_math.formatting import format_matrix

logger = logging.getLogger(__name__)

# Size from which the determinant switches from Laplace expansion to LU
LU_DETERMINANT_MIN_SIZE = 5

BufferLike = Union[Sequence[float], np.ndarray]


def _is_dimension(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool) and value > 0


class Matrix:
    """Dense matrix of float64 values stored in a flat row-major buffer.

    Element ``(i, j)`` lives at offset ``i * columns + j``. The shape is fixed
    at construction; operations that change it return a new matrix.
    """

    __hash__ = None

    def __init__(self, rows: int, columns: int, buffer: Optional[BufferLike] = None):
        """Create a matrix.

        Args:
            rows: Number of rows (positive integer)
            columns: Number of columns (positive integer)
            buffer: Optional row-major values, copied into the matrix.
                Zero-filled when omitted.
        """
        if not _is_dimension(rows) or not _is_dimension(columns):
            raise ShapeError(f"Matrix dimensions must be positive integers, got {rows}x{columns}")

        self._rows = int(rows)
        self._columns = int(columns)

        if buffer is None:
            self._data = np.zeros(self._rows * self._columns, dtype=np.float64)
        else:
            if isinstance(buffer, Matrix):
                buffer = buffer._data
            data = np.array(buffer, dtype=np.float64).ravel()
            if data.size != self._rows * self._columns:
                raise ShapeError(
                    f"Buffer of length {data.size} does not fit a "
                    f"{self._rows}x{self._columns} matrix"
                )
            self._data = data

    # ------------------------------------------------------------------
    # Storage and indexing
    # ------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def shape(self) -> Tuple[int, int]:
        return self._rows, self._columns

    @property
    def is_square(self) -> bool:
        return self._rows == self._columns

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the row-major buffer."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def _offset(self, i: int, j: int) -> int:
        if not (0 <= i < self._rows and 0 <= j < self._columns):
            raise IndexOutOfRange(
                f"Index ({i}, {j}) out of range for {self._rows}x{self._columns} matrix"
            )
        return i * self._columns + j

    def get(self, i: int, j: int) -> float:
        """Return the element at row ``i``, column ``j``."""
        return float(self._data[self._offset(i, j)])

    def set(self, i: int, j: int, value: float) -> "Matrix":
        """Set the element at row ``i``, column ``j`` and return this matrix.

        Returning ``self`` allows chaining on a freshly built matrix, e.g.
        ``Matrix.identity(4).set(3, 0, x).set(3, 1, y)``.
        """
        self._data[self._offset(i, j)] = value
        return self

    def __getitem__(self, key: Tuple[int, int]) -> float:
        i, j = key
        return self.get(i, j)

    def __setitem__(self, key: Tuple[int, int], value: float) -> None:
        i, j = key
        self.set(i, j, value)

    def copy(self) -> "Matrix":
        return Matrix(self._rows, self._columns, self._data)

    def resized(self, rows: int, columns: int) -> "Matrix":
        """Return a ``rows x columns`` matrix holding the overlapping top-left block.

        Cells outside this matrix are zero.
        """
        result = Matrix(rows, columns)
        keep_rows = min(rows, self._rows)
        keep_columns = min(columns, self._columns)
        source = self._data.reshape(self._rows, self._columns)
        target = result._data.reshape(rows, columns)
        target[:keep_rows, :keep_columns] = source[:keep_rows, :keep_columns]
        return result

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls, width: int) -> "Matrix":
        """Return a ``width x width`` identity matrix."""
        result = cls(width, width)
        result._data[:: width + 1] = 1.0
        return result

    @classmethod
    def scale(cls, s: float) -> "Matrix":
        """Uniform 4x4 scale: the top-left 3x3 diagonal is ``s``."""
        return cls.identity(4).set(0, 0, s).set(1, 1, s).set(2, 2, s)

    @classmethod
    def scale_x(cls, s: float) -> "Matrix":
        return cls.identity(4).set(0, 0, s)

    @classmethod
    def scale_y(cls, s: float) -> "Matrix":
        return cls.identity(4).set(1, 1, s)

    @classmethod
    def scale_z(cls, s: float) -> "Matrix":
        return cls.identity(4).set(2, 2, s)

    @classmethod
    def translation(cls, x: float, y: float, z: float) -> "Matrix":
        """4x4 translation; the offsets sit in the last row."""
        return cls.identity(4).set(3, 0, x).set(3, 1, y).set(3, 2, z)

    @classmethod
    def translation_x(cls, x: float) -> "Matrix":
        return cls.identity(4).set(3, 0, x)

    @classmethod
    def translation_y(cls, y: float) -> "Matrix":
        return cls.identity(4).set(3, 1, y)

    @classmethod
    def translation_z(cls, z: float) -> "Matrix":
        return cls.identity(4).set(3, 2, z)

    @classmethod
    def rotation_x(cls, angle: float) -> "Matrix":
        """4x4 rotation of ``angle`` radians about the x axis."""
        c = math.cos(angle)
        s = math.sin(angle)
        return cls(4, 4, [
            1, 0, 0, 0,
            0, c, s, 0,
            0, -s, c, 0,
            0, 0, 0, 1,
        ])

    @classmethod
    def rotation_y(cls, angle: float) -> "Matrix":
        """4x4 rotation of ``angle`` radians about the y axis."""
        c = math.cos(angle)
        s = math.sin(angle)
        return cls(4, 4, [
            c, 0, -s, 0,
            0, 1, 0, 0,
            s, 0, c, 0,
            0, 0, 0, 1,
        ])

    @classmethod
    def rotation_z(cls, angle: float) -> "Matrix":
        """4x4 rotation of ``angle`` radians about the z axis."""
        c = math.cos(angle)
        s = math.sin(angle)
        return cls(4, 4, [
            c, s, 0, 0,
            -s, c, 0, 0,
            0, 0, 1, 0,
            0, 0, 0, 1,
        ])

    @classmethod
    def rotation(cls, axis: Iterable[float], angle: float) -> "Matrix":
        """4x4 rotation about an arbitrary axis using Rodrigues' formula.

        The axis is used as given and is NOT normalized: callers must pass a
        unit vector, otherwise the result is not a rotation.

        Args:
            axis: Unit axis as a length-3 vector, or a length-4 homogeneous
                vector whose last component is ignored
            angle: Rotation angle in radians

        Returns:
            4x4 rotation matrix
        """
        components = [float(value) for value in axis]
        if len(components) not in (3, 4):
            raise DimensionError(
                f"Rotation axis must have 3 or 4 components, got {len(components)}"
            )
        x, y, z = components[:3]

        length = math.sqrt(x * x + y * y + z * z)
        if not math.isclose(length, 1.0, rel_tol=1e-9, abs_tol=1e-9):
            logger.warning(f"Rotation axis is not a unit vector (norm={length:.6f})")

        ca = math.cos(angle)
        sa = math.sin(angle)
        t = 1.0 - ca

        return cls(4, 4, [
            t * x * x + ca, t * x * y + sa * z, t * x * z - sa * y, 0,
            t * x * y - sa * z, t * y * y + ca, t * y * z + sa * x, 0,
            t * x * z + sa * y, t * y * z - sa * x, t * z * z + ca, 0,
            0, 0, 0, 1,
        ])

    @classmethod
    def from_array(cls, data: Union[Sequence[Sequence[float]], np.ndarray]) -> "Matrix":
        """Build a matrix from a rectangular sequence of rows."""
        if isinstance(data, np.ndarray):
            if data.ndim != 2 or data.size == 0:
                raise ShapeError(f"Expected a non-empty 2D array, got shape {data.shape}")
            return cls(data.shape[0], data.shape[1], data)

        rows = [list(row) for row in data]
        if not rows or not rows[0]:
            raise ShapeError("Cannot build a matrix from an empty array")

        width = len(rows[0])
        for index, row in enumerate(rows):
            if len(row) != width:
                raise ShapeError(f"Row {index} has {len(row)} entries, expected {width}")

        return cls(len(rows), width, [value for row in rows for value in row])

    # ------------------------------------------------------------------
    # Product and transpose
    # ------------------------------------------------------------------

    @staticmethod
    def product(a: "Matrix", b: "Matrix") -> "Matrix":
        """Multiply ``a`` (r x n) by ``b`` (n x c) into a new r x c matrix."""
        if a.columns != b.rows:
            raise ShapeError(
                f"Cannot multiply {a.rows}x{a.columns} matrix by {b.rows}x{b.columns} matrix"
            )

        rows, inner, columns = a.rows, a.columns, b.columns
        left = a._data.tolist()
        right = b._data.tolist()
        result = Matrix(rows, columns)

        for i in range(rows):
            row_offset = i * inner
            for j in range(columns):
                value = 0.0
                for k in range(inner):
                    value += left[row_offset + k] * right[k * columns + j]
                result._data[i * columns + j] = value
        return result

    def dot(self, other: "Matrix") -> "Matrix":
        return Matrix.product(self, other)

    def __matmul__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return Matrix.product(self, other)

    def transpose(self) -> "Matrix":
        grid = self._data.reshape(self._rows, self._columns)
        return Matrix(self._columns, self._rows, grid.T)

    # ------------------------------------------------------------------
    # Determinant, cofactors, inverse
    # ------------------------------------------------------------------

    def determinant(self) -> float:
        """Compute the determinant of a square matrix.

        Sizes 1 and 2 use the closed forms, sizes 3 and 4 use Laplace
        expansion along the first row, larger sizes use an LU factorization
        without pivoting (see ``_lu_determinant``).
        """
        if not self.is_square:
            raise ShapeError(
                f"Determinant is only defined for square matrices, got {self._rows}x{self._columns}"
            )

        n = self._rows
        if n == 1:
            return float(self._data[0])
        if n == 2:
            a, b, c, d = self._data.tolist()
            return a * d - b * c
        if n < LU_DETERMINANT_MIN_SIZE:
            return sum(float(self._data[j]) * self.cofactor(0, j) for j in range(n))
        return self._lu_determinant()

    def _lu_determinant(self) -> float:
        """Determinant via Doolittle LU decomposition without pivoting.

        L (unit lower triangular) and U are stored in place in a working copy;
        the determinant is the product of U's diagonal. An exactly zero pivot
        reports the matrix as singular and returns 0.0. Near-zero pivots are
        not detected and can give unstable results.
        """
        n = self._rows
        lu = self._data.reshape(n, n).tolist()

        for i in range(n):
            pivot = lu[i][i]
            if pivot == 0.0:
                logger.debug(f"Zero pivot at row {i}, {n}x{n} matrix treated as singular")
                return 0.0
            for r in range(i + 1, n):
                factor = lu[r][i] / pivot
                lu[r][i] = factor
                for c in range(i + 1, n):
                    lu[r][c] -= factor * lu[i][c]

        det = 1.0
        for i in range(n):
            det *= lu[i][i]
        return det

    def submatrix(self, row: int, col: int) -> "Matrix":
        """Return a copy without ``row`` and ``col``, preserving the order of the rest."""
        self._offset(row, col)
        if self._rows < 2 or self._columns < 2:
            raise ShapeError(
                f"Cannot remove a row and a column from a {self._rows}x{self._columns} matrix"
            )
        grid = self._data.reshape(self._rows, self._columns)
        kept = np.delete(np.delete(grid, row, axis=0), col, axis=1)
        return Matrix(self._rows - 1, self._columns - 1, kept)

    def minor(self, row: int, col: int) -> float:
        """Determinant of the submatrix obtained by deleting ``row`` and ``col``."""
        if not self.is_square:
            raise ShapeError(
                f"Minors are only defined for square matrices, got {self._rows}x{self._columns}"
            )
        self._offset(row, col)
        if self._rows == 1:
            # determinant of the empty matrix
            return 1.0
        return self.submatrix(row, col).determinant()

    def cofactor(self, row: int, col: int) -> float:
        """Signed minor at ``(row, col)``."""
        sign = 1.0 if (row + col) % 2 == 0 else -1.0
        return sign * self.minor(row, col)

    def inverse(self) -> "Matrix":
        """Invert with the adjugate method: transpose(cofactors) / determinant.

        Raises:
            ShapeError: If the matrix is not square
            SingularMatrixError: If the determinant is exactly zero
        """
        if not self.is_square:
            raise ShapeError(
                f"Inverse is only defined for square matrices, got {self._rows}x{self._columns}"
            )

        det = self.determinant()
        if det == 0.0:
            raise SingularMatrixError("Matrix is singular and cannot be inverted")

        n = self._rows
        cofactors = Matrix(n, n)
        for i in range(n):
            for j in range(n):
                cofactors._data[i * n + j] = self.cofactor(i, j)

        adjugate = cofactors.transpose()
        logger.debug(f"Inverted {n}x{n} matrix: determinant={det:.6g}")
        return Matrix(n, n, adjugate._data / det)

    # ------------------------------------------------------------------
    # Conversion and comparison
    # ------------------------------------------------------------------

    def to_array(self) -> List[List[float]]:
        """Return the matrix as a list of row lists."""
        return self._data.reshape(self._rows, self._columns).tolist()

    def to_numpy(self) -> np.ndarray:
        """Return a 2D copy of the matrix."""
        return self._data.reshape(self._rows, self._columns).copy()

    def to_pretty_string(self, decimals: int = 2) -> str:
        return format_matrix(self, decimals)

    def allclose(self, other: "Matrix", rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        """Compare shape exactly and values within tolerance."""
        return self.shape == other.shape and bool(
            np.allclose(self._data, other._data, rtol=rtol, atol=atol)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def __repr__(self) -> str:
        return f"Matrix({self._rows}, {self._columns}, {self._data.tolist()})"

    def __str__(self) -> str:
        return self.to_pretty_string()
