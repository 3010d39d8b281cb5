"""Exceptions raised by the matrix and vector kernel.

Each error also derives from the closest builtin exception so callers can
catch them as ``ValueError``, ``ArithmeticError`` or ``IndexError``.
"""

from __future__ import annotations


class TransformMathError(Exception):
    """Base class for all transform_math errors."""


class ShapeError(TransformMathError, ValueError):
    """Matrix operands have shapes incompatible with the operation."""


class DimensionError(TransformMathError, ValueError):
    """Vector length is incompatible with the operation."""


class SingularMatrixError(TransformMathError, ArithmeticError):
    """Matrix has a zero determinant and cannot be inverted."""


class IndexOutOfRange(TransformMathError, IndexError):
    """Row, column or component index outside the stored data."""
