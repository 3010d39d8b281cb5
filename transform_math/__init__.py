"""Matrix and vector kernel for 3D transform math.

Dense matrices with the factories needed to build affine and rotation
transforms, plus short vectors that rotate and transform through them.
"""

from __future__ import annotations

from transform_math.errors import (
    DimensionError,
    IndexOutOfRange,
    ShapeError,
    SingularMatrixError,
    TransformMathError,
)
from transform_math.matrix import Matrix
from transform_math.vector import Vector

__version__ = "0.1.0"

__all__ = [
    "DimensionError",
    "IndexOutOfRange",
    "Matrix",
    "ShapeError",
    "SingularMatrixError",
    "TransformMathError",
    "Vector",
]
