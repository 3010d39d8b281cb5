"""Plain-text rendering of matrices.

The formatter only relies on ``to_array()``, so it works with anything that
exposes rows of floats.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np


def format_cell(value: float, decimals: int = 2) -> str:
    """Floor a value to ``decimals`` places and render it without a trailing ``.0``."""
    factor = 10.0 ** decimals
    rounded = float(np.floor(value * factor) / factor)
    if rounded == 0.0:
        # avoid printing "-0"
        rounded = 0.0
    text = repr(rounded)
    if text.endswith(".0"):
        text = text[:-2]
    return text


def format_rows(rows: Sequence[Sequence[float]], decimals: int = 2) -> str:
    """Render rows as right-aligned, comma separated cells, one row per line."""
    cells: List[List[str]] = [[format_cell(value, decimals) for value in row] for row in rows]
    width = max((len(cell) for row in cells for cell in row), default=0)

    lines = [", ".join(cell.rjust(width) for cell in row) for row in cells]
    return "".join(line + "\n" for line in lines)


def format_matrix(matrix, decimals: int = 2) -> str:
    """Pretty-print a matrix.

    Args:
        matrix: Object with a ``to_array()`` method returning rows of floats
        decimals: Number of decimals kept (values are floored, not rounded)

    Returns:
        Multi-line string, each line terminated by a newline
    """
    return format_rows(matrix.to_array(), decimals)
