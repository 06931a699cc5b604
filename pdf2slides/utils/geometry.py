"""
Geometry Utilities - Matrix checks and bounding boxes for PDF coordinate spaces
"""

import math
from typing import Optional, Sequence, Tuple

from pdfminer.utils import apply_matrix_pt

Matrix = Tuple[float, float, float, float, float, float]

UNIT_SQUARE = ((0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (1.0, 1.0))


def to_matrix(values) -> Optional[Matrix]:
    """
    Coerce an operator argument list into a matrix.

    Returns:
        Matrix tuple, or None if the values are not six finite numbers
    """
    if not isinstance(values, (list, tuple)) or len(values) != 6:
        return None
    try:
        matrix = tuple(float(v) for v in values)
    except (TypeError, ValueError):
        return None
    if not all(math.isfinite(v) for v in matrix):
        return None
    return matrix


def unit_square_bbox(m: Sequence[float]) -> Tuple[float, float, float, float]:
    """
    Axis-aligned bounding box of the unit square mapped through a matrix.

    Args:
        m: Transformation matrix

    Returns:
        Tuple of (x0, y0, x1, y1)
    """
    corners = [apply_matrix_pt(m, (x, y)) for x, y in UNIT_SQUARE]
    xs = [c[0] for c in corners]
    ys = [c[1] for c in corners]
    return (min(xs), min(ys), max(xs), max(ys))
