"""Map raw predicted values onto valid ordinal bins.

Columns below the category range collapse onto lo, columns above onto hi,
and in-range columns are floored to an integer category. Rows and total
mass are unchanged; colliding cells are summed.

No third-party imports.
"""

import math

from .errors import InvalidMatrixError
from .models import SparseTensor
from .reductions import COL, relabel_column
from .sparse import reduce


def bound_column(column: float, lo: int, hi: int) -> int:
    """Ordinal bin a single raw predicted value falls into."""
    if column < lo:
        return lo
    if column > hi:
        return hi
    return int(math.floor(column))


def bound_matrix(matrix: SparseTensor, lo: int, hi: int) -> SparseTensor:
    """Clip/floor every column of *matrix* into [lo, hi].

    Args:
        matrix: Raw contingency matrix, columns possibly real-valued.
        lo: Lowest valid category.
        hi: Highest valid category.

    Returns:
        Canonical contingency matrix with integer columns in [lo, hi].

    Raises:
        InvalidMatrixError: If lo > hi.
    """
    if lo > hi:
        raise InvalidMatrixError(f"Invalid category range: lo={lo} > hi={hi}")

    below = SparseTensor(tuple(e for e in matrix if e[0][COL] < lo))
    above = SparseTensor(tuple(e for e in matrix if e[0][COL] > hi))
    within = SparseTensor(tuple(
        ((idx[0], int(math.floor(idx[COL]))), v)
        for idx, v in matrix
        if lo <= idx[COL] <= hi
    ))

    merged = (
        relabel_column(below, lo).entries
        + within.entries
        + relabel_column(above, hi).entries
    )
    return reduce(SparseTensor(merged), (False, False))
