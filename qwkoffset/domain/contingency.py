"""Contingency matrix construction and dense conversion.

Convention: rows = actual (true) category, columns = predicted value.
Raw predicted values may be fractional or outside the category range;
bounding.bound_matrix() maps them onto ordinal bins later.

Only depends on: numpy, sparse core.
"""

import math
from typing import Iterable, Tuple

import numpy as np

from .errors import InvalidMatrixError
from .models import CategoryRange, SparseTensor
from .sparse import from_entries


def build_matrix(
    triples: Iterable[Tuple[int, float, float]],
) -> SparseTensor:
    """Build a raw contingency matrix from (actual, predicted, count) triples.

    Triples may arrive in any order; repeated cells are summed. Zero
    counts are kept as zero-valued cells.

    Args:
        triples: (actual_category, predicted_value, count).

    Returns:
        Canonical sparse contingency matrix.

    Raises:
        InvalidMatrixError: On non-integer categories, non-finite
            predictions, or negative / non-finite counts.
    """
    entries = []
    for actual, predicted, count in triples:
        if isinstance(actual, bool) or not float(actual).is_integer():
            raise InvalidMatrixError(
                f"Actual category must be an integer, got {actual!r}"
            )
        if not math.isfinite(float(predicted)):
            raise InvalidMatrixError(
                f"Predicted value must be finite, got {predicted!r}"
            )
        count = float(count)
        if not math.isfinite(count) or count < 0:
            raise InvalidMatrixError(
                f"Count must be a non-negative number, got {count!r} "
                f"at cell ({actual}, {predicted})"
            )
        predicted = float(predicted)
        if predicted.is_integer():
            predicted = int(predicted)
        entries.append(((int(actual), predicted), count))

    return from_entries(entries)


def check_counts(matrix: SparseTensor) -> None:
    """Reject negative or non-finite cell values.

    Raises:
        InvalidMatrixError: On the first offending cell.
    """
    for idx, value in matrix:
        if not math.isfinite(value) or value < 0:
            raise InvalidMatrixError(
                f"Count must be a non-negative number, got {value!r} "
                f"at cell {tuple(idx)}"
            )


def to_dense(
    matrix: SparseTensor,
    rows_range: CategoryRange,
    cols_range: CategoryRange,
) -> np.ndarray:
    """Dense float64 array of a bounded matrix.

    array[i, j] = matrix[rows_range.lo + i, cols_range.lo + j].
    Cells outside the ranges raise; bound the matrix first.
    """
    n_rows = rows_range.width + 1
    n_cols = cols_range.width + 1
    dense = np.zeros((n_rows, n_cols), dtype=np.float64)
    for (row, col), value in matrix:
        if row not in rows_range or col not in cols_range:
            raise InvalidMatrixError(
                f"Cell ({row}, {col}) lies outside the dense shape "
                f"[{rows_range.lo}, {rows_range.hi}] x "
                f"[{cols_range.lo}, {cols_range.hi}]"
            )
        dense[int(row) - rows_range.lo, int(col) - cols_range.lo] += value
    return dense


def normalize_contingency(dense: np.ndarray, axis: int = 1) -> np.ndarray:
    """Normalize a dense contingency matrix to percentages along an axis.

    Zero-sum rows/columns produce all zeros (no NaN/Inf).
    """
    m = dense.astype(np.float64)
    totals = m.sum(axis=axis, keepdims=True)
    safe_totals = np.where(totals == 0, 1.0, totals)
    return np.where(totals == 0, 0.0, m / safe_totals * 100.0)
