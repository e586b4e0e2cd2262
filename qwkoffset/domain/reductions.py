"""Derived views of sparse tensors: marginals, totals, columns, scaling.

Built purely from sparse.reduce / sparse.combine.
Convention: matrix index = (row, column) = (actual, predicted).

No third-party imports.
"""

from typing import Tuple

from .errors import EmptyDatasetError
from .models import SparseTensor
from .sparse import combine, index_order, multiply, reduce

ROW = 0
COL = 1


def _axis_totals(matrix: SparseTensor, axis: int) -> SparseTensor:
    mask = tuple(pos != axis for pos in range(2))
    vector = [((idx[axis],), v) for idx, v in reduce(matrix, mask)]
    # Ordered on the surviving index alone, not the representative's full index
    vector.sort(key=lambda e: index_order(e[0]))
    return SparseTensor(tuple(vector))


def row_sums(matrix: SparseTensor) -> SparseTensor:
    """Vector of row totals, indexed by row, in ascending row order."""
    return _axis_totals(matrix, ROW)


def column_sums(matrix: SparseTensor) -> SparseTensor:
    """Vector of column totals, indexed by column, in ascending column order."""
    return _axis_totals(matrix, COL)


def total_sum(tensor: SparseTensor) -> float:
    """Sum of all values; 0.0 for an empty tensor."""
    if not tensor.entries:
        return 0.0
    reduced = reduce(tensor, (True,) * tensor.arity)
    return reduced.entries[0][1]


def get_column(matrix: SparseTensor, column) -> SparseTensor:
    """Entries of one column, projected to a vector indexed by row."""
    return SparseTensor(tuple(
        ((idx[ROW],), v) for idx, v in matrix if idx[COL] == column
    ))


def scale(tensor: SparseTensor, alpha: float) -> SparseTensor:
    return SparseTensor(tuple((idx, v * alpha) for idx, v in tensor))


def relabel_column(matrix: SparseTensor, column) -> SparseTensor:
    """Move every entry to *column*. Collisions are left for reduce()."""
    return SparseTensor(tuple(((idx[ROW], column), v) for idx, v in matrix))


def inner_product(a: SparseTensor, b: SparseTensor) -> float:
    """Sum of elementwise products (vector dot / Frobenius product)."""
    return total_sum(combine(multiply, a, b))


def index_range(vector: SparseTensor) -> Tuple:
    """(min, max) index of a vector such as row_sums(M).

    Raises:
        EmptyDatasetError: If the vector has no entries.
    """
    if not vector.entries:
        raise EmptyDatasetError("Cannot derive an index range from no entries")
    # Canonical order: first and last entries hold the extremes
    return (vector.entries[0][0][0], vector.entries[-1][0][0])


def distinct_columns(matrix: SparseTensor) -> Tuple:
    """Distinct column indices in ascending order."""
    return tuple(idx[0] for idx, _ in column_sums(matrix))

