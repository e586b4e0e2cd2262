"""Quadratically weighted kappa over sparse contingency matrices.

Reports the kappa-COMPLEMENT (1 - kappa): 0 is perfect agreement and
smaller is better. The offset optimizer minimizes this quantity, so it is
never converted to the conventional kappa inside the engine.

    k = <M, W> / <E, W>

  M  observed contingency matrix (actual=rows, predicted=cols)
  W  quadratic weights (i - j)^2 / (hi - lo)^2
  E  expected counts under independence (outer product of marginals / N)

Only depends on: numpy, sparse core.
"""

from typing import Optional

import numpy as np

from .contingency import check_counts
from .errors import DegenerateRangeError, EmptyDatasetError, InvalidMatrixError
from .models import CategoryRange, KappaResult, SparseTensor
from .reductions import column_sums, index_range, inner_product, row_sums, total_sum
from .sparse import EMPTY, from_dense

# Denominators below this are treated as zero
_EPS = 1e-12


def weight_matrix(lo: int, hi: int) -> SparseTensor:
    """Quadratic weights over [lo, hi] x [lo, hi], zero entries included.

    Raises:
        DegenerateRangeError: If hi == lo (zero-width range).
        InvalidMatrixError: If lo > hi.
    """
    if lo > hi:
        raise InvalidMatrixError(f"Invalid category range: lo={lo} > hi={hi}")
    if hi == lo:
        raise DegenerateRangeError(
            f"Category range [{lo}, {hi}] has zero width; "
            f"quadratic weights are undefined"
        )

    categories = np.arange(lo, hi + 1)
    diff = np.subtract.outer(categories, categories).astype(np.float64)
    weights = diff ** 2 / float(hi - lo) ** 2
    return from_dense(weights, row_offset=lo, col_offset=lo, keep_zeros=True)


def expected_value_matrix(matrix: SparseTensor) -> SparseTensor:
    """Expected counts under independence: E[i, j] = r_i * c_j / N.

    Raises:
        EmptyDatasetError: If the matrix total is zero.
    """
    n = total_sum(matrix)
    if n == 0:
        raise EmptyDatasetError(
            "Cannot compute expected values on an empty contingency matrix"
        )

    rows = row_sums(matrix)
    cols = column_sums(matrix)
    inv_n = 1.0 / n
    # Both vectors are ascending, so row-major emission is canonical
    return SparseTensor(tuple(
        ((r_idx[0], c_idx[0]), r_val * c_val * inv_n)
        for r_idx, r_val in rows
        for c_idx, c_val in cols
    ))


def frobenius_product(a: SparseTensor, b: SparseTensor) -> float:
    """Matrix inner product sum(a * b) over the sparse union of keys."""
    return inner_product(a, b)


def kappa_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, with 0 when the denominator vanishes.

    <E, W> is zero only when all expected mass sits on the diagonal, which
    forces <M, W> to zero as well.
    """
    if abs(denominator) < _EPS:
        return 0.0
    return numerator / denominator


def quadratically_weighted_kappa(
    matrix: SparseTensor,
    category_range: Optional[CategoryRange] = None,
) -> KappaResult:
    """Compute the quadratically weighted kappa-complement.

    Args:
        matrix: Bounded contingency matrix (actual=rows, predicted=cols).
        category_range: Weight range. Defaults to the span of the rows.

    Returns:
        KappaResult. A single-category range yields kappa_complement 0 and
        an empty weight matrix.

    Raises:
        EmptyDatasetError: If the matrix is empty.
        InvalidMatrixError: If a count is negative.
    """
    check_counts(matrix)
    if category_range is None:
        lo, hi = index_range(row_sums(matrix))
        category_range = CategoryRange(int(lo), int(hi))

    expected = expected_value_matrix(matrix)

    try:
        weights = weight_matrix(category_range.lo, category_range.hi)
    except DegenerateRangeError:
        # Single category: nothing to disagree about
        return KappaResult(
            kappa_complement=0.0,
            weights=EMPTY,
            expected=expected,
            numerator=0.0,
            denominator=0.0,
            category_range=category_range,
        )

    numerator = frobenius_product(matrix, weights)
    denominator = frobenius_product(expected, weights)

    return KappaResult(
        kappa_complement=kappa_ratio(numerator, denominator),
        weights=weights,
        expected=expected,
        numerator=numerator,
        denominator=denominator,
        category_range=category_range,
    )


def kappa_from_complement(kappa_complement: float) -> float:
    """Conventional kappa (1 = perfect agreement), for display only."""
    return 1.0 - kappa_complement
