"""Top-level contingency optimizer.

bound -> baseline kappa -> per-column offsets -> apply -> re-bound ->
adjusted kappa.

Only depends on: domain modules, logging.
"""

import logging
from typing import List, Optional

from .bounding import bound_matrix
from .contingency import check_counts
from .errors import InvalidMatrixError
from .kappa import expected_value_matrix, quadratically_weighted_kappa
from .models import CategoryRange, OptimizationResult, SparseTensor
from .offsets import compute_offsets, offset_contingency_matrix
from .reductions import column_sums, distinct_columns, index_range, row_sums

logger = logging.getLogger(__name__)


def optimize_contingency_matrix(
    raw: SparseTensor,
    enable_optimization: bool = True,
    category_range: Optional[CategoryRange] = None,
) -> OptimizationResult:
    """Bound a raw contingency matrix, score it and search per-column offsets.

    Args:
        raw: Raw contingency matrix (actual=rows, raw prediction=cols).
        enable_optimization: Run the offset search. When False the result
            carries no offsets and no adjusted matrix.
        category_range: Known category range of the objective. Defaults to
            the span of the observed rows.

    Returns:
        OptimizationResult.

    Raises:
        EmptyDatasetError: If the matrix has zero total mass.
        InvalidMatrixError: If a count is negative, category_range is inverted,
            or observed rows fall outside category_range.
    """
    check_counts(raw)
    if category_range is not None and category_range.lo > category_range.hi:
        raise InvalidMatrixError(
            f"Invalid category range: lo={category_range.lo} > "
            f"hi={category_range.hi}"
        )

    rows = row_sums(raw)
    cols = column_sums(raw)
    lo, hi = index_range(rows)
    if category_range is None:
        category_range = CategoryRange(int(lo), int(hi))
    elif lo not in category_range or hi not in category_range:
        raise InvalidMatrixError(
            f"Actual categories [{lo}, {hi}] fall outside the category "
            f"range [{category_range.lo}, {category_range.hi}]"
        )
    cols_range = index_range(cols)

    warnings: List[str] = []
    if len(rows) > len(cols):
        msg = (
            f"Contingency matrix has {len(rows)} actual categories but only "
            f"{len(cols)} predicted columns; the table may be malformed."
        )
        logger.warning(msg)
        warnings.append(msg)

    expected_raw = expected_value_matrix(raw)
    bounded = bound_matrix(raw, category_range.lo, category_range.hi)
    baseline = quadratically_weighted_kappa(bounded, category_range)

    logger.debug(
        "Baseline kappa-complement %.6f over categories [%d, %d]",
        baseline.kappa_complement, category_range.lo, category_range.hi,
    )

    if not enable_optimization:
        return OptimizationResult(
            contingency=bounded,
            kappac=baseline.kappa_complement,
            offsets=(),
            rows_range=category_range,
            cols_range=cols_range,
            warnings=tuple(warnings),
        )

    offsets = []
    for source_col in distinct_columns(raw):
        record = compute_offsets(
            raw,
            expected_raw,
            baseline.weights,
            baseline.kappa_complement,
            baseline.numerator,
            baseline.denominator,
            category_range,
            source_col,
        )
        logger.debug(
            "Column %s -> %s (offset %s): %.6f",
            record.source_column, record.dest_column, record.offset,
            record.kappa_complement,
        )
        offsets.append(record)

    adjusted = bound_matrix(
        offset_contingency_matrix(raw, offsets),
        category_range.lo,
        category_range.hi,
    )
    adjusted_kappa = quadratically_weighted_kappa(adjusted, category_range)

    return OptimizationResult(
        contingency=bounded,
        kappac=baseline.kappa_complement,
        offsets=tuple(offsets),
        rows_range=category_range,
        cols_range=cols_range,
        adj_contingency=adjusted,
        adj_kappac=adjusted_kappa.kappa_complement,
        warnings=tuple(warnings),
    )
