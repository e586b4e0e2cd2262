"""Per-column offset search and offset application.

For each predicted (source) column, every destination category is scored
with an O(1) delta against a fixed baseline:

    k(dest) = (k0_num + num_dest - num_src) / (k0_den + den_dest - den_src)

num_* / den_* are the column's contributions to <M, W> and <E, W> when its
mass sits at the destination / at its bounded home bin. E is the expected
matrix of the RAW matrix, so each raw column carries its own share of the
expected counts. Columns are searched independently, never jointly.

No third-party imports.
"""

from typing import Iterable

from .bounding import bound_column
from .kappa import kappa_ratio
from .models import CategoryRange, KappaParts, OffsetRecord, SparseTensor
from .reductions import COL, ROW, get_column, inner_product, relabel_column
from .sparse import from_entries


def kappa_parts(
    matrix: SparseTensor,
    expected: SparseTensor,
    weights: SparseTensor,
    column,
) -> KappaParts:
    """Column *column*'s contribution to the kappa numerator/denominator."""
    w_col = get_column(weights, column)
    return KappaParts(
        numerator=inner_product(get_column(matrix, column), w_col),
        denominator=inner_product(get_column(expected, column), w_col),
    )


def _column_slice(matrix: SparseTensor, column) -> SparseTensor:
    # Filtering a canonical matrix on one column keeps it canonical
    return SparseTensor(tuple(e for e in matrix if e[0][COL] == column))


def compute_offsets(
    raw: SparseTensor,
    expected: SparseTensor,
    weights: SparseTensor,
    k0: float,
    k0_num: float,
    k0_den: float,
    rows_range: CategoryRange,
    source_col,
) -> OffsetRecord:
    """Find the destination category minimizing the kappa-complement.

    Args:
        raw: Raw (unbounded) contingency matrix.
        expected: expected_value_matrix(raw).
        weights: Weight matrix over rows_range.
        k0: Baseline kappa-complement of the bounded matrix.
        k0_num: Baseline numerator <M, W>.
        k0_den: Baseline denominator <E, W>.
        rows_range: Valid category range; every category is a candidate.
        source_col: Raw column to move.

    Returns:
        OffsetRecord for the best destination. Ties go to the lowest
        category; the unmoved candidate scores exactly k0, so the result
        never exceeds the baseline.
    """
    lo, hi = rows_range.lo, rows_range.hi
    source_m = _column_slice(raw, source_col)
    source_e = _column_slice(expected, source_col)

    def candidate(dest) -> KappaParts:
        col = bound_column(dest, lo, hi)
        return kappa_parts(
            relabel_column(source_m, col),
            relabel_column(source_e, col),
            weights,
            col,
        )

    home = bound_column(source_col, lo, hi)
    at_source = candidate(home)

    best_dest = None
    best_k = None
    for dest in rows_range.categories():
        if dest == home:
            k = k0
        else:
            at_dest = candidate(dest)
            k = kappa_ratio(
                k0_num + (at_dest.numerator - at_source.numerator),
                k0_den + (at_dest.denominator - at_source.denominator),
            )
        if best_k is None or k < best_k:
            best_dest, best_k = dest, k

    return OffsetRecord(
        source_column=source_col,
        dest_column=best_dest,
        offset=best_dest - source_col,
        kappa_complement=best_k,
    )


def offset_contingency_matrix(
    raw: SparseTensor,
    offsets: Iterable[OffsetRecord],
) -> SparseTensor:
    """Move each source column's mass to its destination column.

    Every moved entry leaves a zero-valued entry at its source so a vacated
    column is still listed. The result is re-reduced (destinations shared
    by several sources are summed) but not bounded.
    """
    moves = {record.source_column: record.dest_column for record in offsets}

    entries = []
    for idx, value in raw:
        source = idx[COL]
        if source in moves:
            entries.append(((idx[ROW], moves[source]), value))
            entries.append(((idx[ROW], source), 0.0))
        else:
            entries.append((idx, value))
    return from_entries(entries)
