"""Sparse tensor core: canonical ordering, group-and-sum, sorted merge.

A sparse tensor is a sorted tuple of (index-tuple, value) entries.
Everything else in the kappa engine is built from the two primitives
defined here:

  reduce(tensor, ignore_mask)  group entries on the non-ignored index
                               positions and sum each group.
  combine(op, a, b)            merge two canonical tensors key by key
                               (the merge step of mergesort) applying a
                               binary operator.

Only depends on: numpy (for from_dense), domain models.
"""

from typing import Callable, Iterable, List, Sequence, Tuple

import numpy as np

from .errors import InvalidMatrixError
from .models import Entry, Index, SparseTensor

EMPTY = SparseTensor(())


def index_order(index: Index) -> Index:
    """Sort key defining the single total order over index tuples.

    Ascending lexicographic: first position most significant.
    """
    return tuple(index)


def project(index: Index, ignore_mask: Sequence[bool]) -> Index:
    """Drop the ignored positions of *index*, keeping the rest in order."""
    return tuple(v for v, ignored in zip(index, ignore_mask) if not ignored)


def from_entries(entries: Iterable[Entry]) -> SparseTensor:
    """Canonicalize arbitrary-order entries (duplicates summed)."""
    items = [(tuple(idx), float(value)) for idx, value in entries]
    if not items:
        return EMPTY
    return reduce(SparseTensor(tuple(items)), (False,) * len(items[0][0]))


def reduce(tensor: SparseTensor, ignore_mask: Sequence[bool]) -> SparseTensor:
    """Group entries on the non-ignored index positions and sum values.

    Each output entry keeps the full index of the first group member in
    (projected key, index) order, so ignored positions hold a fixed
    representative value. Output is in canonical index order.

    Args:
        tensor: Sparse tensor, canonical or not.
        ignore_mask: One boolean per index position; True = ignored.

    Returns:
        Reduced tensor. Empty input gives an empty tensor; an all-True mask
        gives a single entry holding the grand total.

    Raises:
        InvalidMatrixError: If the mask length differs from the arity.
    """
    if not tensor.entries:
        return EMPTY

    mask = tuple(bool(m) for m in ignore_mask)
    for idx, _ in tensor.entries:
        if len(idx) != len(mask):
            raise InvalidMatrixError(
                f"Ignore mask of length {len(mask)} does not match "
                f"index {idx!r}"
            )

    ordered = sorted(
        tensor.entries,
        key=lambda e: (project(e[0], mask), index_order(e[0])),
    )

    groups: List[Entry] = []
    current_key = project(ordered[0][0], mask)
    current_index = ordered[0][0]
    running = 0.0
    for idx, value in ordered:
        key = project(idx, mask)
        if key != current_key:
            groups.append((current_index, running))
            current_key = key
            current_index = idx
            running = 0.0
        running += value
    groups.append((current_index, running))

    if any(mask):
        # Groups come out in projected order; restore full index order
        groups.sort(key=lambda e: index_order(e[0]))
    return SparseTensor(tuple(groups))


def combine(
    op: Callable[[float, float], float],
    a: SparseTensor,
    b: SparseTensor,
) -> SparseTensor:
    """Elementwise merge of two canonical tensors.

    Walks both listings with two pointers. A key present on one side only
    is combined against 0.0; keys absent from both are never emitted.
    """
    left = a.entries
    right = b.entries
    out: List[Entry] = []
    i = j = 0
    while i < len(left) and j < len(right):
        key_a = index_order(left[i][0])
        key_b = index_order(right[j][0])
        if key_a == key_b:
            out.append((left[i][0], op(left[i][1], right[j][1])))
            i += 1
            j += 1
        elif key_a < key_b:
            out.append((left[i][0], op(left[i][1], 0.0)))
            i += 1
        else:
            out.append((right[j][0], op(0.0, right[j][1])))
            j += 1
    while i < len(left):
        out.append((left[i][0], op(left[i][1], 0.0)))
        i += 1
    while j < len(right):
        out.append((right[j][0], op(0.0, right[j][1])))
        j += 1
    return SparseTensor(tuple(out))


def multiply(x: float, y: float) -> float:
    return x * y


def add(x: float, y: float) -> float:
    return x + y


def from_dense(
    array: np.ndarray,
    row_offset: int = 0,
    col_offset: int = 0,
    keep_zeros: bool = False,
) -> SparseTensor:
    """Convert a 1D or 2D numpy array into a sparse tensor.

    Args:
        array: Dense vector or matrix.
        row_offset: Index of array row 0 (category of the first row).
        col_offset: Index of array column 0 (matrices only).
        keep_zeros: Emit entries for zero cells too.

    Returns:
        Canonical sparse tensor.
    """
    arr = np.asarray(array, dtype=np.float64)
    if arr.ndim not in (1, 2):
        raise InvalidMatrixError(
            f"from_dense expects a vector or matrix, got ndim={arr.ndim}"
        )

    entries: List[Entry] = []
    if arr.ndim == 1:
        for i, value in enumerate(arr):
            if keep_zeros or value != 0.0:
                entries.append(((i + row_offset,), float(value)))
    else:
        n_rows, n_cols = arr.shape
        for i in range(n_rows):
            for j in range(n_cols):
                value = arr[i, j]
                if keep_zeros or value != 0.0:
                    entries.append(
                        ((i + row_offset, j + col_offset), float(value))
                    )
    # Row-major iteration is already canonical
    return SparseTensor(tuple(entries))


def to_pairs(tensor: SparseTensor) -> List[Tuple]:
    """Flatten entries to plain tuples, e.g. (row, col, value)."""
    return [tuple(idx) + (value,) for idx, value in tensor.entries]
