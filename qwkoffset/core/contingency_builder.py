"""Assemble a raw contingency matrix from score partitions.

Each half-open score interval [edges[i], edges[i+1]) becomes one sub-bin
on the data source. Its category distribution contributes triples
(category, edges[i], count), so the interval's lower edge is the raw
predicted value that bounding later floors/clamps into a category.

A partition whose fetch fails degrades to an empty distribution; the
build never aborts on a single partition.

Depends on: numpy, core.data_source, domain.contingency.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from ..domain.contingency import build_matrix
from ..domain.errors import ConfigurationError
from ..domain.models import PartitionReport, SparseTensor
from .data_source import DataSource, PartitionFetchError

logger = logging.getLogger(__name__)


def score_edges(score_min: float, score_max: float, n_bins: int) -> np.ndarray:
    """n_bins + 1 evenly spaced partition edges spanning the score range.

    The top edge is nudged up so the maximum score lands in the last
    half-open interval.

    Raises:
        ConfigurationError: If n_bins < 1 or the range is empty.
    """
    if n_bins < 1:
        raise ConfigurationError(f"n_bins must be >= 1, got {n_bins}")
    if not score_max > score_min:
        raise ConfigurationError(
            f"score_max ({score_max}) must exceed score_min ({score_min})"
        )
    edges = np.linspace(score_min, score_max, n_bins + 1)
    edges[-1] = np.nextafter(edges[-1], np.inf)
    return edges


def build_raw_contingency(
    source: DataSource,
    field: str,
    edges: Sequence[float],
) -> Tuple[SparseTensor, PartitionReport]:
    """Fetch per-partition category counts and build the raw matrix.

    Args:
        source: Data source collaborator.
        field: Objective field name.
        edges: Ascending partition edges; len(edges) - 1 partitions.

    Returns:
        (raw_matrix, report)
    """
    if len(edges) < 2:
        raise ConfigurationError("Need at least two edges to form a partition")

    triples: List[Tuple[int, float, float]] = []
    n_empty = 0
    failed: List[Tuple[float, float]] = []

    for lo, hi in zip(edges[:-1], edges[1:]):
        lo, hi = float(lo), float(hi)
        partition_id = source.create_partition(lo, hi)
        if partition_id is None:
            n_empty += 1
            continue

        try:
            distribution = source.category_distribution(partition_id, field)
        except PartitionFetchError as e:
            logger.warning(
                "Partition [%s, %s) unavailable, counted as empty: %s",
                lo, hi, e,
            )
            failed.append((lo, hi))
            distribution = {}

        for category, count in sorted(distribution.items()):
            triples.append((category, lo, count))

    report = PartitionReport(
        n_partitions=len(edges) - 1,
        n_empty=n_empty,
        n_failed=len(failed),
        failed_intervals=tuple(failed),
    )
    logger.info(
        "Assembled %d cells from %d partitions (%d empty, %d failed)",
        len(triples), report.n_partitions, report.n_empty, report.n_failed,
    )
    return build_matrix(triples), report
