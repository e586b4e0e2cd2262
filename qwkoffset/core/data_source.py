"""Boundary to the dataset platform that supplies category counts.

The kappa engine never issues remote calls itself. A DataSource answers
three questions:

  category_range(field)                    valid ordinal categories
  create_partition(lo, hi)                 sub-bin for scores in [lo, hi)
  category_distribution(partition, field)  category -> count in a sub-bin

InMemoryDataSource implements it over numpy arrays for local runs/tests.

Depends on: numpy, domain.models.
"""

import abc
from typing import Dict, Optional

import numpy as np

from ..domain.errors import EmptyDatasetError, InvalidMatrixError
from ..domain.models import CategoryRange


class PartitionFetchError(Exception):
    """Raised when a partition's category distribution cannot be fetched."""
    pass


class DataSource(abc.ABC):
    """Collaborator interface for category ranges and partition counts."""

    @abc.abstractmethod
    def category_range(self, field: str) -> CategoryRange:
        """Closed integer range of the objective field's categories."""

    @abc.abstractmethod
    def create_partition(self, lo: float, hi: float) -> Optional[str]:
        """Create the sub-bin of rows with score in [lo, hi).

        Returns:
            A partition identifier, or None when the sub-bin is empty.
        """

    @abc.abstractmethod
    def category_distribution(
        self, partition_id: str, field: str,
    ) -> Dict[int, float]:
        """Category -> (possibly weighted) count within a partition.

        Raises:
            PartitionFetchError: If the distribution cannot be fetched.
        """


class InMemoryDataSource(DataSource):
    """DataSource over paired (actual, score) arrays.

    Args:
        actual: 1D integer array of true categories.
        scores: 1D array of model scores (real-valued).
        weights: Optional 1D array of sample weights (default 1.0).
        field: Name reported for the objective field.
        category_range: Known range; defaults to min/max of *actual*.
    """

    def __init__(
        self,
        actual: np.ndarray,
        scores: np.ndarray,
        weights: Optional[np.ndarray] = None,
        field: str = "objective",
        category_range: Optional[CategoryRange] = None,
    ):
        actual = np.asarray(actual)
        scores = np.asarray(scores, dtype=np.float64)
        if len(actual) != len(scores):
            raise InvalidMatrixError(
                f"Array length mismatch: actual={len(actual)}, "
                f"scores={len(scores)}"
            )
        if weights is None:
            weights = np.ones(len(actual), dtype=np.float64)
        weights = np.asarray(weights, dtype=np.float64)
        if len(weights) != len(actual):
            raise InvalidMatrixError(
                f"Array length mismatch: actual={len(actual)}, "
                f"weights={len(weights)}"
            )

        self._actual = actual.astype(np.int64)
        self._scores = scores
        self._weights = weights
        self._field = field
        self._category_range = category_range
        self._partitions: Dict[str, np.ndarray] = {}

    def category_range(self, field: str) -> CategoryRange:
        self._check_field(field)
        if self._category_range is not None:
            return self._category_range
        if len(self._actual) == 0:
            raise EmptyDatasetError("Data source has no rows")
        return CategoryRange(int(self._actual.min()), int(self._actual.max()))

    def create_partition(self, lo: float, hi: float) -> Optional[str]:
        mask = (self._scores >= lo) & (self._scores < hi)
        if not mask.any():
            return None
        partition_id = f"partition/{len(self._partitions)}"
        self._partitions[partition_id] = mask
        return partition_id

    def category_distribution(
        self, partition_id: str, field: str,
    ) -> Dict[int, float]:
        self._check_field(field)
        mask = self._partitions.get(partition_id)
        if mask is None:
            raise PartitionFetchError(f"Unknown partition: {partition_id}")

        distribution: Dict[int, float] = {}
        for category, weight in zip(self._actual[mask], self._weights[mask]):
            key = int(category)
            distribution[key] = distribution.get(key, 0.0) + float(weight)
        return distribution

    def _check_field(self, field: str) -> None:
        if field != self._field:
            raise KeyError(f"Unknown field: {field!r}")
