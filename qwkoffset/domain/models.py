"""Domain data models for qwkoffset.

All models are frozen dataclasses (immutable once created).
Only depends on: typing, dataclasses.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

Index = Tuple[Any, ...]
Entry = Tuple[Index, float]


# ---------------------------------------------------------------------------
# Sparse tensors
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SparseTensor:
    """Sorted collection of (index-tuple, value) entries.

    Canonical form: ascending lexicographic index order, one entry per
    index tuple. Built through domain.sparse, which guarantees it.
    """
    entries: Tuple[Entry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    @property
    def arity(self) -> int:
        """Number of index positions (1 = vector, 2 = matrix). 0 if empty."""
        if not self.entries:
            return 0
        return len(self.entries[0][0])

    def as_dict(self) -> Dict[Index, float]:
        return {idx: value for idx, value in self.entries}


@dataclass(frozen=True)
class CategoryRange:
    """Closed integer interval of valid ordinal categories."""
    lo: int
    hi: int

    @property
    def width(self) -> int:
        return self.hi - self.lo

    def categories(self) -> range:
        return range(self.lo, self.hi + 1)

    def __contains__(self, value) -> bool:
        return self.lo <= value <= self.hi


# ---------------------------------------------------------------------------
# Kappa and offsets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KappaParts:
    """A single column's share of the kappa numerator / denominator."""
    numerator: float
    denominator: float


@dataclass(frozen=True)
class KappaResult:
    """Quadratically weighted kappa-complement and its ingredients.

    kappa_complement = numerator / denominator; 0 means perfect agreement.
    """
    kappa_complement: float
    weights: SparseTensor
    expected: SparseTensor
    numerator: float
    denominator: float
    category_range: CategoryRange


@dataclass(frozen=True)
class OffsetRecord:
    """Best destination found for one predicted (source) column."""
    source_column: float
    dest_column: int
    offset: float                     # dest_column - source_column
    kappa_complement: float


@dataclass(frozen=True)
class OptimizationResult:
    """Bounded matrix, baseline kappa and (optionally) the adjusted matrix."""
    contingency: SparseTensor
    kappac: float
    offsets: Tuple[OffsetRecord, ...]
    rows_range: CategoryRange
    cols_range: Tuple[float, float]
    adj_contingency: Optional[SparseTensor] = None
    adj_kappac: Optional[float] = None
    warnings: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Configuration and provenance
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OptimizationConfig:
    """Configuration for an optimization run."""
    objective_field: str
    score_min: float
    score_max: float
    n_bins: int
    enable_optimization: bool = True
    category_range: Optional[CategoryRange] = None   # overrides the source


@dataclass(frozen=True)
class PartitionReport:
    """How the score partitions behaved while assembling the raw matrix."""
    n_partitions: int
    n_empty: int
    n_failed: int
    failed_intervals: Tuple[Tuple[float, float], ...] = ()


@dataclass(frozen=True)
class RunMetadata:
    """Lightweight provenance record. Serialized to JSON alongside results."""
    package_version: str
    timestamp: str                    # ISO 8601
    objective_field: str
    category_range: Tuple[int, int]
    partitions: PartitionReport
    parameters: Dict[str, Any] = field(default_factory=dict)
