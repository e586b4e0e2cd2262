"""Input validation for qwkoffset.

Checks an assembled raw contingency matrix against the category range
before optimization. Returns structured validation results (never silently
proceeds).

Depends on: domain.*.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..domain.models import CategoryRange, PartitionReport, SparseTensor
from ..domain.reductions import column_sums, row_sums, total_sum


@dataclass
class ValidationIssue:
    """A single validation finding."""
    severity: str     # 'FATAL' | 'WARNING'
    message: str
    suggestion: str = ""


@dataclass
class ValidationResult:
    """Aggregated validation result."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(i.severity == "FATAL" for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == "WARNING" for i in self.issues)

    @property
    def fatal_issues(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "FATAL"]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "WARNING"]


def validate_contingency_inputs(
    raw: SparseTensor,
    category_range: CategoryRange,
    partitions: Optional[PartitionReport] = None,
) -> ValidationResult:
    """Validate a raw contingency matrix before optimization.

    Args:
        raw: Raw contingency matrix (actual=rows, raw prediction=cols).
        category_range: Valid categories of the objective field.
        partitions: Optional report from the contingency builder.

    Returns:
        ValidationResult with issues.
    """
    result = ValidationResult()

    if category_range.lo > category_range.hi:
        result.issues.append(ValidationIssue(
            severity="FATAL",
            message=(
                f"Invalid category range: lo={category_range.lo} > "
                f"hi={category_range.hi}."
            ),
        ))
        return result

    if total_sum(raw) == 0:
        result.issues.append(ValidationIssue(
            severity="FATAL",
            message="Contingency matrix has zero total count.",
            suggestion="Check the score range and partition edges.",
        ))
        return result

    rows = [idx[0] for idx, _ in row_sums(raw)]
    cols = [idx[0] for idx, _ in column_sums(raw)]

    # Actual categories must be known categories
    outside = [r for r in rows if r not in category_range]
    if outside:
        result.issues.append(ValidationIssue(
            severity="FATAL",
            message=(
                f"Actual categories {outside} lie outside the category "
                f"range [{category_range.lo}, {category_range.hi}]."
            ),
        ))

    # Out-of-range predictions are clamped, not rejected
    clamped = [c for c in cols if c not in category_range]
    if clamped:
        result.issues.append(ValidationIssue(
            severity="WARNING",
            message=(
                f"{len(clamped)} predicted column(s) fall outside "
                f"[{category_range.lo}, {category_range.hi}] and will be "
                f"clamped to the range bounds."
            ),
        ))

    if len(rows) > len(cols):
        result.issues.append(ValidationIssue(
            severity="WARNING",
            message=(
                f"{len(rows)} actual categories but only {len(cols)} "
                f"predicted columns."
            ),
            suggestion="Use more score partitions for a finer table.",
        ))

    missing = [c for c in category_range.categories() if c not in rows]
    if missing:
        result.issues.append(ValidationIssue(
            severity="WARNING",
            message=f"Categories {missing} have no observations.",
            suggestion="Kappa weights still span the full category range.",
        ))

    if partitions is not None and partitions.n_failed > 0:
        result.issues.append(ValidationIssue(
            severity="WARNING",
            message=(
                f"{partitions.n_failed} of {partitions.n_partitions} "
                f"partitions could not be fetched and were counted as empty."
            ),
            suggestion="Re-run once the data source is reachable.",
        ))

    return result
