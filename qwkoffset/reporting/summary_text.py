"""Auto-generated summary text for an optimization run.

Produces a short parameterized paragraph describing the contingency table,
the baseline and adjusted quadratically weighted kappa, and the offsets
that changed. Includes citations.

Only depends on: domain models.
"""

from typing import Optional

from ..domain.kappa import kappa_from_complement
from ..domain.models import OptimizationResult, RunMetadata
from ..domain.reductions import total_sum


def generate_summary_text(
    result: OptimizationResult,
    metadata: Optional[RunMetadata] = None,
) -> str:
    """Generate a summary paragraph for an optimization run.

    Args:
        result: The optimization result.
        metadata: Optional run provenance.

    Returns:
        Multi-paragraph text.
    """
    lo, hi = result.rows_range.lo, result.rows_range.hi
    n = total_sum(result.contingency)

    paragraphs = []

    p1 = (
        f"Agreement was measured on {n:g} weighted observations across "
        f"{hi - lo + 1} ordinal categories ({lo}\u2013{hi}). Predicted "
        f"scores were clamped to the category range and floored to "
        f"integer categories before scoring."
    )
    if metadata is not None:
        p1 += (
            f" Counts for field \u2018{metadata.objective_field}\u2019 were "
            f"assembled from {metadata.partitions.n_partitions} score "
            f"partitions"
        )
        if metadata.partitions.n_failed:
            p1 += f" ({metadata.partitions.n_failed} unavailable)"
        p1 += "."
    paragraphs.append(p1)

    p2 = (
        f"The quadratically weighted kappa (Cohen, 1968) was "
        f"{kappa_from_complement(result.kappac):.4f} "
        f"(complement {result.kappac:.4f})."
    )
    paragraphs.append(p2)

    if result.adj_kappac is not None:
        moved = [o for o in result.offsets if o.offset != 0]
        p3 = (
            f"Each predicted column was reassigned independently to the "
            f"category minimizing the kappa-complement. {len(moved)} of "
            f"{len(result.offsets)} columns moved; the adjusted kappa was "
            f"{kappa_from_complement(result.adj_kappac):.4f} "
            f"(complement {result.adj_kappac:.4f})."
        )
        paragraphs.append(p3)

    for warning in result.warnings:
        paragraphs.append(f"Note: {warning}")

    return "\n\n".join(paragraphs)


def generate_references() -> str:
    """Generate the references section for the report."""
    return (
        "Cohen, J. (1968). Weighted kappa: Nominal scale agreement with "
        "provision for scaled disagreement or partial credit. "
        "Psychological Bulletin, 70(4), 213-220. "
        "https://doi.org/10.1037/h0026256\n\n"
        "Fleiss, J.L. and Cohen, J. (1973). The equivalence of weighted "
        "kappa and the intraclass correlation coefficient as measures of "
        "reliability. Educational and Psychological Measurement, 33(3), "
        "613-619. https://doi.org/10.1177/001316447303300309"
    )
