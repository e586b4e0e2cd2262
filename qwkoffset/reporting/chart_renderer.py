"""Chart rendering for qwkoffset reports.

Generates matplotlib figures of bounded / adjusted contingency matrices
and of the per-column offset table.

Depends on: matplotlib, numpy.
"""

import io
from typing import Optional, Sequence, Tuple

import numpy as np

try:
    import matplotlib
    matplotlib.use("Agg")  # non-interactive backend for thread safety
    import matplotlib.pyplot as plt
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from ..domain.contingency import to_dense
from ..domain.models import CategoryRange, OffsetRecord, SparseTensor


STYLE = {
    "font.family": "serif",
    "font.size": 10,
    "axes.grid": True,
    "grid.alpha": 0.3,
    "figure.dpi": 150,
    "savefig.dpi": 150,
    "savefig.bbox": "tight",
}


def is_available() -> bool:
    return HAS_MATPLOTLIB


def _to_png(fig) -> bytes:
    buf = io.BytesIO()
    fig.savefig(buf, format="png")
    plt.close(fig)
    buf.seek(0)
    return buf.read()


def render_contingency_heatmap(
    matrix: SparseTensor,
    rows_range: CategoryRange,
    cols_range: Optional[CategoryRange] = None,
    title: str = "Contingency Matrix",
    figsize: Tuple[float, float] = (7, 6),
) -> Optional[bytes]:
    """Render a bounded contingency matrix as a heatmap.

    Args:
        matrix: Bounded contingency matrix.
        rows_range: Actual category range (y axis).
        cols_range: Predicted category range (x axis); defaults to rows_range.
        title: Figure title.

    Returns:
        PNG image bytes, or None if matplotlib unavailable.
    """
    if not HAS_MATPLOTLIB:
        return None

    cols_range = cols_range or rows_range
    dense = to_dense(matrix, rows_range, cols_range)
    n_rows, n_cols = dense.shape
    peak = dense.max() if dense.size else 0.0

    with plt.rc_context(STYLE):
        fig, ax = plt.subplots(figsize=figsize)
        im = ax.imshow(dense, cmap="YlOrRd", aspect="auto")

        for i in range(n_rows):
            for j in range(n_cols):
                val = dense[i, j]
                color = "white" if val > peak * 0.6 else "black"
                ax.text(j, i, f"{val:g}", ha="center", va="center",
                        color=color, fontsize=9)

        ax.set_xticks(range(n_cols))
        ax.set_xticklabels([str(c) for c in cols_range.categories()])
        ax.set_yticks(range(n_rows))
        ax.set_yticklabels([str(r) for r in rows_range.categories()])
        ax.set_xlabel("Predicted")
        ax.set_ylabel("Actual")
        ax.set_title(title)
        ax.grid(False)

        fig.colorbar(im, ax=ax, label="Count", shrink=0.8)
        fig.tight_layout()
        return _to_png(fig)


def render_offset_chart(
    offsets: Sequence[OffsetRecord],
    baseline_kappac: Optional[float] = None,
    figsize: Tuple[float, float] = (9, 4),
) -> Optional[bytes]:
    """Render per-column offsets with each column's kappa-complement.

    Returns:
        PNG image bytes, or None if matplotlib unavailable or no offsets.
    """
    if not HAS_MATPLOTLIB or not offsets:
        return None

    labels = [f"{o.source_column:g}" for o in offsets]
    x = np.arange(len(offsets))
    shifts = [o.offset for o in offsets]
    kappas = [o.kappa_complement for o in offsets]

    with plt.rc_context(STYLE):
        fig, ax = plt.subplots(figsize=figsize)
        colors = ["#4C72B0" if s >= 0 else "#DD8452" for s in shifts]
        ax.bar(x, shifts, color=colors, edgecolor="black", linewidth=0.5)
        ax.axhline(y=0, color="black", linewidth=0.8)
        ax.set_xlabel("Source column")
        ax.set_ylabel("Offset")
        ax.set_xticks(x)
        ax.set_xticklabels(labels, rotation=45, ha="right")

        ax2 = ax.twinx()
        ax2.plot(x, kappas, color="gray", marker="o", linewidth=1,
                 label="Kappa-complement")
        if baseline_kappac is not None:
            ax2.axhline(y=baseline_kappac, color="gray", linestyle="--",
                        linewidth=1, label=f"Baseline = {baseline_kappac:.3f}")
        ax2.set_ylabel("Kappa-complement")
        ax2.grid(False)
        ax2.legend(loc="upper right")

        ax.set_title("Per-column Offsets")
        fig.tight_layout()
        return _to_png(fig)
