"""
qwkoffset — Quadratically Weighted Kappa with per-column recalibration

Computes the quadratically weighted kappa-complement (1 - kappa, 0 means
perfect agreement) of sparse ordinal contingency matrices, and searches
each predicted category for the score offset that best improves it.
"""

__version__ = "1.0.0"
