"""Error types raised by the kappa engine.

All derive from ValueError so callers that already guard matrix
computations with ``except ValueError`` keep working.

No third-party imports.
"""


class QWKError(ValueError):
    """Base class for contingency / kappa errors."""
    pass


class DegenerateRangeError(QWKError):
    """Raised when the category range has zero width (hi == lo).

    The quadratic weights divide by (hi - lo)^2, so they are undefined.
    quadratically_weighted_kappa() catches this and reports 0.
    """
    pass


class EmptyDatasetError(QWKError):
    """Raised when a contingency matrix has zero total mass."""
    pass


class InvalidMatrixError(QWKError):
    """Raised for negative counts, non-integer categories or bad ranges."""
    pass


class ConfigurationError(QWKError):
    """Raised for an unusable run configuration, e.g. bad score bins."""
    pass
