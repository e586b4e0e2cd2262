"""Test configuration for qwkoffset.

All tests run with plain pytest. Matrices follow the package convention:
rows = actual category, columns = (raw) predicted value.
"""

import os
import sys

import numpy as np
import pytest

# Add repository root to path so package imports work without installing
REPO_DIR = os.path.dirname(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)
if REPO_DIR not in sys.path:
    sys.path.insert(0, REPO_DIR)

from qwkoffset.core.data_source import InMemoryDataSource  # noqa: E402
from qwkoffset.domain.contingency import build_matrix  # noqa: E402


@pytest.fixture
def diagonal_matrix():
    """Perfect 3-class agreement, diagonal counts [5, 4, 5]."""
    return build_matrix([(0, 0, 5), (1, 1, 4), (2, 2, 5)])


@pytest.fixture
def disagreement_matrix():
    """All mass on the two maximal-disagreement corners of [0, 2]."""
    return build_matrix([(0, 2, 5), (2, 0, 5)])


@pytest.fixture
def fractional_raw_matrix():
    """Raw predictions that are fractional or outside [0, 2]."""
    return build_matrix([
        (0, -0.5, 3),
        (0, 0.4, 2),
        (1, 1.7, 4),
        (1, 0.9, 1),
        (2, 2.2, 2),
        (2, 3.5, 3),
    ])


@pytest.fixture
def shifted_raw_matrix():
    """Every prediction one category too high, categories [0, 3]."""
    #        Predicted
    #          1   2   3   4
    # Act 0 [ 10,  .,  .,  . ]
    #     1 [  ., 10,  .,  . ]
    #     2 [  .,  ., 10,  . ]
    #     3 [  .,  .,  ., 10 ]
    return build_matrix([(0, 1, 10), (1, 2, 10), (2, 3, 10), (3, 4, 10)])


@pytest.fixture
def asymmetric_5class_matrix():
    """Realistic 5-class dense matrix with varied agreement."""
    return np.array([
        [45,  3,  1,  0,  1],
        [ 2, 28,  4,  1,  0],
        [ 1,  2, 15,  1,  1],
        [ 3,  1,  2, 38,  1],
        [ 0,  1,  0,  2, 12],
    ], dtype=np.int64)


@pytest.fixture
def in_memory_source():
    """Six rows over categories [0, 2], two per unit score interval."""
    actual = np.array([0, 0, 1, 1, 2, 2])
    scores = np.array([0.2, 0.7, 1.1, 1.9, 2.5, 3.0])
    return InMemoryDataSource(actual, scores, field="rating")
