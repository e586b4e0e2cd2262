"""End-to-end tests for optimize_contingency_matrix()."""

import logging

import numpy as np
import pytest

from qwkoffset.domain.contingency import build_matrix
from qwkoffset.domain.errors import EmptyDatasetError, InvalidMatrixError
from qwkoffset.domain.models import CategoryRange
from qwkoffset.domain.offsets import offset_contingency_matrix
from qwkoffset.domain.optimizer import optimize_contingency_matrix
from qwkoffset.domain.reductions import total_sum
from qwkoffset.domain.sparse import EMPTY, from_dense, from_entries


class TestOptimizeContingencyMatrix:

    def test_diagonal_end_to_end(self, diagonal_matrix):
        result = optimize_contingency_matrix(diagonal_matrix)
        assert result.kappac == 0.0
        assert result.adj_kappac == 0.0
        assert len(result.offsets) == 3
        assert all(o.offset == 0 for o in result.offsets)
        assert result.adj_contingency == diagonal_matrix
        assert result.rows_range == CategoryRange(0, 2)
        assert result.cols_range == (0, 2)

    def test_maximal_disagreement(self, diagonal_matrix, disagreement_matrix):
        diagonal = optimize_contingency_matrix(diagonal_matrix)
        corners = optimize_contingency_matrix(disagreement_matrix)
        assert corners.kappac > diagonal.kappac
        assert corners.kappac == pytest.approx(2.0)
        assert corners.adj_kappac <= corners.kappac
        assert corners.cols_range == (0, 2)
        assert [o.source_column for o in corners.offsets] == [0, 2]

    def test_shifted_matrix_is_recalibrated(self, shifted_raw_matrix):
        result = optimize_contingency_matrix(shifted_raw_matrix)
        assert result.kappac == pytest.approx(0.3)
        assert [o.source_column for o in result.offsets] == [1, 2, 3, 4]
        assert [o.dest_column for o in result.offsets] == [0, 1, 2, 3]
        assert all(o.offset == -1 for o in result.offsets)
        assert result.adj_kappac == pytest.approx(0.0)
        occupied = {k: v for k, v in result.adj_contingency if v}
        assert occupied == {
            (0, 0): 10.0, (1, 1): 10.0, (2, 2): 10.0, (3, 3): 10.0,
        }
        # Vacated source columns are still listed with zero mass
        assert result.adj_contingency.as_dict()[(0, 1)] == 0.0

    def test_contingency_is_bounded(self, fractional_raw_matrix):
        result = optimize_contingency_matrix(fractional_raw_matrix)
        for (_, col), _ in result.contingency:
            assert col in result.rows_range
        for (_, col), _ in result.adj_contingency:
            assert col in result.rows_range
        assert result.cols_range == (-0.5, 3.5)

    def test_optimization_disabled(self, fractional_raw_matrix):
        result = optimize_contingency_matrix(
            fractional_raw_matrix, enable_optimization=False
        )
        assert result.offsets == ()
        assert result.adj_contingency is None
        assert result.adj_kappac is None

    def test_mass_preserved(self, fractional_raw_matrix):
        result = optimize_contingency_matrix(fractional_raw_matrix)
        total = total_sum(fractional_raw_matrix)
        assert total_sum(result.contingency) == pytest.approx(total)
        assert total_sum(result.adj_contingency) == pytest.approx(total)
        moved = offset_contingency_matrix(fractional_raw_matrix, result.offsets)
        assert total_sum(moved) == pytest.approx(total)

    def test_one_offset_per_distinct_column(self, fractional_raw_matrix):
        result = optimize_contingency_matrix(fractional_raw_matrix)
        sources = [o.source_column for o in result.offsets]
        assert sources == [-0.5, 0.4, 0.9, 1.7, 2.2, 3.5]

    def test_records_never_exceed_baseline(self):
        rng = np.random.RandomState(42)
        for _ in range(30):
            triples = [
                (int(rng.randint(0, 4)), round(float(rng.uniform(-1, 5)), 1),
                 float(rng.randint(1, 15)))
                for _ in range(rng.randint(2, 20))
            ]
            triples += [(0, 0, 1), (3, 3, 1)]
            result = optimize_contingency_matrix(build_matrix(triples))
            for record in result.offsets:
                assert record.kappa_complement <= result.kappac

    def test_more_rows_than_columns_warns(self, caplog):
        raw = build_matrix([(0, 0, 5), (1, 0, 5), (2, 0, 5)])
        with caplog.at_level(logging.WARNING):
            result = optimize_contingency_matrix(raw)
        assert len(result.warnings) == 1
        assert "malformed" in result.warnings[0]
        assert "malformed" in caplog.text
        # Processing continues: one column, all mass in category 0
        assert len(result.offsets) == 1

    def test_single_category(self):
        raw = build_matrix([(1, 0.5, 3), (1, 2.5, 4)])
        result = optimize_contingency_matrix(raw)
        assert result.kappac == 0.0
        assert result.adj_kappac == 0.0
        assert [o.dest_column for o in result.offsets] == [1, 1]

    def test_explicit_category_range(self, diagonal_matrix):
        result = optimize_contingency_matrix(
            diagonal_matrix, category_range=CategoryRange(0, 4)
        )
        assert result.rows_range == CategoryRange(0, 4)
        assert result.kappac == 0.0

    def test_rows_outside_category_range_raise(self, diagonal_matrix):
        with pytest.raises(InvalidMatrixError, match="outside"):
            optimize_contingency_matrix(
                diagonal_matrix, category_range=CategoryRange(1, 2)
            )

    def test_empty_raises(self):
        with pytest.raises(EmptyDatasetError):
            optimize_contingency_matrix(EMPTY)

    def test_zero_mass_raises(self):
        with pytest.raises(EmptyDatasetError):
            optimize_contingency_matrix(build_matrix([(0, 0, 0), (1, 1, 0)]))

    def test_unordered_columns(self):
        # Column order runs against the order of each column's first row
        raw = build_matrix([(0, 5, 1), (1, 3, 1), (2, 4, 1)])
        result = optimize_contingency_matrix(raw)
        assert result.cols_range == (3, 5)
        assert [o.source_column for o in result.offsets] == [3, 4, 5]
        keys = [idx for idx, _ in result.contingency]
        assert keys == sorted(keys)

    def test_negative_counts_raise(self):
        raw = from_entries([((0, 0), 5.0), ((1, 1), -2.0), ((2, 2), 4.0)])
        with pytest.raises(InvalidMatrixError, match="non-negative"):
            optimize_contingency_matrix(raw)

    def test_negative_dense_counts_raise(self):
        raw = from_dense(np.array([[3.0, 0.0], [-1.0, 2.0]]))
        with pytest.raises(InvalidMatrixError, match=r"\(1, 0\)"):
            optimize_contingency_matrix(raw)

    def test_inverted_category_range_raises(self, diagonal_matrix):
        with pytest.raises(InvalidMatrixError, match="lo=2 > hi=0"):
            optimize_contingency_matrix(
                diagonal_matrix, category_range=CategoryRange(2, 0)
            )
