"""Tests for contingency input validation."""

from qwkoffset.core.input_validator import validate_contingency_inputs
from qwkoffset.domain.contingency import build_matrix
from qwkoffset.domain.models import CategoryRange, PartitionReport
from qwkoffset.domain.sparse import EMPTY


class TestValidateContingencyInputs:

    def test_clean_matrix(self, diagonal_matrix):
        result = validate_contingency_inputs(diagonal_matrix, CategoryRange(0, 2))
        assert result.is_valid
        assert not result.has_warnings
        assert result.issues == []

    def test_empty_matrix_is_fatal(self):
        result = validate_contingency_inputs(EMPTY, CategoryRange(0, 2))
        assert not result.is_valid
        assert "zero total" in result.fatal_issues[0].message

    def test_zero_mass_is_fatal(self):
        raw = build_matrix([(0, 0, 0)])
        result = validate_contingency_inputs(raw, CategoryRange(0, 2))
        assert not result.is_valid

    def test_inverted_range_is_fatal(self, diagonal_matrix):
        result = validate_contingency_inputs(diagonal_matrix, CategoryRange(2, 0))
        assert not result.is_valid
        assert "lo=2 > hi=0" in result.fatal_issues[0].message

    def test_rows_outside_range_are_fatal(self, diagonal_matrix):
        result = validate_contingency_inputs(diagonal_matrix, CategoryRange(1, 2))
        assert not result.is_valid
        assert "[0]" in result.fatal_issues[0].message

    def test_out_of_range_predictions_warn(self, fractional_raw_matrix):
        result = validate_contingency_inputs(
            fractional_raw_matrix, CategoryRange(0, 2)
        )
        assert result.is_valid
        assert any("clamped" in w.message for w in result.warnings)

    def test_more_rows_than_columns_warn(self):
        raw = build_matrix([(0, 0, 5), (1, 0, 5), (2, 0, 5)])
        result = validate_contingency_inputs(raw, CategoryRange(0, 2))
        assert result.is_valid
        assert any("predicted columns" in w.message for w in result.warnings)

    def test_unobserved_categories_warn(self, diagonal_matrix):
        result = validate_contingency_inputs(diagonal_matrix, CategoryRange(0, 4))
        assert result.is_valid
        assert any("[3, 4]" in w.message for w in result.warnings)

    def test_failed_partitions_warn(self, diagonal_matrix):
        report = PartitionReport(n_partitions=5, n_empty=0, n_failed=2)
        result = validate_contingency_inputs(
            diagonal_matrix, CategoryRange(0, 2), report
        )
        assert result.is_valid
        assert any("2 of 5" in w.message for w in result.warnings)
