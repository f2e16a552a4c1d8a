"""
Tests for the response matrix and table loading.
"""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from irt_analysis.core.constants import MISSING_VALUE
from irt_analysis.core.data import (
    load_response_table,
    response_matrix_from_frame,
    write_response_table,
)
from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.core.errors import DataValidationError


class TestResponseMatrix:
    def test_valid_matrix(self) -> None:
        responses = np.array([[1, 0, -1], [0, 1, 1]], dtype=np.int8)
        data = ResponseMatrix(responses=responses)

        assert data.n_respondents == 2
        assert data.n_items == 3
        assert data.has_missing
        np.testing.assert_array_equal(data.item_correct_counts(), [1, 1, 1])
        np.testing.assert_array_equal(data.item_valid_counts(), [2, 2, 1])
        np.testing.assert_array_equal(data.total_scores(), [1, 2])

    def test_rejects_non_binary_values(self) -> None:
        responses = np.array([[1, 2], [0, 1]], dtype=np.int8)
        with pytest.raises(DataValidationError, match="0, 1 or missing"):
            ResponseMatrix(responses=responses)

    def test_rejects_non_2d(self) -> None:
        with pytest.raises(DataValidationError, match="2D"):
            ResponseMatrix(responses=np.array([1, 0, 1], dtype=np.int8))

    def test_rejects_empty(self) -> None:
        with pytest.raises(DataValidationError, match="non-empty"):
            ResponseMatrix(responses=np.zeros((0, 3), dtype=np.int8))

    def test_data_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            ResponseMatrix(responses=np.full((2, 2), 5, dtype=np.int8))

    def test_from_array_nan_is_missing(self) -> None:
        data = ResponseMatrix.from_array([[1.0, np.nan], [0.0, 1.0]])

        assert data.responses[0, 1] == MISSING_VALUE
        assert data.missing_mask.sum() == 1

    def test_proportion_correct_ignores_missing(self) -> None:
        data = ResponseMatrix.from_array(
            [[1.0, np.nan], [0.0, np.nan], [1.0, np.nan]]
        )
        proportions = data.proportion_correct()

        np.testing.assert_allclose(proportions[0], 2 / 3)
        assert np.isnan(proportions[1])


class TestResponseMatrixFromFrame:
    def test_missing_tokens(self) -> None:
        frame = pd.DataFrame([["1", "NA"], [".", "0"]])
        data = response_matrix_from_frame(frame)

        np.testing.assert_array_equal(
            data.responses, [[1, MISSING_VALUE], [MISSING_VALUE, 0]]
        )

    def test_reports_location_of_bad_value(self) -> None:
        frame = pd.DataFrame([["1", "0"], ["0", "x"]])
        with pytest.raises(DataValidationError, match="row 2, column 2"):
            response_matrix_from_frame(frame)

    def test_rejects_non_binary_number(self) -> None:
        frame = pd.DataFrame([[1, 0], [3, 1]])
        with pytest.raises(DataValidationError, match="Non-binary"):
            response_matrix_from_frame(frame)


class TestResponseTable:
    def test_round_trip_with_missing(self, tmp_path: Path) -> None:
        responses = np.array(
            [[1, 0, MISSING_VALUE], [0, 1, 1], [1, 1, 0]], dtype=np.int8
        )
        path = tmp_path / "responses.txt"

        write_response_table(ResponseMatrix(responses=responses), path)
        loaded = load_response_table(path)

        np.testing.assert_array_equal(loaded.responses, responses)

    def test_file_format(self, tmp_path: Path) -> None:
        path = tmp_path / "responses.txt"
        write_response_table(
            ResponseMatrix(
                responses=np.array([[1, MISSING_VALUE]], dtype=np.int8)
            ),
            path,
        )

        assert path.read_text().strip() == "1 NA"

    def test_inconsistent_rows(self, tmp_path: Path) -> None:
        path = tmp_path / "ragged.txt"
        path.write_text("1 0 1\n0 1\n")

        with pytest.raises(DataValidationError, match="Inconsistent"):
            load_response_table(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_response_table(tmp_path / "nope.txt")

    def test_blank_lines_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "blank.txt"
        path.write_text("1 0\n\n0 1\n")

        assert load_response_table(path).n_respondents == 2
