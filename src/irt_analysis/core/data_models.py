"""
Data models for IRT estimation input.

This module defines the binary response matrix shared by estimation,
scoring and diagnostics.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from irt_analysis.core.constants import MISSING_VALUE
from irt_analysis.core.errors import DataValidationError


@dataclass(frozen=True)
class ResponseMatrix:
    """
    Binary response data for IRT estimation.

    Attributes:
        responses: Array of shape (n_respondents, n_items) with 1 for a
            correct answer, 0 for an incorrect one and MISSING_VALUE for
            a missing one.
    """

    responses: NDArray[np.int8]

    def __post_init__(self) -> None:
        """Validate response matrix."""
        if self.responses.ndim != 2:
            raise DataValidationError(
                f"responses must be 2D, got shape {self.responses.shape}"
            )
        if self.responses.shape[0] == 0 or self.responses.shape[1] == 0:
            raise DataValidationError(
                f"responses must be non-empty, got shape {self.responses.shape}"
            )
        allowed = np.isin(self.responses, (0, 1, MISSING_VALUE))
        if not allowed.all():
            bad = sorted(set(self.responses[~allowed].tolist()))
            raise DataValidationError(
                f"Response values must be 0, 1 or missing, got {bad}"
            )

    @classmethod
    def from_array(cls, values: NDArray[np.floating] | list) -> "ResponseMatrix":
        """
        Build a response matrix from a float array where NaN means missing.

        Raises:
            DataValidationError: If any non-missing value is not 0 or 1.
        """
        arr = np.asarray(values, dtype=np.float64)
        if arr.ndim != 2:
            raise DataValidationError(
                f"responses must be 2D, got shape {arr.shape}"
            )
        missing = np.isnan(arr)
        observed = arr[~missing]
        if not np.isin(observed, (0.0, 1.0)).all():
            bad = sorted(set(observed[~np.isin(observed, (0.0, 1.0))].tolist()))
            raise DataValidationError(
                f"Response values must be 0, 1 or missing, got {bad[:5]}"
            )
        responses = np.where(missing, MISSING_VALUE, arr).astype(np.int8)
        return cls(responses=responses)

    @property
    def n_respondents(self) -> int:
        """Number of respondents (rows)."""
        return self.responses.shape[0]

    @property
    def n_items(self) -> int:
        """Number of items (columns)."""
        return self.responses.shape[1]

    @property
    def missing_mask(self) -> NDArray[np.bool_]:
        """Boolean mask where True indicates missing response."""
        result: NDArray[np.bool_] = self.responses == MISSING_VALUE
        return result

    @property
    def valid_mask(self) -> NDArray[np.bool_]:
        """Boolean mask where True indicates valid (non-missing) response."""
        result: NDArray[np.bool_] = self.responses != MISSING_VALUE
        return result

    @property
    def has_missing(self) -> bool:
        return bool(self.missing_mask.any())

    def item_correct_counts(self) -> NDArray[np.int64]:
        """Number of correct answers per item, shape (n_items,)."""
        counts: NDArray[np.int64] = (self.responses == 1).sum(axis=0)
        return counts.astype(np.int64)

    def item_valid_counts(self) -> NDArray[np.int64]:
        """Number of non-missing answers per item, shape (n_items,)."""
        counts: NDArray[np.int64] = self.valid_mask.sum(axis=0)
        return counts.astype(np.int64)

    def proportion_correct(self) -> NDArray[np.float64]:
        """
        Proportion correct per item among non-missing answers.

        Items without any answers get NaN.
        """
        valid = self.item_valid_counts().astype(np.float64)
        correct = self.item_correct_counts().astype(np.float64)
        with np.errstate(invalid="ignore", divide="ignore"):
            result: NDArray[np.float64] = np.where(
                valid > 0, correct / valid, np.nan
            )
        return result

    def total_scores(self) -> NDArray[np.int64]:
        """Number correct per respondent, shape (n_respondents,)."""
        scores: NDArray[np.int64] = (self.responses == 1).sum(axis=1)
        return scores.astype(np.int64)

    def subset(self, rows: NDArray[np.bool_] | NDArray[np.int64]) -> "ResponseMatrix":
        """Response matrix restricted to the given respondents."""
        return ResponseMatrix(responses=self.responses[rows])
