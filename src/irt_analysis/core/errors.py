"""
Exceptions raised by the analysis package.

Statistical outcomes (a significant misfit, a small p-value) are never
exceptions; these cover invalid input and estimation that did not finish.
"""

from typing import Any


class DataValidationError(ValueError):
    """Response data is malformed (non-binary values, ragged rows, ...)."""


class EstimationError(RuntimeError):
    """Item parameter estimation could not produce a usable result."""


class ConvergenceError(EstimationError):
    """
    Estimation stopped without meeting the convergence criteria.

    Attributes:
        result: The non-converged estimation result, kept for inspection.
    """

    def __init__(self, message: str, result: Any = None) -> None:
        self.result = result
        super().__init__(message)
