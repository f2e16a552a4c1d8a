"""
Core shared types and utilities for the analysis package.

This module provides foundational components used across the IRT
estimation, diagnostics and synthetic data layers.
"""

from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.core.errors import (
    ConvergenceError,
    DataValidationError,
    EstimationError,
)
from irt_analysis.core.utils import get_rng, logit, sigmoid

__all__ = [
    "ConvergenceError",
    "DataValidationError",
    "EstimationError",
    "ResponseMatrix",
    "get_rng",
    "logit",
    "sigmoid",
]
