"""
Core utility functions shared across analysis modules.

This module provides foundational utilities used by both the IRT
statistical models and the synthetic data generation layer.
"""

import numpy as np
from numpy.random import Generator
from numpy.typing import ArrayLike, NDArray
from scipy import special


def get_rng(seed: int | None = None) -> Generator:
    """
    Create a numpy random Generator with optional seed.

    Args:
        seed: Random seed for reproducibility. If None, uses entropy.

    Returns:
        A numpy random Generator instance.
    """
    return np.random.default_rng(seed)


def sigmoid(x: ArrayLike) -> NDArray[np.float64]:
    """
    Logistic function 1 / (1 + exp(-x)).

    Numerically stable for large |x| (no overflow warnings).
    """
    result: NDArray[np.float64] = special.expit(np.asarray(x, np.float64))
    return result


def logit(p: ArrayLike) -> NDArray[np.float64]:
    """Inverse of :func:`sigmoid`, log(p / (1 - p))."""
    result: NDArray[np.float64] = special.logit(np.asarray(p, np.float64))
    return result
