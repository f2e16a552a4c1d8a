"""
Item response function of the dichotomous logistic models.

    P(X=1 | θ) = c + (1 - c) / (1 + exp(-a * (θ - b)))

where:
    - θ: respondent ability
    - a: discrimination (1 under the 1PL model)
    - b: difficulty
    - c: guessing, the lower asymptote (0 under the 1PL and 2PL models)

The 2PL and 1PL curves are exact special cases of the 3PL curve; all of
them go through the same numba kernel as the estimator.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from irt_analysis.irt.estimation.gradients import (
    compute_derivatives,
    compute_probabilities,
)


def _validate(discrimination: float, guessing: float) -> None:
    if discrimination <= 0:
        raise ValueError(
            f"discrimination must be positive, got {discrimination}"
        )
    if not (0.0 <= guessing < 1.0):
        raise ValueError(f"guessing must be in [0, 1), got {guessing}")


def item_response_function(
    theta: ArrayLike,
    discrimination: float = 1.0,
    difficulty: float = 0.0,
    guessing: float = 0.0,
) -> NDArray[np.float64]:
    """
    Probability of a correct answer.

    Args:
        theta: Ability values, any shape.
        discrimination: Slope a > 0.
        difficulty: Location b.
        guessing: Lower asymptote c in [0, 1).

    Returns:
        Probabilities in [c, 1] with the same shape as theta.
    """
    _validate(discrimination, guessing)
    arr = np.asarray(theta, dtype=np.float64)
    probs: NDArray[np.float64] = compute_probabilities(
        np.ascontiguousarray(arr.ravel()),
        float(discrimination),
        float(difficulty),
        float(guessing),
    )
    return probs.reshape(arr.shape)


def item_response_derivative(
    theta: ArrayLike,
    discrimination: float = 1.0,
    difficulty: float = 0.0,
    guessing: float = 0.0,
) -> NDArray[np.float64]:
    """
    Slope of the item characteristic curve:
        dP/dθ = a * (1 - c) * s * (1 - s),   s = sigmoid(a * (θ - b))
    """
    _validate(discrimination, guessing)
    arr = np.asarray(theta, dtype=np.float64)
    result: NDArray[np.float64] = compute_derivatives(
        np.ascontiguousarray(arr.ravel()),
        float(discrimination),
        float(difficulty),
        float(guessing),
    )
    return result.reshape(arr.shape)
