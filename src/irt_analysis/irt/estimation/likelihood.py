"""
Response-pattern likelihood over a grid of ability values.

Shared by the E-step of the estimator, EAP scoring and the pattern-level
goodness-of-fit statistic.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.irt.estimation.gradients import compute_log_probabilities
from irt_analysis.irt.estimation.parameters import ItemParameters


@dataclass(frozen=True)
class ResponseIndicators:
    """
    Float indicator matrices derived from a ResponseMatrix.

    Attributes:
        correct: 1.0 where the answer is correct, shape (n_respondents, n_items).
        incorrect: 1.0 where the answer is incorrect.
        valid: 1.0 where the answer is present.
    """

    correct: NDArray[np.float64]
    incorrect: NDArray[np.float64]
    valid: NDArray[np.float64]

    @classmethod
    def from_matrix(cls, data: ResponseMatrix) -> "ResponseIndicators":
        return cls(
            correct=(data.responses == 1).astype(np.float64),
            incorrect=(data.responses == 0).astype(np.float64),
            valid=data.valid_mask.astype(np.float64),
        )

    @property
    def n_respondents(self) -> int:
        return self.correct.shape[0]


@dataclass
class Posterior:
    """
    Posterior distribution of ability on a grid.

    Attributes:
        weights: Posterior weights, shape (n_respondents, n_points).
            weights[i, q] = P(theta = theta_q | responses_i, params).
        log_marginal: Log marginal likelihood per respondent.
    """

    weights: NDArray[np.float64]
    log_marginal: NDArray[np.float64]

    @property
    def log_likelihood(self) -> float:
        """Marginal log-likelihood summed over respondents."""
        return float(np.sum(self.log_marginal))


def item_log_probabilities(
    item_parameters: Sequence[ItemParameters],
    theta: NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Log P(correct) and log P(incorrect) for each item at each grid point.

    Returns:
        Tuple of arrays, each of shape (n_items, n_points).
    """
    grid = np.ascontiguousarray(theta, dtype=np.float64)
    n_items = len(item_parameters)
    log_p = np.empty((n_items, grid.shape[0]), dtype=np.float64)
    log_q = np.empty((n_items, grid.shape[0]), dtype=np.float64)
    for k, params in enumerate(item_parameters):
        log_p[k], log_q[k] = compute_log_probabilities(
            grid,
            float(params.discrimination),
            float(params.intercept),
            float(params.guessing),
        )
    return log_p, log_q


def log_likelihood_matrix(
    indicators: ResponseIndicators,
    item_parameters: Sequence[ItemParameters],
    theta: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Log-likelihood of each response vector at each grid point.

    Missing answers contribute 0.

    Returns:
        Array of shape (n_respondents, n_points).
    """
    log_p, log_q = item_log_probabilities(item_parameters, theta)
    result: NDArray[np.float64] = (
        indicators.correct @ log_p + indicators.incorrect @ log_q
    )
    return result


def compute_posterior(
    indicators: ResponseIndicators,
    item_parameters: Sequence[ItemParameters],
    theta: NDArray[np.float64],
    log_prior: NDArray[np.float64],
) -> Posterior:
    """
    Posterior over grid points for every respondent.

    P(theta_q | responses) ∝ P(responses | theta_q) * P(theta_q)

    Args:
        indicators: Response indicators.
        item_parameters: Current item parameters.
        theta: Grid points, shape (n_points,).
        log_prior: Log prior mass at the grid points, shape (n_points,).

    Returns:
        Posterior with normalized weights and log marginal likelihoods.
    """
    log_lik = log_likelihood_matrix(indicators, item_parameters, theta)
    log_lik += log_prior[np.newaxis, :]

    # Log-sum-exp for numerical stability
    max_log_lik = np.max(log_lik, axis=1, keepdims=True)
    weights = np.exp(log_lik - max_log_lik)
    row_sums = weights.sum(axis=1, keepdims=True)
    weights /= row_sums

    log_marginal = max_log_lik[:, 0] + np.log(row_sums[:, 0])
    return Posterior(weights=weights, log_marginal=log_marginal)
