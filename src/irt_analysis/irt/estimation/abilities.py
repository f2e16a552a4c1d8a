"""
Ability estimation for fitted IRT models.

Three scoring rules are available (see ScoringMethod):
- EAP: posterior mean over the quadrature grid, SE = posterior SD.
- MAP: posterior mode under the N(mean, std^2) prior.
- ML: maximum of the response likelihood alone.

ML diverges for vectors with all answers correct or all incorrect; those
are reported at the edge of the scoring interval with an infinite standard
error and the boundary flag set.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from scipy.optimize import minimize_scalar

from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.irt.estimation.config import EstimationConfig
from irt_analysis.irt.estimation.data_models import IRTEstimationResult
from irt_analysis.irt.estimation.enums import ScoringMethod
from irt_analysis.irt.estimation.likelihood import (
    ResponseIndicators,
    compute_posterior,
    item_log_probabilities,
)
from irt_analysis.irt.estimation.parameters import ItemParameters
from irt_analysis.irt.estimation.quadrature import get_quadrature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AbilityEstimates:
    """
    Ability estimates for respondents.

    Attributes:
        theta: Point estimates, shape (n_respondents,).
        se: Standard errors, shape (n_respondents,). Infinite for ML
            estimates on the boundary.
        method: Scoring rule used.
        boundary: True where the estimate was clamped to the scoring
            interval or is undefined.
    """

    theta: NDArray[np.float64]
    se: NDArray[np.float64]
    method: ScoringMethod
    boundary: NDArray[np.bool_]

    @property
    def n_respondents(self) -> int:
        """Number of respondents."""
        return len(self.theta)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "theta": self.theta,
                "se": self.se,
                "boundary": self.boundary,
            }
        )


@dataclass(frozen=True)
class PatternScores:
    """
    Scores for each distinct response pattern.

    Attributes:
        patterns: Unique response vectors, shape (n_patterns, n_items).
        observed: Number of respondents with each pattern.
        expected: Expected number under the fitted model.
        abilities: Ability estimates per pattern.
    """

    patterns: NDArray[np.int8]
    observed: NDArray[np.int64]
    expected: NDArray[np.float64]
    abilities: AbilityEstimates

    @property
    def n_patterns(self) -> int:
        return len(self.observed)

    def to_frame(self) -> pd.DataFrame:
        """One row per pattern, item columns followed by the scores."""
        frame = pd.DataFrame(
            self.patterns,
            columns=[f"item_{k + 1}" for k in range(self.patterns.shape[1])],
        )
        frame["observed"] = self.observed
        frame["expected"] = self.expected
        frame["theta"] = self.abilities.theta
        frame["se"] = self.abilities.se
        return frame


def _estimate_eap(
    data: ResponseMatrix,
    item_parameters: tuple[ItemParameters, ...],
    config: EstimationConfig,
) -> AbilityEstimates:
    """
    Estimate abilities using Expected A Posteriori (EAP) method.

    EAP estimates are the posterior mean of ability given the responses
    and estimated item parameters:
        θ_EAP = E[θ | responses] = Σ_q θ_q * P(θ_q | responses)

    Standard errors are the posterior standard deviation:
        SE = sqrt(E[θ² | responses] - (E[θ | responses])²)
    """
    quadrature = get_quadrature(config.quadrature)
    theta = quadrature.points

    posterior = compute_posterior(
        ResponseIndicators.from_matrix(data),
        item_parameters,
        theta,
        quadrature.log_weights,
    )

    eap = posterior.weights @ theta
    variance = posterior.weights @ theta**2 - eap**2
    # Ensure non-negative (numerical precision)
    se = np.sqrt(np.maximum(variance, 0.0))

    return AbilityEstimates(
        theta=eap,
        se=se,
        method=ScoringMethod.EAP,
        boundary=np.zeros(data.n_respondents, dtype=np.bool_),
    )


def _pattern_information(
    theta: float,
    item_parameters: tuple[ItemParameters, ...],
    answered: NDArray[np.bool_],
) -> float:
    """Test information at theta over the answered items."""
    return float(
        sum(
            params.compute_information(theta)
            for params, is_answered in zip(item_parameters, answered)
            if is_answered
        )
    )


def _score_pattern(
    pattern: NDArray[np.int8],
    item_parameters: tuple[ItemParameters, ...],
    method: ScoringMethod,
    config: EstimationConfig,
) -> tuple[float, float, bool]:
    """MAP or ML estimate for one response vector -> (theta, se, boundary)."""
    lower, upper = config.scoring.theta_bounds
    prior_mean = config.quadrature.mean
    prior_precision = 1.0 / config.quadrature.std**2

    answered = pattern >= 0
    correct = pattern == 1
    incorrect = pattern == 0

    if not answered.any():
        if method == ScoringMethod.ML:
            return float("nan"), float("nan"), True
        return prior_mean, config.quadrature.std, False

    if method == ScoringMethod.ML:
        if not incorrect.any():
            return upper, float("inf"), True
        if not correct.any():
            return lower, float("inf"), True

    def negative_log_posterior(theta: float) -> float:
        log_p, log_q = item_log_probabilities(
            item_parameters, np.array([theta], dtype=np.float64)
        )
        value = log_p[correct, 0].sum() + log_q[incorrect, 0].sum()
        if method == ScoringMethod.MAP:
            value -= 0.5 * prior_precision * (theta - prior_mean) ** 2
        return -float(value)

    result = minimize_scalar(
        negative_log_posterior,
        bounds=(lower, upper),
        method="bounded",
        options={"xatol": 1e-6},
    )
    theta_hat = float(result.x)

    information = _pattern_information(theta_hat, item_parameters, answered)
    if method == ScoringMethod.MAP:
        information += prior_precision
    se = 1.0 / np.sqrt(information) if information > 0 else float("inf")

    at_bound = min(theta_hat - lower, upper - theta_hat) < 1e-4
    return theta_hat, float(se), bool(at_bound)


def _estimate_by_pattern(
    data: ResponseMatrix,
    item_parameters: tuple[ItemParameters, ...],
    method: ScoringMethod,
    config: EstimationConfig,
) -> AbilityEstimates:
    """Score each distinct pattern once and broadcast to respondents."""
    patterns, inverse = np.unique(
        data.responses, axis=0, return_inverse=True
    )
    inverse = inverse.ravel()

    scored = [
        _score_pattern(pattern, item_parameters, method, config)
        for pattern in patterns
    ]
    theta, se, boundary = (np.array(values) for values in zip(*scored))

    n_boundary = int(boundary[inverse].sum())
    if n_boundary:
        logger.debug(
            f"{n_boundary} respondents scored on the boundary "
            f"({method.value.upper()})"
        )

    return AbilityEstimates(
        theta=theta[inverse].astype(np.float64),
        se=se[inverse].astype(np.float64),
        method=method,
        boundary=boundary[inverse].astype(np.bool_),
    )


def estimate_abilities(
    data: ResponseMatrix,
    model: IRTEstimationResult,
    method: ScoringMethod | str | None = None,
    config: EstimationConfig | None = None,
) -> AbilityEstimates:
    """
    Estimate latent abilities given fitted item parameters.

    Args:
        data: Response matrix.
        model: Fitted IRT model with item parameters.
        method: Scoring rule. Defaults to config.scoring.method.
        config: Estimation configuration. Uses defaults if None.

    Returns:
        AbilityEstimates, one entry per respondent.
    """
    if config is None:
        config = EstimationConfig()
    method = ScoringMethod(method or config.scoring.method)

    if data.n_items != model.n_items:
        raise ValueError(
            f"Response matrix has {data.n_items} items, "
            f"model has {model.n_items}"
        )

    if method == ScoringMethod.EAP:
        return _estimate_eap(data, model.item_parameters, config)
    return _estimate_by_pattern(data, model.item_parameters, method, config)


def score_patterns(
    data: ResponseMatrix,
    model: IRTEstimationResult,
    method: ScoringMethod | str | None = None,
    config: EstimationConfig | None = None,
) -> PatternScores:
    """
    Score every observed response pattern.

    Expected frequencies are N times the marginal probability of the
    pattern under the fitted model.
    """
    if config is None:
        config = EstimationConfig()

    patterns, counts = np.unique(data.responses, axis=0, return_counts=True)
    pattern_matrix = ResponseMatrix(responses=patterns)

    quadrature = get_quadrature(config.quadrature)
    posterior = compute_posterior(
        ResponseIndicators.from_matrix(pattern_matrix),
        model.item_parameters,
        quadrature.points,
        quadrature.log_weights,
    )
    expected = data.n_respondents * np.exp(posterior.log_marginal)

    return PatternScores(
        patterns=patterns,
        observed=counts.astype(np.int64),
        expected=expected,
        abilities=estimate_abilities(pattern_matrix, model, method, config),
    )
