"""
Diagnostic utilities for IRT model validation.

Provides:
- observed vs model-implied proportions correct per item
- item fit: Yen's Q1 chi-square with infit/outfit mean squares
- the modified parallel analysis test of unidimensionality
- Pearson goodness of fit over response patterns

Simulation-based p-values draw B datasets from the fitted model and use
p = (1 + #{T_b >= T_obs}) / (B + 1).
"""

import logging
from dataclasses import dataclass, replace

import numpy as np
import pandas as pd
from numpy.random import Generator
from numpy.typing import NDArray
from scipy import stats

from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.core.utils import get_rng
from irt_analysis.irt.estimation.abilities import estimate_abilities
from irt_analysis.irt.estimation.config import EstimationConfig
from irt_analysis.irt.estimation.data_models import IRTEstimationResult
from irt_analysis.irt.estimation.enums import ScoringMethod
from irt_analysis.irt.estimation.estimator import IRTEstimator
from irt_analysis.irt.estimation.likelihood import (
    ResponseIndicators,
    compute_posterior,
)
from irt_analysis.irt.estimation.parameters import response_probability_matrix
from irt_analysis.irt.estimation.quadrature import get_quadrature
from irt_analysis.irt.sampling import simulate_from_model
from irt_analysis.irt.tetrachoric import eigenvalues, tetrachoric_matrix

logger = logging.getLogger(__name__)


def _simulated_p_value(observed: float, simulated: NDArray[np.float64]) -> float:
    return float((1 + np.sum(simulated >= observed)) / (len(simulated) + 1))


def _refit(
    data: ResponseMatrix,
    model: IRTEstimationResult,
    config: EstimationConfig,
) -> IRTEstimationResult:
    """Fit the model's variant to simulated data, tolerating non-convergence."""
    return IRTEstimator(
        model.variant, replace(config, allow_non_convergence=True)
    ).fit(data)


@dataclass
class ResponseProbComparison:
    """Comparison of observed vs model proportions correct per item."""

    item_id: NDArray[np.int64]
    empirical_prob: NDArray[np.float64]
    model_prob: NDArray[np.float64]
    difference: NDArray[np.float64]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "item_id": self.item_id,
                "empirical_prob": self.empirical_prob,
                "model_prob": self.model_prob,
                "difference": self.difference,
            }
        )


def compute_response_prob_comparison(
    data: ResponseMatrix,
    model: IRTEstimationResult,
    abilities: NDArray[np.float64] | None = None,
    config: EstimationConfig | None = None,
) -> ResponseProbComparison:
    """Compare empirical vs model proportions correct.

    Args:
        data: Response matrix with observed responses
        model: Fitted IRT model
        abilities: Ability values for each respondent. The model
            probability is then the mean of P(θ_i) over the respondents
            who answered the item. If None, the marginal probability under
            the population distribution is used.
        config: Estimation configuration (quadrature for the marginal).

    Returns:
        ResponseProbComparison with one entry per item
    """
    if config is None:
        config = EstimationConfig()

    empirical = data.proportion_correct()

    if abilities is None:
        quadrature = get_quadrature(config.quadrature)
        probs = response_probability_matrix(
            quadrature.points, model.item_parameters
        )
        model_prob = quadrature.weights @ probs
    else:
        probs = response_probability_matrix(abilities, model.item_parameters)
        valid = data.valid_mask
        with np.errstate(invalid="ignore", divide="ignore"):
            model_prob = (probs * valid).sum(axis=0) / valid.sum(axis=0)

    return ResponseProbComparison(
        item_id=np.arange(data.n_items, dtype=np.int64),
        empirical_prob=empirical,
        model_prob=model_prob,
        difference=empirical - model_prob,
    )


# ---------------------------------------------------------------------------
# Item fit


@dataclass
class ItemFitResult:
    """
    Item fit statistics.

    Attributes:
        item_id: Item indices.
        statistic: Q1 chi-square per item.
        df: Degrees of freedom of the asymptotic reference distribution.
        asymptotic_p_value: p-value from the chi-square distribution.
        p_value: Simulated p-value, or the asymptotic one without
            simulations.
        infit: Information-weighted mean-square residual.
        outfit: Unweighted mean-square residual.
        n_groups: Number of ability groups.
        n_simulations: Number of simulated datasets (0 for asymptotic).
    """

    item_id: NDArray[np.int64]
    statistic: NDArray[np.float64]
    df: int
    asymptotic_p_value: NDArray[np.float64]
    p_value: NDArray[np.float64]
    infit: NDArray[np.float64]
    outfit: NDArray[np.float64]
    n_groups: int
    n_simulations: int

    def misfitting(self, alpha: float) -> NDArray[np.int64]:
        """Items with p-value below alpha."""
        result: NDArray[np.int64] = self.item_id[self.p_value < alpha]
        return result

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "item_id": self.item_id,
                "chi_square": self.statistic,
                "df": self.df,
                "asymptotic_p_value": self.asymptotic_p_value,
                "p_value": self.p_value,
                "infit": self.infit,
                "outfit": self.outfit,
            }
        )


@dataclass
class _ItemFitStatistics:
    q1: NDArray[np.float64]
    infit: NDArray[np.float64]
    outfit: NDArray[np.float64]


def _ability_groups(
    theta: NDArray[np.float64], n_groups: int
) -> list[NDArray[np.int64]]:
    """Respondent indices split into n_groups of near-equal size by theta."""
    order = np.argsort(theta, kind="stable")
    return [group for group in np.array_split(order, n_groups) if group.size]


def _item_fit_statistics(
    data: ResponseMatrix,
    model: IRTEstimationResult,
    config: EstimationConfig,
) -> _ItemFitStatistics:
    """
    Yen's Q1 and mean-square residuals.

    Q1_k = Σ_g n_gk (O_gk - E_gk)^2 / (E_gk (1 - E_gk))

    where O_gk is the observed proportion correct in ability group g and
    E_gk the model probability at the group's median ability.
    """
    theta = estimate_abilities(data, model, ScoringMethod.EAP, config).theta
    correct = (data.responses == 1).astype(np.float64)
    valid = data.valid_mask

    groups = _ability_groups(theta, config.fit_tests.n_groups)
    medians = np.array([np.median(theta[group]) for group in groups])
    expected = response_probability_matrix(medians, model.item_parameters)

    q1 = np.zeros(data.n_items, dtype=np.float64)
    for g, group in enumerate(groups):
        n_valid = valid[group].sum(axis=0)
        answered = n_valid > 0
        observed = np.zeros(data.n_items, dtype=np.float64)
        observed[answered] = (
            correct[group].sum(axis=0)[answered] / n_valid[answered]
        )
        e = expected[g]
        q1 += np.where(
            answered, n_valid * (observed - e) ** 2 / (e * (1.0 - e)), 0.0
        )

    probs = response_probability_matrix(theta, model.item_parameters)
    variance = probs * (1.0 - probs)
    squared_residuals = np.where(valid, (correct - probs) ** 2, 0.0)
    n_valid_items = np.maximum(valid.sum(axis=0), 1)
    with np.errstate(invalid="ignore", divide="ignore"):
        outfit = (
            np.where(valid, squared_residuals / variance, 0.0).sum(axis=0)
            / n_valid_items
        )
        infit = squared_residuals.sum(axis=0) / np.where(
            valid, variance, 0.0
        ).sum(axis=0)

    return _ItemFitStatistics(q1=q1, infit=infit, outfit=outfit)


def item_fit(
    data: ResponseMatrix,
    model: IRTEstimationResult,
    config: EstimationConfig | None = None,
    rng: Generator | None = None,
) -> ItemFitResult:
    """
    Item fit test for every item.

    Respondents are grouped by EAP ability into config.fit_tests.n_groups
    groups. With n_simulations > 0 the p-value is simulated: datasets are
    drawn from the fitted model (keeping the observed missingness), the
    model is optionally refitted, and Q1 is recomputed.

    Args:
        data: Response matrix the model was fitted to.
        model: Fitted IRT model.
        config: Estimation configuration.
        rng: Random number generator for the simulations.

    Returns:
        ItemFitResult with one entry per item.
    """
    if config is None:
        config = EstimationConfig()
    if rng is None:
        rng = get_rng()

    fit_config = config.fit_tests
    observed = _item_fit_statistics(data, model, config)
    df = max(fit_config.n_groups - model.variant.n_item_parameters, 1)
    asymptotic = stats.chi2.sf(observed.q1, df)

    n_simulations = fit_config.n_simulations
    if n_simulations > 0:
        simulated = np.empty((n_simulations, data.n_items), dtype=np.float64)
        for b in range(n_simulations):
            sim_data = simulate_from_model(
                model,
                data.n_respondents,
                rng,
                missing_mask=data.missing_mask,
                prior=config.quadrature,
            )
            sim_model = (
                _refit(sim_data, model, config) if fit_config.refit else model
            )
            simulated[b] = _item_fit_statistics(sim_data, sim_model, config).q1
            logger.debug(f"Item fit simulation {b + 1}/{n_simulations}")
        p_value = np.array(
            [
                _simulated_p_value(observed.q1[k], simulated[:, k])
                for k in range(data.n_items)
            ]
        )
    else:
        p_value = asymptotic

    return ItemFitResult(
        item_id=np.arange(data.n_items, dtype=np.int64),
        statistic=observed.q1,
        df=df,
        asymptotic_p_value=asymptotic,
        p_value=p_value,
        infit=observed.infit,
        outfit=observed.outfit,
        n_groups=fit_config.n_groups,
        n_simulations=n_simulations,
    )


# ---------------------------------------------------------------------------
# Unidimensionality


@dataclass
class UnidimensionalityResult:
    """
    Modified parallel analysis.

    Attributes:
        eigenvalues: Eigenvalues of the observed tetrachoric matrix,
            decreasing.
        statistic: Second eigenvalue of the observed matrix.
        simulated: Second eigenvalues of the simulated datasets.
        p_value: Simulated p-value. Small values point to a second
            dimension.
    """

    eigenvalues: NDArray[np.float64]
    statistic: float
    simulated: NDArray[np.float64]
    p_value: float

    @property
    def n_simulations(self) -> int:
        return len(self.simulated)

    def is_significant(self, alpha: float) -> bool:
        return self.p_value < alpha


def unidimensionality_test(
    data: ResponseMatrix,
    model: IRTEstimationResult,
    config: EstimationConfig | None = None,
    rng: Generator | None = None,
) -> UnidimensionalityResult:
    """
    Test unidimensionality by comparing the second eigenvalue of the
    tetrachoric correlation matrix with its distribution under the fitted
    unidimensional model.

    Raises:
        ValueError: If config.fit_tests.n_simulations is 0.
    """
    if config is None:
        config = EstimationConfig()
    if rng is None:
        rng = get_rng()

    n_simulations = config.fit_tests.n_simulations
    if n_simulations < 1:
        raise ValueError("unidimensionality test needs n_simulations >= 1")

    observed = eigenvalues(tetrachoric_matrix(data))

    simulated = np.empty(n_simulations, dtype=np.float64)
    for b in range(n_simulations):
        sim_data = simulate_from_model(
            model,
            data.n_respondents,
            rng,
            missing_mask=data.missing_mask,
            prior=config.quadrature,
        )
        simulated[b] = eigenvalues(tetrachoric_matrix(sim_data))[1]

    statistic = float(observed[1])
    return UnidimensionalityResult(
        eigenvalues=observed,
        statistic=statistic,
        simulated=simulated,
        p_value=_simulated_p_value(statistic, simulated),
    )


# ---------------------------------------------------------------------------
# Pattern goodness of fit


@dataclass
class PatternFitResult:
    """
    Pearson chi-square over observed response patterns.

    Attributes:
        statistic: Σ (O - E)^2 / E over the observed patterns.
        n_patterns: Number of distinct observed patterns.
        n_respondents: Number of complete response vectors used.
        p_value: Bootstrap p-value (asymptotic without simulations).
        n_simulations: Number of bootstrap datasets.
    """

    statistic: float
    n_patterns: int
    n_respondents: int
    p_value: float
    n_simulations: int


def _pattern_chi_square(
    data: ResponseMatrix,
    model: IRTEstimationResult,
    config: EstimationConfig,
) -> tuple[float, int]:
    patterns, counts = np.unique(data.responses, axis=0, return_counts=True)
    quadrature = get_quadrature(config.quadrature)
    posterior = compute_posterior(
        ResponseIndicators.from_matrix(ResponseMatrix(responses=patterns)),
        model.item_parameters,
        quadrature.points,
        quadrature.log_weights,
    )
    expected = data.n_respondents * np.exp(posterior.log_marginal)
    statistic = float(np.sum((counts - expected) ** 2 / expected))
    return statistic, len(counts)


def pattern_goodness_of_fit(
    data: ResponseMatrix,
    model: IRTEstimationResult,
    config: EstimationConfig | None = None,
    rng: Generator | None = None,
) -> PatternFitResult:
    """
    Parametric bootstrap goodness-of-fit test over response patterns.

    Only complete response vectors enter the statistic. Each bootstrap
    dataset is simulated from the fitted model and refitted. Without any
    complete response vector the statistic and p-value are NaN.
    """
    if config is None:
        config = EstimationConfig()
    if rng is None:
        rng = get_rng()

    complete_rows = ~data.missing_mask.any(axis=1)
    if not complete_rows.any():
        logger.warning("Pattern fit skipped: no complete response vectors")
        return PatternFitResult(
            statistic=np.nan,
            n_patterns=0,
            n_respondents=0,
            p_value=np.nan,
            n_simulations=0,
        )

    complete = data.subset(complete_rows)
    if complete.n_respondents < data.n_respondents:
        logger.debug(
            f"Pattern fit uses {complete.n_respondents} of "
            f"{data.n_respondents} complete response vectors"
        )

    statistic, n_patterns = _pattern_chi_square(complete, model, config)

    n_simulations = config.fit_tests.n_simulations
    if n_simulations > 0:
        simulated = np.empty(n_simulations, dtype=np.float64)
        for b in range(n_simulations):
            sim_data = simulate_from_model(
                model, complete.n_respondents, rng, prior=config.quadrature
            )
            sim_model = _refit(sim_data, model, config)
            simulated[b] = _pattern_chi_square(sim_data, sim_model, config)[0]
        p_value = _simulated_p_value(statistic, simulated)
    else:
        df = max(2**data.n_items - model.n_parameters - 1, 1)
        p_value = float(stats.chi2.sf(statistic, df))

    return PatternFitResult(
        statistic=statistic,
        n_patterns=n_patterns,
        n_respondents=complete.n_respondents,
        p_value=p_value,
        n_simulations=n_simulations,
    )
