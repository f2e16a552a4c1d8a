"""
Response sampling for IRT models.

This module provides functions to sample binary responses given abilities
and item parameters, and to simulate whole datasets from a fitted model
for parametric-bootstrap fit tests.
"""

from collections.abc import Sequence

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray

from irt_analysis.core.constants import MISSING_VALUE
from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.core.utils import get_rng
from irt_analysis.irt.estimation.config import QuadratureConfig
from irt_analysis.irt.estimation.data_models import IRTEstimationResult
from irt_analysis.irt.estimation.parameters import (
    ItemParameters,
    response_probability_matrix,
)


def sample_response(
    ability: float,
    item_params: ItemParameters,
    rng: Generator | None = None,
) -> int:
    """
    Sample a single response given ability and item parameters.

    Args:
        ability: Respondent's latent ability.
        item_params: Item parameters.
        rng: Random number generator.

    Returns:
        1 for a correct answer, 0 otherwise.
    """
    if rng is None:
        rng = get_rng()

    prob = float(item_params.compute_probabilities(ability))
    return int(rng.random() < prob)


def sample_responses(
    abilities: NDArray[np.float64],
    item_parameters: Sequence[ItemParameters],
    rng: Generator | None = None,
) -> NDArray[np.int8]:
    """
    Sample responses for all respondents and items.

    Args:
        abilities: Array of shape (n_respondents,) with ability values.
        item_parameters: Parameters of each item.
        rng: Random number generator.

    Returns:
        Array of shape (n_respondents, n_items) with 0/1 responses.
    """
    if rng is None:
        rng = get_rng()

    probs = response_probability_matrix(abilities, list(item_parameters))
    u = rng.random(probs.shape)
    return (u < probs).astype(np.int8)


def simulate_from_model(
    model: IRTEstimationResult,
    n_respondents: int,
    rng: Generator | None = None,
    missing_mask: NDArray[np.bool_] | None = None,
    prior: QuadratureConfig | None = None,
) -> ResponseMatrix:
    """
    Simulate a dataset from a fitted model.

    Abilities are drawn from the model's N(mean, std^2) population
    distribution, not from estimated abilities.

    Args:
        model: Fitted IRT model.
        n_respondents: Number of rows to simulate.
        rng: Random number generator.
        missing_mask: Cells to blank out, shape (n_respondents, n_items).
            Reproduces the missingness pattern of observed data.
        prior: Ability distribution. Defaults to N(0, 1).

    Returns:
        ResponseMatrix of simulated responses.
    """
    if rng is None:
        rng = get_rng()
    if prior is None:
        prior = QuadratureConfig()

    abilities = rng.normal(prior.mean, prior.std, size=n_respondents)
    responses = sample_responses(abilities, model.item_parameters, rng)

    if missing_mask is not None:
        if missing_mask.shape != responses.shape:
            raise ValueError(
                f"missing_mask shape {missing_mask.shape} does not match "
                f"{responses.shape}"
            )
        responses[missing_mask] = MISSING_VALUE

    return ResponseMatrix(responses=responses)
