"""
Starting value computation for IRT estimation.

Data-driven initialization from classical item statistics: smoothed
proportion correct for the location and the item-rest correlation for the
slope.
"""

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.irt.estimation.enums import ModelVariant
from irt_analysis.irt.estimation.parameters import ItemParameters

# Logistic-to-normal-ogive scaling constant
LOGISTIC_SCALE = 1.702

MIN_INITIAL_SLOPE = 0.3
MAX_INITIAL_SLOPE = 2.5


def compute_proportion_correct(
    data: ResponseMatrix,
    add_constant: float = 0.5,
) -> NDArray[np.float64]:
    """
    Proportion correct for each item with additive smoothing.

    Args:
        data: Response matrix.
        add_constant: Pseudo-count added to both outcomes.

    Returns:
        Array of shape (n_items,) strictly inside (0, 1).
    """
    correct = data.item_correct_counts().astype(np.float64)
    valid = data.item_valid_counts().astype(np.float64)
    smoothed: NDArray[np.float64] = (correct + add_constant) / (
        valid + 2.0 * add_constant
    )
    return smoothed


def compute_item_rest_correlation(data: ResponseMatrix) -> NDArray[np.float64]:
    """
    Correlation of each item with the total score on the other items.

    Missing answers count as incorrect in the rest score and are dropped
    for the item itself. Items with no variance get 0.

    Returns:
        Array of shape (n_items,).
    """
    correct = (data.responses == 1).astype(np.float64)
    total = correct.sum(axis=1)
    result = np.zeros(data.n_items, dtype=np.float64)

    for item_idx in range(data.n_items):
        valid = data.valid_mask[:, item_idx]
        item = correct[valid, item_idx]
        rest = total[valid] - item
        if item.size < 2 or item.std() == 0 or rest.std() == 0:
            continue
        result[item_idx] = np.corrcoef(item, rest)[0, 1]

    return result


def initial_parameters(
    data: ResponseMatrix,
    variant: ModelVariant,
    initial_guessing: float,
) -> list[ItemParameters]:
    """
    Starting item parameters for EM.

    - Slope from the item-rest correlation r: a = 1.702 * r / sqrt(1 - r^2),
      clipped to a sensible range (1 under the 1PL model).
    - Intercept so that the model-implied marginal proportion correct under
      N(0, 1) approximately matches the observed one:
      d = 1.702 * probit(p*) * sqrt(1 + (a / 1.702)^2),
      where p* removes the guessing floor for 3PL.

    Args:
        data: Response matrix.
        variant: Model variant being fitted.
        initial_guessing: Starting c for 3PL fits.

    Returns:
        List of initial ItemParameters, one per item.
    """
    proportions = compute_proportion_correct(data)

    if variant.free_discrimination:
        r = np.clip(compute_item_rest_correlation(data), 0.05, 0.9)
        slopes = LOGISTIC_SCALE * r / np.sqrt(1.0 - r**2)
        slopes = np.clip(slopes, MIN_INITIAL_SLOPE, MAX_INITIAL_SLOPE)
    else:
        slopes = np.ones(data.n_items, dtype=np.float64)

    guessing = initial_guessing if variant.free_guessing else 0.0
    adjusted = np.clip(
        (proportions - guessing) / (1.0 - guessing), 0.02, 0.98
    )
    scale = np.sqrt(1.0 + (slopes / LOGISTIC_SCALE) ** 2)
    intercepts = LOGISTIC_SCALE * stats.norm.ppf(adjusted) * scale

    return [
        ItemParameters.from_slope_intercept(
            item_id=item_idx,
            slope=float(slopes[item_idx]),
            intercept=float(intercepts[item_idx]),
            guessing=guessing,
        )
        for item_idx in range(data.n_items)
    ]
