"""
Asymptotic standard errors for item parameters.

The observed information matrix is the Hessian of the negative marginal
log-likelihood in the internal [a, d, logit(c)] parameterization, obtained
by central differences of the analytic gradient. Its inverse is mapped to
the reported (b, a, c) parameters with the delta method:

    b = -d / a      ∂b/∂a = d / a^2,  ∂b/∂d = -1 / a
    c = sigmoid(g)  ∂c/∂g = c (1 - c)
"""

import logging
from collections.abc import Callable

import numpy as np
from numpy.typing import NDArray

from irt_analysis.irt.estimation.data_models import ParameterEstimate
from irt_analysis.irt.estimation.enums import ModelVariant
from irt_analysis.irt.estimation.parameters import ItemParameters

logger = logging.getLogger(__name__)


def numerical_hessian(
    gradient: Callable[[NDArray[np.float64]], NDArray[np.float64]],
    x: NDArray[np.float64],
    relative_step: float,
) -> NDArray[np.float64]:
    """
    Symmetric central-difference Hessian of a function with known gradient.

    Args:
        gradient: Gradient of the objective.
        x: Point at which to evaluate, shape (n,).
        relative_step: Step size relative to max(1, |x_j|).

    Returns:
        Hessian, shape (n, n).
    """
    n = len(x)
    hessian = np.empty((n, n), dtype=np.float64)
    for j in range(n):
        step = relative_step * max(1.0, abs(x[j]))
        x_plus = x.copy()
        x_minus = x.copy()
        x_plus[j] += step
        x_minus[j] -= step
        hessian[:, j] = (gradient(x_plus) - gradient(x_minus)) / (2.0 * step)
    result: NDArray[np.float64] = 0.5 * (hessian + hessian.T)
    return result


def invert_information(
    information: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Covariance matrix from the observed information matrix.

    Falls back to the pseudo-inverse when the matrix is singular, which
    happens when a parameter sits at an optimization bound.
    """
    try:
        covariance: NDArray[np.float64] = np.linalg.inv(information)
    except np.linalg.LinAlgError:
        logger.warning(
            "Observed information matrix is singular; "
            "using pseudo-inverse for standard errors"
        )
        covariance = np.linalg.pinv(information)
    return covariance


def _standard_error(variance: float) -> float:
    if not np.isfinite(variance) or variance <= 0:
        return float("nan")
    return float(np.sqrt(variance))


def delta_method_estimates(
    item_parameters: list[ItemParameters],
    covariance: NDArray[np.float64],
    variant: ModelVariant,
) -> tuple[ParameterEstimate, ...]:
    """
    Reported parameter estimates with delta-method standard errors.

    Args:
        item_parameters: Estimated parameters, one per item.
        covariance: Covariance of the stacked internal free vectors,
            shape (n_items * n_free, n_items * n_free).
        variant: Model variant (fixes the internal layout).

    Returns:
        Tuple of ParameterEstimate, item by item, in the order
        difficulty, discrimination, guessing (free ones only).
    """
    n_free = variant.n_item_parameters
    estimates: list[ParameterEstimate] = []

    for item_idx, params in enumerate(item_parameters):
        offset = item_idx * n_free
        block = covariance[offset : offset + n_free, offset : offset + n_free]

        # Positions of a, d, g within the item's free vector
        a_pos = 0 if variant.free_discrimination else None
        d_pos = 1 if variant.free_discrimination else 0
        g_pos = d_pos + 1 if variant.free_guessing else None

        a = params.discrimination
        d = params.intercept

        jac_b = np.zeros(n_free, dtype=np.float64)
        jac_b[d_pos] = -1.0 / a
        if a_pos is not None:
            jac_b[a_pos] = d / a**2
        estimates.append(
            ParameterEstimate(
                item_id=params.item_id,
                parameter="difficulty",
                estimate=params.difficulty,
                standard_error=_standard_error(float(jac_b @ block @ jac_b)),
            )
        )

        if a_pos is not None:
            estimates.append(
                ParameterEstimate(
                    item_id=params.item_id,
                    parameter="discrimination",
                    estimate=a,
                    standard_error=_standard_error(float(block[a_pos, a_pos])),
                )
            )

        if g_pos is not None:
            c = params.guessing
            dc_dg = c * (1.0 - c)
            estimates.append(
                ParameterEstimate(
                    item_id=params.item_id,
                    parameter="guessing",
                    estimate=c,
                    standard_error=_standard_error(
                        float(dc_dg**2 * block[g_pos, g_pos])
                    ),
                )
            )

    return tuple(estimates)


def unavailable_estimates(
    item_parameters: list[ItemParameters],
    variant: ModelVariant,
) -> tuple[ParameterEstimate, ...]:
    """Estimates with NaN standard errors, used for failed fits."""
    n_total = len(item_parameters) * variant.n_item_parameters
    covariance = np.full((n_total, n_total), np.nan)
    return delta_method_estimates(item_parameters, covariance, variant)
