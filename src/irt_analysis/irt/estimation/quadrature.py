"""
Gauss-Hermite quadrature for latent variable integration.

Provides nodes and weights for integrating over the normal ability
distribution in MML-EM estimation and EAP scoring.
"""

from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.typing import NDArray

from irt_analysis.irt.estimation.config import QuadratureConfig


@dataclass(frozen=True)
class GaussHermiteQuadrature:
    """
    Quadrature nodes and weights for N(mean, std^2).

    Attributes:
        points: Quadrature points (theta values), shape (n_points,).
        weights: Quadrature weights (probabilities), shape (n_points,).
            Weights sum to 1.
    """

    points: NDArray[np.float64]
    weights: NDArray[np.float64]

    @property
    def n_points(self) -> int:
        """Number of quadrature points."""
        return len(self.points)

    @property
    def log_weights(self) -> NDArray[np.float64]:
        """Log prior mass at each node."""
        result: NDArray[np.float64] = np.log(self.weights + 1e-300)
        return result


@lru_cache(maxsize=16)
def get_quadrature(config: QuadratureConfig) -> GaussHermiteQuadrature:
    """
    Generate Gauss-Hermite quadrature points and weights.

    numpy's hermgauss integrates against exp(-x^2) (physicists' Hermite
    polynomials). The nodes are mapped to the normal density with:
        - x_prob = sqrt(2) * x_phys
        - w_prob = w_phys / sqrt(pi)

    and then scaled to N(mean, std^2):
        - theta = mean + std * x_prob
        - weights normalized to sum to 1

    Args:
        config: Quadrature configuration specifying number of points,
            mean, and standard deviation.

    Returns:
        GaussHermiteQuadrature with points and weights.
    """
    x_phys, w_phys = np.polynomial.hermite.hermgauss(config.n_points)

    x_prob = np.sqrt(2.0) * x_phys
    w_prob = w_phys / np.sqrt(np.pi)

    theta = config.mean + config.std * x_prob
    weights = w_prob / w_prob.sum()

    points = theta.astype(np.float64)
    weights = weights.astype(np.float64)
    # Cached instances are shared between callers
    points.flags.writeable = False
    weights.flags.writeable = False

    return GaussHermiteQuadrature(points=points, weights=weights)
