"""
Tetrachoric correlations of binary items.

Each binary item is treated as a dichotomized standard normal variable.
For a pair of items with proportions correct p_i, p_j and joint proportion
p_11 the tetrachoric correlation ρ solves

    Φ2(h, k; ρ) = p_11,   h = Φ^-1(p_i),  k = Φ^-1(p_j)

The bivariate normal CDF is evaluated with Owen's T function:

    Φ2(h, k; ρ) = (Φ(h) + Φ(k)) / 2 - T(h, a_h) - T(k, a_k) - β
    a_h = (k - ρh) / (h sqrt(1 - ρ^2)),  a_k = (h - ρk) / (k sqrt(1 - ρ^2))

with β = 1/2 when hk < 0 or (hk = 0 and h + k < 0), and 0 otherwise.
"""

import logging

import numpy as np
from numpy.typing import NDArray
from scipy import optimize, special, stats

from irt_analysis.core.data_models import ResponseMatrix

logger = logging.getLogger(__name__)

MAX_CORRELATION = 0.999

# Zero thresholds are nudged off zero for the a_h, a_k ratios
_ZERO_THRESHOLD = 1e-10


def bivariate_normal_cdf(h: float, k: float, rho: float) -> float:
    """P(Z1 < h, Z2 < k) for standard normals with correlation rho."""
    if h == 0.0:
        h = _ZERO_THRESHOLD
    if k == 0.0:
        k = _ZERO_THRESHOLD

    root = np.sqrt(1.0 - rho * rho)
    a_h = (k - rho * h) / (h * root)
    a_k = (h - rho * k) / (k * root)
    beta = 0.5 if h * k < 0 else 0.0

    value = (
        0.5 * (stats.norm.cdf(h) + stats.norm.cdf(k))
        - special.owens_t(h, a_h)
        - special.owens_t(k, a_k)
        - beta
    )
    return float(np.clip(value, 0.0, 1.0))


def tetrachoric_correlation(x: NDArray[np.int8], y: NDArray[np.int8]) -> float:
    """
    Tetrachoric correlation of two binary vectors.

    Only rows where both values are present are used. When a cell of the
    2x2 table is empty, 0.5 is added to every cell.

    Returns:
        Correlation in [-0.999, 0.999], or NaN with fewer than two
        complete rows or a constant item.
    """
    both = (x >= 0) & (y >= 0)
    x = x[both]
    y = y[both]
    if x.size < 2 or x.min() == x.max() or y.min() == y.max():
        return float("nan")

    table = np.array(
        [
            [np.sum((x == 1) & (y == 1)), np.sum((x == 1) & (y == 0))],
            [np.sum((x == 0) & (y == 1)), np.sum((x == 0) & (y == 0))],
        ],
        dtype=np.float64,
    )
    if (table == 0).any():
        table += 0.5

    n = table.sum()
    p11 = table[0, 0] / n
    h = float(stats.norm.ppf(table[0].sum() / n))
    k = float(stats.norm.ppf(table[:, 0].sum() / n))

    def excess(rho: float) -> float:
        return bivariate_normal_cdf(h, k, rho) - p11

    # Φ2 is increasing in rho
    low, high = excess(-MAX_CORRELATION), excess(MAX_CORRELATION)
    if low >= 0:
        return -MAX_CORRELATION
    if high <= 0:
        return MAX_CORRELATION
    return float(
        optimize.brentq(excess, -MAX_CORRELATION, MAX_CORRELATION, xtol=1e-8)
    )


def tetrachoric_matrix(data: ResponseMatrix) -> NDArray[np.float64]:
    """
    Tetrachoric correlation matrix of all items.

    Undefined pairs (constant items, no overlap) are set to 0.

    Returns:
        Symmetric array of shape (n_items, n_items) with unit diagonal.
    """
    n_items = data.n_items
    matrix = np.eye(n_items, dtype=np.float64)
    n_undefined = 0

    for i in range(n_items):
        for j in range(i + 1, n_items):
            rho = tetrachoric_correlation(
                data.responses[:, i], data.responses[:, j]
            )
            if np.isnan(rho):
                n_undefined += 1
                rho = 0.0
            matrix[i, j] = matrix[j, i] = rho

    if n_undefined:
        logger.debug(f"{n_undefined} item pairs without a defined correlation")
    return matrix


def eigenvalues(matrix: NDArray[np.float64]) -> NDArray[np.float64]:
    """Eigenvalues of a symmetric matrix in decreasing order."""
    values: NDArray[np.float64] = np.linalg.eigvalsh(matrix)[::-1]
    return values
