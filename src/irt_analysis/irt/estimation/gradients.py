"""
Numerical kernels for dichotomous logistic IRT models.

The item response function in slope/intercept form is:
    P(X=1 | θ) = c + (1 - c) * s,   s = sigmoid(a * θ + d)

with the reported difficulty b = -d / a. For the Bock-Aitkin M-step each
item is summarized by expected counts at the quadrature nodes θ_q:
    n_q = Σ_i w_iq          (expected respondents answering the item)
    r_q = Σ_i w_iq * y_i    (expected correct answers)

The expected complete-data log-likelihood of one item is:
    Q = Σ_q r_q log P_q + (n_q - r_q) log(1 - P_q)

Gradients, simplified so that nothing divides by P(1 - P):
    ∂Q/∂a = Σ_q θ_q * (r_q - n_q P_q) * s_q / P_q
    ∂Q/∂d = Σ_q (r_q - n_q P_q) * s_q / P_q
    ∂Q/∂g = Σ_q (r_q - n_q P_q) * c / P_q        (c = sigmoid(g))

With c = 0 the ratio s / P is exactly 1 and the gradients reduce to the
familiar 2PL form. By Fisher's identity the same expressions, evaluated
with posteriors at the current parameters, are the gradient of the
marginal log-likelihood.
"""

import math

import numpy as np
from numba import njit  # type: ignore
from numpy.typing import NDArray


@njit  # type: ignore
def stable_sigmoid(z: float) -> float:
    """Logistic function without overflow for large |z|."""
    if z >= 0.0:
        return 1.0 / (1.0 + math.exp(-z))
    ez = math.exp(z)
    return ez / (1.0 + ez)


@njit  # type: ignore
def log_sigmoid(z: float) -> float:
    """log(sigmoid(z)) without overflow or underflow to -inf."""
    if z >= 0.0:
        return -math.log1p(math.exp(-z))
    return z - math.log1p(math.exp(z))


@njit  # type: ignore
def compute_probabilities(
    theta: NDArray[np.float64],
    discrimination: float,
    difficulty: float,
    guessing: float,
) -> NDArray[np.float64]:
    """
    Evaluate P(X=1 | θ) = c + (1 - c) * sigmoid(a * (θ - b)).

    Args:
        theta: Ability values, shape (n_theta,).
        discrimination: Slope a.
        difficulty: Location b.
        guessing: Lower asymptote c in [0, 1).

    Returns:
        Probabilities, shape (n_theta,).
    """
    n = theta.shape[0]
    probs = np.empty(n, dtype=np.float64)
    for q in range(n):
        s = stable_sigmoid(discrimination * (theta[q] - difficulty))
        probs[q] = guessing + (1.0 - guessing) * s
    return probs


@njit  # type: ignore
def compute_derivatives(
    theta: NDArray[np.float64],
    discrimination: float,
    difficulty: float,
    guessing: float,
) -> NDArray[np.float64]:
    """
    Evaluate dP/dθ = a * (1 - c) * s * (1 - s).

    Returns:
        Derivatives, shape (n_theta,).
    """
    n = theta.shape[0]
    out = np.empty(n, dtype=np.float64)
    for q in range(n):
        s = stable_sigmoid(discrimination * (theta[q] - difficulty))
        out[q] = discrimination * (1.0 - guessing) * s * (1.0 - s)
    return out


@njit  # type: ignore
def compute_information(
    theta: NDArray[np.float64],
    discrimination: float,
    difficulty: float,
    guessing: float,
) -> NDArray[np.float64]:
    """
    Fisher information of a binary item, [dP/dθ]^2 / [P (1 - P)].

    Evaluated as a^2 (1 - c) s^2 (1 - s) / (c + (1 - c) s), which is the
    same quantity with P (1 - P) cancelled analytically.

    Returns:
        Information values, shape (n_theta,).
    """
    n = theta.shape[0]
    out = np.empty(n, dtype=np.float64)
    a2 = discrimination * discrimination
    for q in range(n):
        s = stable_sigmoid(discrimination * (theta[q] - difficulty))
        if guessing == 0.0:
            out[q] = a2 * s * (1.0 - s)
        else:
            p = guessing + (1.0 - guessing) * s
            out[q] = a2 * (1.0 - guessing) * s * s * (1.0 - s) / p
    return out


@njit  # type: ignore
def compute_log_probabilities(
    theta: NDArray[np.float64],
    slope: float,
    intercept: float,
    guessing: float,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Log probabilities of a correct and an incorrect answer.

    Args:
        theta: Quadrature points, shape (n_quadrature,).
        slope: Slope a.
        intercept: Intercept d (logit at θ = 0 when c = 0).
        guessing: Lower asymptote c in [0, 1).

    Returns:
        Tuple (log P, log(1 - P)), each of shape (n_quadrature,).
    """
    n = theta.shape[0]
    log_p = np.empty(n, dtype=np.float64)
    log_q = np.empty(n, dtype=np.float64)
    log_one_minus_c = math.log1p(-guessing)
    for q in range(n):
        z = slope * theta[q] + intercept
        if guessing == 0.0:
            log_p[q] = log_sigmoid(z)
        else:
            log_p[q] = math.log(guessing + (1.0 - guessing) * stable_sigmoid(z))
        log_q[q] = log_one_minus_c + log_sigmoid(-z)
    return log_p, log_q


@njit  # type: ignore
def expected_log_likelihood(
    slope: float,
    intercept: float,
    guessing: float,
    theta: NDArray[np.float64],
    n_expected: NDArray[np.float64],
    r_expected: NDArray[np.float64],
) -> tuple[float, float, float, float]:
    """
    Expected complete-data log-likelihood of one item and its gradient.

    Args:
        slope: Slope a.
        intercept: Intercept d.
        guessing: Lower asymptote c in [0, 1).
        theta: Quadrature points, shape (n_quadrature,).
        n_expected: Expected respondents per node, shape (n_quadrature,).
        r_expected: Expected correct answers per node, shape (n_quadrature,).

    Returns:
        Tuple (Q, ∂Q/∂a, ∂Q/∂d, ∂Q/∂g) where g = logit(c).
    """
    ll = 0.0
    grad_a = 0.0
    grad_d = 0.0
    grad_g = 0.0
    log_one_minus_c = math.log1p(-guessing)

    for q in range(theta.shape[0]):
        z = slope * theta[q] + intercept
        s = stable_sigmoid(z)
        p = guessing + (1.0 - guessing) * s
        r = r_expected[q]
        n = n_expected[q]

        if guessing == 0.0:
            log_p = log_sigmoid(z)
            ratio = 1.0
        else:
            log_p = math.log(p)
            ratio = s / p
        log_q = log_one_minus_c + log_sigmoid(-z)

        ll += r * log_p + (n - r) * log_q

        residual = r - n * p
        grad_z = residual * ratio
        grad_a += grad_z * theta[q]
        grad_d += grad_z
        if guessing > 0.0:
            grad_g += residual * guessing / p

    return ll, grad_a, grad_d, grad_g
