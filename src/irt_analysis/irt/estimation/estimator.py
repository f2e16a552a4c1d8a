"""
Dichotomous IRT estimator using MML-EM.

Fits the 1PL, 2PL or 3PL logistic model by marginal maximum likelihood:
Bock-Aitkin EM iterations followed by a quasi-Newton phase on the marginal
likelihood itself, then standard errors from the observed information.
"""

import logging

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import minimize

from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.core.errors import ConvergenceError
from irt_analysis.core.utils import sigmoid
from irt_analysis.irt.estimation.config import EstimationConfig
from irt_analysis.irt.estimation.data_models import (
    EStepResult,
    IRTEstimationResult,
)
from irt_analysis.irt.estimation.enums import ConvergenceStatus, ModelVariant
from irt_analysis.irt.estimation.gradients import expected_log_likelihood
from irt_analysis.irt.estimation.likelihood import (
    ResponseIndicators,
    compute_posterior,
)
from irt_analysis.irt.estimation.parameters import ItemParameters
from irt_analysis.irt.estimation.quadrature import (
    GaussHermiteQuadrature,
    get_quadrature,
)
from irt_analysis.irt.estimation.standard_errors import (
    delta_method_estimates,
    invert_information,
    numerical_hessian,
    unavailable_estimates,
)
from irt_analysis.irt.estimation.starting_values import initial_parameters

logger = logging.getLogger(__name__)


class IRTEstimator:
    """
    Logistic IRT estimator using MML-EM.

    The model:
        P(X=1 | θ) = c + (1 - c) / (1 + exp(-a * (θ - b)))

    The variant decides which of a and c are free (see ModelVariant); all
    variants share one code path driven by the variant's free mask.

    Uses L-BFGS-B for the per-item M-step with analytical gradients and for
    the final quasi-Newton phase, where the gradient of the marginal
    log-likelihood comes from Fisher's identity.
    """

    def __init__(
        self,
        variant: ModelVariant | str = ModelVariant.TWO_PL,
        config: EstimationConfig | None = None,
    ):
        """Initialize estimator for one model variant."""
        self.variant = ModelVariant(variant)
        self.config = config or EstimationConfig()
        self._quadrature = get_quadrature(self.config.quadrature)

    @property
    def quadrature(self) -> GaussHermiteQuadrature:
        """Access quadrature points and weights."""
        return self._quadrature

    @property
    def _item_bounds(self) -> list[tuple[float, float]]:
        bounds = self.config.bounds
        item_bounds = []
        if self.variant.free_discrimination:
            item_bounds.append(bounds.discrimination)
        item_bounds.append(bounds.intercept)
        if self.variant.free_guessing:
            item_bounds.append(bounds.logit_guessing)
        return item_bounds

    def _check_convergence(self, current_ll: float, prev_ll: float) -> bool:
        """
        Check if EM has converged based on log-likelihood change.

        Args:
            current_ll: Current log-likelihood.
            prev_ll: Previous log-likelihood.

        Returns:
            True if converged.
        """
        if prev_ll == -np.inf:
            return False

        abs_change = abs(current_ll - prev_ll)
        return bool(abs_change < self.config.convergence.em_tolerance)

    def _split(self, x: NDArray[np.float64]) -> tuple[float, float, float]:
        """Free vector of one item -> (slope, intercept, guessing)."""
        pos = 0
        slope = 1.0
        if self.variant.free_discrimination:
            slope = float(x[pos])
            pos += 1
        intercept = float(x[pos])
        guessing = 0.0
        if self.variant.free_guessing:
            guessing = float(sigmoid(x[pos + 1]))
        return slope, intercept, guessing

    def _select_free(
        self, grad_a: float, grad_d: float, grad_g: float
    ) -> NDArray[np.float64]:
        full = np.array([grad_a, grad_d, grad_g], dtype=np.float64)
        free: NDArray[np.float64] = full[self.variant.free_mask]
        return free

    def _pack(self, params: list[ItemParameters]) -> NDArray[np.float64]:
        """Stack free vectors of all items, clipped to the bounds."""
        lower, upper = np.array(self._item_bounds * len(params)).T
        x = np.concatenate([p.to_array(self.variant) for p in params])
        result: NDArray[np.float64] = np.clip(x, lower, upper)
        return result

    def _unpack(self, x: NDArray[np.float64]) -> list[ItemParameters]:
        n_free = self.variant.n_item_parameters
        return [
            ItemParameters.from_array(
                item_idx, x[item_idx * n_free : (item_idx + 1) * n_free],
                self.variant,
            )
            for item_idx in range(len(x) // n_free)
        ]

    def _e_step(
        self,
        indicators: ResponseIndicators,
        params: list[ItemParameters],
    ) -> EStepResult:
        """
        E-step: posterior over abilities and expected item counts.

        For each respondent, compute:
            P(theta_q | responses) ∝ P(responses | theta_q) * P(theta_q)

        where P(theta_q) is the quadrature weight (prior), and aggregate
        them into the artificial data of the M-step:
            n_kq = Σ_i valid_ik * w_iq,   r_kq = Σ_i y_ik * w_iq

        Args:
            indicators: Response indicator matrices.
            params: Current item parameters.

        Returns:
            EStepResult with expected counts and marginal log-likelihood.
        """
        posterior = compute_posterior(
            indicators,
            params,
            self._quadrature.points,
            self._quadrature.log_weights,
        )
        return EStepResult(
            expected_n=np.ascontiguousarray(
                indicators.valid.T @ posterior.weights
            ),
            expected_r=np.ascontiguousarray(
                indicators.correct.T @ posterior.weights
            ),
            log_likelihood=posterior.log_likelihood,
        )

    def _m_step(
        self,
        e_result: EStepResult,
        current_params: list[ItemParameters],
    ) -> list[ItemParameters]:
        """
        M-step: optimize item parameters given expected counts.

        Items are independent given the posteriors, so each is optimized
        separately.
        """
        return [
            self._optimize_item(
                item_idx=item_idx,
                n_expected=e_result.expected_n[item_idx],
                r_expected=e_result.expected_r[item_idx],
                current=current,
            )
            for item_idx, current in enumerate(current_params)
        ]

    def _optimize_item(
        self,
        item_idx: int,
        n_expected: NDArray[np.float64],
        r_expected: NDArray[np.float64],
        current: ItemParameters,
    ) -> ItemParameters:
        """
        Optimize parameters for one item using L-BFGS-B.

        Args:
            item_idx: Index of the item.
            n_expected: Expected respondents per node, shape (n_quadrature,).
            r_expected: Expected correct answers per node.
            current: Current parameter estimates.

        Returns:
            Optimized ItemParameters.
        """
        if n_expected.sum() <= 0:
            # No valid responses - keep current parameters
            return current

        theta = self._quadrature.points
        bounds = self._item_bounds
        lower, upper = np.array(bounds).T
        x0 = np.clip(current.to_array(self.variant), lower, upper)

        def objective(
            x: NDArray[np.float64],
        ) -> tuple[float, NDArray[np.float64]]:
            slope, intercept, guessing = self._split(x)
            ll, grad_a, grad_d, grad_g = expected_log_likelihood(
                slope, intercept, guessing, theta, n_expected, r_expected
            )
            return -ll, -self._select_free(grad_a, grad_d, grad_g)

        result = minimize(
            fun=objective,
            x0=x0,
            method="L-BFGS-B",
            jac=True,
            bounds=bounds,
            options={
                "maxiter": self.config.convergence.max_lbfgs_iterations,
                "ftol": self.config.convergence.lbfgs_tolerance,
            },
        )

        return ItemParameters.from_array(item_idx, result.x, self.variant)

    def _marginal_objective(
        self,
        x: NDArray[np.float64],
        indicators: ResponseIndicators,
    ) -> tuple[float, NDArray[np.float64]]:
        """
        Negative marginal log-likelihood per respondent and its gradient.

        By Fisher's identity the gradient equals the gradient of the
        expected complete-data log-likelihood at posteriors computed with
        the same parameters.
        """
        params = self._unpack(x)
        e_result = self._e_step(indicators, params)
        theta = self._quadrature.points

        gradients = []
        for item_idx, item_params in enumerate(params):
            _, grad_a, grad_d, grad_g = expected_log_likelihood(
                float(item_params.discrimination),
                float(item_params.intercept),
                float(item_params.guessing),
                theta,
                e_result.expected_n[item_idx],
                e_result.expected_r[item_idx],
            )
            gradients.append(self._select_free(grad_a, grad_d, grad_g))

        n = indicators.n_respondents
        return (
            -e_result.log_likelihood / n,
            -np.concatenate(gradients) / n,
        )

    def _maximize_marginal(
        self,
        indicators: ResponseIndicators,
        params: list[ItemParameters],
    ) -> tuple[list[ItemParameters], bool]:
        """Quasi-Newton phase on the marginal likelihood."""
        x0 = self._pack(params)
        result = minimize(
            fun=self._marginal_objective,
            x0=x0,
            args=(indicators,),
            method="L-BFGS-B",
            jac=True,
            bounds=self._item_bounds * len(params),
            options={"maxiter": self.config.convergence.max_qn_iterations},
        )
        logger.debug(f"Quasi-Newton phase: {result.message}")
        return self._unpack(result.x), bool(result.success)

    def _parameter_covariance(
        self,
        indicators: ResponseIndicators,
        params: list[ItemParameters],
    ) -> NDArray[np.float64]:
        """Inverse observed information of the stacked free vector."""
        n = indicators.n_respondents

        def gradient(x: NDArray[np.float64]) -> NDArray[np.float64]:
            return n * self._marginal_objective(x, indicators)[1]

        hessian = numerical_hessian(
            gradient,
            self._pack(params),
            self.config.convergence.hessian_step,
        )
        return invert_information(hessian)

    def fit(self, data: ResponseMatrix) -> IRTEstimationResult:
        """
        Fit the model to response data.

        Args:
            data: Response matrix with respondent answers.

        Returns:
            IRTEstimationResult with estimated parameters, standard errors
            and fit statistics.

        Raises:
            ConvergenceError: If estimation did not converge and the
                config does not allow non-converged results.
        """
        indicators = ResponseIndicators.from_matrix(data)
        params = initial_parameters(
            data, self.variant, self.config.initial_guessing
        )

        prev_ll = -np.inf
        convergence_status = ConvergenceStatus.MAX_ITERATIONS
        n_iterations = 0

        for iteration in range(self.config.convergence.max_em_iterations):
            e_result = self._e_step(indicators, params)
            n_iterations = iteration + 1
            logger.debug(
                f"{self.variant.value} iteration {n_iterations}: "
                f"LL = {e_result.log_likelihood:.4f}"
            )

            if not np.isfinite(e_result.log_likelihood):
                convergence_status = ConvergenceStatus.FAILED
                break

            if self._check_convergence(e_result.log_likelihood, prev_ll):
                convergence_status = ConvergenceStatus.CONVERGED
                break

            prev_ll = e_result.log_likelihood
            params = self._m_step(e_result, params)

        log_likelihood = self._e_step(indicators, params).log_likelihood
        if not np.isfinite(log_likelihood):
            convergence_status = ConvergenceStatus.FAILED

        if (
            convergence_status != ConvergenceStatus.FAILED
            and self.config.convergence.max_qn_iterations > 0
        ):
            polished, qn_success = self._maximize_marginal(indicators, params)
            polished_ll = self._e_step(indicators, polished).log_likelihood
            if np.isfinite(polished_ll) and polished_ll >= log_likelihood:
                params = polished
                log_likelihood = polished_ll
                if qn_success:
                    convergence_status = ConvergenceStatus.CONVERGED

        if convergence_status == ConvergenceStatus.FAILED:
            estimates = unavailable_estimates(params, self.variant)
        else:
            covariance = self._parameter_covariance(indicators, params)
            estimates = delta_method_estimates(params, covariance, self.variant)

        result = IRTEstimationResult(
            variant=self.variant,
            item_parameters=tuple(params),
            parameter_estimates=estimates,
            log_likelihood=float(log_likelihood),
            n_respondents=data.n_respondents,
            n_iterations=n_iterations,
            convergence_status=convergence_status,
            model_version=self.config.model_version,
        )

        if not result.converged:
            message = (
                f"{self.variant.value} estimation did not converge: "
                f"{convergence_status.value} after {n_iterations} "
                f"EM iterations"
            )
            if not self.config.allow_non_convergence:
                raise ConvergenceError(message, result=result)
            logger.warning(message)
        else:
            logger.info(
                f"{self.variant.value} converged after {n_iterations} EM "
                f"iterations, LL = {log_likelihood:.4f}"
            )

        return result


def fit_model(
    data: ResponseMatrix,
    variant: ModelVariant | str,
    config: EstimationConfig | None = None,
) -> IRTEstimationResult:
    """Convenience wrapper: fit one model variant with the given config."""
    return IRTEstimator(variant, config).fit(data)
