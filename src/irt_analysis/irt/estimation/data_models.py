import math
from dataclasses import dataclass
from typing import Literal

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict

from irt_analysis.irt.estimation.enums import ConvergenceStatus, ModelVariant
from irt_analysis.irt.estimation.parameters import ItemParameters


@dataclass
class EStepResult:
    """
    Results from the E-step of EM algorithm.

    Attributes:
        expected_n: Expected number of respondents answering each item at
            each quadrature node, shape (n_items, n_quadrature_points).
        expected_r: Expected number of correct answers, same shape.
        log_likelihood: Marginal log-likelihood for current parameters.
    """

    expected_n: NDArray[np.float64]
    expected_r: NDArray[np.float64]
    log_likelihood: float


class ParameterEstimate(BaseModel):
    """
    One reported item parameter with its sampling uncertainty.

    Attributes:
        item_id: Item the parameter belongs to.
        parameter: Which parameter.
        estimate: Point estimate.
        standard_error: Asymptotic standard error (NaN if unavailable).
    """

    model_config = ConfigDict(frozen=True)

    item_id: int
    parameter: Literal["difficulty", "discrimination", "guessing"]
    estimate: float
    standard_error: float

    @property
    def z_value(self) -> float:
        """Wald statistic estimate / SE."""
        if not math.isfinite(self.standard_error) or self.standard_error <= 0:
            return math.nan
        return self.estimate / self.standard_error

    def is_significant(self, z_threshold: float) -> bool:
        """Whether |z| exceeds the threshold."""
        z = self.z_value
        return math.isfinite(z) and abs(z) > z_threshold


class IRTEstimationResult(BaseModel):
    """
    Result of IRT model estimation.

    Attributes:
        variant: Which model was fitted.
        item_parameters: Tuple of estimated item parameters, one per item.
        parameter_estimates: Free parameters with standard errors.
        log_likelihood: Final marginal log-likelihood value.
        n_respondents: Number of rows the model was fitted to.
        n_iterations: Number of EM iterations performed.
        convergence_status: Status indicating how estimation terminated.
        model_version: Version string for reproducibility tracking.
    """

    model_config = ConfigDict(frozen=True)

    variant: ModelVariant
    item_parameters: tuple[ItemParameters, ...]
    parameter_estimates: tuple[ParameterEstimate, ...]
    log_likelihood: float
    n_respondents: int
    n_iterations: int
    convergence_status: ConvergenceStatus
    model_version: str

    @property
    def n_items(self) -> int:
        """Number of items in the model."""
        return len(self.item_parameters)

    @property
    def n_parameters(self) -> int:
        """Number of free parameters."""
        return self.variant.n_item_parameters * self.n_items

    @property
    def converged(self) -> bool:
        """Whether estimation converged successfully."""
        return self.convergence_status == ConvergenceStatus.CONVERGED

    @property
    def aic(self) -> float:
        return -2.0 * self.log_likelihood + 2.0 * self.n_parameters

    @property
    def bic(self) -> float:
        return -2.0 * self.log_likelihood + self.n_parameters * math.log(
            self.n_respondents
        )

    def estimates_for(self, parameter: str) -> tuple[ParameterEstimate, ...]:
        """Estimates of one parameter type, in item order."""
        return tuple(
            e for e in self.parameter_estimates if e.parameter == parameter
        )
