"""
Tabular reports of fitted models.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from irt_analysis.irt.estimation.config import SignificanceConfig
from irt_analysis.irt.estimation.data_models import IRTEstimationResult
from irt_analysis.irt.estimation.parameters import response_probability_matrix


@dataclass(frozen=True)
class ModelSummary:
    """
    Parameter table of one fitted model.

    Attributes:
        model: The fitted model.
        estimates: One row per free parameter with columns item_id,
            parameter, estimate, standard_error, z_value, significant.
        z_threshold: Threshold used for the significant column.
    """

    model: IRTEstimationResult
    estimates: pd.DataFrame
    z_threshold: float

    @property
    def fit_statistics(self) -> dict[str, float]:
        return {
            "log_likelihood": self.model.log_likelihood,
            "AIC": self.model.aic,
            "BIC": self.model.bic,
            "n_parameters": float(self.model.n_parameters),
        }

    def parameter(self, name: str) -> pd.DataFrame:
        """Rows of one parameter type, indexed by item."""
        rows = self.estimates[self.estimates["parameter"] == name]
        return rows.drop(columns="parameter").set_index("item_id")


def summarize_model(
    model: IRTEstimationResult,
    significance: SignificanceConfig | None = None,
) -> ModelSummary:
    """
    Build the parameter table of a fitted model.

    Args:
        model: Fitted model.
        significance: Thresholds. Defaults to SignificanceConfig().

    Returns:
        ModelSummary with estimates, standard errors and z-values.
    """
    if significance is None:
        significance = SignificanceConfig()

    rows = [
        {
            "item_id": estimate.item_id,
            "parameter": estimate.parameter,
            "estimate": estimate.estimate,
            "standard_error": estimate.standard_error,
            "z_value": estimate.z_value,
            "significant": estimate.is_significant(significance.z_threshold),
        }
        for estimate in model.parameter_estimates
    ]
    return ModelSummary(
        model=model,
        estimates=pd.DataFrame(rows),
        z_threshold=significance.z_threshold,
    )


def coefficient_table(model: IRTEstimationResult) -> pd.DataFrame:
    """
    Wide table of item parameters, one row per item.

    The last column is the probability of a correct answer for a
    respondent of average ability.
    """
    frame = pd.DataFrame(
        [
            {
                "item_id": params.item_id,
                "difficulty": params.difficulty,
                "discrimination": params.discrimination,
                "guessing": params.guessing,
            }
            for params in model.item_parameters
        ]
    ).set_index("item_id")
    frame["p_correct_at_mean"] = response_probability_matrix(
        np.zeros(1), model.item_parameters
    )[0]
    return frame
