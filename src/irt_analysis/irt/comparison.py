"""
Likelihood-ratio comparison of nested models.

The 1PL model is the 2PL model with all slopes equal to 1, and the 2PL
model is the 3PL model with all guessing parameters at 0. For nested fits
to the same data

    LR = 2 (LL_general - LL_restricted) ~ χ²(p_general - p_restricted)

The 2PL-vs-3PL boundary case (c = 0 on the edge of the parameter space)
makes the chi-square reference conservative.
"""

from dataclasses import dataclass

import pandas as pd
from scipy import stats

from irt_analysis.irt.estimation.data_models import IRTEstimationResult


@dataclass(frozen=True)
class ModelComparison:
    """
    Likelihood-ratio test of a restricted model against a general one.

    Attributes:
        restricted: The nested (smaller) model.
        general: The larger model.
        statistic: Likelihood-ratio statistic, floored at 0.
        df: Difference in the number of free parameters.
        p_value: Upper tail of χ²(df) at the statistic.
    """

    restricted: IRTEstimationResult
    general: IRTEstimationResult
    statistic: float
    df: int
    p_value: float

    def prefers_general(self, alpha: float) -> bool:
        """Whether the restriction is rejected at level alpha."""
        return self.p_value < alpha

    def to_frame(self) -> pd.DataFrame:
        """Two-row table in the layout of an analysis-of-deviance report."""
        rows = []
        for model in (self.restricted, self.general):
            rows.append(
                {
                    "model": model.variant.value,
                    "AIC": model.aic,
                    "BIC": model.bic,
                    "log_lik": model.log_likelihood,
                    "n_parameters": model.n_parameters,
                }
            )
        frame = pd.DataFrame(rows).set_index("model")
        frame["LRT"] = [float("nan"), self.statistic]
        frame["df"] = [float("nan"), float(self.df)]
        frame["p_value"] = [float("nan"), self.p_value]
        return frame


def compare_models(
    restricted: IRTEstimationResult,
    general: IRTEstimationResult,
) -> ModelComparison:
    """
    Likelihood-ratio test for two nested fits.

    Args:
        restricted: Fit of the smaller model.
        general: Fit of the larger model to the same data.

    Returns:
        ModelComparison.

    Raises:
        ValueError: If the models are not nested or were fitted to data
            of different shape.
    """
    if not restricted.variant.nests(general.variant):
        raise ValueError(
            f"{restricted.variant.value} is not nested in "
            f"{general.variant.value}"
        )
    if (
        restricted.n_items != general.n_items
        or restricted.n_respondents != general.n_respondents
    ):
        raise ValueError("models were fitted to different data")

    df = general.n_parameters - restricted.n_parameters
    # Negative values only come from optimizer tolerance
    statistic = max(
        2.0 * (general.log_likelihood - restricted.log_likelihood), 0.0
    )
    return ModelComparison(
        restricted=restricted,
        general=general,
        statistic=statistic,
        df=df,
        p_value=float(stats.chi2.sf(statistic, df)),
    )
