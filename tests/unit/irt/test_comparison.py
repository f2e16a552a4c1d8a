"""
Tests for nested model comparison and tabular reports.
"""

import math

import numpy as np
import pytest
from scipy import stats

from irt_analysis.irt.comparison import compare_models
from irt_analysis.irt.estimation import (
    ConvergenceStatus,
    IRTEstimationResult,
    ItemParameters,
    ModelVariant,
    ParameterEstimate,
    SignificanceConfig,
)
from irt_analysis.irt.reporting import coefficient_table, summarize_model


def _result(
    variant: ModelVariant,
    log_likelihood: float,
    n_items: int = 4,
    n_respondents: int = 300,
) -> IRTEstimationResult:
    params = tuple(
        ItemParameters(item_id=k, difficulty=k - 1.5) for k in range(n_items)
    )
    estimates = tuple(
        ParameterEstimate(
            item_id=k,
            parameter="difficulty",
            estimate=k - 1.5,
            standard_error=0.5,
        )
        for k in range(n_items)
    )
    return IRTEstimationResult(
        variant=variant,
        item_parameters=params,
        parameter_estimates=estimates,
        log_likelihood=log_likelihood,
        n_respondents=n_respondents,
        n_iterations=10,
        convergence_status=ConvergenceStatus.CONVERGED,
        model_version="test",
    )


class TestCompareModels:
    def test_statistic_and_df(self) -> None:
        restricted = _result(ModelVariant.ONE_PL, -800.0)
        general = _result(ModelVariant.TWO_PL, -790.0)

        comparison = compare_models(restricted, general)

        assert comparison.statistic == pytest.approx(20.0)
        assert comparison.df == 4
        assert comparison.p_value == pytest.approx(stats.chi2.sf(20.0, 4))
        assert comparison.prefers_general(0.05)

    def test_one_pl_against_three_pl(self) -> None:
        comparison = compare_models(
            _result(ModelVariant.ONE_PL, -800.0),
            _result(ModelVariant.THREE_PL, -799.0),
        )

        assert comparison.df == 8
        assert not comparison.prefers_general(0.05)

    def test_negative_statistic_floored(self) -> None:
        comparison = compare_models(
            _result(ModelVariant.TWO_PL, -700.0),
            _result(ModelVariant.THREE_PL, -700.001),
        )

        assert comparison.statistic == 0.0
        assert comparison.p_value == pytest.approx(1.0)

    def test_not_nested(self) -> None:
        with pytest.raises(ValueError, match="not nested"):
            compare_models(
                _result(ModelVariant.TWO_PL, -790.0),
                _result(ModelVariant.ONE_PL, -800.0),
            )

    def test_different_data(self) -> None:
        with pytest.raises(ValueError, match="different data"):
            compare_models(
                _result(ModelVariant.ONE_PL, -800.0, n_respondents=300),
                _result(ModelVariant.TWO_PL, -790.0, n_respondents=250),
            )

    def test_to_frame(self) -> None:
        frame = compare_models(
            _result(ModelVariant.ONE_PL, -800.0),
            _result(ModelVariant.TWO_PL, -790.0),
        ).to_frame()

        assert list(frame.index) == ["1PL", "2PL"]
        assert math.isnan(frame.loc["1PL", "LRT"])
        assert frame.loc["2PL", "LRT"] == pytest.approx(20.0)
        assert frame.loc["1PL", "AIC"] == pytest.approx(1608.0)


class TestReporting:
    def test_summary_columns(self) -> None:
        summary = summarize_model(_result(ModelVariant.ONE_PL, -800.0))

        assert list(summary.estimates.columns) == [
            "item_id",
            "parameter",
            "estimate",
            "standard_error",
            "z_value",
            "significant",
        ]
        np.testing.assert_allclose(
            summary.estimates["z_value"], [-3.0, -1.0, 1.0, 3.0]
        )

    def test_configurable_threshold(self) -> None:
        model = _result(ModelVariant.ONE_PL, -800.0)

        default = summarize_model(model)
        strict = summarize_model(model, SignificanceConfig(z_threshold=2.5))
        lenient = summarize_model(model, SignificanceConfig(z_threshold=0.5))

        assert default.estimates["significant"].tolist() == [
            True,
            False,
            False,
            True,
        ]
        assert strict.z_threshold == 2.5
        assert strict.estimates["significant"].sum() == 2
        assert lenient.estimates["significant"].all()

    def test_parameter_view(self) -> None:
        summary = summarize_model(_result(ModelVariant.ONE_PL, -800.0))
        difficulty = summary.parameter("difficulty")

        assert list(difficulty.index) == [0, 1, 2, 3]
        assert "parameter" not in difficulty.columns

    def test_fit_statistics(self) -> None:
        model = _result(ModelVariant.ONE_PL, -800.0)
        summary = summarize_model(model)

        assert summary.fit_statistics["AIC"] == pytest.approx(model.aic)
        assert summary.fit_statistics["n_parameters"] == 4

    def test_coefficient_table(self) -> None:
        table = coefficient_table(_result(ModelVariant.ONE_PL, -800.0))

        assert list(table.columns) == [
            "difficulty",
            "discrimination",
            "guessing",
            "p_correct_at_mean",
        ]
        np.testing.assert_allclose(
            table["p_correct_at_mean"],
            1 / (1 + np.exp(-(0 - table["difficulty"]))),
        )
