"""
End-to-end analysis of a dataset: nested fits, comparison and fit tests.
"""

from dataclasses import replace

import numpy as np
import pytest

from irt_analysis.core.utils import get_rng
from irt_analysis.irt.comparison import compare_models
from irt_analysis.irt.diagnostics import (
    compute_response_prob_comparison,
    item_fit,
    pattern_goodness_of_fit,
    unidimensionality_test,
)
from irt_analysis.irt.estimation import (
    EstimationConfig,
    FitTestConfig,
    ModelVariant,
    fit_model,
)
from irt_analysis.irt.information import InformationCurve, ThetaGrid
from irt_analysis.irt.reporting import summarize_model
from irt_analysis.synthetic_data.generators import generate_responses
from irt_analysis.synthetic_data.presets import get_preset

pytestmark = pytest.mark.slow


@pytest.fixture(scope="module")
def generated():
    config = replace(get_preset("tutorial"), n_respondents=2000)
    return generate_responses(config)


@pytest.fixture(scope="module")
def one_pl(generated):
    return fit_model(generated.responses, ModelVariant.ONE_PL)


@pytest.fixture(scope="module")
def two_pl(generated):
    return fit_model(generated.responses, ModelVariant.TWO_PL)


def test_likelihood_increases_with_nesting(one_pl, two_pl) -> None:
    assert two_pl.log_likelihood >= one_pl.log_likelihood - 1e-6
    assert two_pl.n_parameters == 2 * one_pl.n_parameters


def test_likelihood_ratio_prefers_two_pl(one_pl, two_pl) -> None:
    """Slopes vary across the generating items."""
    comparison = compare_models(one_pl, two_pl)

    assert comparison.df == 10
    assert comparison.prefers_general(0.01)
    assert two_pl.aic < one_pl.aic


def test_item_fit_asymptotic(generated, one_pl, two_pl) -> None:
    config = EstimationConfig(
        fit_tests=FitTestConfig(n_groups=10, n_simulations=0)
    )

    fit_2pl = item_fit(generated.responses, two_pl, config)
    fit_1pl = item_fit(generated.responses, one_pl, config)

    assert np.all((fit_2pl.p_value >= 0) & (fit_2pl.p_value <= 1))
    # The misspecified model cannot fit better in total
    assert fit_2pl.statistic.sum() <= fit_1pl.statistic.sum()
    assert len(fit_1pl.misfitting(0.05)) > 0
    assert len(fit_2pl.misfitting(0.05)) <= len(fit_1pl.misfitting(0.05))
    assert np.mean(fit_2pl.p_value >= fit_1pl.p_value) >= 0.5


def test_item_fit_simulated(generated, two_pl) -> None:
    config = EstimationConfig(
        fit_tests=FitTestConfig(n_groups=10, n_simulations=4, refit=True)
    )

    result = item_fit(generated.responses, two_pl, config, get_rng(1))

    assert result.n_simulations == 4
    # (1 + count) / (B + 1) takes values in multiples of 1 / 5
    np.testing.assert_allclose(
        result.p_value * 5, np.round(result.p_value * 5), atol=1e-9
    )
    assert np.all(result.p_value >= 0.2)


def test_unidimensionality(generated, two_pl) -> None:
    config = EstimationConfig(fit_tests=FitTestConfig(n_simulations=19))

    result = unidimensionality_test(
        generated.responses, two_pl, config, get_rng(2)
    )

    assert result.n_simulations == 19
    assert 0.05 <= result.p_value <= 1.0
    assert result.eigenvalues[0] > 2 * result.eigenvalues[1]


def test_pattern_goodness_of_fit(generated, two_pl) -> None:
    config = EstimationConfig(fit_tests=FitTestConfig(n_simulations=0))

    result = pattern_goodness_of_fit(generated.responses, two_pl, config)

    assert result.n_respondents == 2000
    assert result.n_patterns <= 2**10
    assert 0.0 <= result.p_value <= 1.0


def test_response_probabilities(generated, two_pl) -> None:
    comparison = compute_response_prob_comparison(generated.responses, two_pl)

    np.testing.assert_allclose(
        comparison.model_prob, comparison.empirical_prob, atol=0.02
    )


def test_report_and_information(two_pl) -> None:
    summary = summarize_model(two_pl)
    curve = InformationCurve(
        two_pl.item_parameters, ThetaGrid(-4.0, 4.0, 81)
    )
    theta, information = curve.to_arrays()

    assert summary.estimates["significant"].sum() >= 10
    assert np.all(information > 0)
    assert abs(theta[np.argmax(information)]) < 2.0
