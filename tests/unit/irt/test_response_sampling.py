"""
Tests for response sampling.
"""

import numpy as np
import pytest

from irt_analysis.core.constants import MISSING_VALUE
from irt_analysis.irt.estimation import (
    ConvergenceStatus,
    IRTEstimationResult,
    ItemParameters,
    ModelVariant,
    QuadratureConfig,
)
from irt_analysis.irt.sampling import (
    sample_response,
    sample_responses,
    simulate_from_model,
)

ITEMS = (
    ItemParameters(item_id=0, difficulty=-1.0),
    ItemParameters(item_id=1, difficulty=0.0, discrimination=1.5),
    ItemParameters(item_id=2, difficulty=1.0, guessing=0.25),
)


def _model() -> IRTEstimationResult:
    return IRTEstimationResult(
        variant=ModelVariant.THREE_PL,
        item_parameters=ITEMS,
        parameter_estimates=(),
        log_likelihood=-1.0,
        n_respondents=10,
        n_iterations=1,
        convergence_status=ConvergenceStatus.CONVERGED,
        model_version="test",
    )


class TestSampleResponse:
    def test_binary(self) -> None:
        rng = np.random.default_rng(0)
        values = {sample_response(0.0, ITEMS[0], rng) for _ in range(50)}

        assert values <= {0, 1}

    def test_extreme_ability(self) -> None:
        rng = np.random.default_rng(0)

        assert sample_response(30.0, ITEMS[1], rng) == 1
        assert sample_response(-30.0, ITEMS[1], rng) == 0


class TestSampleResponses:
    def test_shape_and_dtype(self) -> None:
        responses = sample_responses(
            np.zeros(7), ITEMS, np.random.default_rng(1)
        )

        assert responses.shape == (7, 3)
        assert responses.dtype == np.int8

    def test_proportions_match_model(self) -> None:
        rng = np.random.default_rng(2)
        abilities = np.zeros(20000)

        responses = sample_responses(abilities, ITEMS, rng)
        expected = [float(p.compute_probabilities(0.0)) for p in ITEMS]

        np.testing.assert_allclose(
            responses.mean(axis=0), expected, atol=0.015
        )

    def test_reproducible(self) -> None:
        abilities = np.linspace(-2, 2, 50)
        first = sample_responses(abilities, ITEMS, np.random.default_rng(3))
        second = sample_responses(abilities, ITEMS, np.random.default_rng(3))

        np.testing.assert_array_equal(first, second)


class TestSimulateFromModel:
    def test_dimensions(self) -> None:
        data = simulate_from_model(_model(), 40, np.random.default_rng(4))

        assert data.n_respondents == 40
        assert data.n_items == 3
        assert not data.has_missing

    def test_missing_mask_applied(self) -> None:
        mask = np.zeros((5, 3), dtype=bool)
        mask[0, 1] = mask[4, 2] = True

        data = simulate_from_model(
            _model(), 5, np.random.default_rng(5), missing_mask=mask
        )

        np.testing.assert_array_equal(data.missing_mask, mask)
        assert data.responses[0, 1] == MISSING_VALUE

    def test_missing_mask_shape_checked(self) -> None:
        with pytest.raises(ValueError, match="shape"):
            simulate_from_model(
                _model(),
                5,
                np.random.default_rng(6),
                missing_mask=np.zeros((4, 3), dtype=bool),
            )

    def test_prior_shifts_proportions(self) -> None:
        low = simulate_from_model(
            _model(),
            3000,
            np.random.default_rng(7),
            prior=QuadratureConfig(mean=-1.0),
        )
        high = simulate_from_model(
            _model(),
            3000,
            np.random.default_rng(7),
            prior=QuadratureConfig(mean=1.0),
        )

        assert np.all(
            high.proportion_correct() > low.proportion_correct()
        )
