"""Tests for the synthetic data generation pipeline."""

from dataclasses import replace
from pathlib import Path

import numpy as np
import pytest

from irt_analysis.core.constants import MISSING_VALUE
from irt_analysis.core.data import load_response_table
from irt_analysis.synthetic_data.config import MissingConfig
from irt_analysis.synthetic_data.generators import (
    generate_responses,
    write_generated,
)
from irt_analysis.synthetic_data.presets import get_preset


@pytest.fixture(scope="module")
def tutorial():
    return generate_responses(get_preset("tutorial"))


class TestGenerateResponses:
    def test_shapes(self, tutorial) -> None:
        assert tutorial.responses.n_respondents == 500
        assert tutorial.responses.n_items == 10
        assert tutorial.abilities.shape == (500,)
        assert len(tutorial.item_parameters) == 10

    def test_complete_binary_data(self, tutorial) -> None:
        assert not tutorial.responses.has_missing
        assert tutorial.actual_missing_rate == 0.0
        assert set(np.unique(tutorial.responses.responses)) <= {0, 1}

    def test_reproducible(self, tutorial) -> None:
        again = generate_responses(get_preset("tutorial"))

        np.testing.assert_array_equal(
            again.responses.responses, tutorial.responses.responses
        )
        np.testing.assert_array_equal(again.abilities, tutorial.abilities)

    def test_different_seed_differs(self, tutorial) -> None:
        config = replace(get_preset("tutorial"), random_seed=1)

        other = generate_responses(config)

        assert not np.array_equal(
            other.responses.responses, tutorial.responses.responses
        )

    def test_higher_ability_scores_higher(self, tutorial) -> None:
        scores = tutorial.responses.total_scores()
        correlation = np.corrcoef(tutorial.abilities, scores)[0, 1]

        assert correlation > 0.5

    def test_easier_items_answered_more_often(self, tutorial) -> None:
        difficulty = np.array([p.difficulty for p in tutorial.item_parameters])
        proportion = tutorial.responses.proportion_correct()

        assert proportion[np.argmin(difficulty)] > proportion[
            np.argmax(difficulty)
        ]

    def test_missing_rate(self) -> None:
        config = replace(
            get_preset("tutorial"),
            missing=MissingConfig(model="mcar", params={"rate": 0.1}),
        )

        data = generate_responses(config)

        assert data.actual_missing_rate == pytest.approx(0.1, abs=0.02)

    def test_rasch_preset(self) -> None:
        data = generate_responses(get_preset("rasch"))

        assert all(p.discrimination == 1.0 for p in data.item_parameters)
        assert data.responses.has_missing


class TestWriteGenerated:
    def test_round_trip(self, tmp_path: Path) -> None:
        config = replace(
            get_preset("tutorial"),
            n_respondents=30,
            missing=MissingConfig(model="mcar", params={"rate": 0.2}),
        )
        data = generate_responses(config)
        path = tmp_path / "out" / "responses.txt"

        write_generated(data, path)
        loaded = load_response_table(path)

        np.testing.assert_array_equal(
            loaded.responses, data.responses.responses
        )
        assert (loaded.responses == MISSING_VALUE).any()
