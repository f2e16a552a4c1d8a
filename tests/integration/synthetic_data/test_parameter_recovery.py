from dataclasses import replace

import numpy as np
import pytest

from irt_analysis.core.constants import MISSING_VALUE
from irt_analysis.synthetic_data.config import (
    DistributionConfig,
    GenerationConfig,
    MissingConfig,
)
from irt_analysis.synthetic_data.generators import generate_responses
from irt_analysis.synthetic_data.presets import get_preset

LARGE_SAMPLE_SIZE = 10000

pytestmark = pytest.mark.slow


class TestParameterRecovery:
    """
    Test that with large enough samples, the generated data reproduces
    the configured distributions.
    """

    @pytest.fixture
    def baseline_config(self) -> GenerationConfig:
        return replace(get_preset("tutorial"), n_respondents=LARGE_SAMPLE_SIZE)

    @pytest.mark.parametrize("target_rate", [0.05, 0.10, 0.15, 0.20])
    def test_missing_rate_recovery(
        self, baseline_config: GenerationConfig, target_rate: float
    ) -> None:
        """Test that missing rate is recovered within 1%."""
        baseline_config.missing = MissingConfig(
            model="mcar", params={"rate": target_rate}
        )

        data = generate_responses(baseline_config)
        actual_rate = data.actual_missing_rate

        assert abs(actual_rate - target_rate) < 0.01

    def test_ability_mean_recovery(
        self, baseline_config: GenerationConfig
    ) -> None:
        """Test that ability mean is recovered within tolerance."""
        target_mean = 0.5
        baseline_config.ability.params["mean"] = target_mean

        data = generate_responses(baseline_config)
        actual_mean = data.abilities.mean()

        # Should be within a few standard errors
        assert abs(actual_mean - target_mean) < 0.05

    def test_ability_std_recovery(
        self, baseline_config: GenerationConfig
    ) -> None:
        """Test that ability std is recovered within tolerance."""
        target_std = 1.5
        baseline_config.ability.params["std"] = target_std

        data = generate_responses(baseline_config)
        actual_std = data.abilities.std()

        assert abs(actual_std - target_std) < 0.05

    def test_guessing_floor(self, baseline_config: GenerationConfig) -> None:
        """Low-ability respondents answer hard 3PL items at about the guessing rate."""
        baseline_config.variant = "3PL"
        baseline_config.item_parameters.guessing = DistributionConfig(
            distribution="truncated_normal",
            params={"mean": 0.25, "std": 0.001, "lower": 0.24, "upper": 0.26},
        )

        # Make items hard
        baseline_config.item_parameters.difficulty.params["mean"] = 3.0

        data = generate_responses(baseline_config)

        low_ability_mask = data.abilities < np.percentile(data.abilities, 10)
        low_responses = data.responses.responses[low_ability_mask]
        observed = low_responses != MISSING_VALUE
        actual_accuracy = low_responses[observed].mean()

        assert abs(actual_accuracy - 0.25) < 0.05

    def test_monotonicity_ability_performance(
        self, baseline_config: GenerationConfig
    ) -> None:
        """Test that higher ability leads to higher performance."""
        data = generate_responses(baseline_config)

        edges = np.quantile(data.abilities, np.linspace(0, 1, 11))
        bins = np.clip(np.searchsorted(edges, data.abilities) - 1, 0, 9)
        proportion = data.responses.total_scores() / data.responses.n_items
        accuracies = np.array([proportion[bins == k].mean() for k in range(10)])

        assert np.all(np.diff(accuracies) > 0)
