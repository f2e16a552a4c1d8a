"""Tests for item parameter sampling and config loading."""

from pathlib import Path

import numpy as np
import pytest

from irt_analysis.core.utils import get_rng
from irt_analysis.synthetic_data.config import (
    DistributionConfig,
    GenerationConfig,
    ItemParametersConfig,
)
from irt_analysis.synthetic_data.parameters import (
    MAX_GUESSING,
    load_config,
    sample_item_parameters,
)


def _config(variant: str, **item_parameters: DistributionConfig) -> GenerationConfig:
    return GenerationConfig(
        n_respondents=100,
        n_items=25,
        variant=variant,
        random_seed=0,
        item_parameters=ItemParametersConfig(**item_parameters),
    )


class TestSampleItemParameters:
    def test_one_pl_fixes_slope_and_guessing(self) -> None:
        params = sample_item_parameters(_config("1PL"), get_rng(1))

        assert len(params) == 25
        assert all(p.discrimination == 1.0 for p in params)
        assert all(p.guessing == 0.0 for p in params)
        assert [p.item_id for p in params] == list(range(25))

    def test_two_pl_samples_slopes(self) -> None:
        params = sample_item_parameters(_config("2PL"), get_rng(1))
        slopes = np.array([p.discrimination for p in params])

        assert np.all((slopes >= 0.3) & (slopes <= 2.5))
        assert len(set(slopes.tolist())) == 25
        assert all(p.guessing == 0.0 for p in params)

    def test_three_pl_samples_guessing(self) -> None:
        params = sample_item_parameters(_config("3PL"), get_rng(1))
        guessing = np.array([p.guessing for p in params])

        assert np.all((guessing > 0.0) & (guessing <= MAX_GUESSING))

    def test_guessing_clipped(self) -> None:
        config = _config(
            "3PL",
            guessing=DistributionConfig(
                distribution="uniform", params={"low": 0.6, "high": 0.9}
            ),
        )
        params = sample_item_parameters(config, get_rng(1))

        assert all(p.guessing == MAX_GUESSING for p in params)

    def test_rejects_non_positive_slopes(self) -> None:
        config = _config(
            "2PL",
            discrimination=DistributionConfig(
                distribution="normal", params={"mean": -1.0, "std": 0.1}
            ),
        )

        with pytest.raises(ValueError, match="non-positive"):
            sample_item_parameters(config, get_rng(1))

    def test_reproducible(self) -> None:
        first = sample_item_parameters(_config("3PL"), get_rng(9))
        second = sample_item_parameters(_config("3PL"), get_rng(9))

        assert first == second


class TestLoadConfig:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_minimal_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "small.yaml"
        path.write_text(
            "n_respondents: 50\nn_items: 4\nvariant: 1PL\nrandom_seed: 3\n"
        )

        config = load_config(path)

        assert config.n_items == 4
        assert config.variant == "1PL"
        assert config.item_parameters.difficulty.distribution == "normal"
        assert config.missing.model == "none"

    def test_invalid_values_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("n_respondents: 1\nn_items: 4\nrandom_seed: 3\n")

        with pytest.raises(ValueError, match="at least 2 respondents"):
            load_config(path)
