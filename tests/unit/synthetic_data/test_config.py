import pytest

from irt_analysis.irt.estimation.enums import ModelVariant
from irt_analysis.synthetic_data.config import GenerationConfig
from irt_analysis.synthetic_data.parameters import load_config
from irt_analysis.synthetic_data.presets import (
    PARAMS_DIR,
    get_available_presets,
    get_preset,
)

########################################################
# Configuration loading
########################################################


def test_configuration_presets_load() -> None:
    """Make sure that all the preset configuration files load."""

    for config_path in PARAMS_DIR.glob("*.yaml"):
        # Skip empty files
        if config_path.read_text().strip() == "":
            continue
        preset = load_config(config_path)
        assert preset is not None


def test_available_presets() -> None:
    assert get_available_presets() == ["guessing", "rasch", "tutorial"]


def test_get_preset_tutorial_succeeds() -> None:
    preset = get_preset("tutorial")

    assert preset.n_respondents == 500
    assert preset.n_items == 10
    assert preset.model_variant == ModelVariant.TWO_PL
    assert preset.missing.model == "none"


def test_preset_overrides_merge_with_defaults() -> None:
    """The rasch preset only sets difficulty; the rest keep defaults."""
    preset = get_preset("rasch")

    assert preset.model_variant == ModelVariant.ONE_PL
    assert preset.item_parameters.difficulty.params["std"] == 1.2
    assert preset.ability.distribution == "normal"
    assert preset.missing.params == {"rate": 0.02}


def test_get_preset_unknown_raises() -> None:
    with pytest.raises(ValueError, match="Unknown preset"):
        get_preset("nonexistent_preset")


########################################################
# Validation
########################################################


class TestGenerationConfig:
    def test_rejects_single_respondent(self) -> None:
        with pytest.raises(ValueError, match="at least 2 respondents"):
            GenerationConfig(n_respondents=1, n_items=5, random_seed=0)

    def test_rejects_zero_items(self) -> None:
        with pytest.raises(ValueError, match="at least 1 item"):
            GenerationConfig(n_respondents=10, n_items=0, random_seed=0)

    def test_rejects_unknown_variant(self) -> None:
        with pytest.raises(ValueError, match="variant must be one of"):
            GenerationConfig(
                n_respondents=10, n_items=5, variant="4PL", random_seed=0
            )

    def test_model_variant(self) -> None:
        config = GenerationConfig(
            n_respondents=10, n_items=5, variant="3PL", random_seed=0
        )

        assert config.model_variant == ModelVariant.THREE_PL
