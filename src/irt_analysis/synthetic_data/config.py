from dataclasses import dataclass, field

from omegaconf import MISSING

from irt_analysis.irt.estimation.enums import ModelVariant


@dataclass
class DistributionConfig:
    """Configuration for a single parameter's marginal distribution.

    Attributes:
        distribution: Name registered in the sampler registry ("normal",
            "truncated_normal", "uniform", "log_normal", "beta", ...)
        params: Distribution parameters (mean, std, lower, upper, etc.)
            YAML params are merged into the defaults, so a preset that
            switches distribution must use a family with the same keys.
    """

    distribution: str = MISSING
    params: dict[str, float | None] = MISSING


def _default_difficulty() -> DistributionConfig:
    return DistributionConfig(
        distribution="normal", params={"mean": 0.0, "std": 1.0}
    )


def _default_discrimination() -> DistributionConfig:
    """Slopes, used by the 2PL and 3PL variants."""
    return DistributionConfig(
        distribution="truncated_normal",
        params={"mean": 1.2, "std": 0.4, "lower": 0.3, "upper": 2.5},
    )


def _default_guessing() -> DistributionConfig:
    """Lower asymptotes, used by the 3PL variant."""
    return DistributionConfig(
        distribution="beta", params={"a": 5.0, "b": 17.0}
    )


def _default_ability() -> DistributionConfig:
    return DistributionConfig(
        distribution="normal", params={"mean": 0.0, "std": 1.0}
    )


@dataclass
class ItemParametersConfig:
    """Distributions of the item parameters.

    Parameters that the variant fixes (a = 1 under 1PL, c = 0 under 1PL
    and 2PL) are not sampled.
    """

    difficulty: DistributionConfig = field(default_factory=_default_difficulty)
    discrimination: DistributionConfig = field(
        default_factory=_default_discrimination
    )
    guessing: DistributionConfig = field(default_factory=_default_guessing)


@dataclass
class MissingConfig:
    """Configuration for missing values.

    Attributes:
        model: Model type ("none", "mcar", "ability_dependent", "position_dependent").
        params: Model-specific parameters as dict for OmegaConf compatibility.
    """

    model: str = "none"
    params: dict[str, float] = field(default_factory=dict)


@dataclass
class GenerationConfig:
    """Complete configuration for generating a synthetic dataset."""

    n_respondents: int
    n_items: int

    # Generating model
    variant: str = ModelVariant.TWO_PL.value

    # Reproducibility
    random_seed: int = MISSING

    ability: DistributionConfig = field(default_factory=_default_ability)
    item_parameters: ItemParametersConfig = field(
        default_factory=ItemParametersConfig
    )

    missing: MissingConfig = field(default_factory=MissingConfig)

    def __post_init__(self) -> None:
        if self.n_respondents <= 1:
            raise ValueError("Must have at least 2 respondents")
        if self.n_items <= 0:
            raise ValueError("Must have at least 1 item")
        valid_variants = [v.value for v in ModelVariant]
        if self.variant not in valid_variants:
            raise ValueError(
                f"variant must be one of {valid_variants}, got {self.variant}"
            )

    @property
    def model_variant(self) -> ModelVariant:
        return ModelVariant(self.variant)
