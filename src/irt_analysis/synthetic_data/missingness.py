"""
Missing answer mechanisms.

Each mechanism blanks out cells of a complete binary response matrix,
replacing them with MISSING_VALUE.

Supports:
- NoMissingness: complete data
- MCAR: Missing Completely At Random
- AbilityDependentMissingness: Lower ability -> higher missing rate
- PositionDependentMissingness: Later items -> higher missing rate (fatigue)
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray

from irt_analysis.core.constants import MISSING_VALUE


class MissingnessModel(ABC):
    """Abstract base class for missingness mechanisms."""

    @abstractmethod
    def missing_rates(
        self, abilities: NDArray[np.float64], n_items: int
    ) -> NDArray[np.float64]:
        """
        Probability that each cell is missing.

        Args:
            abilities: Respondent abilities, shape (n_respondents,).
            n_items: Number of items.

        Returns:
            Array of shape (n_respondents, n_items).
        """
        ...

    def apply(
        self,
        responses: NDArray[np.int8],
        abilities: NDArray[np.float64],
        rng: Generator,
    ) -> NDArray[np.int8]:
        """Copy of responses with cells blanked out at the model's rates."""
        rates = self.missing_rates(abilities, responses.shape[1])
        result = responses.copy()
        result[rng.random(responses.shape) < rates] = MISSING_VALUE
        return result


class MissingnessRegistry:
    """Registry for missingness model factories."""

    def __init__(self) -> None:
        self._models: dict[str, Callable[..., MissingnessModel]] = {}

    def register(
        self, name: str
    ) -> Callable[[Callable[..., MissingnessModel]], Callable[..., MissingnessModel]]:
        """Decorator to register a missingness model factory."""

        def decorator(
            factory: Callable[..., MissingnessModel],
        ) -> Callable[..., MissingnessModel]:
            self._models[name] = factory
            return factory

        return decorator

    def get_model(self, name: str, params: dict[str, Any]) -> MissingnessModel:
        """
        Create a missingness model by name.

        Raises:
            ValueError: If model name is not registered.
        """
        if name not in self._models:
            available = sorted(self._models)
            raise ValueError(
                f"Unknown missingness model: {name}. Available: {available}"
            )
        return self._models[name](**params)


missingness_registry = MissingnessRegistry()


@dataclass
class NoMissingness(MissingnessModel):
    def missing_rates(
        self, abilities: NDArray[np.float64], n_items: int
    ) -> NDArray[np.float64]:
        return np.zeros((len(abilities), n_items), dtype=np.float64)


@missingness_registry.register("none")
def create_no_missingness() -> NoMissingness:
    return NoMissingness()


@dataclass
class MCARMissingness(MissingnessModel):
    """
    Every cell is missing with the same probability.

    Attributes:
        rate: Probability that any given response is missing. Must be in [0, 1).
    """

    rate: float = 0.05

    def __post_init__(self) -> None:
        if not (0.0 <= self.rate < 1.0):
            raise ValueError(f"rate must be in [0, 1), got {self.rate}")

    def missing_rates(
        self, abilities: NDArray[np.float64], n_items: int
    ) -> NDArray[np.float64]:
        return np.full((len(abilities), n_items), self.rate, dtype=np.float64)


@missingness_registry.register("mcar")
def create_mcar_missingness(rate: float = 0.05) -> MCARMissingness:
    return MCARMissingness(rate=rate)


@dataclass
class AbilityDependentMissingness(MissingnessModel):
    """
    Lower ability respondents are more likely to skip items.

    rate(θ) = min(max_rate, base_rate + ability_effect * max(0, threshold - θ))

    Attributes:
        base_rate: Base missing rate for all respondents.
        ability_effect: Increase in missing rate per unit below threshold.
        ability_threshold: Ability level below which missingness increases.
        max_rate: Maximum missing rate for any respondent.
    """

    base_rate: float = 0.02
    ability_effect: float = 0.05
    ability_threshold: float = 0.0
    max_rate: float = 0.3

    def __post_init__(self) -> None:
        if not (0.0 <= self.base_rate < 1.0):
            raise ValueError(
                f"base_rate must be in [0, 1), got {self.base_rate}"
            )
        if self.ability_effect < 0:
            raise ValueError(
                f"ability_effect must be >= 0, got {self.ability_effect}"
            )
        if not (0.0 < self.max_rate <= 1.0):
            raise ValueError(
                f"max_rate must be in (0, 1], got {self.max_rate}"
            )

    def missing_rates(
        self, abilities: NDArray[np.float64], n_items: int
    ) -> NDArray[np.float64]:
        shortfall = np.maximum(0.0, self.ability_threshold - abilities)
        rates = np.minimum(
            self.max_rate, self.base_rate + self.ability_effect * shortfall
        )
        return np.repeat(rates[:, np.newaxis], n_items, axis=1)


@missingness_registry.register("ability_dependent")
def create_ability_dependent_missingness(
    base_rate: float = 0.02,
    ability_effect: float = 0.05,
    ability_threshold: float = 0.0,
    max_rate: float = 0.3,
) -> AbilityDependentMissingness:
    return AbilityDependentMissingness(
        base_rate=base_rate,
        ability_effect=ability_effect,
        ability_threshold=ability_threshold,
        max_rate=max_rate,
    )


@dataclass
class PositionDependentMissingness(MissingnessModel):
    """
    Later items are more likely to be skipped due to test fatigue.

    Attributes:
        base_rate: Missing rate for the first item.
        position_effect: Increase in missing rate per item.
        max_rate: Maximum missing rate for any item.
    """

    base_rate: float = 0.01
    position_effect: float = 0.002
    max_rate: float = 0.2

    def __post_init__(self) -> None:
        if not (0.0 <= self.base_rate < 1.0):
            raise ValueError(
                f"base_rate must be in [0, 1), got {self.base_rate}"
            )
        if self.position_effect < 0:
            raise ValueError(
                f"position_effect must be >= 0, got {self.position_effect}"
            )
        if not (0.0 < self.max_rate <= 1.0):
            raise ValueError(
                f"max_rate must be in (0, 1], got {self.max_rate}"
            )

    def missing_rates(
        self, abilities: NDArray[np.float64], n_items: int
    ) -> NDArray[np.float64]:
        rates = np.minimum(
            self.max_rate,
            self.base_rate + self.position_effect * np.arange(n_items),
        )
        return np.repeat(rates[np.newaxis, :], len(abilities), axis=0)


@missingness_registry.register("position_dependent")
def create_position_dependent_missingness(
    base_rate: float = 0.01,
    position_effect: float = 0.002,
    max_rate: float = 0.2,
) -> PositionDependentMissingness:
    return PositionDependentMissingness(
        base_rate=base_rate,
        position_effect=position_effect,
        max_rate=max_rate,
    )


def get_missingness_model(
    model_name: str, params: dict[str, Any] | None = None
) -> MissingnessModel:
    """Get a missingness model by name.

    Args:
        model_name: Name of the model ("none", "mcar", "ability_dependent",
            "position_dependent").
        params: Model-specific parameters.

    Returns:
        Configured MissingnessModel instance.
    """
    if params is None:
        params = {}
    return missingness_registry.get_model(model_name, params)
