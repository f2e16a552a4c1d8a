"""
Sampling from statistical distributions

This module contains utilities for sampling abilities and item parameters.
Any scipy.stats distribution can be registered, plus mixture distributions.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray
from scipy import stats

from irt_analysis.core.utils import get_rng


class FrozenRV(Protocol):
    def rvs(
        self, size: Any, random_state: Any
    ) -> NDArray[np.floating[Any]]: ...


class Distribution(ABC):
    """Abstract base class for a statistical distribution."""

    @abstractmethod
    def sample(self, n: int, rng: Generator) -> NDArray[np.float64]:
        """
        Sample n values.

        Args:
            n: Number of samples.
            rng: Random number generator.

        Returns:
            Array of shape (n,) with sampled values.
        """
        ...


@dataclass
class ScipyDistribution(Distribution):
    """
    Wrapper for any scipy.stats distribution.

    Examples:
        >>> dist = ScipyDistribution(stats.norm(loc=0, scale=1))
        >>> dist = ScipyDistribution(stats.beta(a=5, b=17))
    """

    dist: FrozenRV

    def sample(self, n: int, rng: Generator) -> NDArray[np.float64]:
        samples: NDArray[np.float64] = self.dist.rvs(
            size=n, random_state=rng
        ).astype(np.float64)
        return samples


@dataclass
class MixtureDistribution(Distribution):
    """
    Mixture of multiple distributions with specified weights.

    Examples:
        >>> # Bimodal abilities: 60% low, 40% high
        >>> dist = MixtureDistribution(
        ...     components=[
        ...         ScipyDistribution(stats.norm(loc=-1, scale=0.5)),
        ...         ScipyDistribution(stats.norm(loc=1.5, scale=0.5)),
        ...     ],
        ...     weights=[0.6, 0.4],
        ... )
    """

    components: list[Distribution]
    weights: list[float]

    def __post_init__(self) -> None:
        if len(self.components) != len(self.weights):
            raise ValueError(
                "Number of components must match number of weights"
            )
        if abs(sum(self.weights) - 1.0) > 1e-6:
            raise ValueError(f"Weights must sum to 1, got {sum(self.weights)}")
        if any(w < 0 for w in self.weights):
            raise ValueError("Weights must be non-negative")

    def sample(self, n: int, rng: Generator) -> NDArray[np.float64]:
        # Determine component assignments
        assignments = rng.choice(len(self.components), size=n, p=self.weights)

        values = np.empty(n, dtype=np.float64)
        for k, component in enumerate(self.components):
            mask = assignments == k
            count = int(mask.sum())
            if count > 0:
                values[mask] = component.sample(count, rng)

        return values


####################################################################
# Registry
####################################################################


DistributionGenerator = Callable[..., Distribution]


class SamplerRegistry:
    def __init__(self) -> None:
        self._samplers: dict[str, DistributionGenerator] = {}

    def register(
        self, name: str
    ) -> Callable[[DistributionGenerator], DistributionGenerator]:
        def decorator(
            func: DistributionGenerator,
        ) -> DistributionGenerator:
            self._samplers[name] = func
            return func

        return decorator

    @property
    def names(self) -> list[str]:
        return sorted(self._samplers)

    def get_sampler(
        self, name: str, params: dict[str, float | None]
    ) -> Distribution:
        if name not in self._samplers:
            raise ValueError(
                f"Sampler {name} not registered. Available: {self.names}"
            )
        return self._samplers[name](**params)


registry = SamplerRegistry()


@registry.register("normal")
def normal(*, mean: float = 0.0, std: float = 1.0) -> ScipyDistribution:
    """Normal distribution."""
    return ScipyDistribution(stats.norm(loc=mean, scale=std))


@registry.register("bimodal")
def bimodal(
    *,
    loc1: float,
    scale1: float,
    loc2: float,
    scale2: float,
    weight1: float,
) -> Distribution:
    """
    Bimodal distribution (mixture of two normals).

    Args:
        loc1: Mean of first component.
        scale1: Std dev of first component.
        loc2: Mean of second component.
        scale2: Std dev of second component.
        weight1: Weight of first component (weight2 = 1 - weight1).
    """
    return MixtureDistribution(
        components=[
            ScipyDistribution(stats.norm(loc=loc1, scale=scale1)),
            ScipyDistribution(stats.norm(loc=loc2, scale=scale2)),
        ],
        weights=[weight1, 1.0 - weight1],
    )


@registry.register("uniform")
def uniform(*, low: float = -1.0, high: float = 1.0) -> ScipyDistribution:
    """Uniform distribution."""
    return ScipyDistribution(stats.uniform(loc=low, scale=high - low))


@registry.register("truncated_normal")
def truncated_normal(
    *,
    mean: float = 0.0,
    std: float = 1.0,
    lower: float | None = None,
    upper: float | None = None,
) -> ScipyDistribution:
    """
    Truncated normal distribution.

    Args:
        mean: Mean of the underlying normal distribution.
        std: Standard deviation of the underlying normal distribution.
        lower: Lower bound (None = unbounded).
        upper: Upper bound (None = unbounded).
    """
    # Convert bounds to standardized form for scipy.stats.truncnorm
    a_std = (lower - mean) / std if lower is not None else -np.inf
    b_std = (upper - mean) / std if upper is not None else np.inf
    return ScipyDistribution(
        stats.truncnorm(a_std, b_std, loc=mean, scale=std)
    )


@registry.register("log_normal")
def log_normal(*, mean: float, std: float) -> ScipyDistribution:
    """
    Log-normal distribution parameterized by mean and std of the log-normal.

    Args:
        mean: Mean of the log-normal distribution (not the underlying normal).
        std: Standard deviation of the log-normal distribution.
    """
    # Convert mean/std of log-normal to underlying normal params
    variance = std**2
    sigma = np.sqrt(np.log(1 + variance / (mean**2)))
    mu = np.log(mean) - sigma**2 / 2
    return ScipyDistribution(stats.lognorm(s=sigma, scale=np.exp(mu)))


@registry.register("beta")
def beta(*, a: float, b: float) -> ScipyDistribution:
    """Beta distribution on (0, 1), used for guessing parameters."""
    return ScipyDistribution(stats.beta(a=a, b=b))


def draw_sample(
    n: int,
    distribution_name: str = "normal",
    distribution_params: dict[str, float | None] | None = None,
    rng: Generator | None = None,
) -> NDArray[np.float64]:
    """
    Sample values from a distribution.

    Args:
        n: Number of values.
        distribution_name: Name of the distribution to sample from.
        distribution_params: Parameter values to pass to the distribution sampler.
        rng: Random number generator.

    Returns:
        Array of shape (n,) with sampled values.
    """
    if rng is None:
        rng = get_rng()

    if distribution_params is None:
        distribution_params = {}

    distribution = registry.get_sampler(distribution_name, distribution_params)

    return distribution.sample(n, rng)
