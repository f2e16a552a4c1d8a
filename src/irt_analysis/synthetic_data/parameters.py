"""
Item parameter sampling and config loading.

This module provides:
- Sampling of item parameters from configured marginal distributions
- Config loading from YAML files using OmegaConf
"""

from pathlib import Path

import numpy as np
from numpy.random import Generator
from omegaconf import OmegaConf

from irt_analysis.irt.estimation.parameters import ItemParameters
from irt_analysis.synthetic_data.config import (
    DistributionConfig,
    GenerationConfig,
)
from irt_analysis.synthetic_data.sampling import Distribution, registry

# Sampled guessing values are kept strictly below this
MAX_GUESSING = 0.5


def create_distribution(config: DistributionConfig) -> Distribution:
    """Create a Distribution from configuration using the sampler registry.

    Raises:
        ValueError: If distribution type is unknown
    """
    return registry.get_sampler(
        name=config.distribution,
        params=config.params,
    )


def sample_item_parameters(
    config: GenerationConfig, rng: Generator
) -> list[ItemParameters]:
    """Sample one ItemParameters per item for the configured variant.

    Parameters fixed by the variant take their fixed values: a = 1 under
    1PL, c = 0 under 1PL and 2PL.

    Args:
        config: Generation configuration.
        rng: Random number generator.

    Returns:
        List of ItemParameters of length config.n_items.
    """
    variant = config.model_variant
    n_items = config.n_items
    item_config = config.item_parameters

    difficulty = create_distribution(item_config.difficulty).sample(n_items, rng)

    if variant.free_discrimination:
        discrimination = create_distribution(item_config.discrimination).sample(
            n_items, rng
        )
        if np.any(discrimination <= 0):
            raise ValueError(
                "discrimination distribution produced non-positive values"
            )
    else:
        discrimination = np.ones(n_items, dtype=np.float64)

    if variant.free_guessing:
        guessing = np.clip(
            create_distribution(item_config.guessing).sample(n_items, rng),
            0.0,
            MAX_GUESSING,
        )
    else:
        guessing = np.zeros(n_items, dtype=np.float64)

    return [
        ItemParameters(
            item_id=k,
            difficulty=float(difficulty[k]),
            discrimination=float(discrimination[k]),
            guessing=float(guessing[k]),
        )
        for k in range(n_items)
    ]


def load_config(yaml_path: Path) -> GenerationConfig:
    """Load and validate parameters from YAML.

    Args:
        yaml_path: Path to YAML config file

    Returns:
        Validated GenerationConfig

    Raises:
        FileNotFoundError: If yaml_path doesn't exist
    """
    # Create schema from dataclass
    schema = OmegaConf.structured(GenerationConfig)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    user_config = OmegaConf.load(yaml_path)
    config = OmegaConf.merge(schema, user_config)

    # Convert to typed dataclass
    result = OmegaConf.to_object(config)
    assert isinstance(result, GenerationConfig)

    return result
