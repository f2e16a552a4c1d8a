"""
Orchestration layer for synthetic response data generation.

This module ties together abilities, item parameters, responses, and
missingness to generate complete response data.
"""

import logging
from pathlib import Path

from irt_analysis.core.data import write_response_table
from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.core.utils import get_rng
from irt_analysis.irt.sampling import sample_responses
from irt_analysis.synthetic_data.config import GenerationConfig
from irt_analysis.synthetic_data.data_models import GeneratedData
from irt_analysis.synthetic_data.missingness import get_missingness_model
from irt_analysis.synthetic_data.parameters import sample_item_parameters
from irt_analysis.synthetic_data.sampling import draw_sample

logger = logging.getLogger(__name__)


def generate_responses(config: GenerationConfig) -> GeneratedData:
    """
    Generate synthetic response data.

    This is the main entry point for the synthetic data generation pipeline.
    It orchestrates the full generation process:
        1. Sample respondent abilities
        2. Sample item parameters for the configured variant
        3. Generate responses from the logistic model
        4. Apply missingness

    Args:
        config: Complete generation configuration.

    Returns:
        GeneratedData containing the response matrix and generating values.
    """
    rng = get_rng(config.random_seed)

    # Step 1: Sample respondent abilities
    abilities = draw_sample(
        n=config.n_respondents,
        distribution_name=config.ability.distribution,
        distribution_params=config.ability.params,
        rng=rng,
    )

    # Step 2: Sample item parameters
    item_parameters = sample_item_parameters(config, rng)

    # Step 3: Generate responses
    raw_responses = sample_responses(abilities, item_parameters, rng)

    # Step 4: Apply missingness
    missingness = get_missingness_model(
        config.missing.model, dict(config.missing.params)
    )
    responses = missingness.apply(raw_responses, abilities, rng)

    generated = GeneratedData(
        responses=ResponseMatrix(responses=responses),
        abilities=abilities,
        item_parameters=item_parameters,
        config=config,
    )
    logger.info(
        f"Generated {config.n_respondents} x {config.n_items} "
        f"{config.variant} responses "
        f"({generated.actual_missing_rate:.1%} missing)"
    )
    return generated


def write_generated(data: GeneratedData, path: Path) -> None:
    """Write the response matrix in the whitespace-delimited text format."""
    path.parent.mkdir(parents=True, exist_ok=True)
    write_response_table(data.responses, path)
