"""
Data structures for synthetic response data generation.

This module defines typed data structures for the synthetic data module.
It avoids embedding generation logic - only contracts are defined here.
"""

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict

from irt_analysis.core.data_models import ResponseMatrix
from irt_analysis.irt.estimation.parameters import ItemParameters
from irt_analysis.synthetic_data.config import GenerationConfig


class GeneratedData(BaseModel):
    """
    Complete output from synthetic data generation.

    Contains the response matrix plus the true abilities and item
    parameters it was generated from.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # Primary output
    responses: ResponseMatrix

    # Generating values (for parameter recovery checks)
    abilities: NDArray[np.float64]
    item_parameters: list[ItemParameters]

    # Generation metadata
    config: GenerationConfig

    @property
    def actual_missing_rate(self) -> float:
        """Fraction of cells that are missing."""
        return float(np.mean(self.responses.missing_mask))
