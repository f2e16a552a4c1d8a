"""
Item parameter representation for dichotomous logistic models.

Reported parameterization:
    P(X=1 | θ) = c + (1 - c) * sigmoid(a * (θ - b))

Optimization works on the slope/intercept form [a, d, g] with d = -a * b
and g = logit(c); only the entries that the model variant frees are part
of the optimizer vector.
"""

import math
from typing import Self

import numpy as np
from numpy.typing import ArrayLike, NDArray
from pydantic import BaseModel, ConfigDict, field_validator

from irt_analysis.core.utils import logit, sigmoid
from irt_analysis.irt.estimation.enums import ModelVariant
from irt_analysis.irt.estimation.gradients import (
    compute_derivatives,
    compute_information,
    compute_probabilities,
)


def _as_theta(theta: ArrayLike) -> tuple[NDArray[np.float64], tuple[int, ...]]:
    arr = np.asarray(theta, dtype=np.float64)
    return np.ascontiguousarray(arr.ravel()), arr.shape


class ItemParameters(BaseModel):
    """
    Parameters for one item.

    Attributes:
        item_id: Column index of the item in the response matrix.
        difficulty: Location b, the ability with P = (1 + c) / 2.
        discrimination: Slope a. Fixed at 1 under the 1PL model.
        guessing: Lower asymptote c in [0, 1). Fixed at 0 under 1PL/2PL.
    """

    model_config = ConfigDict(frozen=True)

    item_id: int
    difficulty: float
    discrimination: float = 1.0
    guessing: float = 0.0

    @field_validator("difficulty", "discrimination")
    @classmethod
    def _validate_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError(f"parameter must be finite, got {value}")
        return value

    @field_validator("guessing")
    @classmethod
    def _validate_guessing(cls, value: float) -> float:
        if not (0.0 <= value < 1.0):
            raise ValueError(f"guessing must be in [0, 1), got {value}")
        return value

    @property
    def intercept(self) -> float:
        """Intercept d = -a * b of the slope/intercept form."""
        return -self.discrimination * self.difficulty

    def compute_probabilities(self, theta: ArrayLike) -> NDArray[np.float64]:
        """
        Probability of a correct answer at the given abilities.

        Args:
            theta: Ability values, any shape.

        Returns:
            Probabilities with the same shape as theta.
        """
        flat, shape = _as_theta(theta)
        probs: NDArray[np.float64] = compute_probabilities(
            flat,
            float(self.discrimination),
            float(self.difficulty),
            float(self.guessing),
        )
        return probs.reshape(shape)

    def compute_derivatives(self, theta: ArrayLike) -> NDArray[np.float64]:
        """Slope of the characteristic curve, dP/dθ."""
        flat, shape = _as_theta(theta)
        result: NDArray[np.float64] = compute_derivatives(
            flat,
            float(self.discrimination),
            float(self.difficulty),
            float(self.guessing),
        )
        return result.reshape(shape)

    def compute_information(self, theta: ArrayLike) -> NDArray[np.float64]:
        """Item information [dP/dθ]^2 / [P (1 - P)]."""
        flat, shape = _as_theta(theta)
        result: NDArray[np.float64] = compute_information(
            flat,
            float(self.discrimination),
            float(self.difficulty),
            float(self.guessing),
        )
        return result.reshape(shape)

    def to_array(self, variant: ModelVariant) -> NDArray[np.float64]:
        """
        Flatten free parameters to 1D array for optimization.

        Layout: the entries of [a, d, logit(c)] that the variant frees.
        """
        full = np.array(
            [
                self.discrimination,
                self.intercept,
                float(logit(self.guessing)) if self.guessing > 0 else -np.inf,
            ],
            dtype=np.float64,
        )
        free: NDArray[np.float64] = full[variant.free_mask]
        return free

    @classmethod
    def from_array(
        cls,
        item_id: int,
        arr: NDArray[np.float64],
        variant: ModelVariant,
    ) -> Self:
        """
        Reconstruct parameters from a flattened array.

        Args:
            item_id: Item identifier.
            arr: 1D array of free parameters from to_array().
            variant: Model variant the array was built for.

        Returns:
            ItemParameters with fixed entries at their variant values.
        """
        values = iter(arr)
        slope = float(next(values)) if variant.free_discrimination else 1.0
        intercept = float(next(values))
        guessing = (
            float(sigmoid(next(values))) if variant.free_guessing else 0.0
        )
        return cls(
            item_id=item_id,
            difficulty=-intercept / slope,
            discrimination=slope,
            guessing=guessing,
        )

    @classmethod
    def from_slope_intercept(
        cls,
        item_id: int,
        slope: float,
        intercept: float,
        guessing: float = 0.0,
    ) -> Self:
        return cls(
            item_id=item_id,
            difficulty=-intercept / slope,
            discrimination=slope,
            guessing=guessing,
        )

    @classmethod
    def create_default(cls, item_id: int) -> Self:
        """Neutral parameters: a = 1, b = 0, c = 0."""
        return cls(item_id=item_id, difficulty=0.0)


def stack_parameters(
    item_parameters: tuple[ItemParameters, ...] | list[ItemParameters],
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Arrays (a, b, c), each of shape (n_items,)."""
    a = np.array([p.discrimination for p in item_parameters], np.float64)
    b = np.array([p.difficulty for p in item_parameters], np.float64)
    c = np.array([p.guessing for p in item_parameters], np.float64)
    return a, b, c


def response_probability_matrix(
    theta: ArrayLike,
    item_parameters: tuple[ItemParameters, ...] | list[ItemParameters],
) -> NDArray[np.float64]:
    """
    P(X=1 | θ) for every ability and item.

    Returns:
        Array of shape (n_theta, n_items).
    """
    flat, _ = _as_theta(theta)
    probs = np.empty((flat.shape[0], len(item_parameters)), np.float64)
    for k, params in enumerate(item_parameters):
        probs[:, k] = params.compute_probabilities(flat)
    return probs
