from enum import Enum

import numpy as np
from numpy.typing import NDArray


class ConvergenceStatus(str, Enum):
    CONVERGED = "converged"
    MAX_ITERATIONS = "max_iterations"
    FAILED = "failed"


class ModelVariant(str, Enum):
    """
    Nested logistic models, distinguished by which item parameters are free.

    Internally every item has the slope/intercept vector [a, d, g] with
    logit P*(theta) = a * theta + d and guessing c = sigmoid(g).

        1PL: a fixed at 1, c fixed at 0, d free
        2PL: a and d free, c fixed at 0
        3PL: a, d and g free
    """

    ONE_PL = "1PL"
    TWO_PL = "2PL"
    THREE_PL = "3PL"

    @property
    def free_discrimination(self) -> bool:
        return self is not ModelVariant.ONE_PL

    @property
    def free_guessing(self) -> bool:
        return self is ModelVariant.THREE_PL

    @property
    def free_mask(self) -> NDArray[np.bool_]:
        """Which of [a, d, g] are estimated, shape (3,)."""
        return np.array(
            [self.free_discrimination, True, self.free_guessing], dtype=bool
        )

    @property
    def n_item_parameters(self) -> int:
        """Number of free parameters per item."""
        return int(self.free_mask.sum())

    def nests(self, other: "ModelVariant") -> bool:
        """True if this variant is a restriction of ``other``."""
        return self.n_item_parameters < other.n_item_parameters


class ScoringMethod(str, Enum):
    EAP = "eap"
    MAP = "map"
    ML = "ml"
