"""
Item and test information curves.

Item information for the logistic models:
    I(θ) = [dP/dθ]^2 / [P (1 - P)]

Test information is the sum over items; the conditional standard error of
an ability estimate is 1 / sqrt(I(θ)).

Curves are lazy sequences over a ThetaGrid: every iteration starts a fresh
generator and values are computed point by point.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import integrate

from irt_analysis.irt.estimation.parameters import ItemParameters


@dataclass(frozen=True)
class ThetaGrid:
    """
    Evenly spaced ability values, endpoints included.

    Attributes:
        start: First grid value.
        stop: Last grid value.
        n_points: Number of grid values.
    """

    start: float = -4.0
    stop: float = 4.0
    n_points: int = 101

    def __post_init__(self) -> None:
        if self.n_points < 1:
            raise ValueError(f"n_points must be >= 1, got {self.n_points}")
        if self.stop < self.start:
            raise ValueError(
                f"stop ({self.stop}) must not be below start ({self.start})"
            )

    @property
    def values(self) -> NDArray[np.float64]:
        return np.linspace(self.start, self.stop, self.n_points)

    def __len__(self) -> int:
        return self.n_points

    def __iter__(self) -> Iterator[float]:
        for value in self.values:
            yield float(value)


def _select_items(
    item_parameters: Sequence[ItemParameters],
    items: Sequence[int] | None,
) -> list[ItemParameters]:
    if items is None:
        return list(item_parameters)
    n_items = len(item_parameters)
    for k in items:
        if not 0 <= k < n_items:
            raise IndexError(f"item index {k} out of range for {n_items} items")
    return [item_parameters[k] for k in items]


def item_information(
    theta: ArrayLike, params: ItemParameters
) -> NDArray[np.float64]:
    """Information of one item at the given abilities (shape of theta)."""
    return params.compute_information(theta)


def test_information(
    theta: ArrayLike,
    item_parameters: Sequence[ItemParameters],
    items: Sequence[int] | None = None,
) -> NDArray[np.float64]:
    """
    Sum of item informations at the given abilities.

    Args:
        theta: Ability values, any shape.
        item_parameters: Parameters of all items.
        items: Indices of the items to include. None means all.

    Returns:
        Information values with the shape of theta.
    """
    arr = np.asarray(theta, dtype=np.float64)
    total = np.zeros(arr.shape, dtype=np.float64)
    for params in _select_items(item_parameters, items):
        total += params.compute_information(arr)
    return total


def standard_error_curve(
    item_parameters: Sequence[ItemParameters],
    grid: ThetaGrid | None = None,
    items: Sequence[int] | None = None,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Conditional standard error of measurement, 1 / sqrt(I(θ)).

    Returns:
        Tuple (theta, se). Points with zero information get inf.
    """
    theta = (grid or ThetaGrid()).values
    information = test_information(theta, item_parameters, items)
    with np.errstate(divide="ignore"):
        se = 1.0 / np.sqrt(information)
    return theta, se


class InformationCurve:
    """
    Lazy (theta, information) sequence for a set of items.

    With a single item index this is the item information curve; with
    items=None it is the test information curve.
    """

    def __init__(
        self,
        item_parameters: Sequence[ItemParameters],
        grid: ThetaGrid | None = None,
        items: Sequence[int] | None = None,
    ):
        self.grid = grid or ThetaGrid()
        self.items = None if items is None else tuple(items)
        self._item_parameters = _select_items(item_parameters, items)

    def __len__(self) -> int:
        return len(self.grid)

    def __iter__(self) -> Iterator[tuple[float, float]]:
        for theta in self.grid:
            information = sum(
                float(params.compute_information(theta))
                for params in self._item_parameters
            )
            yield theta, information

    def to_arrays(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Materialize the curve as (theta, information) arrays."""
        theta = self.grid.values
        information = np.zeros_like(theta)
        for params in self._item_parameters:
            information += params.compute_information(theta)
        return theta, information


class CharacteristicCurve:
    """Lazy (theta, P(correct)) sequence for one item."""

    def __init__(
        self,
        params: ItemParameters,
        grid: ThetaGrid | None = None,
    ):
        self.params = params
        self.grid = grid or ThetaGrid()

    def __len__(self) -> int:
        return len(self.grid)

    def __iter__(self) -> Iterator[tuple[float, float]]:
        for theta in self.grid:
            yield theta, float(self.params.compute_probabilities(theta))

    def to_arrays(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        theta = self.grid.values
        return theta, self.params.compute_probabilities(theta)


@dataclass(frozen=True)
class InformationInRange:
    """
    Information captured in an ability interval.

    Attributes:
        lower: Lower end of the interval.
        upper: Upper end of the interval.
        information: Area under the information curve in the interval.
        total_information: Area over the whole ability range.
        proportion: information / total_information.
    """

    lower: float
    upper: float
    information: float
    total_information: float

    @property
    def proportion(self) -> float:
        if self.total_information <= 0:
            return float("nan")
        return self.information / self.total_information


def information_in_range(
    item_parameters: Sequence[ItemParameters],
    lower: float,
    upper: float,
    items: Sequence[int] | None = None,
    total_range: tuple[float, float] = (-10.0, 10.0),
) -> InformationInRange:
    """
    Integrate the information curve over [lower, upper].

    Args:
        item_parameters: Parameters of all items.
        lower: Lower end of the interval.
        upper: Upper end of the interval.
        items: Item indices to include. None means all items.
        total_range: Interval treated as the whole ability range.

    Returns:
        InformationInRange with the area and its share of the total.
    """
    if upper < lower:
        raise ValueError(f"upper ({upper}) must not be below lower ({lower})")

    selected = _select_items(item_parameters, items)

    def curve(theta: float) -> float:
        return sum(float(p.compute_information(theta)) for p in selected)

    def area(a: float, b: float) -> float:
        # Peaks sit near the difficulties
        breakpoints = [
            p.difficulty for p in selected if a < p.difficulty < b
        ]
        value, _ = integrate.quad(
            curve, a, b, points=breakpoints or None, limit=200
        )
        return float(value)

    return InformationInRange(
        lower=lower,
        upper=upper,
        information=area(lower, upper),
        total_information=area(*total_range),
    )
