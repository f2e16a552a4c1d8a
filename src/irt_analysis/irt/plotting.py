"""
Plotting utilities for fitted IRT models.
"""

from collections.abc import Sequence

from matplotlib.figure import Figure

from irt_analysis.irt.estimation.data_models import IRTEstimationResult
from irt_analysis.irt.information import (
    CharacteristicCurve,
    InformationCurve,
    ThetaGrid,
    standard_error_curve,
)


def _item_indices(
    model: IRTEstimationResult, items: Sequence[int] | None
) -> list[int]:
    return list(range(model.n_items)) if items is None else list(items)


def plot_characteristic_curves(
    model: IRTEstimationResult,
    items: Sequence[int] | None = None,
    grid: ThetaGrid | None = None,
) -> Figure:
    """
    Item characteristic curves, one line per item.

    Args:
        model: Fitted model.
        items: Item indices to draw. None draws all items.
        grid: Ability grid.

    Returns:
        matplotlib Figure.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(8, 6))
    for k in _item_indices(model, items):
        theta, probs = CharacteristicCurve(
            model.item_parameters[k], grid
        ).to_arrays()
        ax.plot(theta, probs, label=f"Item {k + 1}")

    ax.set_xlabel("Ability")
    ax.set_ylabel("Probability")
    ax.set_ylim(0.0, 1.0)
    ax.set_title(f"Item Characteristic Curves ({model.variant.value})")
    ax.legend(fontsize=8, ncol=2)

    fig.tight_layout()
    return fig


def plot_item_information(
    model: IRTEstimationResult,
    items: Sequence[int] | None = None,
    grid: ThetaGrid | None = None,
) -> Figure:
    """Item information curves, one line per item."""
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(8, 6))
    for k in _item_indices(model, items):
        theta, information = InformationCurve(
            model.item_parameters, grid, items=[k]
        ).to_arrays()
        ax.plot(theta, information, label=f"Item {k + 1}")

    ax.set_xlabel("Ability")
    ax.set_ylabel("Information")
    ax.set_title(f"Item Information Curves ({model.variant.value})")
    ax.legend(fontsize=8, ncol=2)

    fig.tight_layout()
    return fig


def plot_test_information(
    model: IRTEstimationResult,
    grid: ThetaGrid | None = None,
) -> Figure:
    """
    Test information curve with the standard error curve on a second axis.
    """
    import matplotlib.pyplot as plt

    theta, information = InformationCurve(
        model.item_parameters, grid
    ).to_arrays()
    _, se = standard_error_curve(model.item_parameters, grid)

    fig, ax = plt.subplots(figsize=(8, 6))
    ax.plot(theta, information, color="tab:blue", label="Information")
    ax.set_xlabel("Ability")
    ax.set_ylabel("Information", color="tab:blue")

    se_ax = ax.twinx()
    se_ax.plot(theta, se, color="tab:red", linestyle="--", label="SE")
    se_ax.set_ylabel("Standard error", color="tab:red")

    ax.set_title(f"Test Information ({model.variant.value})")

    fig.tight_layout()
    return fig
