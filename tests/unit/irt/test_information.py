"""
Tests for item and test information curves.
"""

import numpy as np
import pytest

from irt_analysis.irt import information
from irt_analysis.irt.estimation.parameters import ItemParameters

ITEMS = [
    ItemParameters(item_id=0, difficulty=-1.0, discrimination=0.8),
    ItemParameters(item_id=1, difficulty=0.0, discrimination=1.5),
    ItemParameters(
        item_id=2, difficulty=1.0, discrimination=1.1, guessing=0.2
    ),
]


class TestThetaGrid:
    def test_values(self) -> None:
        grid = information.ThetaGrid(-2.0, 2.0, 5)

        np.testing.assert_allclose(grid.values, [-2, -1, 0, 1, 2])
        assert len(grid) == 5
        assert list(grid) == [-2.0, -1.0, 0.0, 1.0, 2.0]

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="n_points"):
            information.ThetaGrid(n_points=0)
        with pytest.raises(ValueError, match="stop"):
            information.ThetaGrid(start=1.0, stop=0.0)


class TestInformationFunctions:
    def test_test_information_is_sum_of_items(self) -> None:
        theta = np.linspace(-3, 3, 25)
        total = information.test_information(theta, ITEMS)
        summed = sum(information.item_information(theta, p) for p in ITEMS)

        np.testing.assert_allclose(total, summed)

    def test_item_subset(self) -> None:
        theta = np.array([0.0, 0.5])
        subset = information.test_information(theta, ITEMS, items=[1])

        np.testing.assert_allclose(
            subset, information.item_information(theta, ITEMS[1])
        )

    def test_bad_item_index(self) -> None:
        with pytest.raises(IndexError):
            information.test_information(0.0, ITEMS, items=[3])

    def test_information_non_negative(self) -> None:
        theta = np.linspace(-6, 6, 121)

        assert np.all(information.test_information(theta, ITEMS) >= 0)

    def test_standard_error_curve(self) -> None:
        grid = information.ThetaGrid(-1.0, 1.0, 11)
        theta, se = information.standard_error_curve(ITEMS, grid)

        np.testing.assert_allclose(
            se, 1 / np.sqrt(information.test_information(theta, ITEMS))
        )

    def test_standard_error_empty_item_set(self) -> None:
        _, se = information.standard_error_curve(ITEMS, items=[])

        assert np.all(np.isinf(se))


class TestCurves:
    def test_information_curve_restartable(self) -> None:
        curve = information.InformationCurve(
            ITEMS, information.ThetaGrid(-2, 2, 9)
        )

        first = list(curve)
        second = list(curve)

        assert len(curve) == 9
        assert first == second
        assert len(first) == 9

    def test_information_curve_matches_arrays(self) -> None:
        curve = information.InformationCurve(
            ITEMS, information.ThetaGrid(-2, 2, 9), items=[0, 2]
        )
        theta, values = curve.to_arrays()
        points = list(curve)

        np.testing.assert_allclose([t for t, _ in points], theta)
        np.testing.assert_allclose([v for _, v in points], values)
        assert curve.items == (0, 2)

    def test_item_curve_peaks_at_difficulty(self) -> None:
        curve = information.InformationCurve(
            ITEMS, information.ThetaGrid(-4, 4, 81), items=[1]
        )
        theta, values = curve.to_arrays()

        assert theta[np.argmax(values)] == pytest.approx(0.0)

    def test_characteristic_curve(self) -> None:
        curve = information.CharacteristicCurve(
            ITEMS[2], information.ThetaGrid(-10, 10, 3)
        )
        values = [p for _, p in curve]

        assert len(curve) == 3
        assert values[0] == pytest.approx(0.2, abs=1e-4)
        assert values[2] == pytest.approx(1.0, abs=1e-4)
        np.testing.assert_allclose(curve.to_arrays()[1], values)


class TestInformationInRange:
    def test_proportion_of_whole_range(self) -> None:
        result = information.information_in_range(ITEMS, -10.0, 10.0)

        assert result.proportion == pytest.approx(1.0)

    def test_two_pl_total_information_is_slope(self) -> None:
        """The 2PL information curve integrates to a over the real line."""
        result = information.information_in_range(
            ITEMS, -10.0, 10.0, items=[1]
        )

        assert result.information == pytest.approx(1.5, rel=1e-4)

    def test_halves_are_additive(self) -> None:
        low = information.information_in_range(ITEMS, -4.0, 0.0)
        high = information.information_in_range(ITEMS, 0.0, 4.0)
        whole = information.information_in_range(ITEMS, -4.0, 4.0)

        assert low.information + high.information == pytest.approx(
            whole.information
        )
        assert 0 < low.proportion < 1

    def test_symmetric_item_splits_in_half(self) -> None:
        result = information.information_in_range(ITEMS, -10.0, 0.0, items=[1])

        assert result.proportion == pytest.approx(0.5, rel=1e-6)

    def test_invalid_interval(self) -> None:
        with pytest.raises(ValueError, match="upper"):
            information.information_in_range(ITEMS, 1.0, 0.0)
