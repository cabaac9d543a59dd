import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from models.gerber import DegenerateWindowError, InvalidParameterError, estimate_thresholds


def test_thresholds_use_bessel_corrected_sd():
    window = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])

    thresholds = estimate_thresholds(window, threshold=0.5)

    np.testing.assert_allclose(thresholds, 0.5 * np.std(window, axis=0, ddof=1))
    np.testing.assert_allclose(thresholds, [1.0, 1.0])


def test_absent_values_are_ignored():
    window = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, np.nan]])

    thresholds = estimate_thresholds(window, threshold=1.0)

    np.testing.assert_allclose(thresholds, [2.0, np.sqrt(2.0)])


def test_zero_multiplier_gives_zero_thresholds():
    rng = np.random.default_rng(3)
    thresholds = estimate_thresholds(rng.normal(size=(20, 4)), threshold=0.0)

    np.testing.assert_array_equal(thresholds, np.zeros(4))


def test_degenerate_column_reported():
    window = np.array([[1.0, 2.0, np.nan], [3.0, np.nan, np.nan], [5.0, np.nan, 1.0]])

    with pytest.raises(DegenerateWindowError) as excinfo:
        estimate_thresholds(window)

    assert excinfo.value.columns == [1, 2]


def test_single_row_window_is_degenerate():
    with pytest.raises(DegenerateWindowError):
        estimate_thresholds(np.array([[1.0, 2.0]]))


def test_negative_multiplier_rejected():
    with pytest.raises(InvalidParameterError):
        estimate_thresholds(np.ones((3, 2)), threshold=-0.5)


@pytest.mark.parametrize("threshold", [np.nan, np.inf])
def test_non_finite_multiplier_rejected(threshold):
    with pytest.raises(InvalidParameterError):
        estimate_thresholds(np.ones((3, 2)), threshold=threshold)


def test_infinite_entry_reported_as_degenerate_column():
    window = np.array([[1.0, 2.0, 0.5], [3.0, np.inf, -0.5], [5.0, 6.0, 0.0]])

    with pytest.raises(DegenerateWindowError) as excinfo:
        estimate_thresholds(window)

    assert excinfo.value.columns == [1]
