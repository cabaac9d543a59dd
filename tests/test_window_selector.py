import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from models.gerber import InvalidParameterError, LookbackSpec, select_window, slice_window


@pytest.mark.parametrize("length", [0, 10, 15])
def test_full_history_when_length_zero_or_beyond_data(length):
    assert select_window(10, LookbackSpec(length=length)) == (0, 10)
    assert select_window(10, LookbackSpec(length=length, from_start=True)) == (0, 10)


def test_window_taken_from_end_by_default():
    assert select_window(10, LookbackSpec(length=3)) == (7, 10)


def test_window_taken_from_start():
    assert select_window(10, LookbackSpec(length=3, from_start=True)) == (0, 3)


def test_one_short_of_full_history_is_not_clamped_in_either_direction():
    assert select_window(10, LookbackSpec(length=9)) == (1, 10)
    assert select_window(10, LookbackSpec(length=9, from_start=True)) == (0, 9)


def test_negative_length_rejected():
    with pytest.raises(InvalidParameterError):
        LookbackSpec(length=-1)


def test_slice_window_returns_independent_copy():
    returns = np.arange(20, dtype=float).reshape(10, 2)
    window = slice_window(returns, LookbackSpec(length=4))

    np.testing.assert_array_equal(window, returns[6:])
    assert not np.shares_memory(window, returns)
    window[0, 0] = -999.0
    assert returns[6, 0] == 12.0
