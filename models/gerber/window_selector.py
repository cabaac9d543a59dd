"""Lookback window selection for threshold estimation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import InvalidParameterError


@dataclass(frozen=True)
class LookbackSpec:
    """Lookback length (0 = full history) and the side it is taken from."""

    length: int = 0
    from_start: bool = False

    def __post_init__(self):
        if int(self.length) < 0:
            raise InvalidParameterError(f"lookback length must be non-negative, got {self.length}")


def select_window(n_periods: int, spec: LookbackSpec) -> Tuple[int, int]:
    """Return the ``[begin, end)`` row range used for standard-deviation estimation.

    A length of zero, or one that reaches the full history, selects every row
    regardless of ``from_start``.
    """
    length = int(spec.length)
    if length <= 0 or length >= n_periods:
        return 0, n_periods
    if spec.from_start:
        return 0, length
    return n_periods - length, n_periods


def slice_window(returns: np.ndarray, spec: LookbackSpec) -> np.ndarray:
    begin, end = select_window(returns.shape[0], spec)
    # Owned copy; later stages must never see the caller's buffer through it.
    return np.array(returns[begin:end], dtype=float, order="F", copy=True)
