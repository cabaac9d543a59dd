"""Per-asset volatility thresholds."""

from __future__ import annotations

import numpy as np

from .errors import DegenerateWindowError, InvalidParameterError


def estimate_thresholds(window: np.ndarray, threshold: float = 0.5) -> np.ndarray:
    """Return ``threshold * sd`` for every column of ``window``.

    ``sd`` is the Bessel-corrected sample standard deviation over the present
    (non-NaN) entries of each column. Infinite entries make ``sd`` undefined
    and are reported like a degenerate window.
    """
    if not np.isfinite(threshold) or threshold < 0:
        raise InvalidParameterError(f"threshold multiplier must be finite and non-negative, got {threshold}")
    if window.ndim != 2:
        raise ValueError("window must be a 2D array (n_periods, n_assets)")

    present = ~np.isnan(window)
    counts = present.sum(axis=0)
    degenerate = np.flatnonzero(counts <= 1)
    if degenerate.size:
        raise DegenerateWindowError(degenerate.tolist())

    infinite = np.flatnonzero(np.isinf(window).any(axis=0))
    if infinite.size:
        raise DegenerateWindowError(
            infinite.tolist(),
            f"standard deviation undefined for columns {infinite.tolist()}: "
            "lookback window contains infinite returns",
        )

    filled = np.where(present, window, 0.0)
    means = filled.sum(axis=0) / counts
    deviations = np.where(present, window - means, 0.0)
    sd = np.sqrt((deviations ** 2).sum(axis=0) / (counts - 1))
    overflow = np.flatnonzero(~np.isfinite(sd))
    if overflow.size:
        raise DegenerateWindowError(overflow.tolist(), f"standard deviation overflows for columns {overflow.tolist()}")
    return float(threshold) * sd
