"""Single entry point for the Gerber matrix computation."""

from __future__ import annotations

import time
from typing import Optional

import numpy as np

from reporting.logging_utils import get_logger

from .errors import InvalidDimensionError, InvalidParameterError
from .matrix_builder import build_matrix
from .pair_classifier import UNDEFINED_POLICIES, UndefinedPolicy
from .threshold_estimator import estimate_thresholds
from .window_selector import LookbackSpec, select_window, slice_window

logger = get_logger(__name__)


def _as_return_matrix(returns) -> np.ndarray:
    try:
        matrix = np.array(returns, dtype=float, order="F", copy=True)
    except (TypeError, ValueError) as exc:
        raise InvalidDimensionError(f"returns must be a numeric 2D matrix: {exc}") from exc
    if matrix.ndim != 2:
        raise InvalidDimensionError(f"returns must be 2D (n_periods, n_assets), got {matrix.ndim}D")
    n_periods, n_assets = matrix.shape
    if n_periods < 2:
        raise InvalidDimensionError(f"need at least 2 periods, got {n_periods}")
    if n_assets < 1:
        raise InvalidDimensionError("need at least 1 asset")
    return matrix


def _as_lookback_length(lookback_length) -> int:
    if isinstance(lookback_length, bool):
        raise InvalidParameterError(f"lookback length must be an integer, got {lookback_length!r}")
    try:
        length = int(lookback_length)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidParameterError(f"lookback length must be an integer, got {lookback_length!r}") from exc
    if length != lookback_length:
        raise InvalidParameterError(f"lookback length must be an integer, got {lookback_length!r}")
    if length < 0:
        raise InvalidParameterError(f"lookback length must be non-negative, got {lookback_length}")
    return length


def compute_gerber_matrix(
    returns,
    lookback_length: int = 0,
    threshold: float = 0.5,
    lookback_from_start: bool = False,
    *,
    num_threads: Optional[int] = None,
    undefined: UndefinedPolicy = "raise",
    show_progress: bool = False,
) -> np.ndarray:
    """Compute the Gerber statistic matrix of a ``(n_periods, n_assets)`` return matrix.

    Args:
        returns: Return matrix, NaN marks an absent observation.
        lookback_length: Rows used to estimate per-asset volatility, 0 for the full history.
        threshold: Multiplier applied to each asset's standard deviation.
        lookback_from_start: Take the lookback rows from the start instead of the end.
        num_threads: Worker threads, ``None`` for the available CPU count.
        undefined: ``"raise"`` or ``"zero"`` for pairs with no concordant or discordant period.
        show_progress: Display a tqdm progress bar over matrix rows.

    Returns:
        np.ndarray: Symmetric ``(n_assets, n_assets)`` matrix with unit diagonal.
    """
    if not np.isfinite(threshold) or threshold < 0:
        raise InvalidParameterError(f"threshold multiplier must be finite and non-negative, got {threshold}")
    lookback_length = _as_lookback_length(lookback_length)
    if undefined not in UNDEFINED_POLICIES:
        raise InvalidParameterError(f"undefined policy must be one of {UNDEFINED_POLICIES}, got {undefined!r}")

    started = time.perf_counter()
    data = _as_return_matrix(returns)
    spec = LookbackSpec(length=lookback_length, from_start=bool(lookback_from_start))
    begin, end = select_window(data.shape[0], spec)
    logger.debug("Threshold window rows [%d, %d) of %d", begin, end, data.shape[0])

    thresholds = estimate_thresholds(slice_window(data, spec), threshold)
    logger.debug("Thresholds: %s", np.array2string(thresholds, precision=6))

    matrix = build_matrix(
        data,
        thresholds,
        num_threads=num_threads,
        undefined=undefined,
        show_progress=show_progress,
    )
    logger.info(
        "Gerber matrix %s computed in %.3fs",
        matrix.shape,
        time.perf_counter() - started,
        context={"periods": data.shape[0], "assets": data.shape[1]},
    )
    return matrix
