"""Gerber matrix construction over all asset pairs."""

from __future__ import annotations

import os
from concurrent import futures
from typing import Callable, Dict, Mapping, Optional, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from reporting.logging_utils import get_logger

from .errors import InvalidParameterError
from .pair_classifier import UNDEFINED_POLICIES, UndefinedPolicy, classify_pair

logger = get_logger(__name__)


def resolve_num_threads(num_threads: Optional[int]) -> int:
    if num_threads is None:
        return max(1, os.cpu_count() or 1)
    if int(num_threads) < 1:
        raise InvalidParameterError(f"num_threads must be at least 1, got {num_threads}")
    return int(num_threads)


def _fill_row(
    matrix: np.ndarray,
    returns: np.ndarray,
    thresholds: np.ndarray,
    i: int,
    undefined: UndefinedPolicy,
) -> None:
    # Row i owns cells (i, j) and (j, i) for every j < i.
    for j in range(i):
        value = classify_pair(returns, i, j, thresholds, undefined)
        matrix[i, j] = value
        matrix[j, i] = value


def build_matrix(
    returns: np.ndarray,
    thresholds: np.ndarray,
    num_threads: Optional[int] = None,
    undefined: UndefinedPolicy = "raise",
    show_progress: bool = False,
) -> np.ndarray:
    """Fill the symmetric Gerber matrix with unit diagonal.

    Each lower-triangle row is an independent unit of work submitted to a
    thread pool. Workers read the shared ``returns`` and ``thresholds`` and
    write only the cells of their own row and its mirror, so the result does
    not depend on the number of threads. If any row fails, the error of the
    lowest failing row is raised once every worker has finished and no matrix
    is returned.
    """
    if undefined not in UNDEFINED_POLICIES:
        raise InvalidParameterError(f"undefined policy must be one of {UNDEFINED_POLICIES}, got {undefined!r}")

    n_assets = returns.shape[1]
    workers = resolve_num_threads(num_threads)
    matrix = np.eye(n_assets, dtype=float)
    rows = range(n_assets - 1, 0, -1)  # longest rows first

    if workers == 1 or n_assets < 3:
        logger.debug("Building %d x %d Gerber matrix inline", n_assets, n_assets)
        for i in tqdm(rows, desc="Computing Gerber rows", unit="row", disable=not show_progress):
            _fill_row(matrix, returns, thresholds, i, undefined)
        return matrix

    logger.debug(
        "Building %d x %d Gerber matrix on %d threads",
        n_assets,
        n_assets,
        workers,
        context={"threads": workers},
    )
    with futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gerber") as executor:
        row_futures: Dict[int, futures.Future] = {
            i: executor.submit(_fill_row, matrix, returns, thresholds, i, undefined) for i in rows
        }
        for _ in tqdm(
            futures.as_completed(row_futures.values()),
            total=len(row_futures),
            desc="Computing Gerber rows",
            unit="row",
            disable=not show_progress,
        ):
            pass

    for i in sorted(row_futures):
        exc = row_futures[i].exception()
        if exc is not None:
            logger.error("Gerber row %d failed: %s", i, exc)
            raise exc
    return matrix


def build_matrices_batch(
    windows: Mapping[Tuple[pd.Timestamp, pd.Timestamp], pd.DataFrame],
    matrix_fn: Callable[[pd.DataFrame], pd.DataFrame],
) -> dict[Tuple[pd.Timestamp, pd.Timestamp], pd.DataFrame]:
    """Build one labelled matrix per window with ``matrix_fn``."""
    results: dict[Tuple[pd.Timestamp, pd.Timestamp], pd.DataFrame] = {}
    for window_key, window_returns in windows.items():
        results[window_key] = matrix_fn(window_returns)
    return results
