"""Helpers for using a Gerber matrix as a covariance proxy."""

from __future__ import annotations

import numpy as np


def gerber_covariance(corr: np.ndarray, sd: np.ndarray) -> np.ndarray:
    """Scale a Gerber matrix into a covariance: ``corr[i, j] * sd[i] * sd[j]``."""
    corr = np.asarray(corr, dtype=float)
    sd = np.asarray(sd, dtype=float).reshape(-1)
    if corr.ndim != 2 or corr.shape[0] != corr.shape[1]:
        raise ValueError("corr must be a square matrix")
    if sd.shape[0] != corr.shape[0]:
        raise ValueError(f"sd has {sd.shape[0]} entries, expected {corr.shape[0]}")
    return corr * np.outer(sd, sd)


def is_psd(matrix: np.ndarray, tol: float = 1e-6) -> bool:
    """True when every eigenvalue of the symmetric ``matrix`` is above ``-tol``."""
    eigenvalues = np.linalg.eigvalsh(np.asarray(matrix, dtype=float))
    return bool(np.all(eigenvalues > -tol))
