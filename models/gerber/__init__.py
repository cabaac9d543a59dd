"""Gerber statistic engine modules."""

from .errors import (  # noqa: F401
    DegenerateWindowError,
    GerberError,
    InvalidDimensionError,
    InvalidParameterError,
    UndefinedPairStatisticError,
)
from .window_selector import LookbackSpec, select_window, slice_window  # noqa: F401
from .threshold_estimator import estimate_thresholds  # noqa: F401
from .pair_classifier import PairCounts, classify_pair, count_pair  # noqa: F401
from .matrix_builder import build_matrix, build_matrices_batch  # noqa: F401
from .engine import compute_gerber_matrix  # noqa: F401
from .covariance import gerber_covariance, is_psd  # noqa: F401
from .config import BASE_CONFIG, load_config  # noqa: F401
