import numpy as np
import pandas as pd
from typing import Dict, Literal, Optional, Tuple, Union, Any
from dataclasses import dataclass
from pathlib import Path

from tqdm import tqdm

from models.gerber import (
    LookbackSpec,
    build_matrices_batch,
    compute_gerber_matrix,
    estimate_thresholds,
    gerber_covariance,
    slice_window,
)
from models.gerber.config import load_config
from reporting.logging_utils import get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class GerberConfig:
    """Configuration class for Gerber statistic computation."""

    lookback: int = 0
    threshold: float = 0.5
    lookback_from_start: bool = False
    use_parallel: bool = True
    num_threads: Optional[int] = None
    undefined_policy: Literal['raise', 'zero'] = 'raise'
    show_progress: bool = False
    update_freq: int = 1

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'GerberConfig':
        """
        Create GerberConfig from dictionary input.

        Accepts either the ``analysis`` block itself or a full run config
        containing one.
        """
        analysis = config_dict.get('analysis', config_dict)
        return cls(
            lookback=analysis.get('lookback', 0),
            threshold=analysis.get('threshold', 0.5),
            lookback_from_start=analysis.get('lookback_from_start', False),
            use_parallel=analysis.get('use_parallel', True),
            num_threads=analysis.get('num_threads'),
            undefined_policy=analysis.get('undefined_policy', 'raise'),
            show_progress=analysis.get('show_progress', False),
            update_freq=analysis.get('update_freq', 1),
        )

    @classmethod
    def from_yaml(cls, path) -> 'GerberConfig':
        return cls.from_dict(load_config(path))

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.lookback is None:
            self.lookback = 0
        if isinstance(self.lookback, bool) or int(self.lookback) != self.lookback:
            raise ValueError(f"lookback must be an integer, got {self.lookback!r}")
        if self.lookback < 0:
            raise ValueError("lookback must be non-negative")
        self.lookback = int(self.lookback)
        if not np.isfinite(self.threshold) or self.threshold < 0:
            raise ValueError("threshold must be finite and non-negative")
        if self.undefined_policy not in ('raise', 'zero'):
            raise ValueError(f"Unknown undefined_policy: {self.undefined_policy}")
        if self.num_threads is not None and self.num_threads < 1:
            raise ValueError("num_threads must be at least 1")
        if self.update_freq < 1:
            raise ValueError("update_freq must be at least 1")

    @property
    def effective_threads(self) -> Optional[int]:
        return self.num_threads if self.use_parallel else 1


def to_return_matrix(returns: pd.DataFrame) -> np.ndarray:
    """Column-contiguous float copy of a return frame, NaN for absent values."""
    return np.asfortranarray(returns.to_numpy(dtype=float, na_value=np.nan))


class GerberAnalyzer():
    """
    Gerber statistic analysis over labelled return data.

    Wraps the array engine with validation, asset labels, rolling windows and
    a covariance proxy for downstream optimizers.
    """
    def __init__(self, config: Union[GerberConfig, Dict]):
        """
        Args:
            config: GerberConfig object or dictionary containing analysis parameters
        """
        if isinstance(config, dict):
            self.config = GerberConfig.from_dict(config)
        else:
            self.config = config
        self._validate_config()

    def _validate_config(self):
        if not isinstance(self.config, GerberConfig):
            raise TypeError("config must be a GerberConfig instance")

    def _validate_data(self, returns: pd.DataFrame, require_datetime: bool = False):
        if not isinstance(returns, pd.DataFrame):
            raise TypeError("Input data must be a pandas DataFrame")
        if require_datetime and not isinstance(returns.index, pd.DatetimeIndex):
            raise TypeError("DataFrame index must be DatetimeIndex")
        if returns.shape[1] < 1:
            raise ValueError("DataFrame must have at least 1 column")

    def _compute(self, returns: pd.DataFrame, lookback: int, show_progress: Optional[bool] = None) -> pd.DataFrame:
        if show_progress is None:
            show_progress = self.config.show_progress
        matrix = compute_gerber_matrix(
            to_return_matrix(returns),
            lookback_length=lookback,
            threshold=self.config.threshold,
            lookback_from_start=self.config.lookback_from_start,
            num_threads=self.config.effective_threads,
            undefined=self.config.undefined_policy,
            show_progress=show_progress,
        )
        columns = returns.columns.tolist()
        return pd.DataFrame(matrix, index=columns, columns=columns)

    def analyze(self,
                returns: pd.DataFrame,
                return_rolling: bool = False) -> Union[pd.DataFrame, pd.Series]:
        """
        Compute the Gerber matrix of a return frame.

        Args:
            returns: DataFrame of per-period returns, one column per asset
            return_rolling: If True, returns a Series of matrices, one per window
                of ``lookback`` rows ending every ``update_freq`` rows.
                If False, returns a single matrix over all rows, with
                thresholds estimated from the configured lookback.

        Returns:
            Union[pd.DataFrame, pd.Series]: Gerber matrix or rolling matrices
        """
        self._validate_data(returns, require_datetime=return_rolling)
        if return_rolling:
            return self._compute_rolling_matrix(returns)
        return self._compute(returns, self.config.lookback)

    def _compute_rolling_matrix(self, returns: pd.DataFrame) -> pd.Series:
        """
        Recompute the Gerber matrix for each rolling window of ``lookback`` rows.

        Each window is an independent computation over its own rows, with
        thresholds estimated from the whole window.
        """
        lookback = self.config.lookback
        if lookback < 2:
            raise ValueError("rolling analysis needs lookback of at least 2")
        if lookback > len(returns):
            raise ValueError("lookback period must not exceed data length")

        date_index = returns.index
        windows = {
            (date_index[end - lookback], date_index[end - 1]): returns.iloc[end - lookback:end]
            for end in range(lookback, len(returns) + 1, self.config.update_freq)
        }
        logger.info("Computing %d rolling Gerber windows", len(windows), context={"lookback": lookback})

        result_dict = {}
        for (_, window_end), window in tqdm(
            windows.items(),
            total=len(windows),
            desc="Computing rolling Gerber matrices",
            unit="window",
            disable=not self.config.show_progress,
        ):
            result_dict[window_end] = self._compute(window, 0, show_progress=False)

        result_series = pd.Series(result_dict)
        result_series.index = pd.DatetimeIndex(result_series.index)
        return result_series

    def compute_matrices_batch(
        self,
        returns: pd.DataFrame,
        windows,
    ) -> Dict[Tuple[pd.Timestamp, pd.Timestamp], pd.DataFrame]:
        """Gerber matrices for explicit ``(start, end)`` date windows, both inclusive."""
        self._validate_data(returns, require_datetime=True)
        frames = {}
        for window_start, window_end in windows:
            key = (pd.Timestamp(window_start), pd.Timestamp(window_end))
            frames[key] = returns.loc[key[0]:key[1]].copy()
        return build_matrices_batch(frames, lambda window: self._compute(window, 0))

    def volatility(self, returns: pd.DataFrame) -> pd.Series:
        """Per-asset sample standard deviation over the configured lookback window."""
        self._validate_data(returns)
        spec = LookbackSpec(length=self.config.lookback, from_start=self.config.lookback_from_start)
        sd = estimate_thresholds(slice_window(to_return_matrix(returns), spec), 1.0)
        return pd.Series(sd, index=returns.columns)

    def covariance(self, returns: pd.DataFrame) -> pd.DataFrame:
        """Gerber covariance proxy ``G[i, j] * sd[i] * sd[j]``."""
        corr = self.analyze(returns)
        sd = self.volatility(returns)
        cov = gerber_covariance(corr.to_numpy(), sd.to_numpy())
        return pd.DataFrame(cov, index=corr.index, columns=corr.columns)


def _resolve_run_path(value, base_dir: Optional[Path]) -> Optional[Path]:
    if not value:
        return None
    path = Path(value)
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path


def setup_run(config_path=None) -> GerberAnalyzer:
    """
    Load a run config, configure logging from its ``run`` block and build the analyzer.

    Relative ``log_file`` and ``logging_config`` paths are resolved against the
    directory of ``config_path``.
    """
    cfg = load_config(config_path)
    run = cfg['run']
    base_dir = Path(config_path).parent if config_path is not None else None
    setup_logging(
        _resolve_run_path(run.get('log_file'), base_dir),
        level=run.get('log_level', 'INFO'),
        config_path=_resolve_run_path(run.get('logging_config'), base_dir),
        context={'config': Path(config_path).name if config_path is not None else 'default'},
    )
    analyzer = GerberAnalyzer(GerberConfig.from_dict(cfg))
    logger.info("Gerber run configured", context={'lookback': analyzer.config.lookback})
    return analyzer
