"""Error types raised by the Gerber engine."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple


class GerberError(ValueError):
    """Base class for all Gerber computation errors."""


class InvalidDimensionError(GerberError):
    """Return matrix has fewer than two periods or no assets."""


class InvalidParameterError(GerberError):
    """Negative threshold multiplier, negative lookback or unknown policy."""


class DegenerateWindowError(GerberError):
    """Some columns have at most one observation inside the lookback window."""

    def __init__(self, columns: Sequence[int], message: Optional[str] = None) -> None:
        self.columns = list(columns)
        if message is None:
            message = (
                "standard deviation undefined for columns "
                f"{self.columns}: need at least 2 observations in the lookback window"
            )
        super().__init__(message)


class UndefinedPairStatisticError(GerberError):
    """No period crosses either threshold for a pair (pos + neg == 0)."""

    def __init__(self, pair: Tuple[int, int], message: Optional[str] = None) -> None:
        self.pair = tuple(pair)
        if message is None:
            message = f"no concordant or discordant periods for pair {self.pair}"
        super().__init__(message)
