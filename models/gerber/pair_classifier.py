"""Concordant/discordant counting for one pair of assets."""

from __future__ import annotations

from typing import Literal, NamedTuple

import numpy as np

from .errors import InvalidParameterError, UndefinedPairStatisticError

UndefinedPolicy = Literal["raise", "zero"]
UNDEFINED_POLICIES = ("raise", "zero")


class PairCounts(NamedTuple):
    pos: int
    neg: int

    @property
    def total(self) -> int:
        return self.pos + self.neg


def count_pair(returns: np.ndarray, i: int, j: int, thresholds: np.ndarray) -> PairCounts:
    """Count concordant and discordant periods of assets ``i`` and ``j``.

    Every period of ``returns`` is scanned. Comparisons are non-strict, and a
    period that passes the concordance test is never also counted as
    discordant. Periods where either value is NaN count toward neither.
    """
    x = returns[:, i]
    y = returns[:, j]
    t_x = thresholds[i]
    t_y = thresholds[j]

    valid = ~(np.isnan(x) | np.isnan(y))
    x = x[valid]
    y = y[valid]

    x_up = x >= t_x
    x_down = x <= -t_x
    y_up = y >= t_y
    y_down = y <= -t_y

    concordant = (x_up & y_up) | (x_down & y_down)
    discordant = ((x_up & y_down) | (x_down & y_up)) & ~concordant
    return PairCounts(int(np.count_nonzero(concordant)), int(np.count_nonzero(discordant)))


def classify_pair(
    returns: np.ndarray,
    i: int,
    j: int,
    thresholds: np.ndarray,
    undefined: UndefinedPolicy = "raise",
) -> float:
    """Return the Gerber statistic for ``(i, j)``.

    With ``undefined="zero"`` a pair without any concordant or discordant
    period yields ``0.0`` instead of raising.
    """
    if undefined not in UNDEFINED_POLICIES:
        raise InvalidParameterError(f"undefined policy must be one of {UNDEFINED_POLICIES}, got {undefined!r}")
    counts = count_pair(returns, i, j, thresholds)
    if counts.total == 0:
        if undefined == "zero":
            return 0.0
        raise UndefinedPairStatisticError((i, j))
    return (counts.pos - counts.neg) / counts.total
