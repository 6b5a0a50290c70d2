"""
Axis scales and per-axis statistics for the parallel-coordinates chart.

Everything here is vectorized over NumPy arrays; NaN marks a missing value and
propagates through every mapping so callers can mask it out in one place.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Sequence, Union

import numpy as np
from matplotlib.ticker import MaxNLocator

from happinessviz.model.rows import Row

if TYPE_CHECKING:
    import numpy.typing as npt

ArrayLike = Union[float, Sequence[float], "npt.NDArray[np.float64]"]

NICE_STEPS = [1, 2, 2.5, 5, 10]
UNIT_MAX = 10.0


@dataclass(frozen=True)
class AxisStats:
    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min


DEFAULT_STATS = AxisStats(0.0, 1.0)


class LinearScale:
    """
    Continuous linear map from a domain interval onto a pixel range.

    A zero-width domain maps every value to the middle of the range.
    """

    def __init__(self, domain: tuple[float, float], range_: tuple[float, float]) -> None:
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def __repr__(self) -> str:
        return f"LinearScale(domain={self.domain}, range={self.range})"

    def __call__(self, values: ArrayLike) -> npt.NDArray[np.float64]:
        v = np.asarray(values, dtype=np.float64)
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return np.where(np.isnan(v), np.nan, (r0 + r1) / 2.0)
        return r0 + (v - d0) / (d1 - d0) * (r1 - r0)

    def _locator(self, count: int) -> MaxNLocator:
        return MaxNLocator(nbins=max(1, count), steps=NICE_STEPS)

    def nice(self, count: int = 10) -> LinearScale:
        """Extend the domain outward to round tick boundaries."""
        d0, d1 = self.domain
        if not (np.isfinite(d0) and np.isfinite(d1)) or d0 == d1:
            return LinearScale(self.domain, self.range)
        lo, hi = min(d0, d1), max(d0, d1)
        ticks = self._locator(count).tick_values(lo, hi)
        lo, hi = float(ticks[0]), float(ticks[-1])
        return LinearScale((lo, hi) if d0 <= d1 else (hi, lo), self.range)

    def ticks(self, count: int = 10) -> npt.NDArray[np.float64]:
        """Round tick values inside the domain."""
        d0, d1 = self.domain
        lo, hi = min(d0, d1), max(d0, d1)
        if not (np.isfinite(lo) and np.isfinite(hi)):
            return np.empty(0)
        if lo == hi:
            return np.array([lo])
        ticks = self._locator(count).tick_values(lo, hi)
        eps = (hi - lo) * 1e-9
        ticks = ticks[(ticks >= lo - eps) & (ticks <= hi + eps)]
        # strip float noise such as 0.30000000000000004
        return np.round(ticks, 12) + 0.0


def _metric(row: Union[Row, Mapping[str, Any]], key: str) -> float:
    if isinstance(row, Row):
        value = row.value(key)
    elif isinstance(row, Mapping):
        value = row.get(key)
    else:
        value = None
    if value is None:
        return np.nan
    try:
        number = float(value)
    except (TypeError, ValueError):
        return np.nan
    return number if np.isfinite(number) else np.nan


def values_matrix(rows: Sequence[Row], keys: Sequence[str]) -> npt.NDArray[np.float64]:
    """(n_rows, n_keys) array of metrics, NaN where missing or malformed."""
    matrix = np.full((len(rows), len(keys)), np.nan, dtype=np.float64)
    for i, row in enumerate(rows):
        for j, key in enumerate(keys):
            matrix[i, j] = _metric(row, key)
    return matrix


def compute_axis_stats(values: npt.NDArray[np.float64], keys: Sequence[str]) -> dict[str, AxisStats]:
    """Per-column extent over finite values; ``{0, 1}`` for columns without any."""
    stats: dict[str, AxisStats] = {}
    for j, key in enumerate(keys):
        column = values[:, j]
        finite = column[np.isfinite(column)]
        if finite.size == 0:
            stats[key] = DEFAULT_STATS
        else:
            stats[key] = AxisStats(float(finite.min()), float(finite.max()))
    return stats


def unit_fraction(values: ArrayLike, stats: AxisStats) -> npt.NDArray[np.float64]:
    """(v - min) / (max - min), clamped to [0, 1]. A zero span divides by 1."""
    v = np.asarray(values, dtype=np.float64)
    span = stats.span or 1.0
    return np.clip((v - stats.min) / span, 0.0, 1.0)


def raw_domain(stats: AxisStats) -> tuple[float, float]:
    """Domain for a raw-mode axis; a single value gets a unit-wide window."""
    if stats.max > stats.min:
        return stats.min, stats.max
    return stats.min - 0.5, stats.max + 0.5


def format_tick(value: float) -> str:
    return f"{value:g}"
