"""
Parallel-Coordinates Layout
===========================
Qt-free core of the chart: axis order, scales, axis positions and line geometry.

Two kinds of state are kept apart:

* ``ChartLayout`` is the result of a full relayout (scales, ticks, evenly
  spaced axis positions and every row projected onto its axes). It is rebuilt
  when rows, display mode, axis order or chart size change.
* Drag positions are transient per-axis x coordinates that exist only while an
  axis is being dragged.

``frame()`` combines the two into polylines without rebuilding any scale, so a
pointer move costs one array stack instead of a relayout.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

import numpy as np

from happinessviz.controller.chart.scales import (
    UNIT_MAX, AxisStats, LinearScale, compute_axis_stats, format_tick,
    raw_domain, unit_fraction, values_matrix,
)
from happinessviz.model.rows import AxisDescriptor, DisplayMode, Row

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

RAW_TICK_COUNT = 8
NORMALIZED_SUFFIX = " (0-10)"


@dataclass(frozen=True)
class Margins:
    top: float = 30.0
    right: float = 30.0
    bottom: float = 24.0
    left: float = 70.0


@dataclass(frozen=True)
class Tick:
    value: float
    y: float
    label: str


@dataclass(frozen=True)
class AxisLayout:
    key: str
    title: str
    x: float
    scale: LinearScale
    ticks: tuple[Tick, ...]


@dataclass(frozen=True, eq=False)
class ChartLayout:
    width: float
    height: float
    margins: Margins
    mode: DisplayMode
    order: tuple[str, ...]
    axes: dict[str, AxisLayout]
    y: npt.NDArray[np.float64]  # (n_rows, n_axes), columns follow `order`

    @property
    def x_extent(self) -> tuple[float, float]:
        left = self.margins.left
        return left, max(left, self.width - self.margins.right)

    @property
    def y_extent(self) -> tuple[float, float]:
        """(bottom, top) in pixels; values grow upward."""
        return self.height - self.margins.bottom, self.margins.top

    def base_positions(self) -> npt.NDArray[np.float64]:
        return np.array([self.axes[k].x for k in self.order], dtype=np.float64)


# ------------------------------------------------------------------------------
# Pure helpers
# ------------------------------------------------------------------------------

def axis_positions(order: Sequence[str], x0: float, x1: float) -> dict[str, float]:
    """Evenly spaced points across [x0, x1]; a lone axis sits in the middle."""
    n = len(order)
    if n == 0:
        return {}
    if n == 1:
        return {order[0]: (x0 + x1) / 2.0}
    step = (x1 - x0) / (n - 1)
    return {key: x0 + i * step for i, key in enumerate(order)}


def build_layout(
    values: npt.NDArray[np.float64],
    columns: dict[str, int],
    stats: dict[str, AxisStats],
    order: Sequence[str],
    titles: dict[str, str],
    mode: DisplayMode,
    width: float,
    height: float,
    margins: Margins = Margins(),
) -> ChartLayout:
    """Full relayout: scales, ticks, axis positions and projected rows."""
    y_range = (height - margins.bottom, margins.top)
    x0 = margins.left
    x1 = max(x0, width - margins.right)
    xs = axis_positions(order, x0, x1)

    unit_scale = LinearScale((0.0, UNIT_MAX), y_range)
    unit_ticks = tuple(
        Tick(float(v), float(unit_scale(v)), f"{v:d}") for v in range(int(UNIT_MAX) + 1)
    )

    n_rows = values.shape[0]
    y = np.full((n_rows, len(order)), np.nan, dtype=np.float64)
    axes: dict[str, AxisLayout] = {}

    for j, key in enumerate(order):
        axis_stats = stats.get(key, AxisStats(0.0, 1.0))
        column = values[:, columns[key]] if key in columns else np.full(n_rows, np.nan)

        if mode == DisplayMode.RAW:
            scale = LinearScale(raw_domain(axis_stats), y_range).nice()
            ticks = tuple(
                Tick(float(v), float(scale(v)), format_tick(v)) for v in scale.ticks(RAW_TICK_COUNT)
            )
            y[:, j] = scale(column)
            title = titles.get(key, key)
        else:
            scale = unit_scale
            ticks = unit_ticks
            y[:, j] = unit_scale(unit_fraction(column, axis_stats) * UNIT_MAX)
            title = titles.get(key, key) + NORMALIZED_SUFFIX

        axes[key] = AxisLayout(key=key, title=title, x=xs[key], scale=scale, ticks=ticks)

    return ChartLayout(
        width=width, height=height, margins=margins, mode=mode,
        order=tuple(order), axes=axes, y=y,
    )


def drawable_mask(y: npt.NDArray[np.float64], xs: npt.NDArray[np.float64]) -> npt.NDArray[np.bool_]:
    """Rows whose every vertex is finite. Anything else is not drawn at all."""
    if y.size == 0:
        return np.zeros(y.shape[0], dtype=bool)
    return np.isfinite(y).all(axis=1) & bool(np.isfinite(xs).all())


def polylines(y: npt.NDArray[np.float64], xs: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Vertices of every drawable row.

    Args:
        y: (n_rows, n_axes) vertical pixel positions.
        xs: (n_axes,) horizontal pixel positions, same column order.

    Returns:
        (n_drawable, n_axes, 2) array of (x, y) points.
    """
    n_axes = xs.shape[0]
    mask = drawable_mask(y, xs)
    rows = y[mask]
    if rows.shape[0] == 0 or n_axes == 0:
        return np.empty((0, n_axes, 2), dtype=np.float64)
    x_grid = np.broadcast_to(xs, rows.shape)
    return np.stack([x_grid, rows], axis=-1)


# ------------------------------------------------------------------------------
# Renderer state
# ------------------------------------------------------------------------------

class ParallelCoordinatesRenderer:
    """
    Owns the permanent axis order and the live drag positions.

    Nothing here raises on bad data: unknown keys are ignored, rows with
    missing values are simply not drawn and empty axes get a unit scale.
    """

    def __init__(self, width: float = 0.0, height: float = 0.0, margins: Margins = Margins()) -> None:
        self.margins = margins
        self._width = float(width)
        self._height = float(height)

        self._axes: tuple[AxisDescriptor, ...] = ()
        self._order: list[str] = []
        self._mode: DisplayMode = DisplayMode.NORMALIZED
        self._rows: tuple[Row, ...] = ()

        self._values: npt.NDArray[np.float64] = np.empty((0, 0))
        self._columns: dict[str, int] = {}
        self._stats: dict[str, AxisStats] = {}

        self._layout: Optional[ChartLayout] = None
        self._drag_positions: dict[str, float] = {}

    # ---- read-only views ----

    @property
    def order(self) -> tuple[str, ...]:
        return tuple(self._order)

    @property
    def stats(self) -> dict[str, AxisStats]:
        return dict(self._stats)

    @property
    def layout(self) -> Optional[ChartLayout]:
        return self._layout

    @property
    def display_mode(self) -> DisplayMode:
        return self._mode

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def size(self) -> tuple[float, float]:
        return self._width, self._height

    @property
    def is_dragging(self) -> bool:
        return bool(self._drag_positions)

    # ---- full relayout triggers ----

    def render(
        self,
        rows: Iterable[Row],
        axes: Iterable[AxisDescriptor],
        display_mode: DisplayMode = DisplayMode.NORMALIZED,
    ) -> ChartLayout:
        """Take a new row set, axis list and display mode, then relayout."""
        axes = tuple(axes)
        keys = list(dict.fromkeys(a.key for a in axes))
        if set(keys) != set(self._order):
            if self._order:
                logger.info("Axis set changed, resetting axis order.")
            self._order = keys
            self._drag_positions.clear()

        self._axes = axes
        try:
            self._mode = DisplayMode(display_mode)
        except ValueError:
            logger.warning(f"Unknown display mode {display_mode!r}, keeping {self._mode}")

        self._rows = tuple(rows)
        self._columns = {key: i for i, key in enumerate(self._order)}
        self._values = values_matrix(self._rows, self._order)
        self._stats = compute_axis_stats(self._values, self._order)
        return self.relayout()

    def resize(self, width: float, height: float) -> ChartLayout:
        self._width = max(0.0, float(width))
        self._height = max(0.0, float(height))
        return self.relayout()

    def relayout(self) -> ChartLayout:
        titles = {a.key: a.label for a in self._axes}
        self._layout = build_layout(
            self._values, self._columns, self._stats, self._order, titles,
            self._mode, self._width, self._height, self.margins,
        )
        return self._layout

    # ---- drag gesture ----

    def begin_drag(self, key: str) -> Optional[float]:
        if self._layout is None or key not in self._layout.axes:
            logger.debug(f"Ignoring drag of unknown axis {key!r}")
            return None
        x = self._drag_positions.setdefault(key, self._layout.axes[key].x)
        return x

    def drag_to(self, key: str, x: float) -> Optional[float]:
        """Move a dragged axis, clamped to the plot's horizontal extent."""
        if key not in self._drag_positions and self.begin_drag(key) is None:
            return None
        x0, x1 = self._layout.x_extent
        try:
            x = float(x)
        except (TypeError, ValueError):
            return self._drag_positions[key]
        if np.isfinite(x):
            self._drag_positions[key] = min(max(x, x0), x1)
        return self._drag_positions[key]

    def end_drag(self) -> tuple[str, ...]:
        """Commit the order implied by the final positions and relayout."""
        if not self._drag_positions:
            return self.order
        positions = dict(zip(self._order, self.live_positions()))
        new_order = sorted(self._order, key=lambda k: positions[k])
        self._drag_positions.clear()
        if new_order != self._order:
            logger.debug(f"Axis order changed to {new_order}")
            self._order = new_order
        self.relayout()
        return self.order

    # ---- per-frame geometry ----

    def axis_position(self, key: str) -> Optional[float]:
        if self._layout is None or key not in self._layout.axes:
            return None
        return self._drag_positions.get(key, self._layout.axes[key].x)

    def live_positions(self) -> npt.NDArray[np.float64]:
        if self._layout is None:
            return np.empty(0)
        base = self._layout.base_positions()
        for j, key in enumerate(self._layout.order):
            if key in self._drag_positions:
                base[j] = self._drag_positions[key]
        return base

    def frame(self) -> npt.NDArray[np.float64]:
        """Polylines for the current layout and drag positions, in axis order."""
        if self._layout is None:
            return np.empty((0, 0, 2))
        return polylines(self._layout.y, self.live_positions())
