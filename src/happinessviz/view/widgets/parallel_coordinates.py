"""
Parallel-Coordinates Widget (QGraphicsView)
===========================================
Qt surface of the chart. Geometry comes from
:class:`~happinessviz.controller.chart.layout.ParallelCoordinatesRenderer`;
this module only draws it and turns mouse gestures into renderer calls.

Two layers are stacked in one scene:

* ``LinesLayer`` paints every polyline into an offscreen ``QImage`` with
  additive blending, so dense bundles glow brighter. The buffer is allocated at
  the viewport's device pixel ratio and reallocated when that ratio changes.
* One ``AxisItem`` per axis key carries the axis line, ticks and title. Items
  are moved on reorder, never recreated.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

import numpy as np
import numpy.typing as npt

from PySide6.QtWidgets import (
    QFrame, QGraphicsItem, QGraphicsLineItem, QGraphicsObject, QGraphicsScene,
    QGraphicsSimpleTextItem, QGraphicsView, QStyleOptionGraphicsItem, QWidget,
)
from PySide6.QtCore import QEvent, QPointF, QRectF, Qt, Signal
from PySide6.QtGui import (
    QBrush, QColor, QFont, QImage, QPainter, QPainterPath, QPen, QPolygonF,
    QResizeEvent,
)

from happinessviz.controller.chart.layout import (
    AxisLayout, ChartLayout, Margins, ParallelCoordinatesRenderer,
)
from happinessviz.model.rows import AxisDescriptor, DisplayMode, Row

logger = logging.getLogger(__name__)

# --- STYLE ---
BACKGROUND_COLOR = "#0b0f14"
LINE_COLOR = "#5aa0ff"
LINE_ALPHA = 0.06
LINE_WIDTH = 1.0
AXIS_COLOR = "#9aa3ad"
AXIS_DRAG_COLOR = "#ffd166"
TICK_COLOR = "#b8c1cc"
TITLE_COLOR = "#dde3ea"
MESSAGE_COLOR = "#9aa3ad"

TICK_LENGTH = 5.0
HANDLE_HALF_WIDTH = 10.0

EMPTY_MESSAGE = "No countries to display"

# --- Z ORDER ---
Z_LINES = 0.0
Z_AXIS = 1.0
Z_AXIS_DRAGGED = 2.0
Z_MESSAGE = 3.0

# Qt >= 6.6 only; older bindings never deliver this event
_DPR_CHANGE_EVENT = getattr(QEvent.Type, "DevicePixelRatioChange", None)


class LinesLayer(QGraphicsItem):
    """Offscreen raster of all polylines, drawn as one image."""

    def __init__(self, parent: Optional[QGraphicsItem] = None) -> None:
        super().__init__(parent)
        self._image: QImage = QImage()
        self._width: float = 0.0
        self._height: float = 0.0
        self._dpr: float = 1.0

        pen_color = QColor(LINE_COLOR)
        pen_color.setAlphaF(LINE_ALPHA)
        self._pen = QPen(pen_color, LINE_WIDTH)
        self._pen.setCosmetic(True)

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def device_pixel_ratio(self) -> float:
        return self._dpr

    def boundingRect(self) -> QRectF:
        return QRectF(0.0, 0.0, self._width, self._height)

    def paint(self, painter: QPainter, option: QStyleOptionGraphicsItem, widget: Optional[QWidget] = None) -> None:
        if not self._image.isNull():
            painter.drawImage(QPointF(0.0, 0.0), self._image)

    def _ensure_buffer(self, width: float, height: float, dpr: float) -> bool:
        """(Re)allocate the backing image. Returns False when there is nothing to draw on."""
        if (width, height) != (self._width, self._height):
            self.prepareGeometryChange()
            self._width, self._height = width, height

        px_w = int(math.ceil(width * dpr))
        px_h = int(math.ceil(height * dpr))
        if px_w <= 0 or px_h <= 0:
            self._image = QImage()
            return False

        if self._image.isNull() or self._dpr != dpr or (self._image.width(), self._image.height()) != (px_w, px_h):
            if self._dpr != dpr:
                logger.debug(f"Line buffer device pixel ratio changed {self._dpr} -> {dpr}")
            self._image = QImage(px_w, px_h, QImage.Format_ARGB32_Premultiplied)
            self._image.setDevicePixelRatio(dpr)
            self._dpr = dpr
        return True

    def draw(self, lines: npt.NDArray[np.float64], width: float, height: float, dpr: float = 1.0) -> int:
        """
        Repaint the buffer.

        Args:
            lines: (n_lines, n_points, 2) array of logical-pixel coordinates.
            width, height: Logical size of the plot.
            dpr: Device pixel ratio of the target screen.

        Returns:
            Number of polylines drawn.
        """
        dpr = dpr if dpr and dpr > 0 else 1.0
        if not self._ensure_buffer(width, height, dpr):
            self.update()
            return 0

        self._image.fill(Qt.transparent)
        drawn = 0
        painter = QPainter(self._image)
        try:
            painter.setRenderHint(QPainter.Antialiasing)
            painter.setCompositionMode(QPainter.CompositionMode_Plus)
            painter.setPen(self._pen)
            for line in lines:
                painter.drawPolyline(QPolygonF([QPointF(x, y) for x, y in line]))
                drawn += 1
        finally:
            painter.end()

        self.update()
        return drawn


class AxisItem(QGraphicsObject):
    """
    One vertical axis: line, ticks, tick labels and title.

    The item sits at ``(x, 0)`` in scene coordinates; everything it owns is laid
    out around local x = 0, so moving an axis is a single ``setPos``.
    """
    drag_started = Signal(str)
    drag_moved = Signal(str, float)
    drag_finished = Signal(str)

    def __init__(self, key: str, parent: Optional[QGraphicsItem] = None) -> None:
        super().__init__(parent)
        self.key = key
        self.title: str = key
        self._dragging = False
        self._handle = QRectF()

        self.setAcceptedMouseButtons(Qt.LeftButton)
        self.setCursor(Qt.OpenHandCursor)
        self.setZValue(Z_AXIS)

        self._line = QGraphicsLineItem(self)
        self._line.setPen(QPen(QColor(AXIS_COLOR), 1.0))
        self._title_item = QGraphicsSimpleTextItem(self)
        self._title_item.setBrush(QBrush(QColor(TITLE_COLOR)))
        title_font = QFont()
        title_font.setBold(True)
        self._title_item.setFont(title_font)
        self._tick_items: list[QGraphicsItem] = []

        for child in (self._line, self._title_item):
            child.setAcceptedMouseButtons(Qt.NoButton)

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    @property
    def tick_labels(self) -> list[str]:
        return [it.text() for it in self._tick_items if isinstance(it, QGraphicsSimpleTextItem)]

    def set_layout(self, axis: AxisLayout, y_extent: tuple[float, float]) -> None:
        """Rebuild line, ticks and title for a fresh layout."""
        bottom, top = y_extent
        self.prepareGeometryChange()
        self.title = axis.title
        self._line.setLine(0.0, top, 0.0, bottom)

        for item in self._tick_items:
            self._discard(item)
        self._tick_items = []

        tick_pen = QPen(QColor(AXIS_COLOR), 1.0)
        tick_brush = QBrush(QColor(TICK_COLOR))
        for tick in axis.ticks:
            mark = QGraphicsLineItem(-TICK_LENGTH, tick.y, 0.0, tick.y, self)
            mark.setPen(tick_pen)
            label = QGraphicsSimpleTextItem(tick.label, self)
            label.setBrush(tick_brush)
            rect = label.boundingRect()
            label.setPos(-TICK_LENGTH - 3.0 - rect.width(), tick.y - rect.height() / 2.0)
            for item in (mark, label):
                item.setAcceptedMouseButtons(Qt.NoButton)
                self._tick_items.append(item)

        self._title_item.setText(axis.title)
        rect = self._title_item.boundingRect()
        self._title_item.setPos(-rect.width() / 2.0, top - 9.0 - rect.height())

        self._handle = QRectF(
            -HANDLE_HALF_WIDTH, top - 9.0 - rect.height(),
            2.0 * HANDLE_HALF_WIDTH, (bottom - top) + 9.0 + rect.height(),
        )
        self.update()

    def set_dragging(self, dragging: bool) -> None:
        if dragging == self._dragging:
            return
        self._dragging = dragging
        self.setZValue(Z_AXIS_DRAGGED if dragging else Z_AXIS)
        self._line.setPen(QPen(QColor(AXIS_DRAG_COLOR if dragging else AXIS_COLOR), 2.0 if dragging else 1.0))
        self.setCursor(Qt.ClosedHandCursor if dragging else Qt.OpenHandCursor)
        self.update()

    def _discard(self, item: QGraphicsItem) -> None:
        scene = item.scene()
        if scene is not None:
            scene.removeItem(item)
        else:
            item.setParentItem(None)

    # --- QGraphicsItem interface ---

    def boundingRect(self) -> QRectF:
        return self._handle.united(self.childrenBoundingRect())

    def shape(self) -> QPainterPath:
        path = QPainterPath()
        path.addRect(self._handle)
        return path

    def paint(self, painter: QPainter, option: QStyleOptionGraphicsItem, widget: Optional[QWidget] = None) -> None:
        if self._dragging:
            highlight = QColor(AXIS_DRAG_COLOR)
            highlight.setAlphaF(0.12)
            painter.fillRect(self._handle, highlight)

    def mousePressEvent(self, event) -> None:
        if event.button() != Qt.LeftButton:
            event.ignore()
            return
        event.accept()
        self.drag_started.emit(self.key)

    def mouseMoveEvent(self, event) -> None:
        self.drag_moved.emit(self.key, float(event.scenePos().x()))

    def mouseReleaseEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self.drag_finished.emit(self.key)


class ParallelCoordinatesView(QGraphicsView):
    """Interactive parallel-coordinates chart with draggable axes."""
    # New axis order after a drag changed it
    order_changed = Signal(object)
    # (drawn polylines, rows given)
    lines_drawn = Signal(int, int)

    def __init__(self, parent: Optional[QWidget] = None, margins: Margins = Margins()) -> None:
        super().__init__(parent)
        self.setRenderHints(self.renderHints() | QPainter.Antialiasing | QPainter.TextAntialiasing)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setFrameShape(QFrame.NoFrame)
        self.setBackgroundBrush(QBrush(QColor(BACKGROUND_COLOR)))
        self.setMinimumSize(320, 200)

        self.chart_scene = QGraphicsScene(self)
        self.setScene(self.chart_scene)

        self.renderer = ParallelCoordinatesRenderer(margins=margins)

        # Items
        self._lines = LinesLayer()
        self._lines.setZValue(Z_LINES)
        self.chart_scene.addItem(self._lines)

        self._axis_items: dict[str, AxisItem] = {}

        self._message = QGraphicsSimpleTextItem()
        self._message.setBrush(QBrush(QColor(MESSAGE_COLOR)))
        self._message.setZValue(Z_MESSAGE)
        self._message.setVisible(False)
        self.chart_scene.addItem(self._message)

        self._last_drawn: int = 0

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def axis_items(self) -> dict[str, AxisItem]:
        return dict(self._axis_items)

    @property
    def lines_layer(self) -> LinesLayer:
        return self._lines

    @property
    def order(self) -> tuple[str, ...]:
        return self.renderer.order

    @property
    def layout_state(self) -> Optional[ChartLayout]:
        return self.renderer.layout

    @property
    def message_text(self) -> Optional[str]:
        return self._message.text() if self._message.isVisible() else None

    @property
    def drawn_count(self) -> int:
        return self._last_drawn

    def render_rows(
        self,
        rows: Iterable[Row],
        axes: Iterable[AxisDescriptor],
        display_mode: DisplayMode = DisplayMode.NORMALIZED,
    ) -> None:
        """Full relayout with a new row set. Named so it does not shadow ``QWidget.render``."""
        self._sync_size()
        self.renderer.render(rows, axes, display_mode)
        self._sync_axes()
        self._redraw_lines()

        if self.renderer.row_count == 0:
            self.show_message(EMPTY_MESSAGE)
        elif self.message_text == EMPTY_MESSAGE:
            self.clear_message()

    def relayout(self) -> None:
        self.renderer.resize(*self._viewport_size())
        self._sync_axes()
        self._redraw_lines()
        self._place_message()

    def show_message(self, text: str) -> None:
        self._message.setText(text)
        self._message.setVisible(True)
        self._place_message()

    def clear_message(self) -> None:
        self._message.setVisible(False)

    def current_lines(self) -> npt.NDArray[np.float64]:
        return self.renderer.frame()

    # --- Drag gesture (also driven by AxisItem signals) ---

    def begin_drag(self, key: str) -> None:
        if self.renderer.begin_drag(key) is None:
            return
        item = self._axis_items.get(key)
        if item is not None:
            item.set_dragging(True)

    def drag_to(self, key: str, x: float) -> None:
        x = self.renderer.drag_to(key, x)
        if x is None:
            return
        item = self._axis_items.get(key)
        if item is not None:
            item.setPos(x, 0.0)
        self._redraw_lines()

    def end_drag(self) -> tuple[str, ...]:
        before = self.renderer.order
        after = self.renderer.end_drag()
        for item in self._axis_items.values():
            item.set_dragging(False)
        self._sync_axes()
        self._redraw_lines()
        if after != before:
            logger.info(f"Axis order: {', '.join(after)}")
            self.order_changed.emit(after)
        return after

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self.relayout()

    def event(self, event: QEvent) -> bool:
        if _DPR_CHANGE_EVENT is not None and event.type() == _DPR_CHANGE_EVENT:
            self._redraw_lines()
        return super().event(event)

    # ------------------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------------------

    def _viewport_size(self) -> tuple[float, float]:
        size = self.viewport().size()
        return float(size.width()), float(size.height())

    def _sync_size(self) -> None:
        width, height = self._viewport_size()
        self.setSceneRect(0.0, 0.0, width, height)
        if (width, height) != self.renderer.size:
            self.renderer.resize(width, height)

    def _sync_axes(self) -> None:
        """Create, update and position axis items to match the current layout."""
        layout = self.renderer.layout
        if layout is None:
            return
        self.setSceneRect(0.0, 0.0, layout.width, layout.height)

        for key in [k for k in self._axis_items if k not in layout.axes]:
            item = self._axis_items.pop(key)
            self.chart_scene.removeItem(item)
            item.deleteLater()

        for key in layout.order:
            item = self._axis_items.get(key)
            if item is None:
                item = AxisItem(key)
                item.drag_started.connect(self.begin_drag)
                item.drag_moved.connect(self.drag_to)
                item.drag_finished.connect(lambda _key: self.end_drag())
                self.chart_scene.addItem(item)
                self._axis_items[key] = item
            item.set_layout(layout.axes[key], layout.y_extent)
            item.setPos(self.renderer.axis_position(key), 0.0)

    def _redraw_lines(self) -> None:
        width, height = self.renderer.size
        dpr = self.viewport().devicePixelRatioF()
        self._last_drawn = self._lines.draw(self.renderer.frame(), width, height, dpr)
        self.lines_drawn.emit(self._last_drawn, self.renderer.row_count)

    def _place_message(self) -> None:
        rect = self._message.boundingRect()
        width, height = self._viewport_size()
        self._message.setPos((width - rect.width()) / 2.0, (height - rect.height()) / 2.0)
