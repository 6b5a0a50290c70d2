import math

import numpy as np
import pytest
from PySide6.QtGui import QColor

from happinessviz.controller.data_controller import YearDataController
from happinessviz.model.loader import DataLoadError, load_year
from happinessviz.model.rows import DEFAULT_AXES, WORLD, DisplayMode
from happinessviz.model.state import ExplorerState
from happinessviz.view.main_window import MainWindow
from happinessviz.view.widgets.display_mode import DisplayModeSelector
from happinessviz.view.widgets.parallel_coordinates import (
    EMPTY_MESSAGE, LinesLayer, ParallelCoordinatesView,
)
from happinessviz.view.widgets.region_filter import RegionFilter
from happinessviz.view.widgets.year_selector import YearSelector

pytestmark = pytest.mark.integration


# --- Year selector ---

def test_year_selector_defaults(qtbot):
    selector = YearSelector()
    qtbot.addWidget(selector)
    assert selector.year == 2019
    assert selector.bounds == (2015, 2019)
    assert selector.lbl_year.text() == "Year: 2019"


def test_year_selector_clamps_initial_value(qtbot):
    selector = YearSelector(year=2030)
    qtbot.addWidget(selector)
    assert selector.year == 2019


def test_year_selector_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        YearSelector(minimum=2020, maximum=2015)


def test_year_selector_emits_on_change(qtbot):
    selector = YearSelector()
    qtbot.addWidget(selector)
    with qtbot.waitSignal(selector.year_changed) as blocker:
        selector.set_year(2016)
    assert blocker.args == [2016]
    assert selector.lbl_year.text() == "Year: 2016"


# --- Region filter ---

def test_region_filter_lists_world_first(qtbot):
    widget = RegionFilter()
    qtbot.addWidget(widget)
    widget.set_regions(["Eastern Asia", "Western Europe"])
    assert widget.regions() == [WORLD, "Eastern Asia", "Western Europe"]
    assert widget.checkbox(WORLD).isChecked()
    assert not widget.checkbox("Eastern Asia").isChecked()


def test_region_filter_world_is_exclusive(qtbot):
    widget = RegionFilter()
    qtbot.addWidget(widget)
    widget.set_regions(["Eastern Asia", "Western Europe"])

    with qtbot.waitSignal(widget.selection_changed) as blocker:
        widget.checkbox("Eastern Asia").click()
    assert blocker.args == [frozenset({"Eastern Asia"})]
    assert not widget.checkbox(WORLD).isChecked()

    widget.checkbox("Western Europe").click()
    assert widget.selection() == {"Eastern Asia", "Western Europe"}

    widget.checkbox(WORLD).click()
    assert widget.selection() == {WORLD}
    assert widget.checkbox(WORLD).isChecked()
    assert not widget.checkbox("Eastern Asia").isChecked()


def test_region_filter_unchecking_last_region_restores_world(qtbot):
    widget = RegionFilter()
    qtbot.addWidget(widget)
    widget.set_regions(["Eastern Asia"])
    widget.checkbox("Eastern Asia").click()
    widget.checkbox("Eastern Asia").click()
    assert widget.selection() == {WORLD}
    assert widget.checkbox(WORLD).isChecked()


# --- Display mode ---

def test_display_mode_selector(qtbot):
    selector = DisplayModeSelector()
    qtbot.addWidget(selector)
    assert selector.mode is DisplayMode.NORMALIZED
    with qtbot.waitSignal(selector.mode_changed) as blocker:
        selector.rb_raw.click()
    assert blocker.args == ["raw"]
    assert selector.mode is DisplayMode.RAW


# --- Line layer ---

def test_lines_layer_allocates_at_device_pixel_ratio(qtbot):
    layer = LinesLayer()
    lines = np.array([[[0.0, 10.5], [100.0, 10.5]]])

    assert layer.draw(lines, 100.0, 50.0, dpr=1.5) == 1
    assert (layer.image.width(), layer.image.height()) == (150, 75)
    assert layer.image.devicePixelRatio() == pytest.approx(1.5)

    layer.draw(lines, 100.0, 50.0, dpr=2.0)
    assert (layer.image.width(), layer.image.height()) == (200, 100)
    assert layer.device_pixel_ratio == 2.0


def test_lines_layer_blends_additively(qtbot):
    single = LinesLayer()
    double = LinesLayer()
    line = [[0.0, 20.5], [100.0, 20.5]]

    single.draw(np.array([line]), 100.0, 40.0)
    double.draw(np.array([line, line]), 100.0, 40.0)

    alpha_one = QColor(single.image.pixelColor(50, 20)).alpha()
    alpha_two = QColor(double.image.pixelColor(50, 20)).alpha()
    assert 0 < alpha_one < alpha_two


def test_lines_layer_empty_size(qtbot):
    layer = LinesLayer()
    assert layer.draw(np.empty((0, 0, 2)), 0.0, 0.0) == 0
    assert layer.image.isNull()


# --- Chart view ---

@pytest.fixture
def chart(qtbot):
    view = ParallelCoordinatesView()
    qtbot.addWidget(view)
    view.resize(900, 450)
    view.show()
    qtbot.waitExposed(view)
    return view


def test_chart_renders_rows_and_axes(qtbot, chart, sample_rows):
    with qtbot.waitSignal(chart.lines_drawn) as blocker:
        chart.render_rows(sample_rows, DEFAULT_AXES)
    assert blocker.args == [3, 3]
    assert set(chart.axis_items) == {a.key for a in DEFAULT_AXES}
    assert chart.message_text is None

    item = chart.axis_items["score"]
    assert item.title.endswith("(0-10)")
    assert item.tick_labels == [str(i) for i in range(11)]


def test_chart_empty_message(chart):
    chart.render_rows([], DEFAULT_AXES)
    assert chart.message_text == EMPTY_MESSAGE
    assert chart.drawn_count == 0


def test_chart_custom_message_replaced_by_data(chart, sample_rows):
    chart.show_message("Could not load data")
    assert chart.message_text == "Could not load data"
    chart.clear_message()
    chart.render_rows(sample_rows, DEFAULT_AXES)
    assert chart.message_text is None


def test_chart_drag_reorders_and_keeps_items(qtbot, chart, sample_rows):
    chart.render_rows(sample_rows, DEFAULT_AXES)
    items_before = chart.axis_items
    x_last = chart.renderer.axis_position("corruption")

    chart.begin_drag("score")
    assert items_before["score"].is_dragging
    assert items_before["score"].zValue() > items_before["gdp"].zValue()

    chart.drag_to("score", x_last - 1.0)
    assert chart.order[0] == "score"  # not committed yet
    assert chart.axis_items["score"].pos().x() == pytest.approx(x_last - 1.0)

    with qtbot.waitSignal(chart.order_changed) as blocker:
        chart.end_drag()
    new_order = blocker.args[0]
    assert new_order[-2:] == ("score", "corruption")
    assert chart.order == new_order

    items_after = chart.axis_items
    assert all(items_after[k] is items_before[k] for k in items_before)
    assert not items_after["score"].is_dragging

    positions = [items_after[k].pos().x() for k in new_order]
    assert positions == sorted(positions)


def test_chart_resize_relayouts(qtbot, chart, sample_rows):
    chart.render_rows(sample_rows, DEFAULT_AXES)
    chart.resize(1200, 600)
    qtbot.waitUntil(lambda: chart.renderer.size[0] > 1000)
    width, height = chart.renderer.size
    assert chart.layout_state.y_extent == (height - 24.0, 30.0)
    assert chart.renderer.axis_position("corruption") == pytest.approx(width - 30.0)
    assert math.isclose(chart.lines_layer.boundingRect().width(), width)


# --- Main window ---

def make_window(qtbot, loader) -> MainWindow:
    state = ExplorerState(year=2019)
    controller = YearDataController(loader)
    window = MainWindow(state, controller, autoload=False)
    qtbot.addWidget(window)
    window.show()
    qtbot.waitExposed(window)
    return window


def test_main_window_loads_year(qtbot, data_dir):
    window = make_window(qtbot, lambda year: load_year(year, data_dir=data_dir))
    with qtbot.waitSignal(window.controller.data_loaded, timeout=5000):
        window.reload()

    assert window.state.loaded_year == 2019
    assert window.chart.renderer.row_count == 4
    assert "Western Europe" in window.region_filter.regions()
    assert window.windowTitle().endswith("2019")
    # Atlantis has no corruption value
    assert window.chart.drawn_count == 3
    assert window.lbl_count.text() == "3 of 4 countries drawn"

    window.region_filter.checkbox("Sub-Saharan Africa").click()
    assert window.chart.renderer.row_count == 1

    window.mode_selector.rb_raw.click()
    assert window.state.display_mode is DisplayMode.RAW
    window.close()


def test_main_window_failure_without_data_shows_message(qtbot):
    def failing(year):
        raise DataLoadError(year, f"{year}.csv", "file not found")

    window = make_window(qtbot, failing)
    with qtbot.waitSignal(window.controller.load_failed, timeout=5000):
        window.reload()

    assert not window.state.has_data
    assert "Could not load data for 2019" in window.chart.message_text
    assert "file not found" in window.statusBar().currentMessage()
    window.close()


def test_main_window_failure_keeps_last_dataset(qtbot, data_dir):
    window = make_window(qtbot, lambda year: load_year(year, data_dir=data_dir))
    with qtbot.waitSignal(window.controller.data_loaded, timeout=5000):
        window.reload()

    with qtbot.waitSignal(window.controller.load_failed, timeout=5000):
        window.year_selector.set_year(2016)  # no 2016 file in data_dir

    assert window.state.loaded_year == 2019
    assert window.chart.renderer.row_count == 4
    assert window.chart.message_text is None
    window.close()
