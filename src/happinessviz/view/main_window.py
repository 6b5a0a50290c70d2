"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, the control panel and the
chart.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects the controls (year, regions, scale) and global actions
   (File -> Reload) to the load controller and the chart.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import QMainWindow, QWidget, QVBoxLayout, QSplitter, QLabel
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent, QKeySequence

from happinessviz.controller.data_controller import YearDataController
from happinessviz.model.loader import LoadResult
from happinessviz.model.rows import DisplayMode
from happinessviz.model.state import ExplorerState
from happinessviz.view.widgets.display_mode import DisplayModeSelector
from happinessviz.view.widgets.parallel_coordinates import ParallelCoordinatesView
from happinessviz.view.widgets.region_filter import RegionFilter
from happinessviz.view.widgets.year_selector import YearSelector

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Happiness Explorer"


class MainWindow(QMainWindow):
    def __init__(
        self,
        state: ExplorerState,
        controller: Optional[YearDataController] = None,
        autoload: bool = True,
    ) -> None:
        super().__init__()
        self.state: ExplorerState = state
        self.controller: YearDataController = controller if controller is not None else YearDataController(parent=self)

        self.update_window_title()
        self.resize(1400, 800)

        # --- SPLITTER (CONTENT AREA) ---
        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # --- LEFT SIDE: Controls ---
        controls = QWidget()
        l_controls = QVBoxLayout(controls)

        self.year_selector = YearSelector(year=self.state.year)
        # the slider clamps out-of-range years; keep the state in step
        self.state.year = self.year_selector.year
        l_controls.addWidget(self.year_selector)

        self.mode_selector = DisplayModeSelector(self.state.display_mode)
        l_controls.addWidget(self.mode_selector)

        self.region_filter = RegionFilter(self.state.selection)
        l_controls.addWidget(self.region_filter, stretch=1)

        splitter.addWidget(controls)

        # --- RIGHT SIDE: Chart ---
        self.chart = ParallelCoordinatesView()
        splitter.addWidget(self.chart)

        # Set initial proportions (1 part sidebar : 4 parts chart)
        splitter.setSizes([280, 1120])
        splitter.setStretchFactor(1, 1)

        # --- STATUS BAR ---
        self.lbl_count = QLabel("")
        self.statusBar().addPermanentWidget(self.lbl_count)

        # --- SIGNAL CONNECTIONS ---
        # 1. Controls -> State / Loads
        self.year_selector.year_changed.connect(self.on_year_changed)
        self.mode_selector.mode_changed.connect(self.on_mode_changed)
        self.region_filter.selection_changed.connect(self.on_selection_changed)

        # 2. Load controller -> Window
        self.controller.loading_started.connect(self.on_loading_started)
        self.controller.data_loaded.connect(self.on_data_loaded)
        self.controller.load_failed.connect(self.on_load_failed)

        # 3. Chart -> Status
        self.chart.lines_drawn.connect(self.on_lines_drawn)
        self.chart.order_changed.connect(self.on_order_changed)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        # Initial Render (empty until the first load lands)
        self.refresh_chart()
        if autoload:
            self.reload()

    def _create_actions(self) -> None:
        self.act_reload = QAction("&Reload", self)
        self.act_reload.setShortcut(QKeySequence("F5"))
        self.act_reload.setStatusTip("Load the selected year again")
        self.act_reload.triggered.connect(self.reload)

        self.act_exit = QAction("E&xit", self)
        self.act_exit.setShortcut(QKeySequence.Quit)
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_reload)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

    # --- HELPER METHODS ---

    def update_window_title(self) -> None:
        title = VISIBLE_APP_NAME
        if self.state.loaded_year is not None:
            title += f" - {self.state.loaded_year}"
        self.setWindowTitle(title)

    def refresh_chart(self) -> None:
        """Push the filtered rows of the current state into the chart."""
        self.chart.render_rows(self.state.visible_rows(), self.state.axes, self.state.display_mode)

    def reload(self) -> None:
        """(Re)request the selected year. This is the only retry path after a failure."""
        self.controller.request_year(self.state.year)

    # --- SLOTS ---

    def on_year_changed(self, year: int) -> None:
        self.state.year = year
        self.controller.request_year(year)

    def on_mode_changed(self, mode: str) -> None:
        self.state.display_mode = DisplayMode(mode)
        self.refresh_chart()

    def on_selection_changed(self, members: frozenset) -> None:
        self.refresh_chart()

    def on_loading_started(self, year: int) -> None:
        self.statusBar().showMessage(f"Loading {year}...")

    def on_data_loaded(self, result: LoadResult) -> None:
        reset = self.state.apply_load_result(result)
        self.region_filter.set_regions(result.regions)

        self.chart.clear_message()
        self.refresh_chart()
        self.update_window_title()

        message = f"Loaded {result.year}: {len(result.rows)} countries"
        if reset:
            message += "; region selection reset to World"
        self.statusBar().showMessage(message, 5000)

    def on_load_failed(self, year: int, message: str) -> None:
        logger.error(f"Loading {year} failed: {message}")
        self.statusBar().showMessage(f"Failed to load {year}: {message}")
        if not self.state.has_data:
            self.chart.show_message(f"Could not load data for {year}.\n{message}")

    def on_lines_drawn(self, drawn: int, total: int) -> None:
        self.lbl_count.setText(f"{drawn} of {total} countries drawn")

    def on_order_changed(self, order: tuple) -> None:
        self.statusBar().showMessage(f"Axis order: {', '.join(order)}", 3000)

    def closeEvent(self, event: QCloseEvent, /) -> None:
        """Wait for background loads before the window goes away."""
        self.controller.shutdown()
        event.accept()
