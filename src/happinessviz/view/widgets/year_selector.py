"""
Year Selector
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QLabel, QSlider, QGroupBox
from PySide6.QtCore import Signal, Qt

from happinessviz import config


class YearSelector(QWidget):
    # Emitted with the new year whenever the slider value changes
    year_changed = Signal(int)

    def __init__(
        self,
        year: int = config.DEFAULT_YEAR,
        minimum: int = config.YEAR_MIN,
        maximum: int = config.YEAR_MAX,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        if minimum > maximum:
            raise ValueError(f"Year range is empty: {minimum} > {maximum}")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        grp = QGroupBox("Year")
        l_grp = QVBoxLayout(grp)

        self.lbl_year = QLabel()
        self.lbl_year.setAlignment(Qt.AlignCenter)
        l_grp.addWidget(self.lbl_year)

        hbox = QHBoxLayout()
        self.lbl_min = QLabel(str(minimum))
        hbox.addWidget(self.lbl_min)

        self.slider = QSlider(Qt.Horizontal)
        self.slider.setRange(minimum, maximum)
        self.slider.setSingleStep(1)
        self.slider.setPageStep(1)
        self.slider.setTickPosition(QSlider.TicksBelow)
        self.slider.setTickInterval(1)
        # QSlider clamps out-of-range values to its bounds
        self.slider.setValue(year)
        hbox.addWidget(self.slider, stretch=1)

        self.lbl_max = QLabel(str(maximum))
        hbox.addWidget(self.lbl_max)
        l_grp.addLayout(hbox)

        layout.addWidget(grp)

        self._update_label(self.slider.value())
        self.slider.valueChanged.connect(self.on_slider_changed)

    # --- PROPERTIES ---

    @property
    def year(self) -> int:
        return self.slider.value()

    @property
    def bounds(self) -> tuple[int, int]:
        return self.slider.minimum(), self.slider.maximum()

    def set_year(self, year: int) -> None:
        """Move the slider; emits ``year_changed`` if the (clamped) value differs."""
        self.slider.setValue(year)

    # --- SLOTS ---

    def on_slider_changed(self, value: int) -> None:
        self._update_label(value)
        self.year_changed.emit(value)

    def _update_label(self, value: int) -> None:
        self.lbl_year.setText(f"Year: {value}")
