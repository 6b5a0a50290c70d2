"""
Display Mode Selector (Raw / 0-10)
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QWidget, QHBoxLayout, QVBoxLayout, QRadioButton, QButtonGroup, QGroupBox
from PySide6.QtCore import Signal

from happinessviz.model.rows import DisplayMode


class DisplayModeSelector(QWidget):
    # Emitted with the DisplayMode value ("raw" / "normalized")
    mode_changed = Signal(str)

    def __init__(self, mode: DisplayMode = DisplayMode.NORMALIZED, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        grp = QGroupBox("Scale")
        hbox = QHBoxLayout(grp)

        self.rb_raw = QRadioButton("Raw")
        self.rb_normalized = QRadioButton("0-10")
        self.rb_normalized.setToolTip("Each axis rescaled to 0-10 between its minimum and maximum")

        self._group = QButtonGroup(self)
        self._buttons: dict[DisplayMode, QRadioButton] = {
            DisplayMode.RAW: self.rb_raw,
            DisplayMode.NORMALIZED: self.rb_normalized,
        }
        for button in self._buttons.values():
            self._group.addButton(button)
            hbox.addWidget(button)
        hbox.addStretch()

        layout.addWidget(grp)

        self._buttons[DisplayMode(mode)].setChecked(True)
        self.rb_raw.toggled.connect(self.on_toggled)

    @property
    def mode(self) -> DisplayMode:
        return DisplayMode.RAW if self.rb_raw.isChecked() else DisplayMode.NORMALIZED

    def set_mode(self, mode: DisplayMode) -> None:
        self._buttons[DisplayMode(mode)].setChecked(True)

    def on_toggled(self, _checked: bool) -> None:
        # One toggled() per switch is enough: the raw button flips every time
        self.mode_changed.emit(self.mode.value)
