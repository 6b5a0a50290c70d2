"""
Region Filter (Checkbox List)
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from PySide6.QtWidgets import QWidget, QVBoxLayout, QCheckBox, QGroupBox, QScrollArea
from PySide6.QtCore import Signal

from happinessviz.model.selection import RegionSelection

logger = logging.getLogger(__name__)


class RegionFilter(QWidget):
    # Emitted with the new set of selected regions after every user toggle
    selection_changed = Signal(object)  # frozenset[str]

    def __init__(self, selection: Optional[RegionSelection] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._selection = selection if selection is not None else RegionSelection()
        self._checkboxes: dict[str, QCheckBox] = {}

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        grp = QGroupBox("Regions")
        l_grp = QVBoxLayout(grp)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        self._list_widget = QWidget()
        self._list_layout = QVBoxLayout(self._list_widget)
        self._list_layout.addStretch()
        scroll.setWidget(self._list_widget)
        l_grp.addWidget(scroll)

        layout.addWidget(grp)

        self.set_regions(())

    # --- PUBLIC API ---

    def selection(self) -> frozenset[str]:
        return self._selection.members

    def regions(self) -> list[str]:
        """Checkbox labels in display order, World first."""
        return list(self._checkboxes)

    def checkbox(self, region: str) -> Optional[QCheckBox]:
        return self._checkboxes.get(region)

    def set_regions(self, regions: Sequence[str]) -> None:
        """Rebuild the checkbox list. Does not touch the selection."""
        for cb in self._checkboxes.values():
            self._list_layout.removeWidget(cb)
            cb.deleteLater()
        self._checkboxes.clear()

        for i, region in enumerate(RegionSelection.options(regions)):
            cb = QCheckBox(region)
            cb.clicked.connect(lambda _checked, r=region: self.on_region_clicked(r))
            # keep the trailing stretch last
            self._list_layout.insertWidget(i, cb)
            self._checkboxes[region] = cb

        self._sync_checkboxes()

    def set_selection(self, members: Sequence[str]) -> None:
        """Replace the selection programmatically (no signal)."""
        self._selection.replace(members)
        self._sync_checkboxes()

    def sync(self) -> None:
        """Re-read the shared selection, e.g. after it was reset elsewhere."""
        self._sync_checkboxes()

    # --- SLOTS ---

    def on_region_clicked(self, region: str) -> None:
        members = self._selection.toggle(region)
        logger.debug(f"Region selection: {sorted(members)}")
        self._sync_checkboxes()
        self.selection_changed.emit(members)

    def _sync_checkboxes(self) -> None:
        for region, cb in self._checkboxes.items():
            cb.blockSignals(True)
            try:
                cb.setChecked(self._selection.is_checked(region))
            finally:
                cb.blockSignals(False)
