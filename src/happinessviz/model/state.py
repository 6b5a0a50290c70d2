"""
Explorer State (Data Model)
===========================
This module defines the central data structure for the running application.

Why is this file needed?
------------------------
1. State Management: It holds the loaded year, its rows, the region selection
   and the display mode in one place.
2. Decoupling: Views read from this object; Controllers write to this object.

Classes:
    ExplorerState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional

from happinessviz import config
from happinessviz.model.loader import LoadResult
from happinessviz.model.rows import DEFAULT_AXES, AxisDescriptor, DisplayMode, Row
from happinessviz.model.selection import RegionSelection

logger = logging.getLogger(__name__)


@dataclass
class ExplorerState:
    """
    Holds everything the window shows. Pass this instance to your Controllers and Views.
    """
    year: int = config.DEFAULT_YEAR
    loaded_year: Optional[int] = None
    rows: tuple[Row, ...] = ()
    regions: tuple[str, ...] = ()
    selection: RegionSelection = field(default_factory=RegionSelection)
    display_mode: DisplayMode = DisplayMode.NORMALIZED
    axes: tuple[AxisDescriptor, ...] = DEFAULT_AXES

    @property
    def has_data(self) -> bool:
        return self.loaded_year is not None

    def apply_load_result(self, result: LoadResult) -> bool:
        """
        Replace rows and regions wholesale.

        Returns:
            True if the region selection had to be reset to World.
        """
        self.loaded_year = result.year
        self.rows = result.rows
        self.regions = result.regions
        reset = self.selection.validate(result.regions)
        logger.debug(f"State now holds {len(self.rows)} rows for {result.year}")
        return reset

    def visible_rows(self) -> list[Row]:
        return self.selection.filter(self.rows)

