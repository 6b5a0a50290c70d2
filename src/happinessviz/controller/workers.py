"""
Background Workers (Threading)
==============================
This module contains QThread subclasses for handling file reads.

Why is this file needed?
------------------------
1. Responsiveness: Reading a year's CSV on the main thread would freeze the
   slider while the file is parsed. These classes push the read to a
   background thread.
2. Signals: They hand the result (or the error) back to the GUI thread using
   queued Qt Signals.

Classes:
    YearLoadWorker: Loads one year's dataset.
"""
from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QThread, Signal

from happinessviz.model.loader import DataLoadError, LoadResult, load_year

logger = logging.getLogger(__name__)

Loader = Callable[[int], LoadResult]


class YearLoadWorker(QThread):
    # (sequence, LoadResult)
    loaded = Signal(int, object)
    # (sequence, year, message)
    failed = Signal(int, int, str)

    def __init__(self, seq: int, year: int, loader: Loader = load_year) -> None:
        super().__init__()
        self.seq = seq
        self.year = year
        self._loader = loader

    def run(self) -> None:
        try:
            logger.debug(f"Worker #{self.seq} loading {self.year}...")
            result = self._loader(self.year)
            self.loaded.emit(self.seq, result)
        except DataLoadError as e:
            logger.error(f"Error in YearLoadWorker: {e}")
            self.failed.emit(self.seq, self.year, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in YearLoadWorker for {self.year}")
            self.failed.emit(self.seq, self.year, f"Unexpected error: {e}")
