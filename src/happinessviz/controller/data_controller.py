"""
Year Data Controller
====================
Starts background loads and decides which results are still wanted.

Every request bumps a generation counter. A worker reports back with the
generation it was started for, and anything older than the latest request is
dropped, so a slow read of 2016 can never overwrite a fast read of 2019 that
the user asked for afterwards.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from happinessviz.controller.workers import Loader, YearLoadWorker
from happinessviz.model.loader import LoadResult, load_year

logger = logging.getLogger(__name__)


class YearDataController(QObject):
    loading_started = Signal(int)
    data_loaded = Signal(object)  # LoadResult
    load_failed = Signal(int, str)

    def __init__(self, loader: Loader = load_year, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._loader = loader
        self._generation: int = 0
        self._pending_year: Optional[int] = None
        self._workers: set[YearLoadWorker] = set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending_year(self) -> Optional[int]:
        """Year of the latest request that has not reported back yet."""
        return self._pending_year

    @property
    def is_busy(self) -> bool:
        return bool(self._workers)

    def request_year(self, year: int) -> int:
        """Start loading ``year``. Returns the generation tag of the request."""
        self._generation += 1
        seq = self._generation
        self._pending_year = year

        worker = YearLoadWorker(seq, year, self._loader)
        worker.loaded.connect(self._on_loaded)
        worker.failed.connect(self._on_failed)
        worker.finished.connect(lambda w=worker: self._release(w))
        self._workers.add(worker)

        logger.info(f"Requesting {year} (request #{seq})")
        self.loading_started.emit(year)
        worker.start()
        return seq

    def shutdown(self) -> None:
        """Invalidate outstanding requests and wait for their threads."""
        self._generation += 1
        self._pending_year = None
        for worker in list(self._workers):
            worker.wait()
        self._workers.clear()

    # --- SLOTS ---

    def _on_loaded(self, seq: int, result: LoadResult) -> None:
        if seq != self._generation:
            logger.debug(f"Discarding stale result for {result.year} (request #{seq}, latest #{self._generation})")
            return
        self._pending_year = None
        self.data_loaded.emit(result)

    def _on_failed(self, seq: int, year: int, message: str) -> None:
        if seq != self._generation:
            logger.debug(f"Discarding stale failure for {year} (request #{seq}, latest #{self._generation})")
            return
        self._pending_year = None
        self.load_failed.emit(year, message)

    def _release(self, worker: YearLoadWorker) -> None:
        self._workers.discard(worker)
        worker.deleteLater()
