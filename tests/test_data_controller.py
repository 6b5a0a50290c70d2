import threading

import pytest

from happinessviz.controller.data_controller import YearDataController
from happinessviz.model.loader import DataLoadError, LoadResult, load_year
from happinessviz.model.rows import Row

pytestmark = pytest.mark.integration


def make_result(year: int) -> LoadResult:
    return LoadResult(year, (Row(f"Country {year}", score=float(year - 2010)),), ("World",))


@pytest.fixture
def controllers():
    created: list[YearDataController] = []

    def factory(loader):
        controller = YearDataController(loader)
        created.append(controller)
        return controller

    yield factory
    for controller in created:
        controller.shutdown()


def test_successful_load_emits_result(qtbot, controllers):
    controller = controllers(make_result)
    with qtbot.waitSignal(controller.loading_started) as started:
        with qtbot.waitSignal(controller.data_loaded, timeout=5000) as blocker:
            controller.request_year(2017)
    assert started.args == [2017]
    assert blocker.args[0].year == 2017
    assert controller.pending_year is None


def test_real_loader_through_worker(qtbot, controllers, data_dir):
    controller = controllers(lambda year: load_year(year, data_dir=data_dir))
    with qtbot.waitSignal(controller.data_loaded, timeout=5000) as blocker:
        controller.request_year(2019)
    result = blocker.args[0]
    assert "Western Europe" in result.regions


def test_load_error_is_reported(qtbot, controllers):
    def failing(year):
        raise DataLoadError(year, f"/nowhere/{year}.csv", "file not found")

    controller = controllers(failing)
    with qtbot.waitSignal(controller.load_failed, timeout=5000) as blocker:
        controller.request_year(2016)
    year, message = blocker.args
    assert year == 2016
    assert "file not found" in message


def test_unexpected_error_is_reported_not_swallowed(qtbot, controllers):
    def broken(year):
        raise RuntimeError("boom")

    controller = controllers(broken)
    with qtbot.waitSignal(controller.load_failed, timeout=5000) as blocker:
        controller.request_year(2015)
    assert "boom" in blocker.args[1]


def test_superseded_result_is_discarded(qtbot, controllers):
    gate = threading.Event()

    def slow_for_2016(year):
        if year == 2016:
            gate.wait(5)
        return make_result(year)

    controller = controllers(slow_for_2016)
    received: list[int] = []
    controller.data_loaded.connect(lambda result: received.append(result.year))

    first = controller.request_year(2016)
    with qtbot.waitSignal(controller.data_loaded, timeout=5000) as blocker:
        second = controller.request_year(2019)
    assert second > first
    assert blocker.args[0].year == 2019

    gate.set()
    qtbot.waitUntil(lambda: not controller.is_busy, timeout=5000)
    assert received == [2019]


def test_superseded_failure_is_discarded(qtbot, controllers):
    gate = threading.Event()

    def loader(year):
        if year == 2015:
            gate.wait(5)
            raise DataLoadError(year, "x", "late failure")
        return make_result(year)

    controller = controllers(loader)
    failures: list[int] = []
    controller.load_failed.connect(lambda year, message: failures.append(year))

    controller.request_year(2015)
    with qtbot.waitSignal(controller.data_loaded, timeout=5000):
        controller.request_year(2018)

    gate.set()
    qtbot.waitUntil(lambda: not controller.is_busy, timeout=5000)
    assert failures == []
