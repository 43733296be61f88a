import threading

import pytest

from conftest import make_schedule
from poolclock.schedules import SchedulerLoop


def test_loop_ticks_immediately_and_stops(collection) -> None:
    collection.initialize_from_config([make_schedule()])
    ticked = threading.Event()
    collection.subscribe(lambda schedule_id, is_on: ticked.set())
    loop = SchedulerLoop(collection, interval_seconds=60)

    loop.start()
    try:
        assert ticked.wait(timeout=5)
        assert loop.running
    finally:
        loop.stop()

    assert not loop.running
    status = loop.status()
    assert status["tick_count"] >= 1
    assert status["last_tick"]["circuits"] == {"5": True}


def test_manual_tick_survives_collection_errors(collection, monkeypatch: pytest.MonkeyPatch) -> None:
    loop = SchedulerLoop(collection, interval_seconds=1)

    def explode(*_args, **_kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(collection, "run_tick", explode)
    assert loop.tick() is None
    assert loop.status()["tick_count"] == 0


def test_interval_must_be_positive(collection) -> None:
    with pytest.raises(ValueError):
        SchedulerLoop(collection, interval_seconds=0)
