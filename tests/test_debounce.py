"""Tests for the change debouncer."""

import pytest

from viewday.debounce import Debouncer


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def calls() -> list[float]:
    return []


@pytest.fixture
def debouncer(clock: FakeClock, calls: list[float]) -> Debouncer:
    return Debouncer(lambda: calls.append(clock.now), cooldown=1.0, clock=clock)


def test_first_change_runs_immediately(debouncer: Debouncer, calls: list[float]):
    assert debouncer.notify() is True
    assert calls == [100.0]
    assert not debouncer.pending


def test_burst_is_coalesced(debouncer: Debouncer, clock: FakeClock, calls: list[float]):
    debouncer.notify()
    for _ in range(5):
        clock.advance(0.1)
        assert debouncer.notify() is False

    assert calls == [100.0]
    assert debouncer.pending


def test_change_after_window_runs_again(debouncer: Debouncer, clock: FakeClock, calls: list[float]):
    debouncer.notify()
    clock.advance(1.0)
    assert debouncer.notify() is True
    assert calls == [100.0, 101.0]


def test_flush_waits_for_the_window(debouncer: Debouncer, clock: FakeClock, calls: list[float]):
    debouncer.notify()
    clock.advance(0.5)
    debouncer.notify()

    assert debouncer.flush() is False
    clock.advance(0.5)
    assert debouncer.flush() is True
    assert calls == [100.0, 101.0]
    assert not debouncer.pending
    assert debouncer.flush() is False


def test_flush_without_pending_changes_does_nothing(debouncer: Debouncer, clock: FakeClock, calls: list[float]):
    clock.advance(10)
    assert debouncer.flush() is False
    assert calls == []


def test_failing_callback_is_contained(clock: FakeClock):
    def boom():
        raise RuntimeError("scan failed")

    debouncer = Debouncer(boom, cooldown=1.0, clock=clock)
    assert debouncer.notify() is True
    clock.advance(0.2)
    assert debouncer.notify() is False
