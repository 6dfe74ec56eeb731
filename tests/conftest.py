from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from mediaservices import MediaContext
from mediaservices.application import OperationTracker
from mediaservices.infrastructure import InMemoryEntityStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    async def async_sleep(self, seconds: float) -> None:
        self.sleep(seconds)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture()
def tracker(store, clock) -> OperationTracker:
    return OperationTracker(store, sleep=clock.sleep, async_sleep=clock.async_sleep, clock=clock)


@pytest.fixture()
def context(store, tracker) -> MediaContext:
    return MediaContext(store, tracker=tracker, origin_poll_interval=10.0)
