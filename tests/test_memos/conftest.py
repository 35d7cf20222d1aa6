"""Shared fixtures for memo store tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from memos.store import MemoStore


class FakeClock:
    """Deterministic clock: each call returns the current instant, then ticks."""

    def __init__(self, start: datetime, tick: timedelta = timedelta(seconds=1)) -> None:
        self.now = start
        self.tick = tick

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.tick
        return current

    def set(self, value: datetime) -> None:
        self.now = value


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture()
def memos_dir(tmp_path: Path) -> Path:
    return tmp_path / "data" / "memos"


@pytest.fixture()
def store(memos_dir: Path, clock: FakeClock) -> MemoStore:
    return MemoStore(memos_dir, clock=clock)
