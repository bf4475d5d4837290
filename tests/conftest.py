"""Pytest configuration and shared fixtures for the test suite."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from filesession.store import RecordStore


class FakeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed instant."""
    return FakeClock(datetime(2026, 1, 25, 10, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    """Storage directory path inside the test's temporary directory."""
    return tmp_path / "sess"


@pytest.fixture
def store(storage_dir: Path, clock: FakeClock) -> RecordStore:
    """Create a RecordStore with a 60 second timeout and a fake clock."""
    return RecordStore(storage_dir, default_timeout=60, clock=clock)
