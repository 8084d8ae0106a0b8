"""Root conftest — shared test configuration."""

import os

import pytest

from tests.factories import FakeClock

# Ensure tests never touch a developer's database file
os.environ.setdefault("BALLOTKEEPER_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
