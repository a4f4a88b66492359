"""
Shared test fixtures
"""

import os
import pytest
from datetime import datetime, timezone, timedelta

from core_ledger.config import LedgerConfig


class FakeClock:
    """Controllable replacement for the wall clock"""

    def __init__(self, start: datetime = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now = self.now + timedelta(days=days, hours=hours)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_config(monkeypatch):
    """LedgerConfig factory that ignores LEDGER_* variables and any .env file"""
    for name in list(os.environ):
        if name.upper().startswith("LEDGER_"):
            monkeypatch.delenv(name)

    def factory(**overrides):
        return LedgerConfig(_env_file=None, **overrides)

    return factory
