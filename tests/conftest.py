import os

# settings are read at import time, point them at throwaway targets first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_BACKEND", "sql")
os.environ.setdefault("SHOP_API_URL", "http://shop.test")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.data.database import Base
from storefront.data.models import StorageEntryModel  # noqa: F401
from storefront.repos.storage_repo import SqlStorage


class FakeClock:
    """Epoch milliseconds that only move when a test says so."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeTimer:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def fire(self):
        if not self.cancelled:
            self.callback()

    def cancel(self):
        self.cancelled = True


class FakeTimerFactory:
    """Records every watchdog the session starts instead of spawning threads."""

    def __init__(self):
        self.timers = []

    def __call__(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if not t.cancelled]


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def storage(engine):
    return SqlStorage(sessionmaker(bind=engine, autoflush=False, autocommit=False))


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def timers():
    return FakeTimerFactory()
