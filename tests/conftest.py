"""Pytest fixtures for testing"""

import pytest
from collections import Counter
from datetime import date
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from ledger_insights.domain.ledger import LedgerSnapshot
from ledger_insights.domain.models import CachedSettings
from ledger_insights.infrastructure.database.models import Base


TODAY = date(2024, 6, 15)


class StaticSettings:
    """Settings source returning a fixed CachedSettings"""

    def __init__(self, value: CachedSettings | None = None):
        self.value = value or CachedSettings()

    def get(self) -> CachedSettings:
        return self.value


class CountingStore:
    """Wraps a LedgerStore and counts calls per lookup"""

    def __init__(self, inner):
        self.inner = inner
        self.calls = Counter()

    def __getattr__(self, name):
        target = getattr(self.inner, name)
        if not callable(target):
            return target

        def counted(*args, **kwargs):
            self.calls[name] += 1
            return target(*args, **kwargs)

        return counted

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


@pytest.fixture
def today() -> date:
    """Fixed reference date (mid June 2024)"""
    return TODAY


@pytest.fixture
def snapshot() -> LedgerSnapshot:
    """Empty in-memory ledger, filled by each test"""
    return LedgerSnapshot()


@pytest.fixture
def settings_source() -> StaticSettings:
    """Settings without a record-start date"""
    return StaticSettings()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Shared in-memory SQLite engine with all tables created"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(engine: Engine) -> Generator[Session, None, None]:
    """Create test database and session"""
    TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def counting_store(snapshot: LedgerSnapshot) -> CountingStore:
    """The snapshot ledger wrapped with per-lookup call counts"""
    return CountingStore(snapshot)
