"""Unit tests for the settings TTL cache"""

import logging
import threading
import time
import pytest
from datetime import date
from ledger_insights.infrastructure.cache.settings_cache import (
    SETTING_BUDGET_WARNING_THRESHOLD,
    SETTING_INSS_CEILING,
    SETTING_INSS_RATE,
    SETTING_MANUAL_BRACKET,
    SETTING_PRO_LABORE,
    SETTING_RECORD_START_DATE,
    SettingsCache,
    build_cached_settings,
)


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self):
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingSettingsStore:
    """Settings store counting reads, optionally slow"""

    def __init__(self, values=None, delay: float = 0.0):
        self.values = dict(values or {})
        self.delay = delay
        self.reads = 0
        self._lock = threading.Lock()

    def get_values(self):
        with self._lock:
            self.reads += 1
        if self.delay:
            time.sleep(self.delay)
        return dict(self.values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> CountingSettingsStore:
    return CountingSettingsStore(
        {
            SETTING_PRO_LABORE: "5000",
            SETTING_INSS_CEILING: "7786.02",
            SETTING_INSS_RATE: "11",
            SETTING_RECORD_START_DATE: "2024-01-01",
            SETTING_MANUAL_BRACKET: "2",
        }
    )


def test_first_get_reads_store(store, clock):
    """Test initial get refreshes and derives INSS"""
    cache = SettingsCache(store, ttl_seconds=300, clock=clock)

    value = cache.get()

    assert store.reads == 1
    assert cache.refresh_count == 1
    assert cache.last_refresh == clock.now
    assert value.record_start_date == date(2024, 1, 1)
    assert value.manual_bracket == 2
    assert value.inss_amount == pytest.approx(550)


def test_fresh_reads_skip_store(store, clock):
    """Test reads within the TTL are served from memory"""
    cache = SettingsCache(store, ttl_seconds=300, clock=clock)

    first = cache.get()
    clock.advance(299)
    second = cache.get()

    assert store.reads == 1
    assert second is first


def test_expired_entry_refreshes(store, clock):
    """Test a read after the TTL sees new store values"""
    cache = SettingsCache(store, ttl_seconds=300, clock=clock)
    cache.get()

    store.values[SETTING_MANUAL_BRACKET] = "4"
    clock.advance(300)
    value = cache.get()

    assert store.reads == 2
    assert value.manual_bracket == 4


def test_invalidate_forces_refresh(store, clock):
    """Test invalidate makes the next get read the store even within the TTL"""
    cache = SettingsCache(store, ttl_seconds=300, clock=clock)
    cache.get()

    store.values[SETTING_PRO_LABORE] = "3000"
    cache.invalidate()
    assert cache.last_refresh is None

    value = cache.get()

    assert store.reads == 2
    assert value.inss_amount == pytest.approx(330)


def test_concurrent_cold_reads_refresh_once():
    """Test a burst of concurrent misses costs a single store read"""
    store = CountingSettingsStore(
        {SETTING_PRO_LABORE: "5000", SETTING_INSS_CEILING: "8000", SETTING_INSS_RATE: "11"},
        delay=0.05,
    )
    cache = SettingsCache(store, ttl_seconds=300)
    thread_count = 16
    barrier = threading.Barrier(thread_count)
    results = []
    results_lock = threading.Lock()

    def reader():
        barrier.wait()
        value = cache.get()
        with results_lock:
            results.append(value)

    threads = [threading.Thread(target=reader) for _ in range(thread_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert store.reads == 1
    assert cache.refresh_count == 1
    assert len(results) == thread_count
    assert all(r == results[0] for r in results)


def test_refresh_logs_reason(store, clock, caplog):
    """Test structured refresh log lines carry the reason"""
    cache = SettingsCache(store, ttl_seconds=300, clock=clock)

    with caplog.at_level(logging.INFO):
        cache.get()
        clock.advance(301)
        cache.get()
        cache.invalidate()
        cache.get()

    reasons = [r.reason for r in caplog.records if getattr(r, "step", None) == "settings_refresh"]
    assert reasons == ["initial", "expired", "invalidated"]


def test_build_cached_settings_defaults():
    """Test empty store yields defaults"""
    value = build_cached_settings({})

    assert value.record_start_date is None
    assert value.inss_amount == 0
    assert value.budget_warning_threshold == 100
    assert value.manual_bracket == 0


def test_build_cached_settings_tolerates_bad_values(caplog):
    """Test unparseable values fall back to defaults with a warning"""
    raw = {
        SETTING_PRO_LABORE: "abc",
        SETTING_RECORD_START_DATE: "01/02/2024",
        SETTING_MANUAL_BRACKET: "9",
        SETTING_BUDGET_WARNING_THRESHOLD: "80",
    }

    with caplog.at_level(logging.WARNING):
        value = build_cached_settings(raw)

    assert value.pro_labore == 0
    assert value.record_start_date is None
    assert value.manual_bracket == 0
    assert value.budget_warning_threshold == 80
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 3
