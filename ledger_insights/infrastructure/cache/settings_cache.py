"""Thread-safe TTL cache for slowly-changing application settings"""

import logging
import threading
import time
from datetime import date
from typing import Callable, Mapping, Optional, Tuple

from ledger_insights.config import settings
from ledger_insights.domain.ledger import SettingsStore
from ledger_insights.domain.models import CachedSettings
from ledger_insights.domain.tax import ANEXO_III, calculate_inss
from ledger_insights.infrastructure.observability.logging import log_settings_refresh
from ledger_insights.infrastructure.observability.metrics import (
    settings_cache_counter,
    settings_refresh_histogram,
)

logger = logging.getLogger(__name__)

SETTING_PRO_LABORE = "pro_labore"
SETTING_INSS_CEILING = "inss_ceiling"
SETTING_INSS_RATE = "inss_rate"
SETTING_BUDGET_WARNING_THRESHOLD = "budget_warning_threshold"
SETTING_RECORD_START_DATE = "record_start_date"  # YYYY-MM-DD
SETTING_MANUAL_BRACKET = "manual_bracket"

DEFAULT_BUDGET_WARNING_THRESHOLD = 100.0


class SettingsCache:
    """
    Settings served from memory, refreshed from the backing store when stale.

    Concurrency:
    - Fresh reads take no lock; the value and its refresh stamp are published
      together as one tuple.
    - A stale read takes the lock, re-checks freshness, and only then reads the
      store, so a burst of concurrent misses costs a single store read.
    - invalidate() takes the same lock as a refresh.
    """

    def __init__(
        self,
        store: SettingsStore,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.ttl = settings.settings_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # (value, last_refresh); last_refresh is None until the first refresh
        # and again after invalidate()
        self._entry: Tuple[CachedSettings, Optional[float]] = (CachedSettings(), None)
        self._refresh_count = 0

    @property
    def last_refresh(self) -> Optional[float]:
        return self._entry[1]

    @property
    def refresh_count(self) -> int:
        return self._refresh_count

    def _is_fresh(self, last_refresh: Optional[float]) -> bool:
        return last_refresh is not None and self._clock() - last_refresh < self.ttl

    def get(self) -> CachedSettings:
        """Cached settings, refreshing from the store at most once per TTL"""
        value, last_refresh = self._entry
        if self._is_fresh(last_refresh):
            settings_cache_counter.labels(result="hit").inc()
            return value

        with self._lock:
            value, last_refresh = self._entry
            if self._is_fresh(last_refresh):
                # Another thread refreshed while we waited for the lock
                settings_cache_counter.labels(result="hit").inc()
                return value

            settings_cache_counter.labels(result="miss").inc()
            if self._refresh_count == 0:
                reason = "initial"
            elif last_refresh is None:
                reason = "invalidated"
            else:
                reason = "expired"

            start = time.perf_counter()
            fresh = build_cached_settings(self.store.get_values())
            duration = time.perf_counter() - start

            self._entry = (fresh, self._clock())
            self._refresh_count += 1

            settings_refresh_histogram.observe(duration)
            log_settings_refresh(reason, fresh.inss_amount, fresh.manual_bracket, duration * 1000)
            return fresh

    def invalidate(self) -> None:
        """Force the next get() to read the backing store"""
        with self._lock:
            value, _ = self._entry
            self._entry = (value, None)
            settings_cache_counter.labels(result="invalidated").inc()
            logger.info("Settings cache invalidated")


def build_cached_settings(raw: Mapping[str, str]) -> CachedSettings:
    """Parse raw key/value settings and derive the INSS amount"""
    pro_labore = _parse_float(raw, SETTING_PRO_LABORE)
    inss_ceiling = _parse_float(raw, SETTING_INSS_CEILING)
    inss_rate = _parse_float(raw, SETTING_INSS_RATE)

    threshold = _parse_float(raw, SETTING_BUDGET_WARNING_THRESHOLD)
    if threshold == 0:
        threshold = DEFAULT_BUDGET_WARNING_THRESHOLD

    manual_bracket = _parse_int(raw, SETTING_MANUAL_BRACKET)
    if not 0 <= manual_bracket <= len(ANEXO_III):
        logger.warning("Ignoring out-of-range manual bracket", extra={"manual_bracket": manual_bracket})
        manual_bracket = 0

    return CachedSettings(
        record_start_date=_parse_date(raw, SETTING_RECORD_START_DATE),
        pro_labore=pro_labore,
        inss_ceiling=inss_ceiling,
        inss_rate=inss_rate,
        inss_amount=calculate_inss(pro_labore, inss_ceiling, inss_rate / 100),
        budget_warning_threshold=threshold,
        manual_bracket=manual_bracket,
    )


def _raw_value(raw: Mapping[str, str], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None or not str(value).strip():
        return None
    return str(value).strip()


def _parse_float(raw: Mapping[str, str], key: str) -> float:
    value = _raw_value(raw, key)
    if value is None:
        return 0.0
    try:
        return float(value)
    except ValueError:
        logger.warning("Invalid numeric setting", extra={"key": key, "value": value})
        return 0.0


def _parse_int(raw: Mapping[str, str], key: str) -> int:
    value = _raw_value(raw, key)
    if value is None:
        return 0
    try:
        return int(value)
    except ValueError:
        logger.warning("Invalid integer setting", extra={"key": key, "value": value})
        return 0


def _parse_date(raw: Mapping[str, str], key: str) -> Optional[date]:
    value = _raw_value(raw, key)
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning("Invalid date setting", extra={"key": key, "value": value})
        return None
