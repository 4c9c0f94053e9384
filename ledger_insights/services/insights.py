"""Reporting facade - wires stores, settings cache and engines; records metrics and logs"""

import logging
import time
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Callable, Iterable, Iterator, List, Optional

from ledger_insights.config import settings
from ledger_insights.domain.analytics import TrendComposer
from ledger_insights.domain.health_score import HealthScoreEngine
from ledger_insights.domain.ledger import GoalStore, LedgerStore
from ledger_insights.domain.models import (
    CategoryShare,
    ComparisonResult,
    Goal,
    HealthScore,
    MonthlySummary,
    Recommendation,
    TrendPoint,
)
from ledger_insights.domain.summary import BatchSummaryAggregator
from ledger_insights.domain.tax import BracketInfo, TaxCalculation, bracket_info, calculate_tax
from ledger_insights.infrastructure.cache.settings_cache import SettingsCache
from ledger_insights.infrastructure.database.repositories import HealthScoreRepository
from ledger_insights.infrastructure.observability.logging import log_health_score
from ledger_insights.infrastructure.observability.metrics import (
    aggregation_duration_histogram,
    record_health_score,
    record_summaries,
)
from ledger_insights.utils.date_utils import YearMonth

logger = logging.getLogger(__name__)


class InsightsService:
    """
    Read-only reports for an already-authorized account set.

    Account resolution (individual + joint/group accounts) happens before these
    calls; the service only aggregates and scores.
    """

    def __init__(
        self,
        store: LedgerStore,
        goals: GoalStore,
        settings_cache: SettingsCache,
        history: Optional[HealthScoreRepository] = None,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.goals = goals
        self.settings_cache = settings_cache
        self.history = history
        self._today = today
        self.aggregator = BatchSummaryAggregator(store)
        self.trends = TrendComposer(self.aggregator, settings_cache, today=today)
        self.health = HealthScoreEngine(self.aggregator, settings_cache, today=today, now=now)

    @contextmanager
    def _timed(self, report: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            aggregation_duration_histogram.labels(report=report).observe(time.perf_counter() - start)

    # Summaries

    def monthly_summaries(
        self, account_ids: Iterable[int], start: YearMonth, end: YearMonth
    ) -> List[MonthlySummary]:
        began = time.perf_counter()
        summaries = self.aggregator.aggregate(account_ids, start, end)
        record_summaries("summaries", len(summaries), time.perf_counter() - began)
        return summaries

    def yearly_summaries(self, account_ids: Iterable[int], year: int) -> List[MonthlySummary]:
        return self.monthly_summaries(account_ids, YearMonth(year, 1), YearMonth(year, 12))

    # Analytics

    def compare_months(self, account_ids: Iterable[int], year: int, month: int) -> ComparisonResult:
        with self._timed("comparison"):
            return self.trends.compare_months(account_ids, year, month)

    def category_breakdown(
        self, account_ids: Iterable[int], year: int, month: int
    ) -> Optional[List[CategoryShare]]:
        with self._timed("breakdown"):
            return self.trends.category_breakdown(account_ids, year, month)

    def resolve_trend_months(self, requested: Optional[int]) -> int:
        """None means the configured default; requests above the maximum are capped"""
        if requested is None:
            return settings.trend_default_months
        return min(requested, settings.trend_max_months)

    def trend(self, account_ids: Iterable[int], months: Optional[int] = None) -> List[TrendPoint]:
        month_count = self.resolve_trend_months(months)
        with self._timed("trend"):
            points = self.trends.trend(account_ids, month_count)
        logger.info("Trend loaded", extra={"months": month_count, "points": len(points)})
        return points

    # Tax

    def tax_projection(self, account_ids: Iterable[int], gross_amount: float) -> TaxCalculation:
        """Tax on a new receipt using trailing 12-month revenue and the cached bracket override"""
        cached = self.settings_cache.get()
        revenue = self.aggregator.trailing_gross_revenue(account_ids, self._today())
        return calculate_tax(revenue, gross_amount, cached.manual_bracket)

    def current_bracket(self, account_ids: Iterable[int]) -> BracketInfo:
        cached = self.settings_cache.get()
        revenue = self.aggregator.trailing_gross_revenue(account_ids, self._today())
        return bracket_info(revenue, cached.manual_bracket)

    # Health score

    def calculate_user_score(self, user_id: int, account_ids: Iterable[int]) -> HealthScore:
        """Score a user's accounts against the goals of every group they belong to"""
        goals = self.goals.active_goals_for_user(user_id)
        return self._score("user", user_id, account_ids, goals, user_id=user_id)

    def calculate_group_score(self, group_id: int, account_ids: Iterable[int]) -> HealthScore:
        """Score a family group's individual + joint accounts against its goals"""
        goals = self.goals.active_goals_for_group(group_id)
        return self._score("group", group_id, account_ids, goals, group_id=group_id)

    def _score(
        self,
        scope: str,
        owner_id: int,
        account_ids: Iterable[int],
        goals: Iterable[Goal],
        user_id: Optional[int] = None,
        group_id: Optional[int] = None,
    ) -> HealthScore:
        start = time.perf_counter()
        with self._timed("health_score"):
            score = self.health.calculate(account_ids, goals, user_id=user_id, group_id=group_id)

        if self.history is not None:
            self.history.add(score)

        record_health_score(scope, score.score, score.level)
        log_health_score(
            scope,
            owner_id,
            score.score,
            score.level,
            (time.perf_counter() - start) * 1000,
            at_risk=score.is_at_risk,
        )
        return score

    def recommendations(self, score: HealthScore) -> List[Recommendation]:
        return self.health.recommendations(score)

    def score_history(
        self,
        user_id: Optional[int] = None,
        group_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[HealthScore]:
        if self.history is None:
            return []
        return self.history.history(
            user_id=user_id,
            group_id=group_id,
            limit=limit or settings.score_history_limit,
        )
