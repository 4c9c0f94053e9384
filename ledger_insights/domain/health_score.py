"""Financial health score - four weighted sub-scores and tailored recommendations"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from ledger_insights.domain.ledger import SettingsSource
from ledger_insights.domain.models import (
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    Goal,
    HealthScore,
    MonthlySummary,
    Recommendation,
)
from ledger_insights.domain.scoring import (
    BUDGET_RAMP,
    DEBT_RAMP,
    GOAL_RAMP,
    SAVINGS_RAMP,
    coefficient_of_variation,
    composite_score,
)
from ledger_insights.domain.summary import BatchSummaryAggregator
from ledger_insights.utils.date_utils import YearMonth

NEUTRAL_SCORE = 50.0
INSUFFICIENT_HISTORY_SCORE = 85.0
NO_EXPENSES_SCORE = 90.0
WEAK_AREA_THRESHOLD = 60.0
URGENT_THRESHOLD = 30.0
HEALTHY_THRESHOLD = 75.0
MAX_WEAK_AREA_RECOMMENDATIONS = 3
MAX_RECOMMENDATIONS = 4

SAVINGS_WINDOW_MONTHS = 3
BUDGET_WINDOW_MONTHS = 3


@dataclass(frozen=True)
class _ScoringWindow:
    """Summaries for the trailing months plus the record-start boundary"""

    current: YearMonth
    record_start: Optional[YearMonth]
    summaries: Dict[YearMonth, MonthlySummary]

    def is_valid(self, month: YearMonth) -> bool:
        return self.record_start is None or month >= self.record_start

    def trailing(self, count: int) -> List[YearMonth]:
        """The last `count` months ending with the current one, newest first"""
        return [self.current.shift(-i) for i in range(count)]


class HealthScoreEngine:
    """
    Scores financial health from ledger summaries and goal progress.

    Scoring formula: 30% savings rate + 25% debt level + 25% goal progress
    + 20% budget consistency. Missing data never raises; each sub-score falls
    back to a documented neutral value instead.
    """

    def __init__(
        self,
        aggregator: BatchSummaryAggregator,
        settings_source: SettingsSource,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.aggregator = aggregator
        self.settings_source = settings_source
        self._today = today
        self._now = now

    def _window(self, accounts: frozenset) -> _ScoringWindow:
        current = YearMonth.of(self._today())
        record_start = self.settings_source.get().record_start_month
        summaries = self.aggregator.aggregate(
            accounts, current.shift(-(max(SAVINGS_WINDOW_MONTHS, BUDGET_WINDOW_MONTHS) - 1)), current
        )
        return _ScoringWindow(current, record_start, {s.month: s for s in summaries})

    # Public entry points

    def calculate(
        self,
        account_ids: Iterable[int],
        goals: Iterable[Goal],
        user_id: Optional[int] = None,
        group_id: Optional[int] = None,
    ) -> HealthScore:
        """Compute a new point-in-time HealthScore for an account set"""
        accounts = frozenset(account_ids)
        window = self._window(accounts)

        savings = self._savings(accounts, window)
        debt = self._debt(accounts, window)
        goal = goal_score(goals)
        budget = self._budget(accounts, window)

        return HealthScore(
            score=composite_score(savings, debt, goal, budget),
            savings_score=savings,
            debt_score=debt,
            goal_score=goal,
            budget_score=budget,
            calculated_at=self._now(),
            user_id=user_id,
            group_id=group_id,
        )

    def savings_score(self, account_ids: Iterable[int]) -> float:
        accounts = frozenset(account_ids)
        return self._savings(accounts, self._window(accounts))

    def debt_score(self, account_ids: Iterable[int]) -> float:
        accounts = frozenset(account_ids)
        return self._debt(accounts, self._window(accounts))

    def budget_score(self, account_ids: Iterable[int]) -> float:
        accounts = frozenset(account_ids)
        return self._budget(accounts, self._window(accounts))

    def recommendations(self, score: HealthScore) -> List[Recommendation]:
        return build_recommendations(score)

    # Sub-scores

    def _savings(self, accounts: frozenset, window: _ScoringWindow) -> float:
        """
        Savings rate over the trailing 3 months: (net income - expenses) / net income.

        >= 30% -> 100, 20-30% -> 80-100, 10-20% -> 60-80, 0-10% -> 40-60,
        negative -> 40 down to 0.
        """
        if not accounts:
            return 0.0

        months = [m for m in window.trailing(SAVINGS_WINDOW_MONTHS) if window.is_valid(m)]
        if not months:
            return NEUTRAL_SCORE

        net_income = sum(window.summaries[m].total_income_net for m in months)
        if net_income <= 0:
            return 0.0

        expenses = sum(window.summaries[m].total_expenses for m in months)
        savings_rate = (net_income - expenses) / net_income
        return SAVINGS_RAMP.score(savings_rate)

    def _debt(self, accounts: frozenset, window: _ScoringWindow) -> float:
        """
        Obligation ratio for the current month: (fixed expenses + bills) / net income.

        <= 30% -> 100, 30-50% -> 80-100, 50-70% -> 60-80, 70-90% -> 40-60,
        above 90% -> 40 down to 0.
        """
        if not accounts or not window.is_valid(window.current):
            return 100.0

        summary = window.summaries[window.current]
        obligations = summary.total_fixed + summary.total_bills

        if summary.total_income_net <= 0:
            # Critical when obligations exist without income
            return 0.0 if obligations > 0 else 100.0

        return DEBT_RAMP.score(obligations / summary.total_income_net)

    def _budget(self, accounts: frozenset, window: _ScoringWindow) -> float:
        """
        Month-over-month expense consistency via coefficient of variation.

        Expenses are fixed + variable + bills; card installments are excluded.
        Fewer than 2 months after record-start -> 85, all zero -> 90.
        """
        if not accounts:
            return 100.0

        months = [m for m in window.trailing(BUDGET_WINDOW_MONTHS) if window.is_valid(m)]
        if len(months) < 2:
            return INSUFFICIENT_HISTORY_SCORE

        expenses = [
            window.summaries[m].total_fixed
            + window.summaries[m].total_variable
            + window.summaries[m].total_bills
            for m in months
        ]
        if all(e == 0 for e in expenses):
            return NO_EXPENSES_SCORE

        return BUDGET_RAMP.score(coefficient_of_variation(expenses))


def goal_score(goals: Iterable[Goal]) -> float:
    """
    Average progress across active goals (each capped at 100%).

    >= 80 -> 100, 60-80 -> 80-100, 40-60 -> 60-80, 20-40 -> 40-60, < 20 -> 20-40.
    No active goals scores a neutral 50.
    """
    active = [g for g in goals if g.is_active]
    if not active:
        return NEUTRAL_SCORE

    average_progress = sum(g.progress_percentage() for g in active) / len(active)
    return GOAL_RAMP.score(average_progress)


_AREA_RECOMMENDATIONS = {
    "savings": (
        Recommendation(
            title="Increase Your Savings Rate",
            description="Your savings rate is low. Try cutting variable expenses by 10% this month.",
            action_url="/expenses",
            priority=PRIORITY_HIGH,
        ),
        Recommendation(
            title="Improve Your Savings",
            description="Consider an automatic transfer of 5-10% of your income into savings.",
            action_url="/dashboard",
            priority=PRIORITY_MEDIUM,
        ),
    ),
    "debt": (
        Recommendation(
            title="Reduce Your Fixed Obligations",
            description="Your fixed expenses are too high. Review contracts and look for cheaper alternatives.",
            action_url="/expenses",
            priority=PRIORITY_HIGH,
        ),
        Recommendation(
            title="Manage Your Bills",
            description="Set up payment reminders for your bills and avoid late fees.",
            action_url="/bills",
            priority=PRIORITY_MEDIUM,
        ),
    ),
    "goals": (
        Recommendation(
            title="Set Financial Goals",
            description="You have little progress on active goals. Clear financial goals help you stay focused.",
            action_url="/goals",
            priority=PRIORITY_HIGH,
        ),
        Recommendation(
            title="Increase Goal Contributions",
            description="Your goals are progressing slowly. Consider raising your monthly contributions.",
            action_url="/goals",
            priority=PRIORITY_MEDIUM,
        ),
    ),
    "budget": (
        Recommendation(
            title="Control Your Variable Spending",
            description="Your expenses swing a lot from month to month. Set a monthly budget and review it weekly.",
            action_url="/expenses",
            priority=PRIORITY_HIGH,
        ),
        Recommendation(
            title="Stay Consistent",
            description="Review your spending regularly to keep your budget consistent.",
            action_url="/dashboard",
            priority=PRIORITY_MEDIUM,
        ),
    ),
}

EXCELLENT_HEALTH = Recommendation(
    title="Excellent Financial Health!",
    description="You are on the right track. Keep monitoring your finances regularly.",
    action_url="/dashboard",
    priority=PRIORITY_LOW,
)

KEEP_GOING = Recommendation(
    title="Keep It Up!",
    description="Your financial health is good. Small adjustments can make it excellent.",
    action_url="/dashboard",
    priority=PRIORITY_MEDIUM,
)

START_SMALL = Recommendation(
    title="Start Small",
    description="Set one simple financial goal and work towards it this month.",
    action_url="/goals",
    priority=PRIORITY_LOW,
)


def recommendation_for_area(area: str, score: float) -> Recommendation:
    """Urgent wording below 30, moderate wording otherwise"""
    urgent, moderate = _AREA_RECOMMENDATIONS[area]
    return urgent if score < URGENT_THRESHOLD else moderate


def build_recommendations(score: HealthScore) -> List[Recommendation]:
    """
    Up to 4 recommendations for a health score.

    Weak areas (sub-score < 60) are reported in fixed order - savings, debt,
    goals, budget - not by severity, at most 3 of them.
    """
    components = [
        ("savings", score.savings_score),
        ("debt", score.debt_score),
        ("goals", score.goal_score),
        ("budget", score.budget_score),
    ]
    weak_areas = [(area, value) for area, value in components if value < WEAK_AREA_THRESHOLD]

    recommendations = [
        recommendation_for_area(area, value)
        for area, value in weak_areas[:MAX_WEAK_AREA_RECOMMENDATIONS]
    ]

    if score.score >= HEALTHY_THRESHOLD:
        recommendations.append(KEEP_GOING if recommendations else EXCELLENT_HEALTH)

    if not recommendations:
        recommendations.append(START_SMALL)

    return recommendations[:MAX_RECOMMENDATIONS]
