"""Trend analytics - month-over-month comparison, category breakdown and income/expense trend"""

from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ledger_insights.domain.ledger import SettingsSource
from ledger_insights.domain.models import (
    CategoryShare,
    ComparisonResult,
    MonthlySummary,
    TrendPoint,
)
from ledger_insights.domain.summary import BatchSummaryAggregator
from ledger_insights.utils.date_utils import YearMonth, month_span


def percent_change(current: float, previous: float) -> Tuple[float, float]:
    """
    (absolute change, percent change) for income and expense totals.

    A previous value of 0 with a positive current value counts as +100%
    rather than an undefined ratio.
    """
    if previous > 0:
        change = current - previous
        return change, change / previous * 100
    if current > 0:
        return current, 100.0
    return 0.0, 0.0


def balance_change(current: float, previous: float) -> Tuple[float, float]:
    """
    (absolute change, percent change) for balances, which may be negative.

    - previous > 0: relative to previous
    - previous < 0: relative to |previous|
    - previous == 0: the change is the current balance itself, +100% only when positive
    """
    if previous > 0:
        change = current - previous
        return change, change / previous * 100
    if previous < 0:
        change = current - previous
        return change, change / abs(previous) * 100
    return current, 100.0 if current > 0 else 0.0


class TrendComposer:
    """Reports built on top of BatchSummaryAggregator"""

    def __init__(
        self,
        aggregator: BatchSummaryAggregator,
        settings_source: SettingsSource,
        today: Callable[[], date] = date.today,
    ):
        self.aggregator = aggregator
        self.settings_source = settings_source
        self._today = today

    def compare_months(self, account_ids: Iterable[int], year: int, month: int) -> ComparisonResult:
        """
        Compare a month with the one before it using a single two-month aggregation.

        When the previous month starts before the record-start date it is reported
        as all zeros with has_previous_month=False and no deltas.
        """
        current = YearMonth.checked(year, month)
        previous = current.shift(-1)

        summaries = self.aggregator.aggregate(account_ids, previous, current)
        by_month: Dict[YearMonth, MonthlySummary] = {s.month: s for s in summaries}
        current_summary = by_month[current]

        record_start = self.settings_source.get().record_start_date
        if record_start is not None and previous.first_day < record_start:
            return ComparisonResult(
                current_month=current_summary,
                previous_month=MonthlySummary(month=previous),
                has_previous_month=False,
            )

        previous_summary = by_month[previous]
        income_delta, income_pct = percent_change(
            current_summary.total_income_gross, previous_summary.total_income_gross
        )
        expense_delta, expense_pct = percent_change(
            current_summary.total_expenses, previous_summary.total_expenses
        )
        balance_delta, balance_pct = balance_change(current_summary.balance, previous_summary.balance)

        return ComparisonResult(
            current_month=current_summary,
            previous_month=previous_summary,
            has_previous_month=True,
            income_change=income_delta,
            income_change_percent=income_pct,
            expense_change=expense_delta,
            expense_change_percent=expense_pct,
            balance_change=balance_delta,
            balance_change_percent=balance_pct,
        )

    def category_breakdown(
        self, account_ids: Iterable[int], year: int, month: int
    ) -> Optional[List[CategoryShare]]:
        """
        Variable expenses of a month grouped by category, with percentage shares.

        Returns None when no accounts were queried and an empty list when the
        accounts have no categorized variable expenses that month. Uncategorized
        expenses are left out of both the rows and the total.
        """
        accounts = frozenset(account_ids)
        if not accounts:
            return None

        target = YearMonth.checked(year, month)
        start, end = month_span(target, target)

        totals: Dict[str, float] = {}
        for expense in self.aggregator.store.active_variable_expenses_between(accounts, start, end):
            category = expense.category.strip()
            if not expense.active or not category:
                continue
            if YearMonth.of(expense.created_at) != target:
                continue
            totals[category] = totals.get(category, 0.0) + expense.amount

        grand_total = sum(totals.values())
        if grand_total <= 0:
            return []

        shares = [
            CategoryShare(category=category, amount=amount, percentage=amount / grand_total * 100)
            for category, amount in totals.items()
        ]
        shares.sort(key=lambda s: (-s.amount, s.category))
        return shares

    def trend(self, account_ids: Iterable[int], month_count: int) -> List[TrendPoint]:
        """
        Income vs expense for month_count months ending with the current month.

        Oldest month first. A non-positive month_count returns an empty list.
        """
        if month_count <= 0:
            return []

        current = YearMonth.of(self._today())
        summaries = self.aggregator.aggregate(account_ids, current.shift(-(month_count - 1)), current)

        points = [
            TrendPoint(
                month=s.month,
                month_name=s.month_name,
                income=s.total_income_net,
                expense=s.total_expenses,
                balance=s.total_income_net - s.total_expenses,
            )
            for s in summaries
        ]
        points.sort(key=lambda p: p.month)
        return points
