"""Monthly summary aggregation - one bulk lookup per entry kind for a whole month range"""

from dataclasses import dataclass
from datetime import date
from typing import AbstractSet, Dict, Iterable, List

from ledger_insights.domain.installments import amortize_installment_plan
from ledger_insights.domain.ledger import LedgerStore
from ledger_insights.domain.models import MonthlySummary
from ledger_insights.utils.date_utils import YearMonth, month_range, month_span


@dataclass
class _MonthTotals:
    """Mutable accumulator for one month bucket"""

    income_gross: float = 0.0
    income_net: float = 0.0
    tax: float = 0.0
    fixed: float = 0.0
    variable: float = 0.0
    cards: float = 0.0
    bills: float = 0.0

    def to_summary(self, month: YearMonth) -> MonthlySummary:
        return MonthlySummary(
            month=month,
            total_income_gross=self.income_gross,
            total_income_net=self.income_net,
            total_tax=self.tax,
            total_fixed=self.fixed,
            total_variable=self.variable,
            total_cards=self.cards,
            total_bills=self.bills,
        )


class BatchSummaryAggregator:
    """Builds MonthlySummary rows for an account set over an inclusive month range.

    A naive implementation performs one lookup per month per entry kind
    (12 months x 5 kinds = 60 lookups). This one performs at most five lookups
    regardless of the range length, and none at all for an empty account set.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    def aggregate(
        self,
        account_ids: Iterable[int],
        range_start: YearMonth,
        range_end: YearMonth,
    ) -> List[MonthlySummary]:
        """
        Summaries for every month in [range_start, range_end], oldest first.

        Every month in range is present even when there is no data for it.
        An inverted range returns an empty list.
        """
        buckets: Dict[YearMonth, _MonthTotals] = {
            month: _MonthTotals() for month in month_range(range_start, range_end)
        }
        if not buckets:
            return []

        accounts = frozenset(account_ids)
        if accounts:
            self._fill_buckets(accounts, range_start, range_end, buckets)

        # Explicit sort: output order never depends on dict insertion order
        return [buckets[month].to_summary(month) for month in sorted(buckets)]

    def _fill_buckets(
        self,
        accounts: AbstractSet[int],
        range_start: YearMonth,
        range_end: YearMonth,
        buckets: Dict[YearMonth, _MonthTotals],
    ) -> None:
        start_at, end_at = month_span(range_start, range_end)
        start_day, end_day = start_at.date(), end_at.date()

        # 1. Incomes, bucketed by income date
        for income in self.store.incomes_between(accounts, start_day, end_day):
            bucket = buckets.get(YearMonth.of(income.date))
            if bucket is None:
                continue
            bucket.income_gross += income.gross_amount
            bucket.income_net += income.net_amount
            bucket.tax += income.tax_amount

        # 2. Fixed expenses carry no date: every month in range gets all of them
        fixed_total = sum(e.amount for e in self.store.active_fixed_expenses(accounts) if e.active)
        if fixed_total:
            for bucket in buckets.values():
                bucket.fixed += fixed_total

        # 3. Variable expenses, bucketed by creation month
        for expense in self.store.active_variable_expenses_between(accounts, start_at, end_at):
            if not expense.active:
                continue
            bucket = buckets.get(YearMonth.of(expense.created_at))
            if bucket is not None:
                bucket.variable += expense.amount

        # 4. Card installments, amortized then clipped to the range
        for plan in self.store.installment_plans(accounts):
            for contribution in amortize_installment_plan(plan):
                bucket = buckets.get(contribution.month)
                if bucket is not None:
                    bucket.cards += contribution.amount

        # 5. Bills, bucketed by due month
        for bill in self.store.bills_due_between(accounts, start_day, end_day):
            bucket = buckets.get(YearMonth.of(bill.due_date))
            if bucket is not None:
                bucket.bills += bill.amount

    def monthly_summary(self, account_ids: Iterable[int], year: int, month: int) -> MonthlySummary:
        target = YearMonth.checked(year, month)
        return self.aggregate(account_ids, target, target)[0]

    def yearly_summaries(self, account_ids: Iterable[int], year: int) -> List[MonthlySummary]:
        """January through December in a single batch"""
        return self.aggregate(account_ids, YearMonth(year, 1), YearMonth(year, 12))

    def trailing_gross_revenue(self, account_ids: Iterable[int], today: date) -> float:
        """Gross income over the 12 months ending with the month of today"""
        current = YearMonth.of(today)
        summaries = self.aggregate(account_ids, current.shift(-11), current)
        return sum(s.total_income_gross for s in summaries)
