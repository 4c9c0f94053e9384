"""Unit tests for month comparison, category breakdown and trends"""

import pytest
from datetime import date, datetime, timezone
from ledger_insights.domain.analytics import TrendComposer, balance_change, percent_change
from ledger_insights.domain.models import (
    CachedSettings,
    FixedExpense,
    Income,
    MonthlySummary,
    VariableExpense,
)
from ledger_insights.domain.summary import BatchSummaryAggregator
from ledger_insights.utils.date_utils import YearMonth


def _composer(store, settings_source, today):
    return TrendComposer(BatchSummaryAggregator(store), settings_source, today=lambda: today)


def _income(account_id: int, day: date, gross: float, net: float | None = None) -> Income:
    net = gross if net is None else net
    return Income(account_id, day, gross_amount=gross, net_amount=net, tax_amount=gross - net)


def test_percent_change():
    """Test relative change with the zero-previous rule"""
    assert percent_change(6000, 5000) == pytest.approx((1000, 20.0))
    assert percent_change(4000, 5000) == pytest.approx((-1000, -20.0))
    assert percent_change(5000, 0) == (5000, 100.0)
    assert percent_change(0, 0) == (0.0, 0.0)


def test_balance_change_handles_negative_previous():
    """Test balances relative to |previous| when the previous balance was negative"""
    assert balance_change(500, 1000) == (-500, -50.0)
    assert balance_change(500, -1000) == (1500, 150.0)
    assert balance_change(-2000, -1000) == (-1000, -100.0)


def test_balance_change_zero_previous():
    assert balance_change(800, 0) == (800, 100.0)
    assert balance_change(-800, 0) == (-800, 0.0)
    assert balance_change(0, 0) == (0, 0.0)


def test_compare_months_income_growth(snapshot, settings_source, today):
    """Test 5000 -> 6000 gross income is +1000 / +20%"""
    snapshot.incomes.extend(
        [
            _income(1, date(2024, 4, 5), 5000, 4500),
            _income(1, date(2024, 5, 5), 6000, 5400),
        ]
    )

    result = _composer(snapshot, settings_source, today).compare_months({1}, 2024, 5)

    assert result.has_previous_month is True
    assert result.current_month.month == YearMonth(2024, 5)
    assert result.previous_month.month == YearMonth(2024, 4)
    assert result.income_change == 1000
    assert result.income_change_percent == pytest.approx(20.0)


def test_compare_months_from_zero_income(snapshot, settings_source, today):
    """Test 0 -> 5000 income counts as +100%"""
    snapshot.incomes.append(_income(1, date(2024, 5, 5), 5000))

    result = _composer(snapshot, settings_source, today).compare_months({1}, 2024, 5)

    assert result.income_change == 5000
    assert result.income_change_percent == 100.0


def test_compare_months_expenses_and_balance(snapshot, settings_source, today):
    """Test expense and balance deltas use derived totals"""
    snapshot.incomes.extend([_income(1, date(2024, 4, 1), 3000), _income(1, date(2024, 5, 1), 3000)])
    snapshot.fixed_expenses.append(FixedExpense(1, 1000))
    snapshot.variable_expenses.append(VariableExpense(1, 500, datetime(2024, 5, 12), category="Food"))

    result = _composer(snapshot, settings_source, today).compare_months({1}, 2024, 5)

    assert result.expense_change == 500
    assert result.expense_change_percent == pytest.approx(50.0)
    assert result.balance_change == -500
    assert result.balance_change_percent == pytest.approx(-25.0)


def test_compare_months_crosses_year(snapshot, settings_source, today):
    result = _composer(snapshot, settings_source, today).compare_months({1}, 2024, 1)
    assert result.previous_month.month == YearMonth(2023, 12)


def test_compare_months_before_record_start(snapshot, settings_source, today):
    """Test previous month predating record-start is reported as missing, not as zero data"""
    settings_source.value = CachedSettings(record_start_date=date(2024, 5, 1))
    snapshot.incomes.extend([_income(1, date(2024, 4, 5), 5000), _income(1, date(2024, 5, 5), 6000)])

    result = _composer(snapshot, settings_source, today).compare_months({1}, 2024, 5)

    assert result.has_previous_month is False
    assert result.previous_month == MonthlySummary(month=YearMonth(2024, 4))
    assert result.current_month.total_income_gross == 6000
    assert result.income_change == 0
    assert result.income_change_percent == 0
    assert result.balance_change == 0


def test_compare_months_record_start_mid_month(snapshot, settings_source, today):
    """Test a record-start after the first day of the previous month still hides it"""
    settings_source.value = CachedSettings(record_start_date=date(2024, 4, 10))

    result = _composer(snapshot, settings_source, today).compare_months({1}, 2024, 5)

    assert result.has_previous_month is False


def test_compare_months_uses_single_aggregation(counting_store, settings_source, today):
    _composer(counting_store, settings_source, today).compare_months({1}, 2024, 5)
    assert counting_store.total_calls == 5


def test_category_breakdown_percentages(snapshot, settings_source, today):
    """Test 1000/500/300 shares sum to 100% and sort by amount"""
    snapshot.variable_expenses.extend(
        [
            VariableExpense(1, 600, datetime(2024, 5, 2), category="Food"),
            VariableExpense(2, 400, datetime(2024, 5, 20), category="Food"),
            VariableExpense(1, 500, datetime(2024, 5, 3), category="Transport"),
            VariableExpense(1, 300, datetime(2024, 5, 31, 22, 0), category="Leisure"),
            VariableExpense(1, 999, datetime(2024, 6, 1), category="Food"),
        ]
    )

    shares = _composer(snapshot, settings_source, today).category_breakdown({1, 2}, 2024, 5)

    assert [s.category for s in shares] == ["Food", "Transport", "Leisure"]
    assert [s.amount for s in shares] == [1000, 500, 300]
    assert shares[0].percentage == pytest.approx(1000 / 1800 * 100)
    assert shares[1].percentage == pytest.approx(500 / 1800 * 100)
    assert shares[2].percentage == pytest.approx(300 / 1800 * 100)
    assert sum(s.percentage for s in shares) == pytest.approx(100.0, abs=0.01)


def test_category_breakdown_skips_uncategorized(snapshot, settings_source, today):
    """Test blank categories are excluded from rows and total"""
    snapshot.variable_expenses.extend(
        [
            VariableExpense(1, 250, datetime(2024, 5, 2), category="Food"),
            VariableExpense(1, 750, datetime(2024, 5, 2), category=""),
            VariableExpense(1, 100, datetime(2024, 5, 2), category="   "),
        ]
    )

    shares = _composer(snapshot, settings_source, today).category_breakdown({1}, 2024, 5)

    assert len(shares) == 1
    assert shares[0].percentage == pytest.approx(100.0)


def test_category_breakdown_no_accounts_is_none(snapshot, settings_source, today):
    assert _composer(snapshot, settings_source, today).category_breakdown(set(), 2024, 5) is None


def test_category_breakdown_no_expenses_is_empty(snapshot, settings_source, today):
    assert _composer(snapshot, settings_source, today).category_breakdown({1}, 2024, 5) == []


def test_trend_is_chronological(snapshot, settings_source, today):
    """Test trend ends with the current month, oldest first, using net income"""
    snapshot.incomes.extend([_income(1, date(2024, 6, 1), 5000, 4000), _income(1, date(2024, 1, 1), 3000)])
    snapshot.fixed_expenses.append(FixedExpense(1, 1000))

    points = _composer(snapshot, settings_source, today).trend({1}, 6)

    assert [p.month for p in points] == [YearMonth(2024, m) for m in range(1, 7)]
    assert points[0].income == 3000
    assert points[-1].month_name == "June 2024"
    assert points[-1].income == 4000
    assert points[-1].expense == 1000
    assert points[-1].balance == 3000
    assert points[1].balance == -1000


def test_trend_crosses_year(snapshot, settings_source, today):
    points = _composer(snapshot, settings_source, today).trend({1}, 12)
    assert points[0].month == YearMonth(2023, 7)
    assert points[-1].month == YearMonth(2024, 6)


@pytest.mark.parametrize("month_count", [0, -1])
def test_trend_non_positive_count_is_empty(counting_store, settings_source, today, month_count):
    """Test non-positive month counts return nothing without lookups"""
    assert _composer(counting_store, settings_source, today).trend({1}, month_count) == []
    assert counting_store.total_calls == 0


def test_category_breakdown_trims_labels(snapshot, settings_source, today):
    """Test labels differing only by surrounding whitespace form one category"""
    snapshot.variable_expenses.extend(
        [
            VariableExpense(1, 100, datetime(2024, 5, 2), category="Food"),
            VariableExpense(1, 100, datetime(2024, 5, 3), category="Food "),
            VariableExpense(1, 100, datetime(2024, 5, 4, tzinfo=timezone.utc), category=" Food"),
        ]
    )

    shares = _composer(snapshot, settings_source, today).category_breakdown({1}, 2024, 5)

    assert len(shares) == 1
    assert shares[0].category == "Food"
    assert shares[0].amount == 300
    assert shares[0].percentage == pytest.approx(100.0)
