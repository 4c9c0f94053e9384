"""Lookup contracts for ledger collaborators and the in-memory LedgerSnapshot"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import AbstractSet, Dict, List, Mapping, Protocol, Set

from ledger_insights.domain.models import (
    Bill,
    CachedSettings,
    FixedExpense,
    Goal,
    Income,
    InstallmentPlan,
    VariableExpense,
)
from ledger_insights.utils.date_utils import wall_clock


class LedgerStore(Protocol):
    """Bulk lookups used by the summary aggregator. One call per entry kind."""

    def incomes_between(self, account_ids: AbstractSet[int], start: date, end: date) -> List[Income]:
        ...

    def active_fixed_expenses(self, account_ids: AbstractSet[int]) -> List[FixedExpense]:
        ...

    def active_variable_expenses_between(
        self, account_ids: AbstractSet[int], start: datetime, end: datetime
    ) -> List[VariableExpense]:
        ...

    def installment_plans(self, account_ids: AbstractSet[int]) -> List[InstallmentPlan]:
        ...

    def bills_due_between(self, account_ids: AbstractSet[int], start: date, end: date) -> List[Bill]:
        ...


class GoalStore(Protocol):
    def active_goals_for_user(self, user_id: int) -> List[Goal]:
        ...

    def active_goals_for_group(self, group_id: int) -> List[Goal]:
        ...


class SettingsStore(Protocol):
    def get_values(self) -> Mapping[str, str]:
        """Raw key/value settings in a single read"""
        ...


class SettingsSource(Protocol):
    """Anything serving the current CachedSettings (normally a SettingsCache)"""

    def get(self) -> CachedSettings:
        ...


@dataclass
class LedgerSnapshot:
    """In-memory set of records relevant to a reporting window.

    Implements both LedgerStore and GoalStore so the engines can run without a
    database. Filtering mirrors the SQL repository: account membership, active
    flags and inclusive date bounds.
    """

    incomes: List[Income] = field(default_factory=list)
    fixed_expenses: List[FixedExpense] = field(default_factory=list)
    variable_expenses: List[VariableExpense] = field(default_factory=list)
    installments: List[InstallmentPlan] = field(default_factory=list)
    bills: List[Bill] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)
    group_members: Dict[int, Set[int]] = field(default_factory=dict)  # user_id -> group ids

    def incomes_between(self, account_ids: AbstractSet[int], start: date, end: date) -> List[Income]:
        return [i for i in self.incomes if i.account_id in account_ids and start <= i.date <= end]

    def active_fixed_expenses(self, account_ids: AbstractSet[int]) -> List[FixedExpense]:
        return [e for e in self.fixed_expenses if e.account_id in account_ids and e.active]

    def active_variable_expenses_between(
        self, account_ids: AbstractSet[int], start: datetime, end: datetime
    ) -> List[VariableExpense]:
        return [
            e
            for e in self.variable_expenses
            if e.account_id in account_ids and e.active and start <= wall_clock(e.created_at) <= end
        ]

    def installment_plans(self, account_ids: AbstractSet[int]) -> List[InstallmentPlan]:
        return [p for p in self.installments if p.account_id in account_ids]

    def bills_due_between(self, account_ids: AbstractSet[int], start: date, end: date) -> List[Bill]:
        return [b for b in self.bills if b.account_id in account_ids and start <= b.due_date <= end]

    def active_goals_for_user(self, user_id: int) -> List[Goal]:
        group_ids = self.group_members.get(user_id, set())
        return [g for g in self.goals if g.is_active and g.group_id in group_ids]

    def active_goals_for_group(self, group_id: int) -> List[Goal]:
        return [g for g in self.goals if g.is_active and g.group_id == group_id]
