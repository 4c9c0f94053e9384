"""Data access layer - ledger lookups, goals, settings and health score history"""

from datetime import date, datetime
from typing import AbstractSet, Dict, List, Optional

from sqlalchemy.orm import Session

from ledger_insights.domain.models import (
    GOAL_STATUS_ACTIVE,
    Bill,
    FixedExpense,
    Goal,
    HealthScore,
    Income,
    InstallmentPlan,
    VariableExpense,
)
from ledger_insights.infrastructure.database.models import (
    EXPENSE_TYPE_FIXED,
    EXPENSE_TYPE_VARIABLE,
    BillRecord,
    CreditCardRecord,
    ExpenseRecord,
    GroupGoalRecord,
    GroupMemberRecord,
    HealthScoreRecord,
    IncomeRecord,
    InstallmentRecord,
    SettingRecord,
)


class LedgerRepository:
    """Ledger lookups for the summary aggregator - one query per entry kind"""

    def __init__(self, db: Session):
        self.db = db

    def incomes_between(self, account_ids: AbstractSet[int], start: date, end: date) -> List[Income]:
        rows = (
            self.db.query(IncomeRecord)
            .filter(
                IncomeRecord.account_id.in_(sorted(account_ids)),
                IncomeRecord.date >= start,
                IncomeRecord.date <= end,
            )
            .all()
        )
        return [
            Income(
                account_id=r.account_id,
                date=r.date,
                gross_amount=r.gross_amount,
                net_amount=r.net_amount,
                tax_amount=r.tax_amount,
                description=r.description or "",
            )
            for r in rows
        ]

    def active_fixed_expenses(self, account_ids: AbstractSet[int]) -> List[FixedExpense]:
        rows = (
            self.db.query(ExpenseRecord)
            .filter(
                ExpenseRecord.account_id.in_(sorted(account_ids)),
                ExpenseRecord.type == EXPENSE_TYPE_FIXED,
                ExpenseRecord.active.is_(True),
            )
            .all()
        )
        return [
            FixedExpense(
                account_id=r.account_id,
                amount=r.amount,
                active=r.active,
                name=r.name,
                category=r.category or "",
            )
            for r in rows
        ]

    def active_variable_expenses_between(
        self, account_ids: AbstractSet[int], start: datetime, end: datetime
    ) -> List[VariableExpense]:
        rows = (
            self.db.query(ExpenseRecord)
            .filter(
                ExpenseRecord.account_id.in_(sorted(account_ids)),
                ExpenseRecord.type == EXPENSE_TYPE_VARIABLE,
                ExpenseRecord.active.is_(True),
                ExpenseRecord.created_at >= start,
                ExpenseRecord.created_at <= end,
            )
            .all()
        )
        return [
            VariableExpense(
                account_id=r.account_id,
                amount=r.amount,
                created_at=r.created_at,
                category=r.category or "",
                active=r.active,
                name=r.name,
            )
            for r in rows
        ]

    def installment_plans(self, account_ids: AbstractSet[int]) -> List[InstallmentPlan]:
        rows = (
            self.db.query(InstallmentRecord, CreditCardRecord.account_id)
            .join(CreditCardRecord, InstallmentRecord.credit_card_id == CreditCardRecord.id)
            .filter(CreditCardRecord.account_id.in_(sorted(account_ids)))
            .all()
        )
        return [
            InstallmentPlan(
                account_id=account_id,
                installment_amount=inst.installment_amount,
                total_installments=inst.total_installments,
                start_date=inst.start_date,
                total_amount=inst.total_amount,
                description=inst.description,
                category=inst.category or "",
            )
            for inst, account_id in rows
        ]

    def bills_due_between(self, account_ids: AbstractSet[int], start: date, end: date) -> List[Bill]:
        rows = (
            self.db.query(BillRecord)
            .filter(
                BillRecord.account_id.in_(sorted(account_ids)),
                BillRecord.due_date >= start,
                BillRecord.due_date <= end,
            )
            .all()
        )
        return [
            Bill(
                account_id=r.account_id,
                amount=r.amount,
                due_date=r.due_date,
                name=r.name,
                category=r.category or "",
                paid=r.paid,
            )
            for r in rows
        ]


def _to_goal(row: GroupGoalRecord) -> Goal:
    return Goal(
        name=row.name,
        target_amount=row.target_amount,
        current_amount=row.current_amount,
        status=row.status,
        group_id=row.group_id,
    )


class GoalRepository:
    """Active goals of a group, or of every group a user belongs to"""

    def __init__(self, db: Session):
        self.db = db

    def active_goals_for_group(self, group_id: int) -> List[Goal]:
        rows = (
            self.db.query(GroupGoalRecord)
            .filter(GroupGoalRecord.group_id == group_id, GroupGoalRecord.status == GOAL_STATUS_ACTIVE)
            .all()
        )
        return [_to_goal(r) for r in rows]

    def active_goals_for_user(self, user_id: int) -> List[Goal]:
        group_ids = self.db.query(GroupMemberRecord.group_id).filter(GroupMemberRecord.user_id == user_id)
        rows = (
            self.db.query(GroupGoalRecord)
            .filter(
                GroupGoalRecord.group_id.in_(group_ids.scalar_subquery()),
                GroupGoalRecord.status == GOAL_STATUS_ACTIVE,
            )
            .all()
        )
        return [_to_goal(r) for r in rows]


class SettingsRepository:
    """Backing store for the settings cache"""

    def __init__(self, db: Session):
        self.db = db

    def get_values(self) -> Dict[str, str]:
        """All settings in a single query"""
        return {row.key: row.value for row in self.db.query(SettingRecord).all()}

    def set_value(self, key: str, value: str) -> None:
        """Insert or update a setting (caller commits and invalidates the cache)"""
        row = self.db.query(SettingRecord).filter(SettingRecord.key == key).first()
        if row is None:
            self.db.add(SettingRecord(key=key, value=value))
        else:
            row.value = value
        self.db.flush()


class HealthScoreRepository:
    """Append-only health score history"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, score: HealthScore) -> HealthScoreRecord:
        """Persist a score snapshot without committing"""
        record = HealthScoreRecord(
            user_id=score.user_id,
            group_id=score.group_id,
            score=score.score,
            savings_score=score.savings_score,
            debt_score=score.debt_score,
            goal_score=score.goal_score,
            budget_score=score.budget_score,
            calculated_at=score.calculated_at,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def history(
        self,
        user_id: Optional[int] = None,
        group_id: Optional[int] = None,
        limit: int = 12,
    ) -> List[HealthScore]:
        """Most recent scores first"""
        query = self.db.query(HealthScoreRecord)
        if user_id is not None:
            query = query.filter(HealthScoreRecord.user_id == user_id)
        elif group_id is not None:
            query = query.filter(HealthScoreRecord.group_id == group_id)

        rows = query.order_by(HealthScoreRecord.calculated_at.desc(), HealthScoreRecord.id.desc()).limit(limit).all()
        return [
            HealthScore(
                score=r.score,
                savings_score=r.savings_score,
                debt_score=r.debt_score,
                goal_score=r.goal_score,
                budget_score=r.budget_score,
                calculated_at=r.calculated_at,
                user_id=r.user_id,
                group_id=r.group_id,
            )
            for r in rows
        ]
