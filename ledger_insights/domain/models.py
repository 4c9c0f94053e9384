"""Domain models - pure Python dataclasses representing ledger entries and reports"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ledger_insights.utils.date_utils import YearMonth


# Ledger entries (read-only inputs owned by the storage collaborator)


@dataclass(frozen=True)
class Income:
    """Income received on a given date"""

    account_id: int
    date: date
    gross_amount: float
    net_amount: float
    tax_amount: float
    description: str = ""


@dataclass(frozen=True)
class FixedExpense:
    """Recurring obligation applied to every month while active"""

    account_id: int
    amount: float
    active: bool = True
    name: str = ""
    category: str = ""


@dataclass(frozen=True)
class VariableExpense:
    """One-off expense bucketed by its creation timestamp"""

    account_id: int
    amount: float
    created_at: datetime
    category: str = ""
    active: bool = True
    name: str = ""


@dataclass(frozen=True)
class Bill:
    """Bill bucketed by its due date"""

    account_id: int
    amount: float
    due_date: date
    name: str = ""
    category: str = ""
    paid: bool = False


@dataclass(frozen=True)
class InstallmentPlan:
    """Credit-card purchase split into equal monthly installments"""

    account_id: int
    installment_amount: float
    total_installments: int
    start_date: date  # any day inside the first installment month
    total_amount: float = 0.0  # informational only, never used to derive amounts
    description: str = ""
    category: str = ""

    @property
    def start_month(self) -> YearMonth:
        return YearMonth.of(self.start_date)


@dataclass(frozen=True)
class InstallmentContribution:
    """Amount an installment plan adds to one month"""

    month: YearMonth
    amount: float


GOAL_STATUS_ACTIVE = "active"
GOAL_STATUS_COMPLETED = "completed"
GOAL_STATUS_CANCELLED = "cancelled"


@dataclass(frozen=True)
class Goal:
    """Shared savings goal owned by a family group"""

    name: str
    target_amount: float
    current_amount: float = 0.0
    status: str = GOAL_STATUS_ACTIVE
    group_id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == GOAL_STATUS_ACTIVE

    def progress_percentage(self) -> float:
        """Progress towards target, capped at 100"""
        if self.target_amount == 0:
            return 0.0
        return min(self.current_amount / self.target_amount * 100, 100.0)


# Derived reports


@dataclass(frozen=True)
class MonthlySummary:
    """Totals for one calendar month.

    total_expenses and balance are always derived from the component totals.
    """

    month: YearMonth
    total_income_gross: float = 0.0
    total_income_net: float = 0.0
    total_tax: float = 0.0
    total_fixed: float = 0.0
    total_variable: float = 0.0
    total_cards: float = 0.0
    total_bills: float = 0.0
    total_expenses: float = field(init=False)
    balance: float = field(init=False)

    def __post_init__(self) -> None:
        total = self.total_fixed + self.total_variable + self.total_cards + self.total_bills
        object.__setattr__(self, "total_expenses", total)
        object.__setattr__(self, "balance", self.total_income_net - total)

    @property
    def month_start(self) -> date:
        return self.month.first_day

    @property
    def month_name(self) -> str:
        return self.month.name()


@dataclass(frozen=True)
class ComparisonResult:
    """Requested month against the month before it"""

    current_month: MonthlySummary
    previous_month: MonthlySummary
    has_previous_month: bool
    income_change: float = 0.0
    income_change_percent: float = 0.0
    expense_change: float = 0.0
    expense_change_percent: float = 0.0
    balance_change: float = 0.0
    balance_change_percent: float = 0.0


@dataclass(frozen=True)
class CategoryShare:
    """Variable-expense total of one category within a month"""

    category: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class TrendPoint:
    """Income vs expense for one month of a trend series"""

    month: YearMonth
    month_name: str
    income: float
    expense: float
    balance: float


@dataclass(frozen=True)
class HealthScore:
    """Point-in-time financial health snapshot. Never mutated after creation."""

    score: float
    savings_score: float
    debt_score: float
    goal_score: float
    budget_score: float
    calculated_at: datetime
    user_id: Optional[int] = None
    group_id: Optional[int] = None

    @property
    def is_healthy(self) -> bool:
        return self.score >= 75

    @property
    def is_at_risk(self) -> bool:
        return self.score < 50

    @property
    def level(self) -> str:
        if self.score >= 90:
            return "excellent"
        if self.score >= 75:
            return "good"
        if self.score >= 50:
            return "fair"
        return "poor"


PRIORITY_HIGH = 1
PRIORITY_MEDIUM = 2
PRIORITY_LOW = 3


@dataclass(frozen=True)
class Recommendation:
    """Actionable advice derived from a health score"""

    title: str
    description: str
    action_url: str
    priority: int


@dataclass(frozen=True)
class CachedSettings:
    """Slowly-changing configuration served by the settings cache"""

    record_start_date: Optional[date] = None
    pro_labore: float = 0.0
    inss_ceiling: float = 0.0
    inss_rate: float = 0.0  # percent, e.g. 11.0
    inss_amount: float = 0.0  # derived on every refresh
    budget_warning_threshold: float = 100.0
    manual_bracket: int = 0  # 0 = automatic, 1-6 = fixed bracket

    @property
    def record_start_month(self) -> Optional[YearMonth]:
        if self.record_start_date is None:
            return None
        return YearMonth.of(self.record_start_date)
