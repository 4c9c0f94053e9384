"""Installment plan amortization across calendar months"""

from typing import List

from ledger_insights.domain.models import InstallmentContribution, InstallmentPlan
from ledger_insights.utils.date_utils import YearMonth


def amortize_installment_plan(plan: InstallmentPlan) -> List[InstallmentContribution]:
    """
    Expand an installment plan into its monthly contributions.

    Requirements:
    - Exactly total_installments consecutive months starting at the plan's start month
    - Every month contributes installment_amount as recorded on the plan
    - No rounding or remainder handling (total_amount is never divided)

    Returns:
        List of InstallmentContribution in chronological order, empty when the plan
        has no installments

    Example:
        3 x 200.00 starting 2024-01-15 -> 2024-01, 2024-02, 2024-03 at 200.00 each
    """
    if plan.total_installments <= 0:
        return []

    start = plan.start_month
    return [
        InstallmentContribution(month=start.shift(i), amount=plan.installment_amount)
        for i in range(plan.total_installments)
    ]


def contribution_for_month(plan: InstallmentPlan, month: YearMonth) -> float:
    """Amount the plan adds to a single month (0 outside its schedule)"""
    if plan.total_installments <= 0:
        return 0.0
    offset = (month.year - plan.start_month.year) * 12 + (month.month - plan.start_month.month)
    if 0 <= offset < plan.total_installments:
        return plan.installment_amount
    return 0.0
