"""Simples Nacional (Anexo III) tax brackets and INSS contribution"""

from dataclasses import dataclass
from typing import List

from ledger_insights.domain.exceptions import InvalidBracketError


@dataclass(frozen=True)
class TaxBracket:
    min_revenue: float
    max_revenue: float
    rate: float  # nominal rate
    deduction: float


ANEXO_III: List[TaxBracket] = [
    TaxBracket(0, 180_000, 0.06, 0),
    TaxBracket(180_000.01, 360_000, 0.112, 9_360),
    TaxBracket(360_000.01, 720_000, 0.135, 17_640),
    TaxBracket(720_000.01, 1_800_000, 0.16, 35_640),
    TaxBracket(1_800_000.01, 3_600_000, 0.21, 125_640),
    TaxBracket(3_600_000.01, 4_800_000, 0.33, 648_000),
]


@dataclass(frozen=True)
class TaxCalculation:
    gross_amount: float
    revenue_12m: float
    effective_rate: float
    tax_amount: float
    net_amount: float
    bracket_applied: int


@dataclass(frozen=True)
class BracketInfo:
    bracket: int
    effective_rate_percent: float
    next_bracket_at: float


def calculate_inss(pro_labore: float, ceiling: float, rate: float) -> float:
    """
    INSS contribution on the monthly pro-labore.

    Args:
        pro_labore: Owner's monthly salary
        ceiling: Contribution ceiling; the base is min(pro_labore, ceiling)
        rate: Decimal rate, e.g. 0.11 for 11%
    """
    if pro_labore <= 0:
        return 0.0
    return min(pro_labore, ceiling) * rate


def _validate_manual_bracket(manual_bracket: int) -> None:
    if not 0 <= manual_bracket <= len(ANEXO_III):
        raise InvalidBracketError(
            f"Manual bracket must be between 0 and {len(ANEXO_III)}, got {manual_bracket}"
        )


def _select_bracket(revenue_12m: float) -> int:
    """1-based bracket index for trailing 12-month revenue"""
    for index, bracket in enumerate(ANEXO_III, start=1):
        if bracket.min_revenue <= revenue_12m <= bracket.max_revenue:
            return index
    # Above the Simples ceiling (or in the cent gap between brackets): last matching tier
    for index in range(len(ANEXO_III), 0, -1):
        if revenue_12m >= ANEXO_III[index - 1].min_revenue:
            return index
    return 1


def _effective_rate(revenue_12m: float, bracket: TaxBracket) -> float:
    if revenue_12m <= 0:
        return 0.0
    return (revenue_12m * bracket.rate - bracket.deduction) / revenue_12m


def calculate_tax(revenue_12m: float, gross_amount: float, manual_bracket: int = 0) -> TaxCalculation:
    """
    Tax owed on a single receipt given trailing 12-month gross revenue (RBT12).

    Effective rate = (RBT12 x nominal rate - deduction) / RBT12.
    Without revenue history the receipt itself is used as RBT12.
    A manual bracket (1-6) replaces automatic bracket selection.
    """
    _validate_manual_bracket(manual_bracket)

    basis = revenue_12m if revenue_12m > 0 else gross_amount
    bracket_index = manual_bracket or _select_bracket(basis)
    bracket = ANEXO_III[bracket_index - 1]

    effective_rate = _effective_rate(basis, bracket)
    tax_amount = gross_amount * effective_rate

    return TaxCalculation(
        gross_amount=gross_amount,
        revenue_12m=revenue_12m,
        effective_rate=effective_rate,
        tax_amount=tax_amount,
        net_amount=gross_amount - tax_amount,
        bracket_applied=bracket_index,
    )


def bracket_info(revenue_12m: float, manual_bracket: int = 0) -> BracketInfo:
    """Current bracket, effective rate in percent, and revenue where the next bracket starts"""
    _validate_manual_bracket(manual_bracket)

    if revenue_12m <= 0 and not manual_bracket:
        first = ANEXO_III[0]
        return BracketInfo(1, first.rate * 100, first.max_revenue)

    index = manual_bracket or _select_bracket(revenue_12m)
    bracket = ANEXO_III[index - 1]
    if revenue_12m > 0:
        rate_percent = _effective_rate(revenue_12m, bracket) * 100
    else:
        rate_percent = bracket.rate * 100
    next_at = ANEXO_III[index].min_revenue if index < len(ANEXO_III) else bracket.max_revenue
    return BracketInfo(index, rate_percent, next_at)
