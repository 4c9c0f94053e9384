"""Calendar-month arithmetic used for month bucketing"""

import calendar
from datetime import date, datetime, time
from typing import List, NamedTuple

from ledger_insights.domain.exceptions import InvalidMonthError


class YearMonth(NamedTuple):
    """Normalized calendar month. Tuple ordering is chronological."""

    year: int
    month: int

    @classmethod
    def of(cls, value: date) -> "YearMonth":
        """Month containing a date or datetime"""
        return cls(value.year, value.month)

    @classmethod
    def checked(cls, year: int, month: int) -> "YearMonth":
        if not 1 <= month <= 12:
            raise InvalidMonthError(f"Month must be between 1 and 12, got {month}")
        return cls(year, month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def shift(self, months: int) -> "YearMonth":
        """Move by whole months, crossing year boundaries as needed"""
        index = self.year * 12 + (self.month - 1) + months
        return YearMonth(index // 12, index % 12 + 1)

    def name(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"


def month_range(start: YearMonth, end: YearMonth) -> List[YearMonth]:
    """Generate list of months from start to end (inclusive)"""
    months = []
    current = start
    while current <= end:
        months.append(current)
        current = current.shift(1)
    return months


def month_span(start: YearMonth, end: YearMonth) -> tuple[datetime, datetime]:
    """First instant of start month and last instant of end month"""
    return datetime.combine(start.first_day, time.min), datetime.combine(end.last_day, time.max)


def wall_clock(value: datetime) -> datetime:
    """Naive wall-clock time of a datetime so aware and naive timestamps compare"""
    return value.replace(tzinfo=None)
