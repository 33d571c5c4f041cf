from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from config import get_settings

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


def local_today() -> date:
    settings = get_settings()
    tz = ZoneInfo(settings.timezone)
    return datetime.now(tz).date()


def days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - date(year, month, 1)).days


def add_months(base: date, months: int) -> date:
    """Shift by whole months, snapping to the last day of shorter months."""
    month_index = (base.year * 12) + (base.month - 1) + months
    year = month_index // 12
    month = (month_index % 12) + 1
    return date(year, month, min(base.day, days_in_month(year, month)))


@dataclass(frozen=True, order=True)
class PeriodKey:
    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.year <= 9999:
            raise ValueError(f"Year must be between 1 and 9999, got {self.year}")
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}")

    @classmethod
    def of(cls, d: date) -> "PeriodKey":
        return cls(d.year, d.month)

    @classmethod
    def parse(cls, value: str) -> "PeriodKey":
        match = _PERIOD_RE.match(value.strip())
        if not match:
            raise ValueError(f"Invalid period '{value}', expected YYYY-MM")
        return cls(int(match.group(1)), int(match.group(2)))

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, days_in_month(self.year, self.month))

    @property
    def days(self) -> int:
        return days_in_month(self.year, self.month)

    def contains(self, d: date) -> bool:
        return d.year == self.year and d.month == self.month

    def previous(self) -> "PeriodKey":
        if self.month == 1:
            return PeriodKey(self.year - 1, 12)
        return PeriodKey(self.year, self.month - 1)

    def next(self) -> "PeriodKey":
        if self.month == 12:
            return PeriodKey(self.year + 1, 1)
        return PeriodKey(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def resolve_period(month: Optional[str], *, today: Optional[date] = None) -> PeriodKey:
    if not month:
        return PeriodKey.of(today or local_today())
    return PeriodKey.parse(month)
