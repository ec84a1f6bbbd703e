from __future__ import annotations

import datetime as dt
from typing import Iterator, Optional, Tuple

from fplan_core.domain.models import YearMonth


def parse_year_month(year_month: YearMonth) -> Tuple[int, int]:
    year_str, month_str = year_month.split("-")
    return int(year_str), int(month_str)


def format_year_month(year: int, month: int) -> YearMonth:
    return f"{year}-{month:02d}"


def add_months(year_month: YearMonth, months: int) -> YearMonth:
    year, month = parse_year_month(year_month)
    total = year * 12 + (month - 1) + months
    return format_year_month(total // 12, total % 12 + 1)


def compare_year_months(a: YearMonth, b: YearMonth) -> int:
    """String order; valid because months are always two zero-padded digits."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def get_months_between(start: YearMonth, end: YearMonth) -> int:
    start_year, start_month = parse_year_month(start)
    end_year, end_month = parse_year_month(end)
    return (end_year - start_year) * 12 + (end_month - start_month)


def is_year_month_in_range(
    year_month: YearMonth, start_date: YearMonth, end_date: Optional[YearMonth] = None
) -> bool:
    if compare_year_months(year_month, start_date) < 0:
        return False
    if end_date and compare_year_months(year_month, end_date) > 0:
        return False
    return True


def get_interval_months(frequency: Optional[str], custom_interval_months: Optional[int] = None) -> int:
    if frequency == "quarterly":
        return 3
    if frequency == "yearly":
        return 12
    if frequency == "custom":
        return custom_interval_months or 1
    return 1


def iter_months(start: YearMonth, end: YearMonth) -> Iterator[YearMonth]:
    """Inclusive month range; yields nothing when end precedes start."""
    current = start
    while compare_year_months(current, end) <= 0:
        yield current
        current = add_months(current, 1)


def current_year_month(today: dt.date) -> YearMonth:
    return format_year_month(today.year, today.month)
