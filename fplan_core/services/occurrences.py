from __future__ import annotations

from typing import List, Optional

from fplan_core.domain.calendar import (
    add_months,
    compare_year_months,
    get_interval_months,
    get_months_between,
    is_year_month_in_range,
)
from fplan_core.domain.models import InvestmentContribution, PlannedItem, RecurringItem, YearMonth


def _is_periodic_active(
    is_active: bool,
    start_date: YearMonth,
    end_date: Optional[YearMonth],
    frequency: Optional[str],
    custom_interval_months: Optional[int],
    year_month: YearMonth,
) -> bool:
    if not is_active:
        return False
    if not is_year_month_in_range(year_month, start_date, end_date):
        return False

    interval = get_interval_months(frequency, custom_interval_months)
    if interval > 1 and get_months_between(start_date, year_month) % interval != 0:
        return False
    return True


def is_recurring_item_active(item: RecurringItem, year_month: YearMonth) -> bool:
    return _is_periodic_active(
        item.is_active,
        item.start_date,
        item.end_date,
        item.frequency,
        item.custom_interval_months,
        year_month,
    )


def is_contribution_active(contribution: InvestmentContribution, year_month: YearMonth) -> bool:
    if not contribution.is_active:
        return False
    if contribution.kind == "one-off":
        return contribution.scheduled_date == year_month

    # recurring
    if not contribution.start_date or not contribution.frequency:
        return False
    return _is_periodic_active(
        contribution.is_active,
        contribution.start_date,
        contribution.end_date,
        contribution.frequency,
        contribution.custom_interval_months,
        year_month,
    )


def get_planned_repeating_occurrences(
    item: PlannedItem, start_date: YearMonth, end_date: YearMonth
) -> List[YearMonth]:
    """
    Occurrence months of a repeating planned item within [start_date, end_date].

    Stepping starts at the item's own first occurrence so the phase never
    shifts with the query window.
    """
    if item.kind != "repeating" or not item.first_occurrence or not item.frequency:
        return []

    interval = get_interval_months(item.frequency, item.custom_interval_months)
    current = item.first_occurrence
    while compare_year_months(current, start_date) < 0:
        current = add_months(current, interval)

    occurrences: List[YearMonth] = []
    while compare_year_months(current, end_date) <= 0:
        if item.end_date and compare_year_months(current, item.end_date) > 0:
            break
        occurrences.append(current)
        current = add_months(current, interval)
    return occurrences
