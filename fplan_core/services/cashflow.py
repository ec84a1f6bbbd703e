from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from fplan_core.domain.calendar import (
    add_months,
    compare_year_months,
    iter_months,
    parse_year_month,
)
from fplan_core.domain.models import (
    CashAccount,
    ItemKind,
    ItemType,
    LineSource,
    MonthlyProjection,
    PlannedItem,
    ProjectionFilters,
    ProjectionLineItem,
    RecurringItem,
    YearMonth,
)
from fplan_core.services.occurrences import get_planned_repeating_occurrences, is_recurring_item_active

logger = logging.getLogger(__name__)


def get_account_end_date(account: CashAccount) -> YearMonth:
    if account.custom_end_date:
        return account.custom_end_date
    return add_months(account.starting_date, account.planning_horizon_months - 1)


def generate_month_list(account: CashAccount) -> List[YearMonth]:
    return list(iter_months(account.starting_date, get_account_end_date(account)))


def _passes_filters(
    filters: Optional[ProjectionFilters],
    category: Optional[str],
    item_type: ItemType,
    kind: ItemKind,
) -> bool:
    if filters is None:
        return True
    # uncategorized lines are never excluded by the category filter
    if filters.categories and category and category not in filters.categories:
        return False
    if filters.item_types and item_type not in filters.item_types:
        return False
    if filters.item_kinds and kind not in filters.item_kinds:
        return False
    return True


def _split_planned_items(
    planned_items: Iterable[PlannedItem],
) -> Tuple[Dict[Tuple[str, YearMonth], PlannedItem], List[PlannedItem]]:
    overrides: Dict[Tuple[str, YearMonth], PlannedItem] = {}
    regular: List[PlannedItem] = []
    for item in planned_items:
        if item.is_recurring_override and item.linked_recurring_item_id and item.scheduled_date:
            overrides[(item.linked_recurring_item_id, item.scheduled_date)] = item
        else:
            regular.append(item)
    return overrides, regular


def _planned_line(item: PlannedItem, source: LineSource) -> ProjectionLineItem:
    return ProjectionLineItem(
        item_id=item.id,
        name=item.name or "",
        amount=item.amount if item.amount is not None else 0.0,
        category=item.category,
        source=source,
    )


def calculate_projection(
    account: CashAccount,
    recurring_items: Optional[Iterable[RecurringItem]],
    planned_items: Optional[Iterable[PlannedItem]],
    filters: Optional[ProjectionFilters] = None,
) -> List[MonthlyProjection]:
    """
    Month-by-month cashflow for one account.

    - Occurrence overrides replace or skip a single recurring occurrence.
    - Repeating planned items are materialized once over the whole account window.
    - The running balance is threaded from the filtered totals, so filters
      change the reported balances.
    """
    recurring = list(recurring_items or [])
    months = generate_month_list(account)
    overrides, regular = _split_planned_items(planned_items or [])

    one_off_by_month: Dict[YearMonth, List[PlannedItem]] = defaultdict(list)
    for item in regular:
        if item.kind == "one-off" and item.scheduled_date:
            one_off_by_month[item.scheduled_date].append(item)

    repeating_by_month: Dict[YearMonth, List[PlannedItem]] = defaultdict(list)
    if months:
        for item in regular:
            if item.kind != "repeating":
                continue
            for occurrence in get_planned_repeating_occurrences(item, months[0], months[-1]):
                repeating_by_month[occurrence].append(item)

    logger.debug(
        "Projecting account %s over %d months (%d recurring, %d planned, %d overrides)",
        account.id,
        len(months),
        len(recurring),
        len(regular),
        len(overrides),
    )

    projections: List[MonthlyProjection] = []
    running_balance = account.starting_balance

    for year_month in months:
        if filters and filters.start_date and compare_year_months(year_month, filters.start_date) < 0:
            continue
        if filters and filters.end_date and compare_year_months(year_month, filters.end_date) > 0:
            break

        income: List[ProjectionLineItem] = []
        expenses: List[ProjectionLineItem] = []

        for item in recurring:
            if not is_recurring_item_active(item, year_month):
                continue
            override = overrides.get((item.id, year_month))
            if override is not None and override.skip_occurrence:
                continue

            category = item.category
            name = item.name
            amount = item.amount
            if override is not None:
                category = override.category if override.category is not None else item.category
                name = override.name if override.name is not None else item.name
                amount = override.amount if override.amount is not None else item.amount

            # an override cannot change the item type
            if not _passes_filters(filters, category, item.type, "recurring"):
                continue

            line = ProjectionLineItem(
                item_id=item.id,
                name=name,
                amount=amount,
                category=category,
                source="recurring",
                is_overridden=override is not None,
            )
            (income if item.type == "income" else expenses).append(line)

        for item in one_off_by_month.get(year_month, []):
            if _passes_filters(filters, item.category, item.type, "one-off"):
                (income if item.type == "income" else expenses).append(_planned_line(item, "planned-one-off"))

        for item in repeating_by_month.get(year_month, []):
            if _passes_filters(filters, item.category, item.type, "repeating"):
                (income if item.type == "income" else expenses).append(_planned_line(item, "planned-repeating"))

        total_income = sum((line.amount for line in income), 0.0)
        total_expenses = sum((line.amount for line in expenses), 0.0)
        net_change = total_income - total_expenses
        year, month = parse_year_month(year_month)

        projections.append(
            MonthlyProjection(
                year_month=year_month,
                year=year,
                month=month,
                starting_balance=running_balance,
                total_income=total_income,
                total_expenses=total_expenses,
                net_change=net_change,
                ending_balance=running_balance + net_change,
                income_breakdown=income,
                expense_breakdown=expenses,
            )
        )
        running_balance += net_change

    return projections


def get_unique_categories(
    recurring_items: Optional[Iterable[RecurringItem]],
    planned_items: Optional[Iterable[PlannedItem]],
) -> List[str]:
    categories = {item.category for item in (recurring_items or []) if item.category}
    categories.update(item.category for item in (planned_items or []) if item.category)
    return sorted(categories)
