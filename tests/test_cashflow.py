import pytest

from fplan_core.domain.models import CashAccount, PlannedItem, ProjectionFilters, RecurringItem
from fplan_core.services.cashflow import calculate_projection, generate_month_list, get_unique_categories


def _account(**kwargs) -> CashAccount:
    base = dict(id="acc", name="Checking", starting_balance=1000.0, starting_date="2025-01", planning_horizon_months=12)
    base.update(kwargs)
    return CashAccount(**base)


def _household():
    recurring = [
        RecurringItem(id="salary", type="income", name="Salary", amount=3000.0, start_date="2025-01", category="salary"),
        RecurringItem(id="rent", type="expense", name="Rent", amount=1000.0, start_date="2025-01", category="housing"),
        RecurringItem(
            id="insurance", type="expense", name="Insurance", amount=300.0, start_date="2025-01",
            frequency="quarterly", category="insurance",
        ),
    ]
    planned = [
        PlannedItem(id="trip", type="expense", kind="one-off", name="Trip", amount=500.0, scheduled_date="2025-06",
                    category="travel"),
        PlannedItem(id="side", type="income", kind="repeating", name="Side gig", amount=200.0, frequency="custom",
                    custom_interval_months=2, first_occurrence="2024-11"),
    ]
    return recurring, planned


def _by_month(rows):
    return {r.year_month: r for r in rows}


def test_month_list_uses_horizon_or_custom_end():
    assert generate_month_list(_account(planning_horizon_months=3)) == ["2025-01", "2025-02", "2025-03"]
    assert generate_month_list(_account(custom_end_date="2025-02")) == ["2025-01", "2025-02"]
    assert generate_month_list(_account(custom_end_date="2024-12")) == []


def test_household_projection_totals():
    recurring, planned = _household()
    rows = calculate_projection(_account(), recurring, planned)
    assert len(rows) == 12
    months = _by_month(rows)

    jan = months["2025-01"]
    assert jan.starting_balance == 1000.0
    assert jan.total_income == 3200.0  # salary + side gig (Nov phase lands on Jan)
    assert jan.total_expenses == 1300.0
    assert jan.ending_balance == 2900.0

    feb = months["2025-02"]
    assert feb.starting_balance == 2900.0
    assert feb.total_income == 3000.0
    assert feb.total_expenses == 1000.0

    june = months["2025-06"]
    assert [line.source for line in june.expense_breakdown] == ["recurring", "planned-one-off"]
    assert june.total_expenses == 1500.0

    side_months = [m for m, r in months.items() if any(line.item_id == "side" for line in r.income_breakdown)]
    assert side_months == ["2025-01", "2025-03", "2025-05", "2025-07", "2025-09", "2025-11"]


def test_net_changes_sum_to_balance_delta():
    recurring, planned = _household()
    rows = calculate_projection(_account(), recurring, planned)
    total_net = sum(r.net_change for r in rows)
    assert total_net == pytest.approx(rows[-1].ending_balance - rows[0].starting_balance)


def test_override_replaces_single_occurrence():
    recurring = [RecurringItem(id="gym", type="expense", name="Gym", amount=100.0, start_date="2025-01")]
    planned = [
        PlannedItem(id="o1", type="expense", kind="one-off", amount=150.0, name="Gym (annual fee)",
                    is_recurring_override=True, linked_recurring_item_id="gym", scheduled_date="2025-03"),
    ]
    months = _by_month(calculate_projection(_account(), recurring, planned))

    march = months["2025-03"].expense_breakdown
    assert [(line.amount, line.name, line.is_overridden) for line in march] == [(150.0, "Gym (annual fee)", True)]
    april = months["2025-04"].expense_breakdown
    assert [(line.amount, line.name, line.is_overridden) for line in april] == [(100.0, "Gym", False)]


def test_override_falls_back_to_recurring_fields():
    recurring = [RecurringItem(id="gym", type="expense", name="Gym", amount=100.0, start_date="2025-01", category="sport")]
    planned = [
        PlannedItem(id="o1", type="expense", kind="one-off", amount=None, is_recurring_override=True,
                    linked_recurring_item_id="gym", scheduled_date="2025-02"),
    ]
    line = _by_month(calculate_projection(_account(), recurring, planned))["2025-02"].expense_breakdown[0]
    assert (line.name, line.amount, line.category, line.is_overridden) == ("Gym", 100.0, "sport", True)


def test_skip_override_removes_occurrence():
    recurring = [RecurringItem(id="gym", type="expense", name="Gym", amount=100.0, start_date="2025-01")]
    planned = [
        PlannedItem(id="o1", type="expense", kind="one-off", is_recurring_override=True, skip_occurrence=True,
                    linked_recurring_item_id="gym", scheduled_date="2025-03"),
    ]
    months = _by_month(calculate_projection(_account(), recurring, planned))
    assert months["2025-03"].expense_breakdown == []
    assert months["2025-03"].net_change == 0.0
    assert months["2025-04"].net_change == -100.0
    # the override never shows up as a planned line of its own
    assert all(line.source == "recurring" for r in months.values() for line in r.expense_breakdown)


def test_category_filter_changes_reported_balance():
    recurring, planned = _household()
    unfiltered = calculate_projection(_account(), recurring, planned)
    housing_only = calculate_projection(_account(), recurring, planned, ProjectionFilters(categories=("housing",)))

    jan = housing_only[0]
    # salary and insurance are filtered out, the uncategorized side gig is kept
    assert [line.item_id for line in jan.income_breakdown] == ["side"]
    assert [line.item_id for line in jan.expense_breakdown] == ["rent"]
    assert jan.ending_balance == 200.0
    assert housing_only[-1].ending_balance != unfiltered[-1].ending_balance


def test_item_type_and_kind_filters():
    recurring, planned = _household()
    expenses = calculate_projection(_account(), recurring, planned, ProjectionFilters(item_types=("expense",)))
    assert all(r.total_income == 0.0 for r in expenses)

    one_offs = calculate_projection(_account(), recurring, planned, ProjectionFilters(item_kinds=("one-off",)))
    assert [r.year_month for r in one_offs if r.expense_breakdown] == ["2025-06"]
    assert one_offs[-1].ending_balance == 500.0


def test_date_filters_truncate_rows():
    recurring, planned = _household()
    rows = calculate_projection(
        _account(), recurring, planned, ProjectionFilters(start_date="2025-03", end_date="2025-05")
    )
    assert [r.year_month for r in rows] == ["2025-03", "2025-04", "2025-05"]
    # months before the filter start are not threaded into the balance
    assert rows[0].starting_balance == 1000.0


def test_missing_collections_are_empty():
    rows = calculate_projection(_account(planning_horizon_months=2), None, None)
    assert [(r.year_month, r.ending_balance) for r in rows] == [("2025-01", 1000.0), ("2025-02", 1000.0)]


def test_unique_categories_sorted():
    recurring, planned = _household()
    assert get_unique_categories(recurring, planned) == ["housing", "insurance", "salary", "travel"]
    assert get_unique_categories(None, None) == []
