import pytest

from fplan_core.domain.models import (
    CashAccount,
    Debt,
    InvestmentAccount,
    Receivable,
    RecurringItem,
    WealthProjectionData,
)
from fplan_core.services.cashflow import calculate_projection
from fplan_core.services.wealth import (
    calculate_wealth_projection,
    get_earliest_start_date,
    get_latest_end_date,
)


def _data(**kwargs) -> WealthProjectionData:
    base = dict(
        cash_accounts=[
            CashAccount(id="cash", name="Checking", starting_balance=1000.0, starting_date="2025-01", planning_horizon_months=12),
        ],
        investments=[
            InvestmentAccount(id="inv", name="Fund", starting_valuation=2000.0, valuation_date="2025-01", annual_growth_rate=0.0),
        ],
        receivables=[
            Receivable(id="rcv", name="IOU", initial_principal=300.0, start_date="2025-01"),
        ],
        debts=[
            Debt(id="phone", name="Phone", debt_type="fixed-installment", initial_principal=500.0, start_date="2025-01",
                 installment_amount=100.0, total_installments=5),
        ],
    )
    base.update(kwargs)
    return WealthProjectionData(**base)


def test_paid_off_debt_counts_as_zero_after_last_row():
    months = calculate_wealth_projection(_data(), "2025-01", "2025-12")
    assert len(months) == 12
    assert [m.debts_total for m in months[:5]] == [400.0, 300.0, 200.0, 100.0, 0.0]
    assert all(m.debts_total == 0.0 for m in months[5:])


def test_net_worth_combines_all_entities():
    first = calculate_wealth_projection(_data(), "2025-01", "2025-12")[0]
    assert first.cash_accounts_total == 1000.0
    assert first.investments_total == 2000.0
    assert first.receivables_total == 300.0
    assert first.debts_total == 400.0
    assert first.net_worth == 1000.0 + 2000.0 + 300.0 - 400.0
    assert (first.year, first.month) == (2025, 1)


def test_breakdowns_carry_entity_ids_and_names():
    first = calculate_wealth_projection(_data(), "2025-01", "2025-01")[0]
    assert [(e.id, e.name, e.value) for e in first.cash_accounts_breakdown] == [("cash", "Checking", 1000.0)]
    debt_entry = first.debts_breakdown[0]
    assert (debt_entry.id, debt_entry.value, debt_entry.interest_paid) == ("phone", 400.0, 0.0)


def test_debt_starting_later_uses_initial_principal_before_its_start():
    late = Debt(id="car", name="Car", debt_type="amortized", initial_principal=9000.0, start_date="2025-06",
                monthly_payment=1000.0)
    months = calculate_wealth_projection(_data(debts=[late]), "2025-01", "2025-07")
    assert [m.debts_total for m in months] == [9000.0] * 5 + [8000.0, 7000.0]
    assert months[0].debts_breakdown[0].interest_paid is None


def test_cash_fallback_before_account_start():
    account = CashAccount(id="cash", name="New", starting_balance=50.0, starting_date="2025-03", planning_horizon_months=6)
    items = {"cash": [RecurringItem(id="r", type="income", name="Pay", amount=10.0, start_date="2025-03")]}
    months = calculate_wealth_projection(
        _data(cash_accounts=[account], recurring_items=items, investments=[], receivables=[], debts=[]),
        "2025-01",
        "2025-04",
    )
    assert [m.cash_accounts_total for m in months] == [50.0, 50.0, 60.0, 70.0]


def test_precomputed_cash_projection_is_used():
    account = CashAccount(id="cash", name="Checking", starting_balance=0.0, starting_date="2025-01", planning_horizon_months=2)
    items = [RecurringItem(id="r", type="income", name="Pay", amount=10.0, start_date="2025-01")]
    pre = {"cash": calculate_projection(account, items, [])}
    months = calculate_wealth_projection(
        _data(cash_accounts=[account], cash_projections=pre, investments=[], receivables=[], debts=[]),
        "2025-01",
        "2025-02",
    )
    assert [m.net_worth for m in months] == [10.0, 20.0]


def test_receivable_fallback_uses_current_balance():
    rec = Receivable(id="rcv", name="IOU", initial_principal=300.0, start_date="2025-05", current_balance=250.0)
    months = calculate_wealth_projection(_data(receivables=[rec]), "2025-01", "2025-05")
    assert [m.receivables_total for m in months] == [250.0] * 4 + [300.0]


def test_inverted_range_is_empty():
    assert calculate_wealth_projection(_data(), "2025-06", "2025-05") == []


def test_empty_data_emits_zero_rows_per_month():
    months = calculate_wealth_projection(WealthProjectionData(), "2025-01", "2025-03")
    assert [m.net_worth for m in months] == [0.0, 0.0, 0.0]


def test_window_helpers_take_current_month_as_parameter():
    data = _data()
    assert get_earliest_start_date(data, "2030-01") == "2025-01"
    assert get_earliest_start_date(WealthProjectionData(), "2030-01") == "2030-01"
    assert get_latest_end_date(data, "2025-01") == "2035-01"
    assert get_latest_end_date(data, "2025-01", default_horizon_months=6) == "2025-12"

    far = CashAccount(id="far", name="Far", starting_balance=0.0, starting_date="2025-01", custom_end_date="2040-12")
    assert get_latest_end_date(_data(cash_accounts=[far]), "2025-01") == "2040-12"


def test_investment_valuation_in_breakdown():
    inv = InvestmentAccount(id="inv", name="Fund", starting_valuation=1200.0, valuation_date="2025-01", annual_growth_rate=12.0)
    months = calculate_wealth_projection(_data(investments=[inv]), "2025-01", "2025-12")
    assert months[-1].investments_breakdown[0].value == pytest.approx(1344.0)


def test_paid_off_receivable_falls_back_to_stored_balance():
    # the projection stops at zero; later months show the stored balance again
    rec = Receivable(id="rcv", name="IOU", initial_principal=200.0, start_date="2025-01",
                     expected_monthly_repayment=100.0, current_balance=150.0)
    months = calculate_wealth_projection(_data(receivables=[rec]), "2025-01", "2025-05")
    assert [m.receivables_total for m in months] == [100.0, 0.0, 150.0, 150.0, 150.0]
