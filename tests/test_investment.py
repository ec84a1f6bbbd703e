import pytest

from fplan_core.domain.models import InvestmentAccount, InvestmentContribution
from fplan_core.services.investment import calculate_investment_projection, get_monthly_growth_rate


def _account(**kwargs) -> InvestmentAccount:
    base = dict(id="inv", name="Index fund", starting_valuation=1200.0, valuation_date="2025-01", annual_growth_rate=12.0)
    base.update(kwargs)
    return InvestmentAccount(**base)


def test_monthly_rate_compounds_to_annual_rate():
    rate = get_monthly_growth_rate(12.0)
    assert (1 + rate) ** 12 == pytest.approx(1.12)
    assert get_monthly_growth_rate(0.0) == 0.0


def test_twelve_months_of_growth_match_annual_rate():
    rows = calculate_investment_projection(_account(), [], "2025-01", "2025-12")
    assert len(rows) == 12
    assert rows[-1].ending_valuation == pytest.approx(1200 * 1.12, rel=1e-6)
    assert rows[0].starting_valuation == 1200.0


def test_query_before_valuation_date_starts_at_valuation_date():
    rows = calculate_investment_projection(_account(), None, "2024-10", "2025-03")
    assert [r.year_month for r in rows] == ["2025-01", "2025-02", "2025-03"]


def test_query_after_valuation_date_replays_silently():
    rows = calculate_investment_projection(_account(), [], "2025-07", "2025-09")
    assert [r.year_month for r in rows] == ["2025-07", "2025-08", "2025-09"]
    assert rows[0].starting_valuation == pytest.approx(1200 * 1.12 ** 0.5)


def test_replay_includes_contributions():
    contributions = [
        InvestmentContribution(id="c", type="contribution", kind="recurring", amount=100.0, start_date="2025-01",
                               frequency="monthly"),
    ]
    rows = calculate_investment_projection(_account(annual_growth_rate=0.0), contributions, "2025-04", "2025-04")
    assert rows[0].starting_valuation == 1500.0
    assert rows[0].contributions == 100.0
    assert rows[0].ending_valuation == 1600.0


def test_withdrawals_can_drive_valuation_negative():
    contributions = [
        InvestmentContribution(id="w", type="withdrawal", kind="one-off", amount=5000.0, scheduled_date="2025-02"),
    ]
    rows = calculate_investment_projection(_account(annual_growth_rate=0.0), contributions, "2025-01", "2025-03")
    assert [r.ending_valuation for r in rows] == [1200.0, -3800.0, -3800.0]
    assert rows[1].withdrawals == 5000.0


def test_inactive_contribution_is_ignored():
    contributions = [
        InvestmentContribution(id="c", type="contribution", kind="one-off", amount=300.0, scheduled_date="2025-01",
                               is_active=False),
    ]
    rows = calculate_investment_projection(_account(annual_growth_rate=0.0), contributions, "2025-01", "2025-01")
    assert rows[0].ending_valuation == 1200.0


def test_inverted_range_is_empty():
    assert calculate_investment_projection(_account(), [], "2025-06", "2025-05") == []
