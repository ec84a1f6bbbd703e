from __future__ import annotations

import math
from typing import Iterable, List, Optional, Tuple

from fplan_core.domain.calendar import add_months, compare_year_months
from fplan_core.domain.models import (
    InvestmentAccount,
    InvestmentContribution,
    InvestmentProjectionRow,
    YearMonth,
)
from fplan_core.services.occurrences import is_contribution_active


def get_monthly_growth_rate(annual_growth_rate: float) -> float:
    """Monthly rate that compounds to ``annual_growth_rate`` percent over twelve months."""
    return math.pow(1 + annual_growth_rate / 100, 1 / 12) - 1


def _month_flows(contributions: List[InvestmentContribution], year_month: YearMonth) -> Tuple[float, float]:
    added = 0.0
    withdrawn = 0.0
    for contribution in contributions:
        if not is_contribution_active(contribution, year_month):
            continue
        if contribution.type == "contribution":
            added += contribution.amount
        else:
            withdrawn += contribution.amount
    return added, withdrawn


def calculate_investment_projection(
    investment: InvestmentAccount,
    contributions: Optional[Iterable[InvestmentContribution]],
    start_date: YearMonth,
    end_date: YearMonth,
) -> List[InvestmentProjectionRow]:
    """
    Monthly compounding valuation. Emission starts at the later of ``start_date``
    and the valuation date; months between the valuation date and a later
    ``start_date`` are replayed silently. Valuations are not floored at zero.
    """
    flows = list(contributions or [])
    monthly_rate = get_monthly_growth_rate(investment.annual_growth_rate)

    current = investment.valuation_date
    valuation = investment.starting_valuation

    # warm-up: bring the valuation forward to start_date without emitting rows
    while compare_year_months(current, start_date) < 0:
        added, withdrawn = _month_flows(flows, current)
        valuation = valuation + valuation * monthly_rate + added - withdrawn
        current = add_months(current, 1)

    rows: List[InvestmentProjectionRow] = []
    while compare_year_months(current, end_date) <= 0:
        growth = valuation * monthly_rate
        added, withdrawn = _month_flows(flows, current)
        ending = valuation + growth + added - withdrawn
        rows.append(
            InvestmentProjectionRow(
                year_month=current,
                starting_valuation=valuation,
                growth=growth,
                contributions=added,
                withdrawals=withdrawn,
                ending_valuation=ending,
            )
        )
        valuation = ending
        current = add_months(current, 1)

    return rows
