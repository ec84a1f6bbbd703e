from __future__ import annotations

from typing import Iterable, List

import pandas as pd

from fplan_core.domain.models import MonthlyProjection, YearlyRollup


def calculate_yearly_rollups(monthly: Iterable[MonthlyProjection]) -> List[YearlyRollup]:
    """
    Fold monthly cash rows into calendar-year rows:
    - Income/expense totals are summed per year.
    - Starting balance comes from the first month, ending balance from the last.
    """
    rows = sorted(monthly, key=lambda p: p.year_month)
    if not rows:
        return []

    df = pd.DataFrame(
        [
            {
                "year": p.year,
                "total_income": p.total_income,
                "total_expenses": p.total_expenses,
                "starting_balance": p.starting_balance,
                "ending_balance": p.ending_balance,
            }
            for p in rows
        ]
    )
    yearly = df.groupby("year", sort=True).agg(
        total_income=("total_income", "sum"),
        total_expenses=("total_expenses", "sum"),
        starting_balance=("starting_balance", "first"),
        ending_balance=("ending_balance", "last"),
    )

    rollups: List[YearlyRollup] = []
    for year, agg in yearly.iterrows():
        total_income = float(agg["total_income"])
        total_expenses = float(agg["total_expenses"])
        rollups.append(
            YearlyRollup(
                year=int(year),
                total_income=total_income,
                total_expenses=total_expenses,
                net_change=total_income - total_expenses,
                starting_balance=float(agg["starting_balance"]),
                ending_balance=float(agg["ending_balance"]),
                months=[p for p in rows if p.year == year],
            )
        )
    return rollups
