from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from fplan_core.domain.calendar import add_months, compare_year_months
from fplan_core.domain.models import (
    Receivable,
    ReceivableProjectionRow,
    ReceivableRepayment,
    YearMonth,
)


def calculate_receivable_projection(
    receivable: Receivable,
    repayments: Optional[Iterable[ReceivableRepayment]],
    start_date: YearMonth,
    end_date: YearMonth,
) -> List[ReceivableProjectionRow]:
    """
    Balance decay from the receivable's own start date.

    Recorded repayments win over the expected monthly repayment, which is only
    used as a forecast from ``start_date`` on. The loop stops once the balance
    reaches zero.
    """
    recorded: Dict[YearMonth, float] = defaultdict(float)
    for repayment in repayments or []:
        recorded[repayment.date] += repayment.amount

    monthly_rate = 0.0
    if receivable.has_interest:
        monthly_rate = (receivable.annual_interest_rate or 0.0) / 100 / 12

    rows: List[ReceivableProjectionRow] = []
    current = receivable.start_date
    balance = receivable.initial_principal

    while compare_year_months(current, end_date) <= 0:
        in_window = compare_year_months(current, start_date) >= 0
        interest = balance * monthly_rate

        repaid = recorded.get(current, 0.0)
        if repaid <= 0:
            repaid = (receivable.expected_monthly_repayment or 0.0) if in_window else 0.0

        ending = max(0.0, balance + interest - repaid)
        if in_window:
            rows.append(
                ReceivableProjectionRow(
                    year_month=current,
                    starting_balance=balance,
                    repayments=repaid,
                    interest_accrued=interest,
                    ending_balance=ending,
                )
            )

        balance = ending
        current = add_months(current, 1)
        if balance <= 0:
            break

    return rows
