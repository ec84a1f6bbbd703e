from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from fplan_core.domain.calendar import add_months, compare_year_months
from fplan_core.domain.models import (
    Debt,
    DebtAmortizationRow,
    DebtExtraPayment,
    DebtReferenceRate,
    YearMonth,
)


def get_effective_rate(
    debt: Debt,
    reference_rates: Optional[Iterable[DebtReferenceRate]],
    year_month: YearMonth,
) -> float:
    """Annual rate in percent applying to ``year_month``."""
    if debt.interest_model == "none":
        return 0.0
    if debt.interest_model == "fixed":
        return debt.fixed_interest_rate or 0.0

    # variable: latest reference entry at or before the month, plus margin
    applicable = [r for r in reference_rates or [] if compare_year_months(r.year_month, year_month) <= 0]
    reference = max(applicable, key=lambda r: r.year_month).rate if applicable else 0.0
    return reference + (debt.reference_rate_margin or 0.0)


def calculate_debt_amortization(
    debt: Debt,
    reference_rates: Optional[Iterable[DebtReferenceRate]],
    extra_payments: Optional[Iterable[DebtExtraPayment]],
    start_date: YearMonth,
    end_date: YearMonth,
) -> List[DebtAmortizationRow]:
    """
    Amortization schedule from the debt's own start date.

    Two models:
    - amortized: ``monthly_payment`` covers interest first, the rest reduces principal.
    - fixed-installment: no interest, ``installment_amount`` for ``total_installments`` months.

    Extra payments reduce principal on top of the schedule. Nothing is emitted
    once the principal reaches zero.
    """
    rates = list(reference_rates or [])
    extras: Dict[YearMonth, float] = defaultdict(float)
    for payment in extra_payments or []:
        extras[payment.date] += payment.amount

    rows: List[DebtAmortizationRow] = []
    current = debt.start_date
    principal = debt.initial_principal
    installments_left = debt.total_installments or 0

    while compare_year_months(current, end_date) <= 0 and principal > 0:
        annual_rate = get_effective_rate(debt, rates, current)
        interest = 0.0
        principal_paid = 0.0
        total_payment = 0.0

        if debt.debt_type == "amortized":
            interest = principal * annual_rate / 100 / 12
            payment = debt.monthly_payment or 0.0
            principal_paid = min(principal, payment - interest)
            total_payment = payment
        elif installments_left > 0:
            # fixed-installment
            principal_paid = min(principal, debt.installment_amount or 0.0)
            total_payment = principal_paid
            installments_left -= 1

        extra = extras.get(current, 0.0)
        principal_paid += min(principal - principal_paid, extra)
        total_payment += extra

        ending = max(0.0, principal - principal_paid)
        if compare_year_months(current, start_date) >= 0:
            rows.append(
                DebtAmortizationRow(
                    year_month=current,
                    starting_principal=principal,
                    interest_paid=interest,
                    principal_paid=principal_paid,
                    total_payment=total_payment,
                    ending_principal=ending,
                    interest_rate=annual_rate,
                )
            )

        principal = ending
        current = add_months(current, 1)

    return rows
