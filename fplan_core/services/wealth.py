from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fplan_core.domain.calendar import add_months, compare_year_months, iter_months, parse_year_month
from fplan_core.domain.models import (
    BreakdownEntry,
    DebtAmortizationRow,
    InvestmentProjectionRow,
    MonthlyProjection,
    ReceivableProjectionRow,
    WealthProjectionData,
    WealthProjectionMonth,
    YearMonth,
)
from fplan_core.services.cashflow import calculate_projection, get_account_end_date
from fplan_core.services.debt import calculate_debt_amortization
from fplan_core.services.investment import calculate_investment_projection
from fplan_core.services.receivable import calculate_receivable_projection

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_MONTHS = 120


def _cash_series(data: WealthProjectionData) -> Dict[str, List[MonthlyProjection]]:
    series: Dict[str, List[MonthlyProjection]] = {}
    for account in data.cash_accounts:
        if account.id in data.cash_projections:
            series[account.id] = data.cash_projections[account.id]
        else:
            series[account.id] = calculate_projection(
                account,
                data.recurring_items.get(account.id),
                data.planned_items.get(account.id),
            )
    return series


def calculate_wealth_projection(
    data: WealthProjectionData,
    start_date: YearMonth,
    end_date: YearMonth,
) -> List[WealthProjectionMonth]:
    """
    Merge every entity's series into one net-worth row per month.

    Values are summed across entities as-is, without currency conversion.
    Missing months fall back to each entity's static value; a debt whose
    schedule ended before the month counts as paid off.
    """
    months = list(iter_months(start_date, end_date))
    if not months:
        return []

    cash: Dict[str, Dict[YearMonth, MonthlyProjection]] = {
        account_id: {row.year_month: row for row in rows} for account_id, rows in _cash_series(data).items()
    }

    investments: Dict[str, Dict[YearMonth, InvestmentProjectionRow]] = {}
    for inv in data.investments:
        rows = calculate_investment_projection(
            inv, data.investment_contributions.get(inv.id), start_date, end_date
        )
        investments[inv.id] = {row.year_month: row for row in rows}

    receivables: Dict[str, Dict[YearMonth, ReceivableProjectionRow]] = {}
    for rec in data.receivables:
        rows = calculate_receivable_projection(
            rec, data.receivable_repayments.get(rec.id), start_date, end_date
        )
        receivables[rec.id] = {row.year_month: row for row in rows}

    debts: Dict[str, Dict[YearMonth, DebtAmortizationRow]] = {}
    debt_last_month: Dict[str, Optional[YearMonth]] = {}
    for debt in data.debts:
        rows = calculate_debt_amortization(
            debt,
            data.debt_reference_rates.get(debt.id),
            data.debt_extra_payments.get(debt.id),
            start_date,
            end_date,
        )
        debts[debt.id] = {row.year_month: row for row in rows}
        debt_last_month[debt.id] = rows[-1].year_month if rows else None

    logger.debug(
        "Aggregating %d months: %d cash, %d investments, %d receivables, %d debts",
        len(months),
        len(data.cash_accounts),
        len(data.investments),
        len(data.receivables),
        len(data.debts),
    )

    result: List[WealthProjectionMonth] = []
    for year_month in months:
        cash_breakdown: List[BreakdownEntry] = []
        for account in data.cash_accounts:
            row = cash[account.id].get(year_month)
            balance = row.ending_balance if row is not None else account.starting_balance
            cash_breakdown.append(BreakdownEntry(id=account.id, name=account.name, value=balance))

        investments_breakdown: List[BreakdownEntry] = []
        for inv in data.investments:
            inv_row = investments[inv.id].get(year_month)
            valuation = inv_row.ending_valuation if inv_row is not None else inv.starting_valuation
            investments_breakdown.append(BreakdownEntry(id=inv.id, name=inv.name, value=valuation))

        receivables_breakdown: List[BreakdownEntry] = []
        for rec in data.receivables:
            rec_row = receivables[rec.id].get(year_month)
            balance = rec_row.ending_balance if rec_row is not None else rec.balance_today
            receivables_breakdown.append(BreakdownEntry(id=rec.id, name=rec.name, value=balance))

        debts_breakdown: List[BreakdownEntry] = []
        for debt in data.debts:
            debt_row = debts[debt.id].get(year_month)
            last = debt_last_month[debt.id]
            if debt_row is not None:
                principal = debt_row.ending_principal
            elif last is not None and compare_year_months(year_month, last) > 0:
                principal = 0.0  # paid off
            else:
                principal = debt.initial_principal
            debts_breakdown.append(
                BreakdownEntry(
                    id=debt.id,
                    name=debt.name,
                    value=principal,
                    interest_paid=debt_row.interest_paid if debt_row is not None else None,
                )
            )

        cash_total = sum((e.value for e in cash_breakdown), 0.0)
        investments_total = sum((e.value for e in investments_breakdown), 0.0)
        receivables_total = sum((e.value for e in receivables_breakdown), 0.0)
        debts_total = sum((e.value for e in debts_breakdown), 0.0)
        year, month = parse_year_month(year_month)

        result.append(
            WealthProjectionMonth(
                year_month=year_month,
                year=year,
                month=month,
                cash_accounts_total=cash_total,
                cash_accounts_breakdown=cash_breakdown,
                investments_total=investments_total,
                investments_breakdown=investments_breakdown,
                receivables_total=receivables_total,
                receivables_breakdown=receivables_breakdown,
                debts_total=debts_total,
                debts_breakdown=debts_breakdown,
                net_worth=cash_total + investments_total + receivables_total - debts_total,
            )
        )

    return result


def get_earliest_start_date(data: WealthProjectionData, current_month: YearMonth) -> YearMonth:
    """Earliest start across all entities, or ``current_month`` when there are none."""
    starts = (
        [a.starting_date for a in data.cash_accounts]
        + [i.valuation_date for i in data.investments]
        + [r.start_date for r in data.receivables]
        + [d.start_date for d in data.debts]
    )
    return min(starts) if starts else current_month


def get_latest_end_date(
    data: WealthProjectionData,
    current_month: YearMonth,
    default_horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> YearMonth:
    default_end = add_months(current_month, default_horizon_months)
    ends = [get_account_end_date(account) for account in data.cash_accounts]
    latest = max(ends) if ends else None
    if latest and compare_year_months(latest, default_end) > 0:
        return latest
    return default_end
