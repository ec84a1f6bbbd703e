from __future__ import annotations

import json
import logging
import math
import re
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from fplan_core.domain.models import (
    CashAccount,
    Debt,
    DebtExtraPayment,
    DebtReferenceRate,
    InvestmentAccount,
    InvestmentContribution,
    PlannedItem,
    Receivable,
    ReceivableRepayment,
    RecurringItem,
    WealthProjectionData,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

YEAR_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

ITEM_TYPES = ("income", "expense")
FREQUENCIES = ("monthly", "quarterly", "yearly", "custom")
PLANNED_KINDS = ("one-off", "repeating")
CONTRIBUTION_TYPES = ("contribution", "withdrawal")
CONTRIBUTION_KINDS = ("one-off", "recurring")
DEBT_TYPES = ("amortized", "fixed-installment")
INTEREST_MODELS = ("none", "fixed", "variable")


class WorkspaceError(ValueError):
    """Raised when a workspace record cannot be turned into a valid entity."""


def _where(record: Dict[str, Any], section: str) -> str:
    return f"{section}[{record.get('id', '?')}]"


def _required(record: Dict[str, Any], key: str, section: str) -> Any:
    if record.get(key) is None:
        raise WorkspaceError(f"{_where(record, section)}: missing '{key}'")
    return record[key]


def _year_month(record: Dict[str, Any], key: str, section: str, required: bool = True) -> Optional[str]:
    value = _required(record, key, section) if required else record.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not YEAR_MONTH_RE.match(value):
        raise WorkspaceError(f"{_where(record, section)}: '{key}' must be YYYY-MM, got {value!r}")
    return value


def _number(record: Dict[str, Any], key: str, section: str, required: bool = True) -> Optional[float]:
    value = _required(record, key, section) if required else record.get(key)
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise WorkspaceError(f"{_where(record, section)}: '{key}' is not a number: {value!r}") from exc
    if not math.isfinite(number):
        raise WorkspaceError(f"{_where(record, section)}: '{key}' must be finite")
    return number


def _integer(record: Dict[str, Any], key: str, section: str, default: Optional[int] = None) -> Optional[int]:
    value = _number(record, key, section, required=False)
    return default if value is None else int(value)


def _choice(
    record: Dict[str, Any],
    key: str,
    section: str,
    allowed: Iterable[str],
    default: Optional[str] = None,
    required: bool = False,
) -> Optional[str]:
    value = _required(record, key, section) if required else record.get(key, default)
    if value is None:
        return None
    if value not in allowed:
        raise WorkspaceError(f"{_where(record, section)}: '{key}' must be one of {list(allowed)}, got {value!r}")
    return value


def _cash_account(r: Dict[str, Any]) -> CashAccount:
    s = "accounts"
    return CashAccount(
        id=str(_required(r, "id", s)),
        name=str(r.get("name", "")),
        starting_balance=_number(r, "starting_balance", s),
        starting_date=_year_month(r, "starting_date", s),
        planning_horizon_months=_integer(r, "planning_horizon_months", s, default=12),
        custom_end_date=_year_month(r, "custom_end_date", s, required=False),
        currency=str(r.get("currency", "EUR")),
    )


def _recurring_item(r: Dict[str, Any]) -> RecurringItem:
    s = "recurring_items"
    return RecurringItem(
        id=str(_required(r, "id", s)),
        type=_choice(r, "type", s, ITEM_TYPES, required=True),
        name=str(r.get("name", "")),
        amount=_number(r, "amount", s),
        start_date=_year_month(r, "start_date", s),
        frequency=_choice(r, "frequency", s, FREQUENCIES, default="monthly"),
        custom_interval_months=_integer(r, "custom_interval_months", s),
        end_date=_year_month(r, "end_date", s, required=False),
        category=r.get("category"),
        is_active=bool(r.get("is_active", True)),
        account_id=str(_required(r, "account_id", s)),
    )


def _planned_item(r: Dict[str, Any]) -> PlannedItem:
    s = "planned_items"
    override = bool(r.get("is_recurring_override", False))
    return PlannedItem(
        id=str(_required(r, "id", s)),
        type=_choice(r, "type", s, ITEM_TYPES, required=True),
        kind=_choice(r, "kind", s, PLANNED_KINDS, required=True),
        name=r.get("name"),
        amount=_number(r, "amount", s, required=not override),
        category=r.get("category"),
        scheduled_date=_year_month(r, "scheduled_date", s, required=False),
        frequency=_choice(r, "frequency", s, FREQUENCIES),
        custom_interval_months=_integer(r, "custom_interval_months", s),
        first_occurrence=_year_month(r, "first_occurrence", s, required=False),
        end_date=_year_month(r, "end_date", s, required=False),
        is_recurring_override=override,
        linked_recurring_item_id=r.get("linked_recurring_item_id"),
        skip_occurrence=bool(r.get("skip_occurrence", False)),
        account_id=str(_required(r, "account_id", s)),
    )


def _investment(r: Dict[str, Any]) -> InvestmentAccount:
    s = "investments"
    return InvestmentAccount(
        id=str(_required(r, "id", s)),
        name=str(r.get("name", "")),
        starting_valuation=_number(r, "starting_valuation", s),
        valuation_date=_year_month(r, "valuation_date", s),
        annual_growth_rate=_number(r, "annual_growth_rate", s, required=False) or 0.0,
        currency=str(r.get("currency", "EUR")),
    )


def _contribution(r: Dict[str, Any]) -> InvestmentContribution:
    s = "investment_contributions"
    return InvestmentContribution(
        id=str(_required(r, "id", s)),
        type=_choice(r, "type", s, CONTRIBUTION_TYPES, required=True),
        kind=_choice(r, "kind", s, CONTRIBUTION_KINDS, required=True),
        amount=_number(r, "amount", s),
        scheduled_date=_year_month(r, "scheduled_date", s, required=False),
        start_date=_year_month(r, "start_date", s, required=False),
        end_date=_year_month(r, "end_date", s, required=False),
        frequency=_choice(r, "frequency", s, FREQUENCIES),
        custom_interval_months=_integer(r, "custom_interval_months", s),
        is_active=bool(r.get("is_active", True)),
        investment_id=str(_required(r, "investment_id", s)),
    )


def _receivable(r: Dict[str, Any]) -> Receivable:
    s = "receivables"
    return Receivable(
        id=str(_required(r, "id", s)),
        name=str(r.get("name", "")),
        initial_principal=_number(r, "initial_principal", s),
        start_date=_year_month(r, "start_date", s),
        has_interest=bool(r.get("has_interest", False)),
        annual_interest_rate=_number(r, "annual_interest_rate", s, required=False),
        expected_monthly_repayment=_number(r, "expected_monthly_repayment", s, required=False),
        current_balance=_number(r, "current_balance", s, required=False),
        currency=str(r.get("currency", "EUR")),
    )


def _repayment(r: Dict[str, Any]) -> ReceivableRepayment:
    s = "receivable_repayments"
    return ReceivableRepayment(
        id=str(_required(r, "id", s)),
        date=_year_month(r, "date", s),
        amount=_number(r, "amount", s),
        receivable_id=str(_required(r, "receivable_id", s)),
    )


def _debt(r: Dict[str, Any]) -> Debt:
    s = "debts"
    return Debt(
        id=str(_required(r, "id", s)),
        name=str(r.get("name", "")),
        debt_type=_choice(r, "debt_type", s, DEBT_TYPES, required=True),
        initial_principal=_number(r, "initial_principal", s),
        start_date=_year_month(r, "start_date", s),
        interest_model=_choice(r, "interest_model", s, INTEREST_MODELS, default="none"),
        fixed_interest_rate=_number(r, "fixed_interest_rate", s, required=False),
        reference_rate_margin=_number(r, "reference_rate_margin", s, required=False),
        monthly_payment=_number(r, "monthly_payment", s, required=False),
        installment_amount=_number(r, "installment_amount", s, required=False),
        total_installments=_integer(r, "total_installments", s),
        currency=str(r.get("currency", "EUR")),
    )


def _reference_rate(r: Dict[str, Any]) -> DebtReferenceRate:
    s = "debt_reference_rates"
    return DebtReferenceRate(
        id=str(_required(r, "id", s)),
        year_month=_year_month(r, "year_month", s),
        rate=_number(r, "rate", s),
        debt_id=str(_required(r, "debt_id", s)),
    )


def _extra_payment(r: Dict[str, Any]) -> DebtExtraPayment:
    s = "debt_extra_payments"
    return DebtExtraPayment(
        id=str(_required(r, "id", s)),
        date=_year_month(r, "date", s),
        amount=_number(r, "amount", s),
        debt_id=str(_required(r, "debt_id", s)),
    )


def _records(data: Dict[str, Any], section: str, build: Callable[[Dict[str, Any]], T]) -> List[T]:
    return [build(record) for record in data.get(section) or []]


def _group(records: List[T], parent: Callable[[T], str]) -> Dict[str, List[T]]:
    grouped: Dict[str, List[T]] = defaultdict(list)
    for record in records:
        grouped[parent(record)].append(record)
    return dict(grouped)


def parse_workspace(data: Dict[str, Any]) -> WealthProjectionData:
    """Validate raw workspace records and group sub-records by their parent id."""
    workspace = WealthProjectionData(
        cash_accounts=_records(data, "accounts", _cash_account),
        recurring_items=_group(_records(data, "recurring_items", _recurring_item), lambda r: r.account_id),
        planned_items=_group(_records(data, "planned_items", _planned_item), lambda r: r.account_id),
        investments=_records(data, "investments", _investment),
        investment_contributions=_group(
            _records(data, "investment_contributions", _contribution), lambda r: r.investment_id
        ),
        receivables=_records(data, "receivables", _receivable),
        receivable_repayments=_group(
            _records(data, "receivable_repayments", _repayment), lambda r: r.receivable_id
        ),
        debts=_records(data, "debts", _debt),
        debt_reference_rates=_group(_records(data, "debt_reference_rates", _reference_rate), lambda r: r.debt_id),
        debt_extra_payments=_group(_records(data, "debt_extra_payments", _extra_payment), lambda r: r.debt_id),
    )
    logger.debug(
        "Loaded workspace: %d accounts, %d investments, %d receivables, %d debts",
        len(workspace.cash_accounts),
        len(workspace.investments),
        len(workspace.receivables),
        len(workspace.debts),
    )
    return workspace


def load_workspace(path: str | Path) -> WealthProjectionData:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as f:
        return parse_workspace(json.load(f))
