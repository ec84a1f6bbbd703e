from __future__ import annotations

import dataclasses
from typing import Dict, List, Literal, Optional, Tuple

YearMonth = str  # "YYYY-MM", zero-padded month

ItemType = Literal["income", "expense"]
ItemKind = Literal["recurring", "one-off", "repeating"]
Frequency = Literal["monthly", "quarterly", "yearly", "custom"]
LineSource = Literal["recurring", "planned-one-off", "planned-repeating"]
DebtType = Literal["amortized", "fixed-installment"]
InterestModel = Literal["none", "fixed", "variable"]
ContributionType = Literal["contribution", "withdrawal"]
ContributionKind = Literal["one-off", "recurring"]


# -------------------------------
# Cash accounts
# -------------------------------


@dataclasses.dataclass(frozen=True)
class CashAccount:
    id: str
    name: str
    starting_balance: float
    starting_date: YearMonth
    planning_horizon_months: int = 12
    custom_end_date: Optional[YearMonth] = None
    currency: str = "EUR"


@dataclasses.dataclass(frozen=True)
class RecurringItem:
    id: str
    type: ItemType
    name: str
    amount: float
    start_date: YearMonth
    frequency: Frequency = "monthly"
    custom_interval_months: Optional[int] = None
    end_date: Optional[YearMonth] = None
    category: Optional[str] = None
    is_active: bool = True
    account_id: str = ""


@dataclasses.dataclass(frozen=True)
class PlannedItem:
    """
    A one-off or repeating planned item.

    When ``is_recurring_override`` is set the item is not a cash line of its own:
    it replaces (or with ``skip_occurrence`` suppresses) the occurrence of
    ``linked_recurring_item_id`` in ``scheduled_date``. Its ``name``, ``amount``
    and ``category`` are then optional and fall back to the recurring item's.
    """

    id: str
    type: ItemType
    kind: Literal["one-off", "repeating"]
    name: Optional[str] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    scheduled_date: Optional[YearMonth] = None
    frequency: Optional[Frequency] = None
    custom_interval_months: Optional[int] = None
    first_occurrence: Optional[YearMonth] = None
    end_date: Optional[YearMonth] = None
    is_recurring_override: bool = False
    linked_recurring_item_id: Optional[str] = None
    skip_occurrence: bool = False
    account_id: str = ""


@dataclasses.dataclass(frozen=True)
class ProjectionFilters:
    start_date: Optional[YearMonth] = None
    end_date: Optional[YearMonth] = None
    categories: Tuple[str, ...] = ()
    item_types: Tuple[ItemType, ...] = ()
    item_kinds: Tuple[ItemKind, ...] = ()


@dataclasses.dataclass
class ProjectionLineItem:
    item_id: str
    name: str
    amount: float
    category: Optional[str]
    source: LineSource
    is_overridden: bool = False


@dataclasses.dataclass
class MonthlyProjection:
    year_month: YearMonth
    year: int
    month: int
    starting_balance: float
    total_income: float
    total_expenses: float
    net_change: float
    ending_balance: float
    income_breakdown: List[ProjectionLineItem] = dataclasses.field(default_factory=list)
    expense_breakdown: List[ProjectionLineItem] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class YearlyRollup:
    year: int
    total_income: float
    total_expenses: float
    net_change: float
    starting_balance: float
    ending_balance: float
    months: List[MonthlyProjection]


# -------------------------------
# Investments
# -------------------------------


@dataclasses.dataclass(frozen=True)
class InvestmentAccount:
    id: str
    name: str
    starting_valuation: float
    valuation_date: YearMonth
    annual_growth_rate: float  # percent, e.g. 7 for 7%
    currency: str = "EUR"


@dataclasses.dataclass(frozen=True)
class InvestmentContribution:
    id: str
    type: ContributionType
    kind: ContributionKind
    amount: float
    scheduled_date: Optional[YearMonth] = None
    start_date: Optional[YearMonth] = None
    end_date: Optional[YearMonth] = None
    frequency: Optional[Frequency] = None
    custom_interval_months: Optional[int] = None
    is_active: bool = True
    investment_id: str = ""


@dataclasses.dataclass
class InvestmentProjectionRow:
    year_month: YearMonth
    starting_valuation: float
    growth: float
    contributions: float
    withdrawals: float
    ending_valuation: float


# -------------------------------
# Receivables
# -------------------------------


@dataclasses.dataclass(frozen=True)
class Receivable:
    id: str
    name: str
    initial_principal: float
    start_date: YearMonth
    has_interest: bool = False
    annual_interest_rate: Optional[float] = None
    expected_monthly_repayment: Optional[float] = None  # forecast only, never a transaction
    current_balance: Optional[float] = None
    currency: str = "EUR"

    @property
    def balance_today(self) -> float:
        if self.current_balance is None:
            return self.initial_principal
        return self.current_balance


@dataclasses.dataclass(frozen=True)
class ReceivableRepayment:
    id: str
    date: YearMonth
    amount: float
    receivable_id: str = ""


@dataclasses.dataclass
class ReceivableProjectionRow:
    year_month: YearMonth
    starting_balance: float
    repayments: float
    interest_accrued: float
    ending_balance: float


# -------------------------------
# Debts
# -------------------------------


@dataclasses.dataclass(frozen=True)
class Debt:
    """
    ``amortized`` debts pay ``monthly_payment`` against interest first and use
    ``interest_model``; ``fixed-installment`` debts carry no interest and pay
    ``installment_amount`` for ``total_installments`` periods.
    """

    id: str
    name: str
    debt_type: DebtType
    initial_principal: float
    start_date: YearMonth
    interest_model: InterestModel = "none"
    fixed_interest_rate: Optional[float] = None
    reference_rate_margin: Optional[float] = None
    monthly_payment: Optional[float] = None
    installment_amount: Optional[float] = None
    total_installments: Optional[int] = None
    currency: str = "EUR"


@dataclasses.dataclass(frozen=True)
class DebtReferenceRate:
    id: str
    year_month: YearMonth
    rate: float
    debt_id: str = ""


@dataclasses.dataclass(frozen=True)
class DebtExtraPayment:
    id: str
    date: YearMonth
    amount: float
    debt_id: str = ""


@dataclasses.dataclass
class DebtAmortizationRow:
    year_month: YearMonth
    starting_principal: float
    interest_paid: float
    principal_paid: float
    total_payment: float
    ending_principal: float
    interest_rate: float


# -------------------------------
# Wealth
# -------------------------------


@dataclasses.dataclass
class BreakdownEntry:
    id: str
    name: str
    value: float
    interest_paid: Optional[float] = None  # debts only


@dataclasses.dataclass
class WealthProjectionMonth:
    year_month: YearMonth
    year: int
    month: int
    cash_accounts_total: float
    cash_accounts_breakdown: List[BreakdownEntry]
    investments_total: float
    investments_breakdown: List[BreakdownEntry]
    receivables_total: float
    receivables_breakdown: List[BreakdownEntry]
    debts_total: float
    debts_breakdown: List[BreakdownEntry]
    net_worth: float


@dataclasses.dataclass
class WealthProjectionData:
    """Fully materialized inputs for the wealth aggregator, sub-records keyed by parent id."""

    cash_accounts: List[CashAccount] = dataclasses.field(default_factory=list)
    cash_projections: Dict[str, List[MonthlyProjection]] = dataclasses.field(default_factory=dict)
    recurring_items: Dict[str, List[RecurringItem]] = dataclasses.field(default_factory=dict)
    planned_items: Dict[str, List[PlannedItem]] = dataclasses.field(default_factory=dict)
    investments: List[InvestmentAccount] = dataclasses.field(default_factory=list)
    investment_contributions: Dict[str, List[InvestmentContribution]] = dataclasses.field(default_factory=dict)
    receivables: List[Receivable] = dataclasses.field(default_factory=list)
    receivable_repayments: Dict[str, List[ReceivableRepayment]] = dataclasses.field(default_factory=dict)
    debts: List[Debt] = dataclasses.field(default_factory=list)
    debt_reference_rates: Dict[str, List[DebtReferenceRate]] = dataclasses.field(default_factory=dict)
    debt_extra_payments: Dict[str, List[DebtExtraPayment]] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class WealthConfig:
    start_date: Optional[YearMonth] = None
    end_date: Optional[YearMonth] = None
    default_horizon_months: int = 120
