from fplan_core.domain.models import (  # noqa: F401
    BreakdownEntry,
    CashAccount,
    Debt,
    DebtAmortizationRow,
    DebtExtraPayment,
    DebtReferenceRate,
    InvestmentAccount,
    InvestmentContribution,
    InvestmentProjectionRow,
    MonthlyProjection,
    PlannedItem,
    ProjectionFilters,
    ProjectionLineItem,
    Receivable,
    ReceivableProjectionRow,
    ReceivableRepayment,
    RecurringItem,
    WealthConfig,
    WealthProjectionData,
    WealthProjectionMonth,
    YearlyRollup,
)

__all__ = [
    "BreakdownEntry",
    "CashAccount",
    "Debt",
    "DebtAmortizationRow",
    "DebtExtraPayment",
    "DebtReferenceRate",
    "InvestmentAccount",
    "InvestmentContribution",
    "InvestmentProjectionRow",
    "MonthlyProjection",
    "PlannedItem",
    "ProjectionFilters",
    "ProjectionLineItem",
    "Receivable",
    "ReceivableProjectionRow",
    "ReceivableRepayment",
    "RecurringItem",
    "WealthConfig",
    "WealthProjectionData",
    "WealthProjectionMonth",
    "YearlyRollup",
]
