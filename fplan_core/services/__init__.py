from fplan_core.services.cashflow import calculate_projection, get_unique_categories  # noqa: F401
from fplan_core.services.debt import calculate_debt_amortization  # noqa: F401
from fplan_core.services.investment import calculate_investment_projection  # noqa: F401
from fplan_core.services.receivable import calculate_receivable_projection  # noqa: F401
from fplan_core.services.rollup import calculate_yearly_rollups  # noqa: F401
from fplan_core.services.wealth import (  # noqa: F401
    calculate_wealth_projection,
    get_earliest_start_date,
    get_latest_end_date,
)

__all__ = [
    "calculate_projection",
    "get_unique_categories",
    "calculate_debt_amortization",
    "calculate_investment_projection",
    "calculate_receivable_projection",
    "calculate_yearly_rollups",
    "calculate_wealth_projection",
    "get_earliest_start_date",
    "get_latest_end_date",
]
