from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from fplan_core.domain.calendar import add_months, current_year_month
from fplan_core.domain.models import ProjectionFilters, WealthConfig, WealthProjectionData
from fplan_core.io import config as config_io
from fplan_core.io import export
from fplan_core.io import workspace as workspace_io
from fplan_core.services import cashflow, debt, investment, receivable, rollup, wealth

app = typer.Typer(help="Personal finance planning CLI: cashflow, growth, amortization and net worth projections.")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


def _load(path: Path) -> WealthProjectionData:
    try:
        return workspace_io.load_workspace(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Workspace not found: {exc}") from exc
    except workspace_io.WorkspaceError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _find(entities: Iterable[Any], entity_id: str, label: str):
    for entity in entities:
        if entity.id == entity_id:
            return entity
    raise typer.BadParameter(f"Unknown {label} id: {entity_id}")


def _window(start: Optional[str], end: Optional[str], default_start: str, months: int):
    start = start or default_start
    return start, end or add_months(start, months - 1)


def _emit(rows: Sequence[Any], out: Optional[Path], table: Callable[[Sequence[Any]], Table]) -> None:
    if out is None:
        console.print(table(rows))
        return
    if out.suffix.lower() == ".csv":
        export.save_csv(out, rows)
    else:
        export.save_json(out, rows)
    typer.echo(f"{len(rows)} rows written to {out}")


def _filters(
    path: Optional[Path],
    start: Optional[str],
    end: Optional[str],
    category: Optional[List[str]],
    item_type: Optional[List[str]],
    item_kind: Optional[List[str]],
) -> ProjectionFilters:
    base = config_io.load_projection_filters(path) if path else ProjectionFilters()
    return ProjectionFilters(
        start_date=start or base.start_date,
        end_date=end or base.end_date,
        categories=tuple(category or base.categories),
        item_types=tuple(item_type or base.item_types),
        item_kinds=tuple(item_kind or base.item_kinds),
    )


def _money(value: Optional[float]) -> str:
    return "" if value is None else f"{value:,.2f}"


def _table(title: str, columns: List[str], rows: Iterable[List[str]]) -> Table:
    table = Table(title=title)
    for i, col in enumerate(columns):
        table.add_column(col, justify="left" if i == 0 else "right")
    for row in rows:
        table.add_row(*row)
    return table


@app.command("cashflow")
def cashflow_cmd(
    workspace: Path = typer.Option(..., help="Workspace JSON with entity records"),
    account: str = typer.Option(..., help="Cash account id"),
    filters: Optional[Path] = typer.Option(None, help="Filters JSON (start_date, end_date, categories, ...)"),
    start: Optional[str] = typer.Option(None, help="First month to show (YYYY-MM)"),
    end: Optional[str] = typer.Option(None, help="Last month to show (YYYY-MM)"),
    category: Optional[List[str]] = typer.Option(None, help="Only include these categories"),
    item_type: Optional[List[str]] = typer.Option(None, help="Only include income|expense"),
    item_kind: Optional[List[str]] = typer.Option(None, help="Only include recurring|one-off|repeating"),
    out: Optional[Path] = typer.Option(None, help="Write rows to .json or .csv instead of printing"),
):
    """Monthly cashflow projection for one cash account."""
    data = _load(workspace)
    acc = _find(data.cash_accounts, account, "account")
    flt = _filters(filters, start, end, category, item_type, item_kind)
    rows = cashflow.calculate_projection(
        acc, data.recurring_items.get(acc.id), data.planned_items.get(acc.id), flt
    )
    _emit(
        rows,
        out,
        lambda rs: _table(
            f"Cashflow - {acc.name} ({acc.currency})",
            ["Month", "Start", "Income", "Expenses", "Net", "End"],
            (
                [
                    r.year_month,
                    _money(r.starting_balance),
                    _money(r.total_income),
                    _money(r.total_expenses),
                    _money(r.net_change),
                    _money(r.ending_balance),
                ]
                for r in rs
            ),
        ),
    )


@app.command("rollup")
def rollup_cmd(
    workspace: Path = typer.Option(..., help="Workspace JSON with entity records"),
    account: str = typer.Option(..., help="Cash account id"),
    filters: Optional[Path] = typer.Option(None, help="Filters JSON (start_date, end_date, categories, ...)"),
    start: Optional[str] = typer.Option(None, help="First month to include (YYYY-MM)"),
    end: Optional[str] = typer.Option(None, help="Last month to include (YYYY-MM)"),
    category: Optional[List[str]] = typer.Option(None, help="Only include these categories"),
    item_type: Optional[List[str]] = typer.Option(None, help="Only include income|expense"),
    item_kind: Optional[List[str]] = typer.Option(None, help="Only include recurring|one-off|repeating"),
    out: Optional[Path] = typer.Option(None, help="Write rows to .json or .csv instead of printing"),
):
    """Yearly rollup of an account's cashflow projection."""
    data = _load(workspace)
    acc = _find(data.cash_accounts, account, "account")
    flt = _filters(filters, start, end, category, item_type, item_kind)
    monthly = cashflow.calculate_projection(
        acc, data.recurring_items.get(acc.id), data.planned_items.get(acc.id), flt
    )
    rows = rollup.calculate_yearly_rollups(monthly)
    _emit(
        rows,
        out,
        lambda rs: _table(
            f"Yearly rollup - {acc.name} ({acc.currency})",
            ["Year", "Start", "Income", "Expenses", "Net", "End"],
            (
                [
                    str(r.year),
                    _money(r.starting_balance),
                    _money(r.total_income),
                    _money(r.total_expenses),
                    _money(r.net_change),
                    _money(r.ending_balance),
                ]
                for r in rs
            ),
        ),
    )


@app.command("categories")
def categories_cmd(
    workspace: Path = typer.Option(..., help="Workspace JSON with entity records"),
    account: str = typer.Option(..., help="Cash account id"),
):
    """List the categories used by an account's items."""
    data = _load(workspace)
    acc = _find(data.cash_accounts, account, "account")
    names = cashflow.get_unique_categories(data.recurring_items.get(acc.id), data.planned_items.get(acc.id))
    typer.echo(json.dumps(names, indent=2))


@app.command("investment")
def investment_cmd(
    workspace: Path = typer.Option(..., help="Workspace JSON with entity records"),
    investment_id: str = typer.Option(..., "--investment", help="Investment account id"),
    start: Optional[str] = typer.Option(None, help="First month (defaults to valuation date)"),
    end: Optional[str] = typer.Option(None, help="Last month"),
    months: int = typer.Option(12, help="Months to project when --end is not given"),
    out: Optional[Path] = typer.Option(None, help="Write rows to .json or .csv instead of printing"),
):
    """Growth projection for one investment account."""
    data = _load(workspace)
    inv = _find(data.investments, investment_id, "investment")
    start, end = _window(start, end, inv.valuation_date, months)
    rows = investment.calculate_investment_projection(inv, data.investment_contributions.get(inv.id), start, end)
    _emit(
        rows,
        out,
        lambda rs: _table(
            f"Investment - {inv.name} ({inv.annual_growth_rate:.2f}%/yr)",
            ["Month", "Start", "Growth", "In", "Out", "End"],
            (
                [
                    r.year_month,
                    _money(r.starting_valuation),
                    _money(r.growth),
                    _money(r.contributions),
                    _money(r.withdrawals),
                    _money(r.ending_valuation),
                ]
                for r in rs
            ),
        ),
    )


@app.command("receivable")
def receivable_cmd(
    workspace: Path = typer.Option(..., help="Workspace JSON with entity records"),
    receivable_id: str = typer.Option(..., "--receivable", help="Receivable id"),
    start: Optional[str] = typer.Option(None, help="First month (defaults to receivable start)"),
    end: Optional[str] = typer.Option(None, help="Last month"),
    months: int = typer.Option(12, help="Months to project when --end is not given"),
    out: Optional[Path] = typer.Option(None, help="Write rows to .json or .csv instead of printing"),
):
    """Repayment projection for one receivable."""
    data = _load(workspace)
    rec = _find(data.receivables, receivable_id, "receivable")
    start, end = _window(start, end, rec.start_date, months)
    rows = receivable.calculate_receivable_projection(rec, data.receivable_repayments.get(rec.id), start, end)
    _emit(
        rows,
        out,
        lambda rs: _table(
            f"Receivable - {rec.name}",
            ["Month", "Start", "Interest", "Repaid", "End"],
            (
                [
                    r.year_month,
                    _money(r.starting_balance),
                    _money(r.interest_accrued),
                    _money(r.repayments),
                    _money(r.ending_balance),
                ]
                for r in rs
            ),
        ),
    )


@app.command("debt")
def debt_cmd(
    workspace: Path = typer.Option(..., help="Workspace JSON with entity records"),
    debt_id: str = typer.Option(..., "--debt", help="Debt id"),
    start: Optional[str] = typer.Option(None, help="First month (defaults to debt start)"),
    end: Optional[str] = typer.Option(None, help="Last month"),
    months: int = typer.Option(12, help="Months to project when --end is not given"),
    out: Optional[Path] = typer.Option(None, help="Write rows to .json or .csv instead of printing"),
):
    """Amortization schedule for one debt."""
    data = _load(workspace)
    dbt = _find(data.debts, debt_id, "debt")
    start, end = _window(start, end, dbt.start_date, months)
    rows = debt.calculate_debt_amortization(
        dbt, data.debt_reference_rates.get(dbt.id), data.debt_extra_payments.get(dbt.id), start, end
    )
    _emit(
        rows,
        out,
        lambda rs: _table(
            f"Debt - {dbt.name} ({dbt.debt_type})",
            ["Month", "Start", "Rate %", "Interest", "Principal", "Payment", "End"],
            (
                [
                    r.year_month,
                    _money(r.starting_principal),
                    f"{r.interest_rate:.3f}",
                    _money(r.interest_paid),
                    _money(r.principal_paid),
                    _money(r.total_payment),
                    _money(r.ending_principal),
                ]
                for r in rs
            ),
        ),
    )


@app.command("wealth")
def wealth_cmd(
    workspace: Path = typer.Option(..., help="Workspace JSON with entity records"),
    config: Optional[Path] = typer.Option(None, help="Wealth config JSON (start_date, end_date, default_horizon_months)"),
    start: Optional[str] = typer.Option(None, help="First month (defaults to earliest entity start)"),
    end: Optional[str] = typer.Option(None, help="Last month (defaults to latest account end or horizon)"),
    horizon: Optional[int] = typer.Option(None, help="Default horizon in months from the current month"),
    out: Optional[Path] = typer.Option(None, help="Write rows to .json or .csv instead of printing"),
):
    """Unified net worth projection across all entities."""
    data = _load(workspace)
    cfg = config_io.load_wealth_config(config) if config else WealthConfig()
    today = current_year_month(date.today())
    start = start or cfg.start_date or wealth.get_earliest_start_date(data, today)
    end = end or cfg.end_date or wealth.get_latest_end_date(
        data, today, horizon if horizon is not None else cfg.default_horizon_months
    )
    rows = wealth.calculate_wealth_projection(data, start, end)
    _emit(
        rows,
        out,
        lambda rs: _table(
            "Net worth",
            ["Month", "Cash", "Investments", "Receivables", "Debts", "Net worth"],
            (
                [
                    r.year_month,
                    _money(r.cash_accounts_total),
                    _money(r.investments_total),
                    _money(r.receivables_total),
                    _money(r.debts_total),
                    _money(r.net_worth),
                ]
                for r in rs
            ),
        ),
    )


if __name__ == "__main__":
    app()
