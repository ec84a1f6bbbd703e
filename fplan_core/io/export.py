from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Iterable, List

import pandas as pd

# nested per-line / per-entity lists that do not fit a flat table
_NESTED_FIELDS = {
    "income_breakdown",
    "expense_breakdown",
    "months",
    "cash_accounts_breakdown",
    "investments_breakdown",
    "receivables_breakdown",
    "debts_breakdown",
}


def to_payload(rows: Iterable[Any]) -> List[dict]:
    """Dataclass rows to plain dicts, safe to serialize as JSON."""
    return [dataclasses.asdict(row) for row in rows]


def projection_frame(rows: Iterable[Any]) -> pd.DataFrame:
    records = []
    for row in rows:
        flat = {k: v for k, v in dataclasses.asdict(row).items() if k not in _NESTED_FIELDS}
        records.append(flat)
    return pd.DataFrame.from_records(records)


def save_json(path: Path, rows: Iterable[Any]) -> None:
    """Write projection rows, nested breakdowns included, as a JSON array."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(to_payload(rows), indent=2), encoding="utf-8")


def save_csv(path: Path, rows: Iterable[Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    projection_frame(rows).to_csv(path, index=False)
