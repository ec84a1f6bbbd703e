from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from fplan_core.domain.models import ProjectionFilters, WealthConfig


def load_projection_filters(path: str | Path) -> ProjectionFilters:
    data = _config_object(path)
    return ProjectionFilters(
        start_date=data.get("start_date"),
        end_date=data.get("end_date"),
        categories=tuple(data.get("categories", ()) or ()),
        item_types=tuple(data.get("item_types", ()) or ()),
        item_kinds=tuple(data.get("item_kinds", ()) or ()),
    )


def load_wealth_config(path: str | Path) -> WealthConfig:
    data = _config_object(path)
    return WealthConfig(
        start_date=data.get("start_date"),
        end_date=data.get("end_date"),
        default_horizon_months=int(data.get("default_horizon_months", 120)),
    )


def _config_object(path: str | Path) -> Dict[str, Any]:
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: config must be a JSON object, got {type(data).__name__}")
    return data
