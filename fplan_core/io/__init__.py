from fplan_core.io.workspace import WorkspaceError, load_workspace, parse_workspace  # noqa: F401
from fplan_core.io.config import load_projection_filters, load_wealth_config  # noqa: F401
from fplan_core.io.export import projection_frame, save_csv, save_json, to_payload  # noqa: F401

__all__ = [
    "WorkspaceError",
    "load_workspace",
    "parse_workspace",
    "load_projection_filters",
    "load_wealth_config",
    "projection_frame",
    "save_csv",
    "save_json",
    "to_payload",
]
