"""CLI commands for cell-vsm."""

from cell_vsm.cli.analyze import analyze
from cell_vsm.cli.flow import flow
from cell_vsm.cli.report import report
from cell_vsm.cli.store import list_saved, save

__all__ = [
    "analyze",
    "flow",
    "report",
    "save",
    "list_saved",
]
