"""I/O utilities for JSON payloads and CSV export."""

from .export_csv import export_planning_csv, read_planning_csv
from .payload import read_json, write_json

__all__ = [
    "export_planning_csv",
    "read_planning_csv",
    "read_json",
    "write_json",
]
