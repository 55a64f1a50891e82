from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

# Inspection rows, in sheet column order. The 8th "max_score" column only
# exists in the editing grid and is never written to the workbook.
FIELDS = (
    "category",
    "subcategory",
    "sub_subcategory",
    "task",
    "assignee",
    "achieved_score",
    "score_range_text",
)
N_COLS = len(FIELDS)
COL = {name: i for i, name in enumerate(FIELDS)}
MAX_SCORE_COL = N_COLS

HEADER_SENTINEL = "major-category"
HEADERS = [
    HEADER_SENTINEL,
    "mid-category",
    "sub-category",
    "task",
    "assignee",
    "score",
    "score-range",
]

METADATA_FIELDS = (
    "project_name",
    "location",
    "general_manager",
    "inspector",
    "inspection_date",
)
METADATA_LABELS = [
    "Project name:",
    "Site (city/district):",
    "General manager:",
    "Inspector:",
    "Inspection date:",
]

# 0-based sheet positions
METADATA_ROWS = (1, 2, 3, 4, 5)
METADATA_COL = 1
PREAMBLE_ROWS = 7
HEADER_ROW = 7
DATA_START_ROW = 8
# 1-based, matches the A8:G<n> print range of the checklist template
PRINT_AREA_FIRST_ROW = 8

COLUMN_WIDTHS = [15, 26, 32, 88, 8, 8, 10]
SHEET_TITLE = "Inspection Checklist"
UNCATEGORIZED = "Uncategorized"
DEFAULT_RANGE_TEXT = "0/1"


@dataclass(frozen=True)
class SheetLayout:
    header_sentinel: str = HEADER_SENTINEL
    headers: tuple[str, ...] = tuple(HEADERS)
    metadata_labels: tuple[str, ...] = tuple(METADATA_LABELS)
    column_widths: tuple[int, ...] = tuple(COLUMN_WIDTHS)
    sheet_title: str = SHEET_TITLE
    uncategorized_label: str = UNCATEGORIZED

    def __post_init__(self) -> None:
        if len(self.headers) != N_COLS or len(self.column_widths) != N_COLS:
            raise ValueError(f"A sheet layout needs exactly {N_COLS} headers and column widths")
        if len(self.metadata_labels) != len(METADATA_FIELDS):
            raise ValueError(f"A sheet layout needs exactly {len(METADATA_FIELDS)} metadata labels")


DEFAULT_LAYOUT = SheetLayout()


@dataclass(frozen=True)
class ProjectMetadata:
    project_name: str = ""
    location: str = ""
    general_manager: str = ""
    inspector: str = ""
    inspection_date: str = ""

    def values(self) -> list[str]:
        return [getattr(self, name) for name in METADATA_FIELDS]

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class InspectionRow:
    category: str
    subcategory: str = ""
    sub_subcategory: str = ""
    task: str = ""
    assignee: str = ""
    achieved_score: int = 0
    max_score: int = 1
    score_range_text: str = DEFAULT_RANGE_TEXT

    def as_cells(self) -> list[Any]:
        return [getattr(self, name) for name in FIELDS]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Change:
    row_number: int
    column: str
    original_value: str
    new_value: str
    action: str
    reason: str


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def cell_text(value: Any) -> str:
    """Trimmed text of a raw cell; integral floats lose their trailing ``.0``."""
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime) and not (value.hour or value.minute or value.second):
        return value.date().isoformat()
    return str(value).strip()


def cell_at(row: Any, index: int) -> Any:
    if row is None or index >= len(row):
        return ""
    return row[index]


def normalise_header_for_match(value: str) -> str:
    return " ".join(value.strip().lower().split())

