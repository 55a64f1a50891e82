"""Turn a checklist sheet's raw cell grid into metadata plus inspection rows.

The sheet convention is a fixed one:

    row 0      blank
    rows 1-5   "<label>:" | value   (project, site, manager, inspector, date)
    row 6      blank
    row 7      header row, first cell is the "major-category" sentinel
    rows 8..   one inspection item per row

Category cells are usually vertically merged in the source workbook, so a
reader hands us the value on the first row of a run and blanks below it.
Those blanks inherit the nearest category above them.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

from site_checklist.dates import normalize_date
from site_checklist.errors import InvalidDateFormatError, MissingColumnError, UnreadableSheetError
from site_checklist.scores import parse_range, parse_score, range_is_well_formed
from site_checklist.shared import (
    COL,
    DATA_START_ROW,
    DEFAULT_LAYOUT,
    DEFAULT_RANGE_TEXT,
    FIELDS,
    HEADER_ROW,
    METADATA_COL,
    METADATA_FIELDS,
    METADATA_ROWS,
    Change,
    InspectionRow,
    ProjectMetadata,
    SheetLayout,
    cell_at,
    cell_text,
    is_blank,
    normalise_header_for_match,
)

MIN_SHEET_ROWS = max(METADATA_ROWS) + 1


@dataclass
class DecodedSheet:
    metadata: ProjectMetadata
    rows: list[InspectionRow]
    headers: list[str]
    header_detected: bool
    changes: list[Change] = field(default_factory=list)
    stats: Counter = field(default_factory=Counter)
    warnings: list[str] = field(default_factory=list)
    sheet_name: str = ""


class RowBuilder:
    """Normalises raw row values one at a time, carrying the category down."""

    def __init__(self, layout: SheetLayout = DEFAULT_LAYOUT) -> None:
        self.layout = layout
        self.carry = ""
        self.changes: list[Change] = []
        self.stats: Counter = Counter()
        self.warnings: list[str] = []

    def _column_label(self, name: str) -> str:
        return self.layout.headers[COL[name]]

    def _category(self, raw: Any, row_number: int) -> str:
        category = cell_text(raw)
        if category:
            self.carry = category
            return category
        if self.carry:
            self.stats["categories_inherited"] += 1
            return self.carry
        label = self.layout.uncategorized_label
        self.carry = label
        self.stats["rows_uncategorized"] += 1
        self.warnings.append(f"Row {row_number}: no category above this row to inherit; filed under '{label}'")
        self.changes.append(
            Change(row_number, self._column_label("category"), "", label, "Fixed", "First data row has a blank category")
        )
        return label

    def build(self, values: Mapping[str, Any], row_number: int) -> InspectionRow:
        category = self._category(values.get("category"), row_number)

        raw_score = values.get("achieved_score")
        score, defaulted = parse_score(raw_score)
        if defaulted:
            self.stats["scores_defaulted"] += 1
            self.changes.append(
                Change(
                    row_number,
                    self._column_label("achieved_score"),
                    cell_text(raw_score),
                    "0",
                    "Defaulted",
                    "Malformed score defaulted to 0",
                )
            )

        range_text = cell_text(values.get("score_range_text")) or DEFAULT_RANGE_TEXT
        score_range = parse_range(range_text)
        if not range_is_well_formed(range_text):
            self.stats["score_ranges_defaulted"] += 1
            self.changes.append(
                Change(
                    row_number,
                    self._column_label("score_range_text"),
                    range_text,
                    score_range.text(),
                    "Defaulted",
                    "Malformed score range; unparseable halves fall back to 0/1",
                )
            )

        self.stats["rows_decoded"] += 1
        return InspectionRow(
            category=category,
            subcategory=cell_text(values.get("subcategory")),
            sub_subcategory=cell_text(values.get("sub_subcategory")),
            task=cell_text(values.get("task")),
            assignee=cell_text(values.get("assignee")),
            achieved_score=score,
            max_score=score_range.max,
            score_range_text=range_text,
        )


def _as_rows(value: Any) -> list | None:
    """A plain list for any iterable of cells (numpy/pandas arrays included); None if not one."""
    if isinstance(value, (str, bytes, Mapping)):
        return None
    if hasattr(value, "tolist"):
        value = value.tolist()
    if isinstance(value, Iterable):
        return list(value)
    return None


def _as_grid(cells: Any) -> list[Sequence]:
    rows = _as_rows(cells)
    if rows is None:
        raise UnreadableSheetError("Cell data must be a sequence of rows")
    grid: list[Sequence] = []
    for idx, row in enumerate(rows):
        if row is None:
            grid.append([])
            continue
        values = _as_rows(row)
        if values is None:
            raise UnreadableSheetError(f"Row {idx + 1} is not a sequence of cells")
        grid.append(values)
    if len(grid) < MIN_SHEET_ROWS:
        raise UnreadableSheetError(
            f"Sheet has {len(grid)} row(s); at least {MIN_SHEET_ROWS} are needed to read the project details block"
        )
    return grid


def extract_metadata(
    cells: Sequence[Sequence],
    *,
    strict: bool = True,
    layout: SheetLayout = DEFAULT_LAYOUT,
    today: date | None = None,
) -> ProjectMetadata:
    """Read the project details block. In strict mode an unreadable date raises."""
    raw = {name: cell_at(cells[row], METADATA_COL) for name, row in zip(METADATA_FIELDS, METADATA_ROWS)}
    raw_date = raw.pop("inspection_date")
    inspection_date = normalize_date(raw_date, today=today)
    if strict and not inspection_date and not is_blank(raw_date):
        label = layout.metadata_labels[METADATA_FIELDS.index("inspection_date")].rstrip(":")
        raise InvalidDateFormatError(label, raw_date)
    return ProjectMetadata(**{name: cell_text(value) for name, value in raw.items()}, inspection_date=inspection_date)


def is_header_row(row: Sequence, layout: SheetLayout = DEFAULT_LAYOUT) -> bool:
    first = cell_text(cell_at(row, 0))
    return normalise_header_for_match(first) == normalise_header_for_match(layout.header_sentinel)


def resolve_columns(header_row: Sequence, layout: SheetLayout = DEFAULT_LAYOUT) -> dict[str, int]:
    """Map every field to its column by header label; raise if any label is absent."""
    positions: dict[str, int] = {}
    for idx, value in enumerate(header_row):
        key = normalise_header_for_match(cell_text(value))
        if key and key not in positions:
            positions[key] = idx
    columns: dict[str, int] = {}
    missing: list[str] = []
    for name, label in zip(FIELDS, layout.headers):
        idx = positions.get(normalise_header_for_match(label))
        if idx is None:
            missing.append(label)
        else:
            columns[name] = idx
    if missing:
        raise MissingColumnError(missing)
    return columns


def decode(
    cells: Sequence[Sequence],
    *,
    layout: SheetLayout = DEFAULT_LAYOUT,
    strict_dates: bool = True,
    today: date | None = None,
) -> DecodedSheet:
    grid = _as_grid(cells)
    metadata = extract_metadata(grid, strict=strict_dates, layout=layout, today=today)

    header_row = grid[HEADER_ROW] if len(grid) > HEADER_ROW else []
    header_detected = is_header_row(header_row, layout)
    if header_detected:
        columns = resolve_columns(header_row, layout)
        headers = [cell_text(header_row[columns[name]]) for name in FIELDS]
    else:
        columns = dict(COL)
        headers = list(layout.headers)

    builder = RowBuilder(layout)
    rows: list[InspectionRow] = []
    for idx in range(DATA_START_ROW, len(grid)):
        raw = grid[idx]
        if all(is_blank(value) for value in raw):
            builder.stats["blank_rows_skipped"] += 1
            continue
        values = {name: cell_at(raw, columns[name]) for name in FIELDS}
        rows.append(builder.build(values, idx + 1))

    warnings = list(builder.warnings)
    if not header_detected:
        warnings.insert(0, f"Row {HEADER_ROW + 1} is not a '{layout.header_sentinel}' header row; default column order assumed")

    return DecodedSheet(
        metadata=metadata,
        rows=rows,
        headers=headers,
        header_detected=header_detected,
        changes=builder.changes,
        stats=builder.stats,
        warnings=warnings,
    )
