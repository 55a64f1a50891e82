"""The in-memory grid a checklist editor works on.

Row 0 holds the seven header labels; every other row holds the seven sheet
cells plus an eighth, read-only "max score" cell derived from the score
range. The helper cell is recomputed on every edit and dropped on encode.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from site_checklist.decoder import DecodedSheet, RowBuilder
from site_checklist.scores import parse_range
from site_checklist.shared import (
    COL,
    DEFAULT_LAYOUT,
    FIELDS,
    MAX_SCORE_COL,
    N_COLS,
    InspectionRow,
    SheetLayout,
    cell_at,
    is_blank,
)

GRID_WIDTH = N_COLS + 1


def grid_row(row: InspectionRow) -> list[Any]:
    return row.as_cells() + [row.max_score]


def build_grid(decoded: DecodedSheet) -> list[list[Any]]:
    return [list(decoded.headers)] + [grid_row(row) for row in decoded.rows]


def rows_from_grid(
    grid: Sequence[Sequence[Any]], *, layout: SheetLayout = DEFAULT_LAYOUT
) -> list[InspectionRow]:
    """Re-normalise an edited grid (header row first) back into inspection rows."""
    builder = RowBuilder(layout)
    rows: list[InspectionRow] = []
    for idx, raw in enumerate(grid[1:], start=1):
        cells = list(raw)[:N_COLS]
        if all(is_blank(value) for value in cells):
            continue
        values = {name: cell_at(cells, COL[name]) for name in FIELDS}
        rows.append(builder.build(values, idx))
    return rows


def apply_edit(grid: Sequence[Sequence[Any]], row: int, column: int, value: Any) -> list[list[Any]]:
    """Return a copy of ``grid`` with one cell replaced.

    The header row and the max-score helper column are not editable.
    """
    if row < 1 or row >= len(grid):
        raise IndexError(f"Row {row} is outside the editable rows 1..{len(grid) - 1}")
    if column < 0 or column >= N_COLS:
        raise IndexError(f"Column {column} is not an editable checklist column")
    updated = [list(r) for r in grid]
    target = updated[row] + [""] * (GRID_WIDTH - len(updated[row]))
    target[column] = value
    target[MAX_SCORE_COL] = parse_range(target[COL["score_range_text"]]).max
    updated[row] = target[:GRID_WIDTH]
    return updated
