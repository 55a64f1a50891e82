"""Lay inspection rows back out in the checklist sheet convention.

The result is still a plain cell grid; ``site_checklist.workbook`` turns it
into an ``.xlsx`` file. Merge ranges are always recomputed from the rows
being written, never carried over from a previous decode.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from openpyxl.utils import get_column_letter

from site_checklist.shared import (
    COL,
    DATA_START_ROW,
    DEFAULT_LAYOUT,
    N_COLS,
    PRINT_AREA_FIRST_ROW,
    InspectionRow,
    ProjectMetadata,
    SheetLayout,
    cell_text,
)


@dataclass(frozen=True)
class MergeRange:
    """Inclusive, 0-based bounds into the encoded cell grid."""

    first_row: int
    last_row: int
    first_col: int = 0
    last_col: int = 0

    @property
    def ref(self) -> str:
        return (
            f"{get_column_letter(self.first_col + 1)}{self.first_row + 1}:"
            f"{get_column_letter(self.last_col + 1)}{self.last_row + 1}"
        )


@dataclass(frozen=True)
class PrintArea:
    """1-based, inclusive row span over the checklist columns."""

    first_row: int
    last_row: int

    @property
    def ref(self) -> str:
        return f"A{self.first_row}:{get_column_letter(N_COLS)}{self.last_row}"


@dataclass
class EncodedSheet:
    cells: list[list]
    merges: list[MergeRange]
    column_widths: list[int]
    print_area: PrintArea
    sheet_title: str


def row_cells(row: InspectionRow | Sequence) -> list:
    """Exactly seven output cells; extra grid columns (the max-score helper) are dropped."""
    if isinstance(row, InspectionRow):
        return row.as_cells()
    values = list(row)[:N_COLS]
    return values + [""] * (N_COLS - len(values))


def category_merges(cells: Sequence[Sequence], start_row: int = DATA_START_ROW) -> list[MergeRange]:
    """One vertical merge per run of 2+ consecutive rows with the same non-empty category."""
    col = COL["category"]
    merges: list[MergeRange] = []
    run_start: int | None = None
    run_value = ""

    def close_run(last_row: int) -> None:
        if run_start is not None and last_row > run_start:
            merges.append(MergeRange(run_start, last_row, col, col))

    for idx in range(start_row, len(cells)):
        row = cells[idx]
        value = cell_text(row[col]) if len(row) > col else ""
        if value and value == run_value:
            continue
        close_run(idx - 1)
        run_start, run_value = (idx, value) if value else (None, "")
    close_run(len(cells) - 1)
    return merges


def encode(
    metadata: ProjectMetadata,
    rows: Sequence[InspectionRow | Sequence],
    *,
    headers: Sequence[str] | None = None,
    layout: SheetLayout = DEFAULT_LAYOUT,
) -> EncodedSheet:
    cells: list[list] = [[]]
    for label, value in zip(layout.metadata_labels, metadata.values()):
        cells.append([label, value])
    cells.append([])

    header_values = list(headers) if headers is not None else list(layout.headers)
    cells.append(row_cells(header_values))
    for row in rows:
        cells.append(row_cells(row))

    return EncodedSheet(
        cells=cells,
        merges=category_merges(cells),
        column_widths=list(layout.column_widths),
        print_area=PrintArea(PRINT_AREA_FIRST_ROW, len(cells)),
        sheet_title=layout.sheet_title,
    )
