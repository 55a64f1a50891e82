from __future__ import annotations

from pathlib import Path

from openpyxl import Workbook

from site_checklist.shared import HEADERS, METADATA_LABELS

DEFAULT_METADATA = ["Riverside Clinic", "Springfield", "Dana Park", "Lee Morgan", "2025-06-03"]

SURVEY_ROWS = [
    ["Site survey", "Dimensions", "", "Were all dimensions measured?", "Avery", 1, "0/1"],
    ["", "Checklist", "", "Is the survey checklist complete?", "Avery", 1, "0/1"],
    ["", "Photos", "Exterior", "Are exterior photos attached?", "Jordan", 2, "0/3"],
    ["Drawings", "Design set", "Floor plan", "Is the floor plan accurate?", "Jordan", 4, "0/5"],
    ["", "Design set", "Elevations", "Are the elevations accurate?", "Jordan", 3, "0/5"],
]


def checklist_cells(rows, *, metadata=None, header=HEADERS) -> list[list]:
    cells: list[list] = [[]]
    for label, value in zip(METADATA_LABELS, metadata or DEFAULT_METADATA):
        cells.append([label, value])
    cells.append([])
    cells.append(list(header) if header is not None else [""] * 7)
    cells.extend(list(row) for row in rows)
    return cells


def write_checklist_workbook(path: Path, rows=SURVEY_ROWS, *, metadata=None, merges=()) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = "Checklist"
    for row in checklist_cells(rows, metadata=metadata):
        ws.append([None if value == "" else value for value in row])
    for ref in merges:
        ws.merge_cells(ref)
    wb.save(path)
    return path
