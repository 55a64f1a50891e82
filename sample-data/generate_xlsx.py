#!/usr/bin/env python3
"""
Generates sample-data/site_checklist_sample.xlsx, an inspection checklist laid
out the way site teams fill it in by hand.

Run from the repo root:
    python sample-data/generate_xlsx.py

Quirks baked in:
  - Inspection date typed as "6/3/25" text instead of a real date
  - Category cells merged vertically (A9:A11, A13:A15)
  - Blank separator row 12 between the two category blocks
  - Score range "3/x" with a non-numeric maximum
  - Score "2 pts" typed with a unit
  - A row with no sub-subcategory
"""

from pathlib import Path

import openpyxl

OUTPUT = Path(__file__).parent / "site_checklist_sample.xlsx"

wb = openpyxl.Workbook()
ws = wb.active
ws.title = "Inspection Checklist"

ws.append([])
ws.append(["Project name:", "Riverside Clinic Fit-out"])
ws.append(["Site (city/district):", "Springfield / North"])
ws.append(["General manager:", "Dana Park"])
ws.append(["Inspector:", "Lee Morgan"])
ws.append(["Inspection date:", "6/3/25"])
ws.append([])
ws.append(["major-category", "mid-category", "sub-category", "task", "assignee", "score", "score-range"])

rows = [
    ["Site survey", "Dimensions", "", "Were all dimensions measured on site?", "Avery", 1, "0/1"],
    [None, "Checklist", "", "Is the survey checklist complete?", "Avery", 1, "0/1"],
    [None, "Photos", "Exterior", "Are exterior photos attached?", "Jordan", "2 pts", "0/3"],
    [None, None, None, None, None, None, None],
    ["Drawings", "Design set", "Floor plan", "Is the floor plan accurate?", "Jordan", 4, "0/5"],
    [None, "Design set", "Elevations", "Are the elevations accurate?", "Jordan", 3, "0/5"],
    [None, "Quality", "", "Were quality standards followed?", "Casey", 2, "3/x"],
]
for row in rows:
    ws.append(row)

ws.merge_cells("A9:A11")
ws.merge_cells("A13:A15")

wb.save(OUTPUT)
print(f"Created: {OUTPUT}")
