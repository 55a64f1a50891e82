"""Plain-text and tabular views of a score rollup."""

from __future__ import annotations

from typing import Any

import pandas as pd

from site_checklist.aggregate import ALL_ASSIGNEES, AggregationNode, Rollup, select

REPORT_COLUMNS = [
    "level",
    "assignee",
    "category",
    "subcategory",
    "sub_subcategory",
    "sum_score",
    "sum_max",
    "item_count",
    "percentage",
]
LEVELS = ["category", "subcategory", "sub_subcategory"]

SCORE_BANDS = [
    (90, "excellent"),
    (80, "good"),
    (70, "fair"),
    (0, "poor"),
]


def score_band(value: float) -> str:
    return next((label for threshold, label in SCORE_BANDS if value >= threshold), "poor")


def _record(level: str, assignee: str | None, path: list[str], node: AggregationNode) -> dict[str, Any]:
    keys = path + [""] * (len(LEVELS) - len(path))
    return {
        "level": level,
        "assignee": assignee or "",
        "category": keys[0],
        "subcategory": keys[1],
        "sub_subcategory": keys[2],
        "sum_score": node.sum_score,
        "sum_max": node.sum_max,
        "item_count": node.item_count,
        "percentage": node.percentage,
    }


def _walk(node: AggregationNode, path: list[str], assignee: str | None, records: list[dict[str, Any]]) -> None:
    for key, child in node.children.items():
        child_path = path + [key]
        records.append(_record(LEVELS[len(child_path) - 1], assignee, child_path, child))
        _walk(child, child_path, assignee, records)


def rollup_to_frame(rollup: Rollup, assignee: str | None = ALL_ASSIGNEES) -> pd.DataFrame:
    """One row per node, depth-first, starting with the selection's total."""
    selection = select(rollup, assignee)
    records = [_record("total", assignee, [], selection.total)]
    for key, node in selection.categories.items():
        records.append(_record("category", assignee, [key], node))
        _walk(node, [key], assignee, records)
    return pd.DataFrame(records, columns=REPORT_COLUMNS)


def _line(label: str, node: AggregationNode, depth: int) -> str:
    indent = "  " * depth
    return (
        f"{indent}{label or '[blank]'}: {node.sum_score}/{node.sum_max} "
        f"({node.percentage:.1f}%, {node.item_count} item{'s' if node.item_count != 1 else ''})"
    )


def render_rollup_text(rollup: Rollup, assignee: str | None = ALL_ASSIGNEES) -> str:
    selection = select(rollup, assignee)
    heading = "All assignees" if assignee is ALL_ASSIGNEES else f"Assignee: {assignee}"
    total = selection.total
    lines = [
        heading,
        f"Total: {total.sum_score}/{total.sum_max} ({total.percentage:.1f}%, {score_band(total.percentage)})",
    ]

    def walk(node: AggregationNode, depth: int) -> None:
        for key, child in node.children.items():
            lines.append(_line(key, child, depth))
            walk(child, depth + 1)

    for key, node in selection.categories.items():
        line = _line(key, node, 1)
        if node.assignees:
            line += f" [{len(node.assignees)} assignee{'s' if len(node.assignees) != 1 else ''}]"
        lines.append(line)
        walk(node, 2)
    return "\n".join(lines) + "\n"
