"""Score rollups over inspection rows.

Both trees are the same reducer run over a different grouping path:

    by category   category -> subcategory -> sub-subcategory
    by assignee   assignee -> category -> subcategory -> sub-subcategory

Every node on a row's path gets the row's score, max score and a count of
one. The sub-subcategory level is only created for rows that have one.
Percentages are derived when read, never stored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Any

from site_checklist.shared import InspectionRow

ALL_ASSIGNEES = None
OPTIONAL_LEVELS = frozenset({"sub_subcategory"})


def percentage(sum_score: int, sum_max: int) -> float:
    if sum_max <= 0:
        return 0.0
    # half-up, not banker's rounding: 1/16 reads 6.3
    return float(Decimal(sum_score / sum_max * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _frozen_children(children: Mapping[str, AggregationNode] | None = None) -> Mapping[str, AggregationNode]:
    return MappingProxyType(dict(children or {}))


@dataclass(frozen=True)
class AggregationNode:
    sum_score: int = 0
    sum_max: int = 0
    item_count: int = 0
    children: Mapping[str, AggregationNode] = field(default_factory=_frozen_children)
    assignees: frozenset[str] = frozenset()

    @property
    def percentage(self) -> float:
        return percentage(self.sum_score, self.sum_max)

    def child(self, *path: str) -> AggregationNode:
        """Descend by keys; a missing key yields an empty node rather than an error."""
        node = self
        for key in path:
            node = node.children.get(key)
            if node is None:
                return EMPTY_NODE
        return node

    def leaf(self) -> AggregationNode:
        return AggregationNode(self.sum_score, self.sum_max, self.item_count)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sum_score": self.sum_score,
            "sum_max": self.sum_max,
            "item_count": self.item_count,
            "percentage": self.percentage,
        }
        if self.assignees:
            payload["assignees"] = sorted(self.assignees)
        if self.children:
            payload["children"] = {key: child.to_dict() for key, child in self.children.items()}
        return payload


EMPTY_NODE = AggregationNode()


@dataclass(frozen=True)
class GroupingPath:
    levels: tuple[str, ...]
    optional: frozenset[str] = OPTIONAL_LEVELS
    # depth (1 = first level) whose nodes remember which assignees fed them
    collect_assignees_at: int | None = None


CATEGORY_PATH = GroupingPath(("category", "subcategory", "sub_subcategory"), collect_assignees_at=1)
ASSIGNEE_PATH = GroupingPath(("assignee", "category", "subcategory", "sub_subcategory"))


class _Accumulator:
    __slots__ = ("sum_score", "sum_max", "item_count", "children", "assignees")

    def __init__(self) -> None:
        self.sum_score = 0
        self.sum_max = 0
        self.item_count = 0
        self.children: dict[str, _Accumulator] = {}
        self.assignees: set[str] = set()

    def add(self, row: InspectionRow) -> None:
        self.sum_score += row.achieved_score
        self.sum_max += row.max_score
        self.item_count += 1

    def child(self, key: str) -> _Accumulator:
        node = self.children.get(key)
        if node is None:
            node = self.children[key] = _Accumulator()
        return node

    def freeze(self) -> AggregationNode:
        return AggregationNode(
            sum_score=self.sum_score,
            sum_max=self.sum_max,
            item_count=self.item_count,
            children=_frozen_children({key: child.freeze() for key, child in self.children.items()}),
            assignees=frozenset(self.assignees),
        )


class GroupByReducer:
    """Accumulates rows along one grouping path; ``result()`` returns the root node."""

    def __init__(self, path: GroupingPath) -> None:
        self.path = path
        self._root = _Accumulator()

    def add(self, row: InspectionRow) -> None:
        self._root.add(row)
        node = self._root
        for depth, level in enumerate(self.path.levels, start=1):
            key = getattr(row, level)
            if not key and level in self.path.optional:
                break
            node = node.child(key)
            node.add(row)
            if depth == self.path.collect_assignees_at and row.assignee:
                node.assignees.add(row.assignee)

    def result(self) -> AggregationNode:
        return self._root.freeze()


def group_by(rows: Iterable[InspectionRow], path: GroupingPath) -> AggregationNode:
    reducer = GroupByReducer(path)
    for row in rows:
        reducer.add(row)
    return reducer.result()


@dataclass(frozen=True)
class Rollup:
    total: AggregationNode
    by_category: AggregationNode
    by_assignee: AggregationNode

    @property
    def assignee_names(self) -> list[str]:
        return sorted(self.by_assignee.children)


@dataclass(frozen=True)
class Selection:
    total: AggregationNode
    categories: Mapping[str, AggregationNode]


def aggregate(rows: Iterable[InspectionRow]) -> Rollup:
    by_category = GroupByReducer(CATEGORY_PATH)
    by_assignee = GroupByReducer(ASSIGNEE_PATH)
    for row in rows:
        by_category.add(row)
        by_assignee.add(row)
    category_root = by_category.result()
    return Rollup(
        total=category_root.leaf(),
        by_category=category_root,
        by_assignee=by_assignee.result(),
    )


def select(rollup: Rollup, assignee: str | None = ALL_ASSIGNEES) -> Selection:
    """Everyone's scores, or one assignee's; an unknown assignee reads as all zeros."""
    if assignee is ALL_ASSIGNEES:
        return Selection(total=rollup.total, categories=rollup.by_category.children)
    node = rollup.by_assignee.children.get(assignee)
    if node is None:
        return Selection(total=EMPTY_NODE, categories=_frozen_children())
    return Selection(total=node.leaf(), categories=node.children)
