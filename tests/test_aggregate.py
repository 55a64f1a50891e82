from __future__ import annotations

import unittest

from site_checklist.aggregate import (
    ALL_ASSIGNEES,
    ASSIGNEE_PATH,
    CATEGORY_PATH,
    EMPTY_NODE,
    aggregate,
    group_by,
    percentage,
    select,
)
from site_checklist.shared import InspectionRow


def item(category, subcategory, assignee, score, max_score, sub_subcategory=""):
    return InspectionRow(
        category=category,
        subcategory=subcategory,
        sub_subcategory=sub_subcategory,
        task=f"{category}/{subcategory}",
        assignee=assignee,
        achieved_score=score,
        max_score=max_score,
        score_range_text=f"0/{max_score}",
    )


ROWS = [
    item("A", "X", "M1", 1, 1),
    item("A", "Y", "M2", 3, 5),
]


class PercentageTests(unittest.TestCase):
    def test_rounded_to_one_decimal(self):
        self.assertEqual(percentage(4, 6), 66.7)
        self.assertEqual(percentage(1, 3), 33.3)
        self.assertEqual(percentage(5, 5), 100.0)

    def test_ties_round_half_up(self):
        self.assertEqual(percentage(1, 16), 6.3)
        self.assertEqual(percentage(5, 16), 31.3)

    def test_zero_max_reads_as_zero(self):
        self.assertEqual(percentage(0, 0), 0.0)
        self.assertEqual(EMPTY_NODE.percentage, 0.0)


class AggregateTests(unittest.TestCase):
    def test_category_tree(self):
        rollup = aggregate(ROWS)
        node = rollup.by_category.child("A")
        self.assertEqual((node.sum_score, node.sum_max, node.item_count), (4, 6, 2))
        self.assertEqual(node.percentage, 66.7)
        self.assertEqual(node.assignees, frozenset({"M1", "M2"}))
        self.assertEqual(rollup.by_category.child("A", "Y").sum_max, 5)

    def test_assignee_tree(self):
        rollup = aggregate(ROWS)
        node = rollup.by_assignee.child("M1", "A", "X")
        self.assertEqual((node.sum_score, node.sum_max, node.percentage), (1, 1, 100.0))
        self.assertEqual(rollup.assignee_names, ["M1", "M2"])

    def test_total_and_counts(self):
        rollup = aggregate(ROWS)
        self.assertEqual((rollup.total.sum_score, rollup.total.sum_max, rollup.total.item_count), (4, 6, 2))
        self.assertEqual(rollup.total.children, {})

    def test_sub_subcategory_level_only_for_rows_that_have_one(self):
        rows = [item("A", "X", "M1", 1, 2, "deep"), item("A", "X", "M1", 2, 2)]
        rollup = aggregate(rows)
        sub = rollup.by_category.child("A", "X")
        self.assertEqual((sub.sum_score, sub.sum_max), (3, 4))
        self.assertEqual(list(sub.children), ["deep"])
        self.assertEqual(sub.child("deep").sum_score, 1)

    def test_parent_sums_match_children_when_every_row_reaches_the_leaf(self):
        rows = [
            item("A", "X", "M1", 1, 2, "p"),
            item("A", "X", "M2", 2, 3, "q"),
            item("A", "Y", "M1", 0, 4, "r"),
            item("B", "Z", "M2", 5, 5, "s"),
        ]
        rollup = aggregate(rows)

        def check(node):
            if not node.children:
                return
            self.assertEqual(node.sum_score, sum(child.sum_score for child in node.children.values()))
            self.assertEqual(node.sum_max, sum(child.sum_max for child in node.children.values()))
            self.assertEqual(node.item_count, sum(child.item_count for child in node.children.values()))
            for child in node.children.values():
                check(child)

        check(rollup.by_category)
        check(rollup.by_assignee)

    def test_blank_assignee_rows_count_but_are_not_named(self):
        rollup = aggregate([item("A", "X", "", 1, 1), item("A", "X", "M1", 0, 1)])
        self.assertEqual(rollup.by_category.child("A").assignees, frozenset({"M1"}))
        self.assertEqual(rollup.by_category.child("A").item_count, 2)
        self.assertEqual(rollup.by_assignee.child("").sum_score, 1)

    def test_empty_input(self):
        rollup = aggregate([])
        self.assertEqual(rollup.total.item_count, 0)
        self.assertEqual(rollup.by_category.children, {})
        self.assertEqual(rollup.assignee_names, [])

    def test_nodes_are_read_only(self):
        rollup = aggregate(ROWS)
        with self.assertRaises(TypeError):
            rollup.by_category.children["B"] = EMPTY_NODE

    def test_group_by_matches_aggregate(self):
        self.assertEqual(group_by(ROWS, CATEGORY_PATH), aggregate(ROWS).by_category)
        self.assertEqual(group_by(ROWS, ASSIGNEE_PATH), aggregate(ROWS).by_assignee)

    def test_to_dict(self):
        payload = aggregate(ROWS).by_category.child("A").to_dict()
        self.assertEqual(payload["percentage"], 66.7)
        self.assertEqual(payload["assignees"], ["M1", "M2"])
        self.assertEqual(payload["children"]["X"], {"sum_score": 1, "sum_max": 1, "item_count": 1, "percentage": 100.0})


class SelectTests(unittest.TestCase):
    def test_all_assignees(self):
        selection = select(aggregate(ROWS), ALL_ASSIGNEES)
        self.assertEqual(selection.total.sum_score, 4)
        self.assertEqual(list(selection.categories), ["A"])

    def test_one_assignee(self):
        selection = select(aggregate(ROWS), "M2")
        self.assertEqual((selection.total.sum_score, selection.total.sum_max), (3, 5))
        self.assertEqual(list(selection.categories["A"].children), ["Y"])

    def test_unknown_assignee_reads_as_zero(self):
        selection = select(aggregate(ROWS), "Nobody")
        self.assertEqual((selection.total.sum_score, selection.total.sum_max, selection.total.percentage), (0, 0, 0.0))
        self.assertEqual(dict(selection.categories), {})


if __name__ == "__main__":
    unittest.main()
