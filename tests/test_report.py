from __future__ import annotations

import unittest

from site_checklist.aggregate import aggregate
from site_checklist.report import REPORT_COLUMNS, render_rollup_text, rollup_to_frame, score_band
from site_checklist.shared import InspectionRow

ROWS = [
    InspectionRow("A", "X", "", "t1", "M1", 1, 1, "0/1"),
    InspectionRow("A", "Y", "deep", "t2", "M2", 3, 5, "0/5"),
]


class ScoreBandTests(unittest.TestCase):
    def test_thresholds(self):
        self.assertEqual(score_band(100.0), "excellent")
        self.assertEqual(score_band(90.0), "excellent")
        self.assertEqual(score_band(89.9), "good")
        self.assertEqual(score_band(80.0), "good")
        self.assertEqual(score_band(70.0), "fair")
        self.assertEqual(score_band(69.9), "poor")
        self.assertEqual(score_band(0.0), "poor")


class RollupFrameTests(unittest.TestCase):
    def test_frame_is_depth_first_with_total_first(self):
        frame = rollup_to_frame(aggregate(ROWS))
        self.assertEqual(list(frame.columns), REPORT_COLUMNS)
        self.assertEqual(list(frame["level"]), ["total", "category", "subcategory", "subcategory", "sub_subcategory"])
        self.assertEqual(frame.iloc[0]["sum_score"], 4)
        self.assertEqual(frame.iloc[1]["percentage"], 66.7)
        self.assertEqual(list(frame.iloc[4][["category", "subcategory", "sub_subcategory"]]), ["A", "Y", "deep"])

    def test_frame_for_one_assignee(self):
        frame = rollup_to_frame(aggregate(ROWS), "M1")
        self.assertEqual(set(frame["assignee"]), {"M1"})
        self.assertEqual(list(frame["sum_max"]), [1, 1, 1])


class RenderTextTests(unittest.TestCase):
    def test_all_assignees(self):
        text = render_rollup_text(aggregate(ROWS))
        self.assertTrue(text.startswith("All assignees\n"))
        self.assertIn("Total: 4/6 (66.7%, poor)", text)
        self.assertIn("  A: 4/6 (66.7%, 2 items) [2 assignees]", text)
        self.assertIn("    X: 1/1 (100.0%, 1 item)", text)
        self.assertIn("      deep: 3/5 (60.0%, 1 item)", text)

    def test_unknown_assignee_renders_zero_total(self):
        text = render_rollup_text(aggregate(ROWS), "Nobody")
        self.assertIn("Assignee: Nobody", text)
        self.assertIn("Total: 0/0 (0.0%, poor)", text)


if __name__ == "__main__":
    unittest.main()
