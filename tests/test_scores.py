from __future__ import annotations

import unittest

from site_checklist.scores import ScoreRange, coerce_int, parse_range, parse_score, range_is_well_formed


class ParseRangeTests(unittest.TestCase):
    def test_documented_defaults(self):
        self.assertEqual(parse_range(""), ScoreRange(0, 1))
        self.assertEqual(parse_range("2/5"), ScoreRange(2, 5))
        self.assertEqual(parse_range("abc"), ScoreRange(0, 1))
        self.assertEqual(parse_range("3/x"), ScoreRange(3, 1))

    def test_each_half_defaults_independently(self):
        self.assertEqual(parse_range("x/4"), ScoreRange(0, 4))
        self.assertEqual(parse_range(" 2 / 5 "), ScoreRange(2, 5))

    def test_malformed_shapes_fall_back_to_zero_one(self):
        for raw in (None, "1/2/3", "5", "/"):
            with self.subTest(raw=raw):
                self.assertEqual(parse_range(raw), ScoreRange(0, 1))

    def test_bounds_are_clamped(self):
        self.assertEqual(parse_range("2/0"), ScoreRange(2, 1))
        self.assertEqual(parse_range("-1/3"), ScoreRange(0, 3))

    def test_range_text(self):
        self.assertEqual(parse_range("3/x").text(), "3/1")

    def test_well_formed_check(self):
        self.assertTrue(range_is_well_formed("2/5"))
        self.assertTrue(range_is_well_formed(" 0 / 1 "))
        self.assertFalse(range_is_well_formed("3/x"))
        self.assertFalse(range_is_well_formed("2/0"))
        self.assertFalse(range_is_well_formed(None))


class ScoreCoercionTests(unittest.TestCase):
    def test_leading_integer_coercion(self):
        self.assertEqual(coerce_int("3 pts", 0), 3)
        self.assertEqual(coerce_int(4.0, 0), 4)
        self.assertEqual(coerce_int("2.7", 0), 2)
        self.assertEqual(coerce_int("abc", 7), 7)
        self.assertEqual(coerce_int(True, 7), 7)
        self.assertEqual(coerce_int(float("nan"), 7), 7)

    def test_parse_score_flags_malformed_values(self):
        self.assertEqual(parse_score(""), (0, False))
        self.assertEqual(parse_score(None), (0, False))
        self.assertEqual(parse_score("3"), (3, False))
        self.assertEqual(parse_score(5), (5, False))
        self.assertEqual(parse_score("abc"), (0, True))
        self.assertEqual(parse_score(-2), (0, True))


if __name__ == "__main__":
    unittest.main()
