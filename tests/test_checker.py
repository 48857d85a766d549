#!/usr/bin/env python3
"""
Answer checker tests
Point-aware grading with a numeric tolerance
"""

import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from gradients.checker import check, compare_expressions, grade
from gradients.errors import ParseError
from gradients.families import FunctionCatalog, Point


class TestCheck(unittest.TestCase):
    """Single answer against a known value"""

    def setUp(self):
        self.point = Point(2, 3)

    def test_exact_number(self):
        result = check("4", self.point, 4, tolerance=0.05)
        self.assertTrue(result.matches)
        self.assertEqual(result.user_value, 4)
        self.assertIsNone(result.error)

    def test_wrong_number(self):
        result = check("5", self.point, 4, tolerance=0.05)
        self.assertFalse(result.matches)
        self.assertEqual(result.user_value, 5)

    def test_tolerance_is_strict(self):
        self.assertTrue(check("4.04", self.point, 4).matches)
        self.assertFalse(check("4.06", self.point, 4).matches)

    def test_expression_uses_question_point(self):
        self.assertTrue(check("x+y-1", self.point, 4).matches)
        self.assertFalse(check("x+y-1", Point(1, 1), 4).matches)

    def test_parse_error_is_incorrect(self):
        result = check("sin(", self.point, 4)
        self.assertFalse(result.matches)
        self.assertIsNone(result.user_value)
        self.assertIn("end of expression", result.error)

    def test_domain_error_is_incorrect(self):
        result = check("1/(x-2)", self.point, 4)
        self.assertFalse(result.matches)
        self.assertIsNone(result.user_value)
        self.assertIn("division by zero", result.error)

    def test_oversized_answers_are_incorrect(self):
        for text in ("(" * 300 + "1" + ")" * 300,
                     "(" * 150 + "4" + ")" * 150,
                     "-" * 1200 + "1",
                     "^".join(["1"] * 1200),
                     "^".join(["1"] * 200)):
            result = check(text, self.point, 4)
            self.assertFalse(result.matches)
            self.assertIsNone(result.user_value)
            self.assertIsNotNone(result.error)


class TestCompareExpressions(unittest.TestCase):
    """Two expressions evaluated at the same point"""

    def test_equivalent_forms(self):
        self.assertTrue(compare_expressions("2*x", "x+x", Point(3, 1)).matches)
        self.assertFalse(compare_expressions("2*x", "x*x", Point(3, 1)).matches)

    def test_bad_reference_raises(self):
        with self.assertRaises(ParseError):
            compare_expressions("2*x", "x+", Point(3, 1))


class TestGrade(unittest.TestCase):
    """Both partials graded independently"""

    def setUp(self):
        self.inst = FunctionCatalog().instance('saddle', a=2, b=1)
        self.point = Point(1, -1)

    def test_both_right(self):
        result = grade(self.inst, self.point, "4", "-2*y")
        self.assertTrue(result.correct)
        self.assertEqual((result.correct_dfdx, result.correct_dfdy), (4.0, 2.0))

    def test_one_wrong(self):
        result = grade(self.inst, self.point, "4", "3")
        self.assertTrue(result.dfdx.matches)
        self.assertFalse(result.dfdy.matches)
        self.assertFalse(result.correct)

    def test_unreadable_answer(self):
        result = grade(self.inst, self.point, "4*", "2")
        self.assertFalse(result.dfdx.matches)
        self.assertTrue(result.dfdy.matches)
        self.assertFalse(result.correct)


if __name__ == '__main__':
    unittest.main()
