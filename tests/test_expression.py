#!/usr/bin/env python3
"""
Expression evaluator tests
Grammar, precedence, constants and the two failure kinds
"""

import math
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from gradients.errors import DomainError, ParseError
from gradients.expression import evaluate, parse, tokenize, BinOp, Unary, MAX_DEPTH, MAX_LENGTH


ORIGIN = {'x': 0.0, 'y': 0.0}


class TestEvaluate(unittest.TestCase):
    """Values of well-formed expressions"""

    def test_linear_combination(self):
        self.assertEqual(evaluate("2*x+3*y", {'x': 1, 'y': 2}), 8)

    def test_exp_is_not_corrupted_by_e(self):
        self.assertEqual(evaluate("exp(x)", ORIGIN), 1)
        self.assertAlmostEqual(evaluate("exp(x)*e", ORIGIN), math.e)
        self.assertAlmostEqual(evaluate("sqrt(e)", ORIGIN), math.sqrt(math.e))

    def test_constants(self):
        self.assertAlmostEqual(evaluate("pi", ORIGIN), math.pi)
        self.assertAlmostEqual(evaluate("π/2", ORIGIN), math.pi / 2)
        self.assertAlmostEqual(evaluate("2*e^x", {'x': 1, 'y': 0}), 2 * math.e)

    def test_functions(self):
        self.assertAlmostEqual(evaluate("sin(pi/2)", ORIGIN), 1.0)
        self.assertAlmostEqual(evaluate("cos(x)", ORIGIN), 1.0)
        self.assertAlmostEqual(evaluate("tan(pi/4)", ORIGIN), 1.0)
        self.assertEqual(evaluate("sqrt(x)", {'x': 4, 'y': 0}), 2.0)
        self.assertEqual(evaluate("abs(-3)", ORIGIN), 3.0)

    def test_precedence(self):
        self.assertEqual(evaluate("2+3*4", ORIGIN), 14)
        self.assertEqual(evaluate("(1+2)*3", ORIGIN), 9)
        self.assertEqual(evaluate("8/4/2", ORIGIN), 1)
        self.assertEqual(evaluate("5-3-1", ORIGIN), 1)

    def test_power_binds_tighter_than_unary_minus(self):
        self.assertEqual(evaluate("-2^2", ORIGIN), -4)
        self.assertEqual(evaluate("(-2)^2", ORIGIN), 4)
        self.assertEqual(evaluate("-x^2", {'x': 3, 'y': 0}), -9)

    def test_power_is_right_associative(self):
        self.assertEqual(evaluate("2^3^2", ORIGIN), 512)
        self.assertEqual(evaluate("2^-1", ORIGIN), 0.5)

    def test_decimals_and_whitespace(self):
        self.assertAlmostEqual(evaluate(" 2.5 * .4 ", ORIGIN), 1.0)
        self.assertAlmostEqual(evaluate("3.", ORIGIN), 3.0)

    def test_unary_signs(self):
        self.assertEqual(evaluate("--3", ORIGIN), 3)
        self.assertEqual(evaluate("4*x + -3*y + -1", {'x': 1, 'y': 1}), 0)
        self.assertEqual(evaluate("+y", {'x': 0, 'y': 7}), 7)


class TestParseErrors(unittest.TestCase):
    """Malformed text raises ParseError"""

    def assertParseError(self, text):
        with self.assertRaises(ParseError):
            evaluate(text, ORIGIN)

    def test_unfinished_call(self):
        self.assertParseError("sin(")

    def test_empty(self):
        self.assertParseError("")
        self.assertParseError("   ")

    def test_unbalanced(self):
        self.assertParseError("(1+2")
        self.assertParseError("1+2)")

    def test_unknown_identifiers(self):
        self.assertParseError("xe")
        self.assertParseError("ln(x)")
        self.assertParseError("X")

    def test_implicit_multiplication_is_rejected(self):
        self.assertParseError("2x")
        self.assertParseError("sin x")

    def test_missing_operand(self):
        self.assertParseError("2*")
        self.assertParseError("*2")
        self.assertParseError("()")

    def test_bad_character_position(self):
        with self.assertRaises(ParseError) as ctx:
            evaluate("1 + ?", ORIGIN)
        self.assertEqual(ctx.exception.position, 4)


class TestOversizedInput(unittest.TestCase):
    """Deep or very long answers are rejected, not overflowed"""

    def assertTooDeep(self, text):
        self.assertLessEqual(len(text), MAX_LENGTH)
        with self.assertRaises(ParseError) as ctx:
            evaluate(text, ORIGIN)
        self.assertIn("nested too deeply", str(ctx.exception))

    def test_deep_parentheses(self):
        self.assertTooDeep("(" * 150 + "1" + ")" * 150)

    def test_deep_function_calls(self):
        self.assertTooDeep("sin(" * 80 + "x" + ")" * 80)

    def test_long_sign_run(self):
        self.assertTooDeep("-" * 200 + "1")

    def test_long_power_chain(self):
        self.assertTooDeep("^".join(["1"] * 200))

    def test_nesting_up_to_the_limit_is_fine(self):
        depth = MAX_DEPTH
        self.assertEqual(evaluate("(" * depth + "2" + ")" * depth, ORIGIN), 2)
        self.assertEqual(evaluate("-" * depth + "2", ORIGIN), 2)

    def test_too_long(self):
        for text in ("(" * 300 + "1" + ")" * 300, "-" * 1200 + "1", "^".join(["1"] * 1200)):
            with self.assertRaises(ParseError) as ctx:
                evaluate(text, ORIGIN)
            self.assertIn("too long", str(ctx.exception))
            self.assertEqual(ctx.exception.position, MAX_LENGTH)

    def test_long_flat_sum_evaluates(self):
        text = "+".join(["1"] * 200)
        self.assertLessEqual(len(text), MAX_LENGTH)
        self.assertEqual(evaluate(text, ORIGIN), 200)


class TestDomainErrors(unittest.TestCase):
    """Undefined values raise DomainError instead of returning NaN/inf"""

    def assertDomainError(self, text, bindings=ORIGIN):
        with self.assertRaises(DomainError):
            evaluate(text, bindings)

    def test_division_by_zero(self):
        self.assertDomainError("1/x")

    def test_even_root_of_negative(self):
        self.assertDomainError("sqrt(-1)")
        self.assertDomainError("(-8)^(1/3)")

    def test_zero_to_negative_power(self):
        self.assertDomainError("0^-1")

    def test_overflow(self):
        self.assertDomainError("exp(1000)")
        self.assertDomainError("10^400")

    def test_unbound_variable(self):
        self.assertDomainError("x", {})


class TestTokenizer(unittest.TestCase):
    """Identifiers are whole words"""

    def test_identifiers_are_whole_words(self):
        kinds = [(t.kind, t.text) for t in tokenize("exp(e)")]
        self.assertEqual(kinds, [('IDENT', 'exp'), ('LPAREN', '('), ('IDENT', 'e'),
                                 ('RPAREN', ')'), ('END', '')])

    def test_parse_tree_shape(self):
        tree = parse("-x^2")
        self.assertIsInstance(tree, Unary)
        self.assertIsInstance(tree.operand, BinOp)
        self.assertEqual(tree.operand.op, '^')


if __name__ == '__main__':
    unittest.main()
