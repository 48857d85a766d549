"""Grading of learner answers against the analytic partials."""
import logging
from dataclasses import dataclass
from typing import Optional

from . import expression
from .config import TOLERANCE
from .errors import ExpressionError
from .families import FunctionInstance, Point

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckResult:
    matches: bool
    user_value: Optional[float]
    error: Optional[str] = None


@dataclass(frozen=True)
class GradeResult:
    dfdx: CheckResult
    dfdy: CheckResult
    correct_dfdx: float
    correct_dfdy: float

    @property
    def correct(self) -> bool:
        return self.dfdx.matches and self.dfdy.matches


def check(user_expr: str, point: Point, correct_value: float, tolerance: float = TOLERANCE) -> CheckResult:
    """Evaluate `user_expr` at the question's point and compare.

    Parse and domain failures are an incorrect answer, never an exception.
    """
    try:
        value = expression.evaluate(user_expr, {'x': point.x, 'y': point.y})
    except ExpressionError as exc:
        log.debug("answer %r rejected: %s", user_expr, exc)
        return CheckResult(False, None, str(exc))
    return CheckResult(abs(value - correct_value) < tolerance, value)


def compare_expressions(user_expr: str, reference_expr: str, point: Point,
                        tolerance: float = TOLERANCE) -> CheckResult:
    """Compare two expressions, both evaluated at `point`.

    The reference must be well formed; only the learner's side is forgiven.
    """
    reference = expression.evaluate(reference_expr, {'x': point.x, 'y': point.y})
    return check(user_expr, point, reference, tolerance)


def grade(instance: FunctionInstance, point: Point, dfdx_text: str, dfdy_text: str,
          tolerance: float = TOLERANCE) -> GradeResult:
    correct_dfdx, correct_dfdy = instance.gradient(point)
    return GradeResult(
        dfdx=check(dfdx_text, point, correct_dfdx, tolerance),
        dfdy=check(dfdy_text, point, correct_dfdy, tolerance),
        correct_dfdx=correct_dfdx,
        correct_dfdy=correct_dfdy,
    )
