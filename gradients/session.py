"""
Question lifecycle for gradient practice.

  IDLE --new_question()--> ACTIVE --submit()--> GRADED --skip()/new_question()--> ACTIVE

A session owns the random source, the live question and the running
score. UIs call its methods one user action at a time and draw whatever
plain data comes back.
"""
import enum
import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from . import checker
from .checker import CheckResult, GradeResult
from .config import TrainerConfig
from .errors import StateError, ValidationError
from .families import FunctionCatalog, FunctionInstance, Point, random_point
from .geometry import GradientSegment, SurfaceGrid, compute_arrow, sample_surface

log = logging.getLogger(__name__)


class State(enum.Enum):
    IDLE = 'idle'
    ACTIVE = 'active'
    GRADED = 'graded'


@dataclass
class SessionStats:
    attempted: int = 0
    correct: int = 0


@dataclass
class Question:
    family_id: str
    instance: FunctionInstance
    point: Point
    answered: bool = False
    correct: Optional[bool] = None


@dataclass(frozen=True)
class RenderPayload:
    surface: SurfaceGrid
    evaluation_point: Tuple[float, float, float]
    gradient_arrow: GradientSegment


@dataclass(frozen=True)
class QuestionPayload:
    template_text: str
    substituted_coefficients: Dict[str, int]
    point: Point
    text: str


@dataclass(frozen=True)
class FeedbackPayload:
    dfdx_verdict: CheckResult
    dfdy_verdict: CheckResult
    correct_dfdx: float
    correct_dfdy: float
    correct: bool
    solution_steps: List[str]
    stats: SessionStats


def _fmt(v: float) -> str:
    return f"{v:.3f}"


def solution_steps(instance: FunctionInstance, point: Point, result: GradeResult) -> List[str]:
    gx, gy = _fmt(result.correct_dfdx), _fmt(result.correct_dfdy)
    if result.correct:
        return [
            "Alternative Method / Verification",
            "You correctly computed the partial derivatives by finding the slopes "
            "of the surface in the x and y directions.",
            f"At point {point}:",
            f"∂f/∂x = {gx}",
            f"∂f/∂y = {gy}",
            f"Gradient vector ∇f = <{gx}, {gy}>",
            "This vector points in the direction of steepest ascent on the surface.",
        ]
    return [
        f"Step 1: Write down the function: {instance.formula_text()}",
        "Step 2: Compute ∂f/∂x treating y as a constant, differentiate each term: "
        f"{instance.partial_x_text()}",
        f"Step 3: Evaluate at {point}: ∂f/∂x{point} = {gx}",
        "Step 4: Compute ∂f/∂y treating x as a constant, differentiate each term: "
        f"{instance.partial_y_text()}",
        f"Step 5: Evaluate at {point}: ∂f/∂y{point} = {gy}",
        f"Final Answer: ∇f{point} = <{gx}, {gy}>",
    ]


class QuestionSession:
    def __init__(self, catalog: Optional[FunctionCatalog] = None,
                 rng: Optional[random.Random] = None,
                 config: Optional[TrainerConfig] = None):
        self.catalog = catalog or FunctionCatalog()
        self.rng = rng or random.Random()
        # explore() draws here; self.rng only feeds questions
        self._explore_rng = random.Random(self.rng.random())
        self.config = config or TrainerConfig()
        self.reset()

    def reset(self):
        """Drop the live question and zero the score."""
        self.state = State.IDLE
        self.question: Optional[Question] = None
        self.stats = SessionStats()

    # ----- geometry -----

    def render_payload(self, instance: FunctionInstance, point: Point) -> RenderPayload:
        cfg = self.config
        z0 = float(instance.evaluate(point.x, point.y))
        return RenderPayload(
            surface=sample_surface(instance, point, cfg.half_range, cfg.step),
            evaluation_point=(float(point.x), float(point.y), z0),
            gradient_arrow=compute_arrow(instance, point, cfg.arrow_length),
        )

    def explore(self, family_id: str, point: Point) -> RenderPayload:
        """Plot data for a fresh instance of `family_id`; the quiz is untouched."""
        instance = self.catalog.generate(family_id, self._explore_rng)
        return self.render_payload(instance, point)

    # ----- transitions -----

    def new_question(self) -> Tuple[QuestionPayload, RenderPayload]:
        family_id = self.catalog.random_family_id(self.rng)
        instance = self.catalog.generate(family_id, self.rng)
        point = random_point(self.rng, self.config.point_low, self.config.point_high)
        self.question = Question(family_id, instance, point)
        self.state = State.ACTIVE
        formula = instance.formula_text()
        log.info("new %s question at %s: %s", family_id, point, formula)

        template = self.catalog.family(family_id).template
        payload = QuestionPayload(
            template_text=template,
            substituted_coefficients=dict(instance.coefficients),
            point=point,
            text=f"Given {formula}\n\nCompute ∇f{point}",
        )
        return payload, self.render_payload(instance, point)

    def skip(self) -> Tuple[QuestionPayload, RenderPayload]:
        if self.state is not State.GRADED:
            raise StateError(f"skip is only offered after grading (state: {self.state.value})")
        return self.new_question()

    def submit(self, dfdx_text: str, dfdy_text: str) -> FeedbackPayload:
        if self.state is not State.ACTIVE:
            raise StateError(f"no ungraded question to submit to (state: {self.state.value})")
        dfdx_text = (dfdx_text or '').strip()
        dfdy_text = (dfdy_text or '').strip()
        if not dfdx_text or not dfdy_text:
            raise ValidationError("Please fill in both partial derivatives.")

        q = self.question
        result = checker.grade(q.instance, q.point, dfdx_text, dfdy_text, self.config.tolerance)

        self.stats.attempted += 1
        if result.correct:
            self.stats.correct += 1
        q.answered = True
        q.correct = result.correct
        self.state = State.GRADED
        log.info("graded %s question at %s: %s (%d/%d)", q.family_id, q.point,
                 'correct' if result.correct else 'incorrect',
                 self.stats.correct, self.stats.attempted)

        return FeedbackPayload(
            dfdx_verdict=result.dfdx,
            dfdy_verdict=result.dfdy,
            correct_dfdx=result.correct_dfdx,
            correct_dfdy=result.correct_dfdy,
            correct=result.correct,
            solution_steps=solution_steps(q.instance, q.point, result),
            stats=SessionStats(self.stats.attempted, self.stats.correct),
        )
