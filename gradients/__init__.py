"""Gradient practice: random f(x, y), graded ∇f at a point."""
from .checker import CheckResult, GradeResult, check, compare_expressions, grade
from .config import TrainerConfig
from .errors import (ConfigurationError, DomainError, ExpressionError, GradientError,
                     ParseError, StateError, ValidationError)
from .expression import evaluate, parse
from .families import FAMILIES, FunctionCatalog, FunctionFamily, FunctionInstance, Point
from .geometry import GradientSegment, SurfaceGrid, compute_arrow, sample_surface
from .session import (FeedbackPayload, Question, QuestionPayload, QuestionSession,
                      RenderPayload, SessionStats, State)

__version__ = "0.1.0"
