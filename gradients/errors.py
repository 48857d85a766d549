"""Exceptions raised by the gradient trainer."""


class GradientError(Exception):
    """Base class for every error the trainer raises on purpose."""


class ValidationError(GradientError):
    """Learner input is missing or empty."""


class ExpressionError(GradientError):
    """An expression could not be turned into a number."""


class ParseError(ExpressionError):
    def __init__(self, message: str, position: int = -1):
        if position >= 0:
            message = f"{message} (at position {position})"
        super().__init__(message)
        self.position = position


class DomainError(ExpressionError):
    """The expression is well formed but undefined at the given point."""


class ConfigurationError(GradientError):
    """A function family or trainer setting is impossible to honour."""


class StateError(GradientError):
    """A session operation was called in the wrong lifecycle state."""
