"""
Function families for gradient practice.

Each family is a template f(x, y) with integer coefficients. The value,
both partial derivatives and their printable formulas are written out by
hand per family and looked up by family id; values and grading never
differentiate at runtime. SymPy is only used to pretty-print the closed
form and its partials as LaTeX.

All value/partial functions are NumPy-aware: pass floats for a single
point or meshgrid arrays for a whole surface.
"""
import logging
import random
import string
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple

import numpy as np
import sympy as sp

from .errors import ConfigurationError

log = logging.getLogger(__name__)

X, Y = sp.symbols('x y')

# ---------------- Data model ----------------

@dataclass(frozen=True)
class CoefficientRule:
    name: str
    low: int
    high: int
    exclude: Optional[int] = None

    def choices(self) -> List[int]:
        return [v for v in range(self.low, self.high + 1) if v != self.exclude]


@dataclass(frozen=True)
class FunctionFamily:
    id: str
    name: str
    template: str
    rules: Tuple[CoefficientRule, ...]

    @property
    def coefficient_names(self) -> Tuple[str, ...]:
        return tuple(r.name for r in self.rules)

    def placeholders(self) -> List[str]:
        return [field for _, field, _, _ in string.Formatter().parse(self.template) if field]


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __str__(self):
        return f"({self.x:g}, {self.y:g})"


def _real(v):
    return v if isinstance(v, np.ndarray) else float(v)


@dataclass(frozen=True)
class FunctionInstance:
    family_id: str
    coefficients: Mapping[str, int]

    def __hash__(self):
        # mappingproxy is unhashable; hash the same pairs __eq__ compares
        return hash((self.family_id, tuple(sorted(self.coefficients.items()))))

    @property
    def _form(self) -> '_Form':
        return _FORMS[self.family_id]

    def evaluate(self, x, y):
        return _real(self._form.f(self.coefficients, x, y))

    def partial_x_value(self, x, y):
        return _real(self._form.fx(self.coefficients, x, y))

    def partial_y_value(self, x, y):
        return _real(self._form.fy(self.coefficients, x, y))

    def gradient(self, point: Point) -> Tuple[float, float]:
        return (float(self.partial_x_value(point.x, point.y)),
                float(self.partial_y_value(point.x, point.y)))

    def partial_x_text(self) -> str:
        """df/dx with the coefficients filled in, in evaluator syntax."""
        return self._form.fx_text(self.coefficients)

    def partial_y_text(self) -> str:
        return self._form.fy_text(self.coefficients)

    def formula_text(self) -> str:
        return _FAMILIES_BY_ID[self.family_id].template.format_map(self.coefficients)

    def sympy_expr(self) -> sp.Expr:
        return self._form.expr(self.coefficients)

    def latex(self) -> str:
        return sp.latex(self.sympy_expr())

    def partial_x_latex(self) -> str:
        return sp.latex(sp.diff(self.sympy_expr(), X))

    def partial_y_latex(self) -> str:
        return sp.latex(sp.diff(self.sympy_expr(), Y))

# ---------------- Closed forms ----------------

Coeffs = Mapping[str, int]


def _linear_text(*terms: Tuple[int, str]) -> str:
    """Join (coefficient, factor) pairs with folded signs: 4*x - 2*y - 1."""
    out = ""
    for coeff, factor in terms:
        body = f"{abs(coeff)}*{factor}" if factor else f"{abs(coeff)}"
        if not out:
            out = f"-{body}" if coeff < 0 else body
        else:
            out += f" - {body}" if coeff < 0 else f" + {body}"
    return out


class _Form(NamedTuple):
    f: Callable
    fx: Callable
    fy: Callable
    fx_text: Callable[[Coeffs], str]
    fy_text: Callable[[Coeffs], str]
    expr: Callable[[Coeffs], sp.Expr]


def _quadratic(k, x, y):
    return k['a']*x*x + k['b']*x*y + k['c']*y*y + k['d']*x + k['e']*y

def _quadratic_x(k, x, y):
    return 2*k['a']*x + k['b']*y + k['d']

def _quadratic_y(k, x, y):
    return k['b']*x + 2*k['c']*y + k['e']


def _gauss(k, x, y):
    return k['a'] * np.exp(-(x*x + y*y) / k['c'])

def _exponential(k, x, y):
    return _gauss(k, x, y) + k['d']

def _exponential_x(k, x, y):
    return _gauss(k, x, y) * (-2*x / k['c'])

def _exponential_y(k, x, y):
    return _gauss(k, x, y) * (-2*y / k['c'])


def _sinusoidal(k, x, y):
    return k['a']*np.sin(x) + k['b']*np.cos(y) + k['c']

def _sinusoidal_x(k, x, y):
    return k['a']*np.cos(x) + 0*y

def _sinusoidal_y(k, x, y):
    return -k['b']*np.sin(y) + 0*x


def _saddle(k, x, y):
    return k['a']*x*x - k['b']*y*y

def _saddle_x(k, x, y):
    return 2*k['a']*x + 0*y

def _saddle_y(k, x, y):
    return -2*k['b']*y + 0*x


_FORMS: Dict[str, _Form] = {
    'quadratic': _Form(
        _quadratic, _quadratic_x, _quadratic_y,
        lambda k: _linear_text((2*k['a'], 'x'), (k['b'], 'y'), (k['d'], '')),
        lambda k: _linear_text((k['b'], 'x'), (2*k['c'], 'y'), (k['e'], '')),
        lambda k: k['a']*X**2 + k['b']*X*Y + k['c']*Y**2 + k['d']*X + k['e']*Y,
    ),
    'exponential': _Form(
        _exponential, _exponential_x, _exponential_y,
        lambda k: f"{k['a']}*e^(-(x^2+y^2)/{k['c']})*(-2*x/{k['c']})",
        lambda k: f"{k['a']}*e^(-(x^2+y^2)/{k['c']})*(-2*y/{k['c']})",
        lambda k: k['a']*sp.exp(-(X**2 + Y**2) / sp.Integer(k['c'])) + k['d'],
    ),
    'sinusoidal': _Form(
        _sinusoidal, _sinusoidal_x, _sinusoidal_y,
        lambda k: f"{k['a']}*cos(x)",
        lambda k: f"{-k['b']}*sin(y)",
        lambda k: k['a']*sp.sin(X) + k['b']*sp.cos(Y) + k['c'],
    ),
    'saddle': _Form(
        _saddle, _saddle_x, _saddle_y,
        lambda k: f"{2*k['a']}*x",
        lambda k: f"{-2*k['b']}*y",
        lambda k: k['a']*X**2 - k['b']*Y**2,
    ),
}

FAMILIES: Tuple[FunctionFamily, ...] = (
    FunctionFamily(
        'quadratic', 'Quadratic',
        'f(x,y) = {a}x² + {b}xy + {c}y² + {d}x + {e}y',
        (CoefficientRule('a', -3, 3, 0), CoefficientRule('b', -3, 3, 0),
         CoefficientRule('c', -3, 3, 0), CoefficientRule('d', -2, 2, 0),
         CoefficientRule('e', -2, 2, 0)),
    ),
    FunctionFamily(
        'exponential', 'Exponential',
        'f(x,y) = {a}e^(-(x²+y²)/{c}) + {d}',
        (CoefficientRule('a', 1, 3), CoefficientRule('c', 1, 3),
         CoefficientRule('d', -2, 2, 0)),
    ),
    FunctionFamily(
        'sinusoidal', 'Sinusoidal',
        'f(x,y) = {a}·sin(x) + {b}·cos(y) + {c}',
        (CoefficientRule('a', 1, 3), CoefficientRule('b', 1, 3),
         CoefficientRule('c', -2, 2, 0)),
    ),
    FunctionFamily(
        'saddle', 'Saddle Surface',
        'f(x,y) = {a}x² - {b}y²',
        (CoefficientRule('a', 1, 3), CoefficientRule('b', 1, 3)),
    ),
)

_FAMILIES_BY_ID: Dict[str, FunctionFamily] = {fam.id: fam for fam in FAMILIES}

# ---------------- Random draws ----------------

def random_int(rng: random.Random, low: int, high: int, exclude: Optional[int] = None) -> int:
    """Uniform integer in [low, high], redrawn while it equals `exclude`."""
    n = rng.randint(low, high)
    while n == exclude:
        n = rng.randint(low, high)
    return n


def random_point(rng: random.Random, low: int = -3, high: int = 3) -> Point:
    return Point(random_int(rng, low, high), random_int(rng, low, high))

# ---------------- Catalog ----------------

def validate_family(fam: FunctionFamily):
    if fam.id not in _FORMS:
        raise ConfigurationError(f"family {fam.id!r} has no closed form")
    names = fam.coefficient_names
    if len(set(names)) != len(names):
        raise ConfigurationError(f"family {fam.id!r} repeats a coefficient name")
    for rule in fam.rules:
        if rule.low > rule.high:
            raise ConfigurationError(
                f"{fam.id}.{rule.name}: empty range [{rule.low}, {rule.high}]")
        if not rule.choices():
            raise ConfigurationError(
                f"{fam.id}.{rule.name}: range [{rule.low}, {rule.high}] only holds "
                f"the excluded value {rule.exclude}")
    unknown = set(fam.placeholders()) - set(names)
    if unknown:
        raise ConfigurationError(
            f"family {fam.id!r} template uses unknown placeholders {sorted(unknown)}")


class FunctionCatalog:
    """The built-in families, checked once up front."""

    def __init__(self, families: Iterable[FunctionFamily] = FAMILIES):
        self._families: Dict[str, FunctionFamily] = {}
        for fam in families:
            validate_family(fam)
            if fam.id in self._families:
                raise ConfigurationError(f"duplicate family id {fam.id!r}")
            self._families[fam.id] = fam
        if not self._families:
            raise ConfigurationError("catalog has no families")

    def ids(self) -> List[str]:
        return list(self._families)

    def family(self, family_id: str) -> FunctionFamily:
        try:
            return self._families[family_id]
        except KeyError:
            raise ConfigurationError(f"unknown function family {family_id!r}") from None

    def random_family_id(self, rng: random.Random) -> str:
        return rng.choice(self.ids())

    def generate(self, family_id: str, rng: random.Random) -> FunctionInstance:
        fam = self.family(family_id)
        coeffs = {r.name: random_int(rng, r.low, r.high, r.exclude) for r in fam.rules}
        log.debug("generated %s with %s", family_id, coeffs)
        return FunctionInstance(family_id, MappingProxyType(coeffs))

    def instance(self, family_id: str, **coefficients: int) -> FunctionInstance:
        """Build an instance from explicit coefficients (no range check)."""
        fam = self.family(family_id)
        if set(coefficients) != set(fam.coefficient_names):
            raise ConfigurationError(
                f"{family_id} takes coefficients {list(fam.coefficient_names)}, "
                f"got {sorted(coefficients)}")
        return FunctionInstance(family_id, MappingProxyType(dict(coefficients)))
