"""
Expression evaluator for learner answers.

Grammar (low to high precedence):
  expr    := term (('+' | '-') term)*
  term    := unary (('*' | '/') unary)*
  unary   := ('-' | '+') unary | power
  power   := primary ('^' unary)?          right-associative, tighter than unary minus
  primary := number | x | y | pi | π | e
           | func '(' expr ')' | '(' expr ')'
  func    := sin | cos | tan | sqrt | exp | abs

Identifiers are read as whole words before anything is looked up, so the
constant `e` can never eat into `exp`, `sqrt` or `sin`.
Nothing here calls eval(); the text is tokenized, parsed into a small
AST and walked.

Answers longer than MAX_LENGTH characters or nested deeper than
MAX_DEPTH levels (parentheses, function calls, unary signs and `^`
exponents all count) are a ParseError; parsing and walking recurse per
level, so both stay under the interpreter's recursion limit.
"""
import logging
import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Union

from .errors import DomainError, ParseError

log = logging.getLogger(__name__)

# ---------------- Tokens ----------------

_TOKEN_SPEC = [
    ('NUM',    r'\d+\.?\d*|\.\d+'),
    ('IDENT',  r'[A-Za-z_]\w*|π'),
    ('OP',     r'[-+*/^]'),
    ('LPAREN', r'\('),
    ('RPAREN', r'\)'),
    ('SKIP',   r'\s+'),
    ('BAD',    r'.'),
]
_TOKEN_RE = re.compile('|'.join(f'(?P<{name}>{pat})' for name, pat in _TOKEN_SPEC))

VARIABLES = ('x', 'y')

MAX_LENGTH = 500
MAX_DEPTH = 64

CONSTANTS: Dict[str, float] = {
    'pi': math.pi,
    'π': math.pi,
    'e': math.e,
}


def _sqrt(v: float) -> float:
    if v < 0:
        raise DomainError(f"sqrt of negative number {v:g}")
    return math.sqrt(v)


FUNCTIONS: Dict[str, Callable[[float], float]] = {
    'sin': math.sin,
    'cos': math.cos,
    'tan': math.tan,
    'sqrt': _sqrt,
    'exp': math.exp,
    'abs': abs,
}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int


def tokenize(expression: str) -> List[Token]:
    tokens = []
    for m in _TOKEN_RE.finditer(expression):
        kind = m.lastgroup
        if kind == 'SKIP':
            continue
        if kind == 'BAD':
            raise ParseError(f"unexpected character {m.group()!r}", m.start())
        tokens.append(Token(kind, m.group(), m.start()))
    tokens.append(Token('END', '', len(expression)))
    return tokens

# ---------------- AST ----------------

@dataclass(frozen=True)
class Num:
    value: float

@dataclass(frozen=True)
class Var:
    name: str

@dataclass(frozen=True)
class Unary:
    op: str
    operand: 'Node'

@dataclass(frozen=True)
class BinOp:
    op: str
    left: 'Node'
    right: 'Node'

@dataclass(frozen=True)
class Call:
    func: str
    arg: 'Node'

Node = Union[Num, Var, Unary, BinOp, Call]

# ---------------- Parser ----------------

class _Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.i = 0
        self.depth = 0

    @property
    def tok(self) -> Token:
        return self.tokens[self.i]

    def _take(self) -> Token:
        t = self.tokens[self.i]
        self.i += 1
        return t

    def _nested(self, parse_inner: Callable[[], Node]) -> Node:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise ParseError(f"expression nested too deeply (more than {MAX_DEPTH} levels)",
                             self.tok.pos)
        node = parse_inner()
        self.depth -= 1
        return node

    def _at_op(self, *ops: str) -> bool:
        return self.tok.kind == 'OP' and self.tok.text in ops

    def _expect_rparen(self):
        if self.tok.kind != 'RPAREN':
            raise ParseError("unbalanced parentheses: missing ')'", self.tok.pos)
        self._take()

    def parse(self) -> Node:
        node = self.expr()
        if self.tok.kind == 'RPAREN':
            raise ParseError("unbalanced parentheses: unexpected ')'", self.tok.pos)
        if self.tok.kind != 'END':
            raise ParseError(f"unexpected {self.tok.text!r}", self.tok.pos)
        return node

    def expr(self) -> Node:
        node = self.term()
        while self._at_op('+', '-'):
            op = self._take().text
            node = BinOp(op, node, self.term())
        return node

    def term(self) -> Node:
        node = self.unary()
        while self._at_op('*', '/'):
            op = self._take().text
            node = BinOp(op, node, self.unary())
        return node

    def unary(self) -> Node:
        if self._at_op('-', '+'):
            op = self._take().text
            return Unary(op, self._nested(self.unary))
        return self.power()

    def power(self) -> Node:
        base = self.primary()
        if self._at_op('^'):
            self._take()
            # exponent goes back through unary so 2^-1 and 2^3^2 both work
            return BinOp('^', base, self._nested(self.unary))
        return base

    def primary(self) -> Node:
        t = self.tok
        if t.kind == 'NUM':
            self._take()
            return Num(float(t.text))
        if t.kind == 'IDENT':
            self._take()
            if t.text in FUNCTIONS:
                if self.tok.kind != 'LPAREN':
                    raise ParseError(f"{t.text} needs a parenthesized argument", self.tok.pos)
                self._take()
                arg = self._nested(self.expr)
                self._expect_rparen()
                return Call(t.text, arg)
            if t.text in CONSTANTS:
                return Num(CONSTANTS[t.text])
            if t.text in VARIABLES:
                return Var(t.text)
            raise ParseError(f"unknown identifier {t.text!r}", t.pos)
        if t.kind == 'LPAREN':
            self._take()
            node = self._nested(self.expr)
            self._expect_rparen()
            return node
        if t.kind == 'END':
            raise ParseError("unexpected end of expression", t.pos)
        if t.kind == 'RPAREN':
            raise ParseError("unbalanced parentheses: unexpected ')'", t.pos)
        raise ParseError(f"expected a number, variable or '(' but got {t.text!r}", t.pos)


def parse(expression: str) -> Node:
    if not expression or not expression.strip():
        raise ParseError("empty expression")
    if len(expression) > MAX_LENGTH:
        raise ParseError(f"expression too long ({len(expression)} characters, "
                         f"at most {MAX_LENGTH})", MAX_LENGTH)
    return _Parser(tokenize(expression)).parse()

# ---------------- Evaluation ----------------

def _power(base: float, exponent: float) -> float:
    if base == 0 and exponent < 0:
        raise DomainError("zero raised to a negative power")
    if base < 0 and not float(exponent).is_integer():
        raise DomainError(f"negative base {base:g} raised to non-integer power {exponent:g}")
    return math.pow(base, exponent)


def _walk(node: Node, bindings: Mapping[str, float]) -> float:
    if isinstance(node, Num):
        return node.value
    if isinstance(node, Var):
        if node.name not in bindings:
            raise DomainError(f"no value bound for {node.name}")
        return float(bindings[node.name])
    if isinstance(node, Unary):
        v = _walk(node.operand, bindings)
        return -v if node.op == '-' else v
    if isinstance(node, Call):
        return FUNCTIONS[node.func](_walk(node.arg, bindings))

    left = _walk(node.left, bindings)
    right = _walk(node.right, bindings)
    if node.op == '+':
        return left + right
    if node.op == '-':
        return left - right
    if node.op == '*':
        return left * right
    if node.op == '/':
        if right == 0:
            raise DomainError("division by zero")
        return left / right
    return _power(left, right)


def evaluate_node(node: Node, bindings: Mapping[str, float]) -> float:
    try:
        value = _walk(node, bindings)
    except (ValueError, OverflowError, ZeroDivisionError) as exc:
        raise DomainError(f"undefined result: {exc}") from exc
    if not math.isfinite(value):
        raise DomainError(f"result is not a finite number ({value})")
    return value


def evaluate(expression: str, bindings: Mapping[str, float]) -> float:
    """Parse `expression` and evaluate it with `bindings` for x and y.

    Raises ParseError for malformed text and DomainError when the value
    is undefined (division by zero, sqrt of a negative, overflow, ...).
    """
    node = parse(expression)
    value = evaluate_node(node, bindings)
    log.debug("evaluated %r at %s -> %r", expression, dict(bindings), value)
    return value
