"""
Custom per-pixel formulas.

A formula is a small arithmetic expression over the variables

- r: value of the channel being computed (0-255)
- g, b: the pixel's green and blue values
- x, y: pixel position
- w, h: image dimensions

with the functions sin, cos, tan, sqrt, abs, floor, ceil, round, min, max,
log and the constants PI and E. Operators, loosest first: `?:`, comparisons
(`< <= > >= == !=`, yielding 1 or 0), `+ -`, `* / %`, unary `+ -`, `^`
(right-associative).

Formulas are parsed into an expression tree and interpreted; nothing is
ever compiled or executed as Python code. The tree is evaluated over whole
NumPy planes at once, one pass per color channel.

Evaluation is best-effort: infinite results clamp like any other value
(`255 / r` on a black pixel gives 255), wherever a result is not a number
(`sqrt(-1)`, `0 / 0`) the pixel keeps its channel value, and a formula that
does not parse leaves the image unchanged.

Example:
    >>> apply_custom_formula(buffer, "r > 128 ? 255 : 0")
"""

import logging
import math
import re
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple

import numpy as np
from pydantic import BaseModel

from imagelab.exceptions import FormulaSyntaxError
from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import round_half_up, to_uint8

logger = logging.getLogger(__name__)

VARIABLES = ("r", "g", "b", "x", "y", "w", "h")

# Bounds that keep parsing and evaluation well inside the interpreter stack
MAX_NESTING = 64
MAX_TREE_DEPTH = 100

CONSTANTS: Dict[str, float] = {
    "PI": math.pi,
    "E": math.e,
}


def _variadic(reducer: Callable) -> Callable:
    def apply(*args):
        result = args[0]
        for arg in args[1:]:
            result = reducer(result, arg)
        return result

    return apply


# name -> (implementation, minimum arguments, maximum arguments or None)
FUNCTIONS: Dict[str, Tuple[Callable, int, Optional[int]]] = {
    "sin": (np.sin, 1, 1),
    "cos": (np.cos, 1, 1),
    "tan": (np.tan, 1, 1),
    "sqrt": (np.sqrt, 1, 1),
    "abs": (np.abs, 1, 1),
    "floor": (np.floor, 1, 1),
    "ceil": (np.ceil, 1, 1),
    "round": (round_half_up, 1, 1),
    "log": (np.log, 1, 1),
    "min": (_variadic(np.minimum), 1, None),
    "max": (_variadic(np.maximum), 1, None),
}


class FormulaValidation(BaseModel):
    """Parse-time validation result for a formula."""

    valid: bool
    error: Optional[str] = None
    position: Optional[int] = None


# ==============================================================================
# Tokenizer
# ==============================================================================


class Token(NamedTuple):
    kind: str
    text: str
    position: int


_TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    | (?P<name>[A-Za-z_][A-Za-z_0-9]*)
    | (?P<op><=|>=|==|!=|[-+*/%^(),?:<>])
    """,
    re.VERBOSE,
)


def tokenize(formula: str) -> List[Token]:
    """
    Split a formula into tokens.

    Raises:
        FormulaSyntaxError: On a character that starts no token
    """
    tokens = []
    position = 0
    while position < len(formula):
        match = _TOKEN_PATTERN.match(formula, position)
        if match is None:
            raise FormulaSyntaxError(
                formula, f"unexpected character '{formula[position]}'", position
            )
        kind = match.lastgroup
        if kind != "space":
            tokens.append(Token(kind, match.group(), position))
        position = match.end()
    tokens.append(Token("end", "", len(formula)))
    return tokens


# ==============================================================================
# Expression tree
# ==============================================================================


class Node(ABC):
    """Expression tree node evaluated over NumPy planes."""

    depth = 1

    @abstractmethod
    def evaluate(self, env: Mapping[str, np.ndarray]) -> np.ndarray:
        pass


class Number(Node):
    def __init__(self, value: float):
        self.value = float(value)

    def evaluate(self, env):
        return np.float64(self.value)


class Variable(Node):
    def __init__(self, name: str):
        self.name = name

    def evaluate(self, env):
        return np.asarray(env[self.name], dtype=np.float64)


class UnaryOp(Node):
    def __init__(self, op: str, operand: Node):
        self.op = op
        self.operand = operand
        self.depth = operand.depth + 1

    def evaluate(self, env):
        value = self.operand.evaluate(env)
        return -value if self.op == "-" else value


def _compare(fn: Callable) -> Callable:
    def apply(left, right):
        result = fn(left, right).astype(np.float64)
        # NaN operands must not turn into a silent 0
        return np.where(np.isnan(left) | np.isnan(right), np.nan, result)

    return apply


_BINARY_OPERATORS: Dict[str, Callable] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "%": np.fmod,
    "^": np.power,
    "<": _compare(np.less),
    "<=": _compare(np.less_equal),
    ">": _compare(np.greater),
    ">=": _compare(np.greater_equal),
    "==": _compare(np.equal),
    "!=": _compare(np.not_equal),
}


class BinaryOp(Node):
    def __init__(self, op: str, left: Node, right: Node):
        self.op = op
        self.left = left
        self.right = right
        self.depth = max(left.depth, right.depth) + 1

    def evaluate(self, env):
        left = np.asarray(self.left.evaluate(env), dtype=np.float64)
        right = np.asarray(self.right.evaluate(env), dtype=np.float64)
        return _BINARY_OPERATORS[self.op](left, right)


class Conditional(Node):
    def __init__(self, condition: Node, when_true: Node, when_false: Node):
        self.condition = condition
        self.when_true = when_true
        self.when_false = when_false
        self.depth = max(condition.depth, when_true.depth, when_false.depth) + 1

    def evaluate(self, env):
        condition = np.asarray(self.condition.evaluate(env), dtype=np.float64)
        chosen = np.where(
            condition != 0, self.when_true.evaluate(env), self.when_false.evaluate(env)
        )
        return np.where(np.isnan(condition), np.nan, chosen)


class Call(Node):
    def __init__(self, name: str, args: List[Node]):
        self.name = name
        self.args = args
        self.depth = max((arg.depth for arg in args), default=0) + 1

    def evaluate(self, env):
        fn = FUNCTIONS[self.name][0]
        return fn(*(np.asarray(arg.evaluate(env), dtype=np.float64) for arg in self.args))


# ==============================================================================
# Parser
# ==============================================================================

_COMPARISONS = ("<", "<=", ">", ">=", "==", "!=")


class _Parser:
    """Recursive-descent parser, one method per precedence level."""

    def __init__(self, formula: str):
        self.formula = formula
        self.tokens = tokenize(formula)
        self.index = 0
        self.nesting = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _error(self, reason: str, token: Optional[Token] = None) -> FormulaSyntaxError:
        token = token or self.current
        return FormulaSyntaxError(self.formula, reason, token.position)

    def _accept(self, *ops: str) -> Optional[Token]:
        token = self.current
        if token.kind == "op" and token.text in ops:
            self.index += 1
            return token
        return None

    def _descend(self) -> None:
        # conditional and unary lie on every recursive path of the grammar
        if self.nesting >= MAX_NESTING:
            raise self._error("formula nested too deeply")
        self.nesting += 1

    def _checked(self, node: Node, token: Token) -> Node:
        if node.depth > MAX_TREE_DEPTH:
            raise self._error("formula nested too deeply", token)
        return node

    def _expect(self, op: str) -> Token:
        token = self._accept(op)
        if token is None:
            found = self.current.text or "end of formula"
            raise self._error(f"expected '{op}' but found '{found}'")
        return token

    def parse(self) -> Node:
        if self.current.kind == "end":
            raise self._error("formula is empty")
        node = self.conditional()
        if self.current.kind != "end":
            raise self._error(f"unexpected '{self.current.text}'")
        return node

    def conditional(self) -> Node:
        self._descend()
        node = self.comparison()
        token = self._accept("?")
        if token is not None:
            when_true = self.conditional()
            self._expect(":")
            when_false = self.conditional()
            node = self._checked(Conditional(node, when_true, when_false), token)
        self.nesting -= 1
        return node

    def comparison(self) -> Node:
        node = self.additive()
        while True:
            token = self._accept(*_COMPARISONS)
            if token is None:
                return node
            node = self._checked(BinaryOp(token.text, node, self.additive()), token)

    def additive(self) -> Node:
        node = self.term()
        while True:
            token = self._accept("+", "-")
            if token is None:
                return node
            node = self._checked(BinaryOp(token.text, node, self.term()), token)

    def term(self) -> Node:
        node = self.unary()
        while True:
            token = self._accept("*", "/", "%")
            if token is None:
                return node
            node = self._checked(BinaryOp(token.text, node, self.unary()), token)

    def unary(self) -> Node:
        self._descend()
        token = self._accept("+", "-")
        if token is not None:
            node = self._checked(UnaryOp(token.text, self.unary()), token)
        else:
            node = self.power()
        self.nesting -= 1
        return node

    def power(self) -> Node:
        base = self.primary()
        token = self._accept("^")
        if token is not None:
            # Exponent may carry its own sign: 2^-1
            return self._checked(BinaryOp("^", base, self.unary()), token)
        return base

    def primary(self) -> Node:
        token = self.current

        if token.kind == "number":
            self.index += 1
            return Number(float(token.text))

        if token.kind == "name":
            self.index += 1
            if self._accept("("):
                return self.call(token)
            if token.text in CONSTANTS:
                return Number(CONSTANTS[token.text])
            if token.text in VARIABLES:
                return Variable(token.text)
            if token.text in FUNCTIONS:
                raise self._error(f"function '{token.text}' must be called", token)
            raise self._error(f"unknown name '{token.text}'", token)

        if self._accept("("):
            node = self.conditional()
            self._expect(")")
            return node

        if token.kind == "end":
            raise self._error("unexpected end of formula")
        raise self._error(f"unexpected '{token.text}'")

    def call(self, name: Token) -> Node:
        if name.text not in FUNCTIONS:
            raise self._error(f"unknown function '{name.text}'", name)

        args = []
        if not self._accept(")"):
            args.append(self.conditional())
            while self._accept(","):
                args.append(self.conditional())
            self._expect(")")

        _, min_args, max_args = FUNCTIONS[name.text]
        if len(args) < min_args or (max_args is not None and len(args) > max_args):
            expected = str(min_args) if max_args == min_args else f"at least {min_args}"
            raise self._error(
                f"function '{name.text}' expects {expected} argument(s), got {len(args)}", name
            )
        return self._checked(Call(name.text, args), name)


@lru_cache(maxsize=128)
def parse_formula(formula: str) -> Node:
    """
    Parse a formula into an expression tree.

    Args:
        formula: Formula text, e.g. "255 - r"

    Returns:
        Root node of the expression tree

    Raises:
        FormulaSyntaxError: With the position of the offending token
    """
    return _Parser(formula).parse()


def validate_formula(formula: str) -> FormulaValidation:
    """Check that a formula parses, without raising."""
    try:
        parse_formula(formula)
    except FormulaSyntaxError as e:
        return FormulaValidation(valid=False, error=e.reason, position=e.position)
    return FormulaValidation(valid=True)


# ==============================================================================
# Evaluation
# ==============================================================================


def evaluate_formula(formula: str, context: Mapping[str, float]) -> int:
    """
    Evaluate a formula for a single sample.

    Args:
        formula: Formula text
        context: Values for r, g, b, x, y, w, h; r is required

    Returns:
        Result rounded half-up and clamped to [0, 255], or the context's r
        value if the formula fails to parse, uses a variable missing from
        the context or yields NaN
    """
    fallback = int(context["r"])
    try:
        tree = parse_formula(formula)
    except FormulaSyntaxError as e:
        logger.debug(f"Formula fallback: {e.message}")
        return fallback

    try:
        with np.errstate(all="ignore"):
            value = float(tree.evaluate(context))
    except KeyError as e:
        logger.debug(f"Formula fallback: no value for {e}")
        return fallback
    if math.isnan(value):
        return fallback
    return int(to_uint8(value))


def apply_custom_formula(buffer: PixelBuffer, formula: str) -> PixelBuffer:
    """
    Apply a formula to every color channel of every pixel.

    For each channel the formula is evaluated with that channel's value in
    the `r` slot. Infinite results clamp to 0 or 255; samples whose result
    is NaN keep their value.

    Args:
        buffer: Source buffer
        formula: Formula text

    Returns:
        New PixelBuffer with alpha untouched
    """
    try:
        tree = parse_formula(formula)
    except FormulaSyntaxError as e:
        logger.warning(f"Custom formula ignored: {e.message}")
        return buffer.copy()

    height, width = buffer.shape
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    rgb = buffer.rgb
    env = {
        "g": rgb[:, :, 1],
        "b": rgb[:, :, 2],
        "x": xs,
        "y": ys,
        "w": float(width),
        "h": float(height),
    }

    result = np.empty_like(rgb)
    fallbacks = 0
    with np.errstate(all="ignore"):
        for channel in range(3):
            original = rgb[:, :, channel]
            values = np.broadcast_to(tree.evaluate({**env, "r": original}), original.shape)
            undefined = np.isnan(values)
            fallbacks += int(undefined.sum())
            result[:, :, channel] = np.where(undefined, original, values)

    if fallbacks:
        logger.debug(f"Custom formula '{formula}': {fallbacks} samples kept their value")
    return buffer.with_rgb(to_uint8(result))
