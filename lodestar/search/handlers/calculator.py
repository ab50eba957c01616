"""
Calculator Handler - Inline math evaluation in search.

Triggers on bare arithmetic such as "2 + 2" or "(3 - 1) ^ 8". The
expression is parsed by a small recursive-descent evaluator that only
knows numeric literals, parentheses and + - * / % ^. There are no names,
no function calls and nothing is handed to eval().

Grammar (^ is right-associative and binds tighter than unary minus):
    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/" | "%") unary)*
    unary   := ("+" | "-") unary | power
    power   := primary ("^" unary)?
    primary := NUMBER | "(" expr ")"
"""

import math
import re
from typing import Optional

from loguru import logger

from lodestar.search.modes import CALC_CHARS, CALC_OPERATORS, Classification, Mode
from lodestar.search.router import ResultKind, ResultRecord, SearchHandler

CALC_ICON = "accessories-calculator-symbolic"
PRECISION = 10
MAX_EXPRESSION_LENGTH = 4096

_TOKEN = re.compile(r"\s*(?:(\d+\.?\d*|\.\d+)|(.))")


class _ParseError(Exception):
    pass


def _tokenize(text: str) -> list[str | float]:
    tokens: list[str | float] = []
    for number, op in _TOKEN.findall(text):
        if number:
            tokens.append(float(number))
        elif op.strip():
            tokens.append(op)
    return tokens


class _Parser:
    """Recursive-descent evaluator over a token list."""

    def __init__(self, tokens: list[str | float]):
        self.tokens = tokens
        self.pos = 0

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self):
        token = self.peek()
        if token is None:
            raise _ParseError("unexpected end of expression")
        self.pos += 1
        return token

    def parse(self) -> float:
        value = self.expr()
        if self.peek() is not None:
            raise _ParseError(f"unexpected token {self.peek()!r}")
        return value

    def expr(self) -> float:
        value = self.term()
        while self.peek() in ("+", "-"):
            if self.take() == "+":
                value = value + self.term()
            else:
                value = value - self.term()
        return value

    def term(self) -> float:
        value = self.unary()
        while self.peek() in ("*", "/", "%"):
            op = self.take()
            rhs = self.unary()
            if op == "*":
                value = value * rhs
            elif op == "/":
                value = value / rhs
            else:
                # Truncated remainder: sign follows the dividend
                value = math.fmod(value, rhs)
        return value

    def unary(self) -> float:
        if self.peek() == "-":
            self.take()
            return -self.unary()
        if self.peek() == "+":
            self.take()
            return self.unary()
        return self.power()

    def power(self) -> float:
        base = self.primary()
        if self.peek() == "^":
            self.take()
            return math.pow(base, self.unary())
        return base

    def primary(self) -> float:
        token = self.take()
        if isinstance(token, float):
            return token
        if token == "(":
            value = self.expr()
            if self.take() != ")":
                raise _ParseError("missing closing parenthesis")
            return value
        raise _ParseError(f"unexpected token {token!r}")


def evaluate(text: str) -> Optional[float]:
    """
    Evaluate a restricted arithmetic expression.

    Args:
        text: Expression using digits, whitespace, . and + - * / % ^ ( )

    Returns:
        The result rounded to 10 decimal places, or None when the text is
        not a calculation (bad characters, no operator, invalid structure,
        division by zero, or a non-finite result). Text longer than
        MAX_EXPRESSION_LENGTH or nested too deeply to parse is also None.
    """
    if not text or len(text) > MAX_EXPRESSION_LENGTH:
        return None
    if not CALC_CHARS.match(text) or not CALC_OPERATORS.search(text):
        return None

    try:
        result = _Parser(_tokenize(text)).parse()
    except (_ParseError, ZeroDivisionError, OverflowError, ValueError, RecursionError) as e:
        logger.debug(f"Calculator rejected '{text}': {e}")
        return None

    if not math.isfinite(result):
        return None
    result = round(result, PRECISION)
    # Normalise -0.0
    return result if result != 0 else 0.0


def format_number(value: float) -> str:
    """Format a result the way a pocket calculator would show it."""
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


class CalculatorHandler(SearchHandler):
    """Evaluate arithmetic typed straight into the search entry."""

    name = "calculator"
    mode = Mode.CALCULATOR

    def get_results(self, query: Classification, limit: int) -> list[ResultRecord]:
        expression = query.residual.strip()
        value = evaluate(expression)
        if value is None:
            # Router falls back to app search
            return []

        display = format_number(value)
        return [ResultRecord(
            kind=ResultKind.CALC,
            primary_text=display,
            secondary_text=f"{expression} = {display}",
            icon=CALC_ICON,
            payload=display,
        )]
