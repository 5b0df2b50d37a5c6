"""
Left-to-right arithmetic (no HTTP, no storage).

"8*7-6" is read as ((8*7)-6) and "2+3*4" as ((2+3)*4): there is no operator
precedence and no parentheses. The multiplication and division signs may be
typed as "*" / "/" or "×" / "÷".
"""

import re
from typing import List, Union

Number = Union[int, float]

TOKEN_RE = re.compile(r"[0-9]+|[+\-*/×÷]")
OPERATORS = {"+", "-", "*", "/", "×", "÷"}


class EvaluationError(ValueError):
    """Base class for anything the evaluator refuses to compute."""


class DivisionByZero(EvaluationError):
    pass


class MalformedExpression(EvaluationError):
    pass


def tokenize(expression: str) -> List[str]:
    """
    Split "12 + 34" into ["12", "+", "34"].
    Whitespace is dropped; any other character the regex can't claim is an error.
    """
    clean = re.sub(r"\s", "", expression)
    if clean == "":
        raise MalformedExpression("Expression is empty.")

    tokens = TOKEN_RE.findall(clean)
    if "".join(tokens) != clean:
        raise MalformedExpression(f"Unexpected character in {expression!r}.")
    return tokens


def _to_int(token: str, expression: str) -> int:
    try:
        return int(token)
    except ValueError as exc:
        # int() refuses digit strings past sys.get_int_max_str_digits()
        raise MalformedExpression(f"Number too long in {expression!r}.") from exc


def evaluate_expression(expression: str) -> Number:
    """
    Example:
      evaluate_expression("8*7-6") -> 50
      evaluate_expression("7/2")   -> 3.5
    Raises DivisionByZero or MalformedExpression.
    """
    tokens = tokenize(expression)

    # Numbers sit at even indexes, operators at odd ones, and we must end on a number
    if len(tokens) % 2 == 0:
        raise MalformedExpression(f"Expression {expression!r} ends with an operator.")

    i = 0
    while i < len(tokens):
        expected_number = i % 2 == 0
        if expected_number and not tokens[i].isdigit():
            raise MalformedExpression(f"Expected a number at token {i}, got {tokens[i]!r}.")
        if not expected_number and tokens[i] not in OPERATORS:
            raise MalformedExpression(f"Expected an operator at token {i}, got {tokens[i]!r}.")
        i += 1

    result: Number = _to_int(tokens[0], expression)
    i = 1
    while i < len(tokens):
        operator = tokens[i]
        operand = _to_int(tokens[i + 1], expression)

        if operator == "+":
            result = result + operand
        elif operator == "-":
            result = result - operand
        elif operator in ("*", "×"):
            result = result * operand
        else:
            if operand == 0:
                raise DivisionByZero(f"Division by zero in {expression!r}.")
            result = result / operand
        i += 2

    return result
