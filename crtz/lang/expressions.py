"""
Expression evaluator.

Expressions are kept as text in the program model and evaluated on
demand: the text is tokenized in expression mode, converted to postfix
with the shunting-yard algorithm and folded over a value stack.

Every value is an integer; booleans count as 1/0 and comparisons
produce 1/0. Nothing in here raises for script content:

- an operator without two operands makes the whole expression 0
- division by zero gives 0
- unknown variables, objects and fields read as 0
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Mapping

from crtz.lang.lexer import Lexer, Token, TokenKind

if TYPE_CHECKING:
    from crtz.lang.program import Instance, Variables


PRECEDENCE = {
    "==": 1, "!=": 1, "<": 1, "<=": 1, ">": 1, ">=": 1,
    "+": 2, "-": 2,
    "*": 3, "/": 3,
}


def is_operator(token: Token) -> bool:
    return token.kind == TokenKind.SYMBOL and token.text in PRECEDENCE


def to_postfix(tokens: list[Token]) -> list[Token]:
    """Convert infix tokens to postfix; operators are left-associative."""
    output: list[Token] = []
    stack: list[Token] = []

    for token in tokens:
        if is_operator(token):
            while (stack and is_operator(stack[-1])
                   and PRECEDENCE[stack[-1].text] >= PRECEDENCE[token.text]):
                output.append(stack.pop())
            stack.append(token)
        elif token.is_symbol("("):
            stack.append(token)
        elif token.is_symbol(")"):
            while stack and not stack[-1].is_symbol("("):
                output.append(stack.pop())
            if stack:
                stack.pop()
        else:
            output.append(token)

    while stack:
        token = stack.pop()
        # Unbalanced "(" carries no value
        if not token.is_symbol("("):
            output.append(token)

    return output


@lru_cache(maxsize=1024)
def compile_expression(text: str) -> tuple[Token, ...]:
    """Tokenize and convert an expression to postfix (cached per text)."""
    return tuple(to_postfix(list(Lexer(text, expression=True))))


def split_dotted(name: str) -> tuple[str, str]:
    """Split `obj.field` at the first dot; field is empty for bare names."""
    head, _, tail = name.partition('.')
    return head, tail


def divide(a: int, b: int) -> int:
    """Integer division truncating toward zero; x / 0 is 0."""
    if b == 0:
        return 0
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


BINARY_OPERATORS = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": divide,
    "==": lambda a, b: int(a == b),
    "!=": lambda a, b: int(a != b),
    "<": lambda a, b: int(a < b),
    "<=": lambda a, b: int(a <= b),
    ">": lambda a, b: int(a > b),
    ">=": lambda a, b: int(a >= b),
}


def resolve_name(name: str, scope: Variables, objects: Mapping[str, Instance]) -> int:
    """
    Look a name up the way expressions do.

    Dotted names read an object field; bare names read the boolean table
    first, then the integer table. Anything missing is 0.
    """
    instance_name, field_name = split_dotted(name)
    if field_name:
        instance = objects.get(instance_name)
        if instance is None:
            return 0
        return instance.fields.get(field_name, 0)

    if name in scope.bools:
        return 1 if scope.bools[name] else 0
    return scope.ints.get(name, 0)


def evaluate_postfix(postfix: tuple[Token, ...] | list[Token],
                     scope: Variables,
                     objects: Mapping[str, Instance]) -> int:
    stack: list[int] = []

    for token in postfix:
        if is_operator(token):
            if len(stack) < 2:
                return 0
            b = stack.pop()
            a = stack.pop()
            stack.append(BINARY_OPERATORS[token.text](a, b))
        elif token.kind == TokenKind.NUMBER:
            stack.append(token.number)
        elif token.kind == TokenKind.BOOLEAN:
            stack.append(1 if token.text == "true" else 0)
        else:
            stack.append(resolve_name(token.text, scope, objects))

    return stack[-1] if stack else 0


def evaluate(text: str, scope: Variables, objects: Mapping[str, Instance] | None = None) -> int:
    """
    Evaluate expression text against a variable scope and object table.

    Args:
        text: Expression source, e.g. "hero.health - 3 * damage"
        scope: Variable tables used for bare names
        objects: Object table used for dotted names

    Returns:
        The integer result (also used as a truth value)
    """
    return evaluate_postfix(compile_expression(text), scope, objects or {})
