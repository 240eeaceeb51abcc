# SPDX-License-Identifier: MIT
"""Tree-walking evaluator for description files.

``evaluate(node, scope)`` computes the Value of one AST node, mutating
``scope`` for assignments and appending to the scope's TargetCollector
for rule invocations. ``evaluate_file`` runs a complete file in a fresh
root scope and returns the targets it declared.

Semantics:
- Blocks evaluate their statements in order and yield Nil.
- ``=`` binds in the current scope. ``+=`` and ``-=`` read the current
  value through the scope chain and bind the result in the current scope.
- ``&&`` and ``||`` short-circuit and require booleans.
- ``==`` and ``!=`` compare structurally; ordering needs two integers.
- ``+`` adds integers, concatenates strings and lists, and appends a
  value to a list; ``-`` subtracts integers and removes elements from a
  list.
- ``if`` conditions must be booleans; branches run in the current scope.
"""

from __future__ import annotations

import logging
from pathlib import Path

from antimony.core.errors import ExecutionError
from antimony.core.target import Target
from antimony.dsl.ast import (
    ArrayExpression,
    BinaryOperandExpression,
    BlockExpression,
    BooleanLiteralExpression,
    ConditionalExpression,
    DeclarationReferenceExpression,
    Expression,
    FunctionCallExpression,
    IntegerLiteralExpression,
    StringLiteralExpression,
    UnaryOperandExpression,
)
from antimony.dsl.builtins import BUILTINS
from antimony.dsl.parser import INT64_MAX, INT64_MIN, parse
from antimony.dsl.scope import Scope
from antimony.dsl.source import SourceFile, SourceRange
from antimony.dsl.token import TokenKind
from antimony.dsl.value import (
    NIL,
    BooleanValue,
    IntegerValue,
    ListValue,
    StringValue,
    Value,
    boolean,
)

logger = logging.getLogger(__name__)

_RELATIONS = {
    TokenKind.LESS: lambda lhs, rhs: lhs < rhs,
    TokenKind.LESS_EQUAL: lambda lhs, rhs: lhs <= rhs,
    TokenKind.GREATER: lambda lhs, rhs: lhs > rhs,
    TokenKind.GREATER_EQUAL: lambda lhs, rhs: lhs >= rhs,
}


def _integer(value: int, at: SourceRange) -> IntegerValue:
    if not INT64_MIN <= value <= INT64_MAX:
        raise ExecutionError("integer overflow", at)
    return IntegerValue(value)


def _mismatch(
    operation: TokenKind, lhs: Value, rhs: Value, at: SourceRange
) -> ExecutionError:
    return ExecutionError(
        f"invalid operands to '{operation}': "
        f"'{lhs.type_name}' and '{rhs.type_name}'",
        at,
    )


def add(lhs: Value, rhs: Value, at: SourceRange) -> Value:
    """Evaluate ``lhs + rhs``."""
    if isinstance(lhs, IntegerValue) and isinstance(rhs, IntegerValue):
        return _integer(lhs.data + rhs.data, at)
    if isinstance(lhs, StringValue) and isinstance(rhs, StringValue):
        return StringValue(lhs.data + rhs.data)
    if isinstance(lhs, ListValue):
        if isinstance(rhs, ListValue):
            return ListValue(lhs.data + rhs.data)
        return ListValue(lhs.data + (rhs,))
    raise _mismatch(TokenKind.PLUS, lhs, rhs, at)


def subtract(lhs: Value, rhs: Value, at: SourceRange) -> Value:
    """Evaluate ``lhs - rhs``."""
    if isinstance(lhs, IntegerValue) and isinstance(rhs, IntegerValue):
        return _integer(lhs.data - rhs.data, at)
    if isinstance(lhs, ListValue):
        removed = rhs.data if isinstance(rhs, ListValue) else (rhs,)
        return ListValue.of(value for value in lhs.data if value not in removed)
    raise _mismatch(TokenKind.MINUS, lhs, rhs, at)


def _condition(value: Value, what: str, at: SourceRange) -> bool:
    if value.boolean is None:
        raise ExecutionError(
            f"{what} must be of type 'boolean', not '{value.type_name}'", at
        )
    return value.boolean


def _assign(node: BinaryOperandExpression, scope: Scope) -> Value:
    assert isinstance(node.lhs, DeclarationReferenceExpression)
    name = node.lhs.name
    value = evaluate(node.rhs, scope)

    kind = node.operation.kind
    if kind is not TokenKind.EQUAL:
        current = scope.lookup(name)
        if current is None:
            raise ExecutionError(f"undefined variable '{name}'", node.lhs.range)
        if kind is TokenKind.PLUS_EQUAL:
            value = add(current, value, node.range)
        else:
            value = subtract(current, value, node.range)

    scope[name] = value
    return NIL


def _binary(node: BinaryOperandExpression, scope: Scope) -> Value:
    kind = node.operation.kind
    if node.is_assignment:
        return _assign(node, scope)

    if kind in (TokenKind.AMPERSAND_AMPERSAND, TokenKind.PIPE_PIPE):
        what = f"operand of '{kind}'"
        lhs = _condition(evaluate(node.lhs, scope), what, node.lhs.range)
        if lhs is (kind is TokenKind.PIPE_PIPE):
            return boolean(lhs)
        return boolean(_condition(evaluate(node.rhs, scope), what, node.rhs.range))

    lhs_value = evaluate(node.lhs, scope)
    rhs_value = evaluate(node.rhs, scope)

    if kind is TokenKind.EQUAL_EQUAL:
        return boolean(lhs_value == rhs_value)
    if kind is TokenKind.BANG_EQUAL:
        return boolean(lhs_value != rhs_value)
    if kind in _RELATIONS:
        if lhs_value.integer is None or rhs_value.integer is None:
            raise _mismatch(kind, lhs_value, rhs_value, node.range)
        return boolean(_RELATIONS[kind](lhs_value.integer, rhs_value.integer))
    if kind is TokenKind.PLUS:
        return add(lhs_value, rhs_value, node.range)
    if kind is TokenKind.MINUS:
        return subtract(lhs_value, rhs_value, node.range)

    raise ExecutionError(f"unsupported operator '{kind}'", node.operation.range)


def _call(node: FunctionCallExpression, scope: Scope) -> Value:
    name = node.callee.name
    arguments = [evaluate(argument, scope) for argument in node.arguments]

    if (template := scope.template(name)) is not None:
        logger.debug("Invoking template '%s' at %s", name, node.range)
        return template.invoke(node, arguments, scope)

    function = BUILTINS.get(name)
    if function is None:
        raise ExecutionError(f"unknown function '{name}'", node.callee.range)
    return function(node, arguments, scope)


def evaluate(node: Expression, scope: Scope) -> Value:
    """Evaluate one AST node in ``scope``.

    Args:
        node: The node to evaluate.
        scope: The scope to resolve names in and bind assignments into.

    Returns:
        The node's value (Nil for statements).

    Raises:
        ExecutionError: On type or arity mismatches, undefined names,
            disallowed rule invocations, or failed assertions.
    """
    if isinstance(node, BlockExpression):
        for statement in node.statements:
            evaluate(statement, scope)
        return NIL

    if isinstance(node, BinaryOperandExpression):
        return _binary(node, scope)

    if isinstance(node, UnaryOperandExpression):
        operand = evaluate(node.operand, scope)
        return boolean(not _condition(operand, "operand of '!'", node.operand.range))

    if isinstance(node, ConditionalExpression):
        condition = evaluate(node.condition, scope)
        if _condition(condition, "condition", node.condition.range):
            return evaluate(node.positive, scope)
        if node.negative is not None:
            return evaluate(node.negative, scope)
        return NIL

    if isinstance(node, DeclarationReferenceExpression):
        value = scope.lookup(node.name)
        if value is None:
            raise ExecutionError(f"undefined variable '{node.name}'", node.range)
        return value

    if isinstance(node, FunctionCallExpression):
        return _call(node, scope)

    if isinstance(node, ArrayExpression):
        return ListValue.of(evaluate(element, scope) for element in node.elements)

    if isinstance(node, BooleanLiteralExpression):
        return BooleanValue(node.value)

    if isinstance(node, IntegerLiteralExpression):
        return IntegerValue(node.value)

    if isinstance(node, StringLiteralExpression):
        return StringValue(node.value)

    raise TypeError(f"cannot evaluate {type(node).__name__}")


def execute(statements: list[Expression], scope: Scope) -> list[Target]:
    """Evaluate top-level statements and return the targets they declared."""
    for statement in statements:
        evaluate(statement, scope)
    return scope.collector.targets


def evaluate_file(
    source: SourceFile | str,
    directory: Path | None = None,
    **variables: Value,
) -> list[Target]:
    """Parse and evaluate a whole description file.

    Args:
        source: The file (or text) to evaluate.
        directory: Directory the file describes. Defaults to the directory
            the file was read from, or the current directory for a buffer.
        **variables: Overrides for the default variable table.

    Returns:
        The targets declared by the file, in declaration order.

    Raises:
        ParseError: If the file has syntax errors.
        ExecutionError: If evaluation fails.
    """
    if isinstance(source, str):
        source = SourceFile(source)
    if directory is None:
        directory = source.directory or Path.cwd()

    statements = parse(source)
    scope = Scope.root(directory, **variables)
    return execute(statements, scope)
