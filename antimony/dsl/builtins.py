# SPDX-License-Identifier: MIT
"""Builtin rule functions.

Each builtin receives the call expression, its already-evaluated
arguments, and the calling scope. Builtins validate their own arguments;
there is no shared signature layer. Rule builtins (``executable`` and
friends) evaluate the attached block in a child scope and reify a Target
from that child's own bindings.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from antimony.core.errors import ExecutionError
from antimony.core.target import (
    DynamicLibraryTarget,
    ExecutableTarget,
    GroupTarget,
    StaticLibraryTarget,
    Target,
)
from antimony.dsl.scope import Variable
from antimony.dsl.template import Template
from antimony.dsl.value import NIL, ScopeValue, StringValue, Value

if TYPE_CHECKING:
    from antimony.dsl.ast import FunctionCallExpression
    from antimony.dsl.scope import Scope

Builtin = Callable[["FunctionCallExpression", "list[Value]", "Scope"], Value]

BUILTINS: dict[str, Builtin] = {}


def builtin(name: str) -> Callable[[Builtin], Builtin]:
    """Register a function in the builtin table under ``name``."""

    def register(function: Builtin) -> Builtin:
        BUILTINS[name] = function
        return function

    return register


def _plural(count: int) -> str:
    return "argument" if count == 1 else "arguments"


def check_arity(
    name: str, node: FunctionCallExpression, arguments: list[Value], *counts: int
) -> None:
    """Fail unless ``len(arguments)`` is one of ``counts``."""
    if len(arguments) in counts:
        return
    expected = " or ".join(str(count) for count in counts)
    raise ExecutionError(
        f"'{name}' takes {expected} {_plural(counts[-1])}, "
        f"{len(arguments)} provided",
        node.range,
    )


def _string_argument(
    name: str, node: FunctionCallExpression, value: Value
) -> str:
    if value.string is None:
        raise ExecutionError(
            f"'{name}' expects a string argument, got '{value.type_name}'",
            node.range,
        )
    return value.string


def _run_block(node: FunctionCallExpression, scope: Scope) -> None:
    from antimony.dsl.evaluator import evaluate

    if node.scope is not None:
        evaluate(node.scope, scope)


def _declare(
    name: str,
    kind: type[Target],
    node: FunctionCallExpression,
    arguments: list[Value],
    scope: Scope,
) -> Value:
    # Arguments and context are checked before the block runs.
    check_arity(name, node, arguments, 1)
    if scope.importing:
        raise ExecutionError(f"'{name}' is not permitted while importing", node.range)
    if scope.configuring:
        raise ExecutionError(
            f"'{name}' is not permitted while configuring", node.range
        )

    target_name = _string_argument(name, node, arguments[0])
    child = scope.child()
    child[Variable.TARGET_NAME] = StringValue(target_name)
    _run_block(node, child)

    target = kind.reify(child, node.range)
    for existing in scope.collector:
        if existing.label == target.label:
            raise ExecutionError(
                f"duplicate target '{target.name}' "
                f"(first defined at {existing.defined_at})",
                node.range,
            )
    scope.collector.append(target)
    return NIL


@builtin("assert")
def assert_(
    node: FunctionCallExpression, arguments: list[Value], scope: Scope
) -> Value:
    """``assert(condition, message?)``: fail evaluation when false."""
    check_arity("assert", node, arguments, 1, 2)
    condition = arguments[0].boolean
    if condition is None:
        raise ExecutionError(
            f"'assert' expects a boolean condition, got '{arguments[0].type_name}'",
            node.range,
        )
    message = None
    if len(arguments) == 2:
        message = _string_argument("assert", node, arguments[1])
    if not condition:
        raise ExecutionError(
            f"assertion failure: {message}" if message else "assertion failure",
            node.range,
        )
    return NIL


@builtin("config")
def config(node: FunctionCallExpression, arguments: list[Value], scope: Scope) -> Value:
    """``config(name) { ... }``: bind a named set of flags."""
    check_arity("config", node, arguments, 1)
    name = _string_argument("config", node, arguments[0])
    child = scope.child(configuring=True)
    _run_block(node, child)
    scope[name] = ScopeValue(child)
    return NIL


@builtin("executable")
def executable(
    node: FunctionCallExpression, arguments: list[Value], scope: Scope
) -> Value:
    return _declare("executable", ExecutableTarget, node, arguments, scope)


@builtin("group")
def group(node: FunctionCallExpression, arguments: list[Value], scope: Scope) -> Value:
    return _declare("group", GroupTarget, node, arguments, scope)


@builtin("shared_library")
def shared_library(
    node: FunctionCallExpression, arguments: list[Value], scope: Scope
) -> Value:
    return _declare("shared_library", DynamicLibraryTarget, node, arguments, scope)


@builtin("static_library")
def static_library(
    node: FunctionCallExpression, arguments: list[Value], scope: Scope
) -> Value:
    return _declare("static_library", StaticLibraryTarget, node, arguments, scope)


@builtin("template")
def template(
    node: FunctionCallExpression, arguments: list[Value], scope: Scope
) -> Value:
    """``template(name) { body }``: define a user rule function."""
    check_arity("template", node, arguments, 1)
    name = _string_argument("template", node, arguments[0])
    if name in BUILTINS:
        raise ExecutionError(f"cannot redefine builtin '{name}'", node.range)
    if node.scope is None:
        raise ExecutionError(f"template '{name}' has no body", node.range)
    scope.define_template(name, Template(name, node.scope, node.range))
    return NIL
