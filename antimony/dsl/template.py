# SPDX-License-Identifier: MIT
"""User-defined rule templates.

A template is a rule function whose body is description language rather
than native code:

    template("swift_tool") {
      executable(target_name) {
        sources = sources
        swiftflags = ["-O"]
      }
    }

    swift_tool("fmt") {
      sources = ["main.swift"]
    }

Invoking a template creates a child of the calling scope, binds
``target_name`` and ``invoker_arguments``, evaluates the call's own block
and then the template body in that child.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from antimony.core.errors import ExecutionError
from antimony.dsl.scope import Variable
from antimony.dsl.value import NIL, ListValue, StringValue, Value

if TYPE_CHECKING:
    from antimony.dsl.ast import BlockExpression, FunctionCallExpression
    from antimony.dsl.scope import Scope
    from antimony.dsl.source import SourceRange


@dataclass(frozen=True)
class Template:
    """A named, AST-bodied rule function.

    Attributes:
        name: The name the template is invoked by.
        body: The block evaluated on every invocation.
        defined_at: Where the template was defined.
    """

    name: str
    body: BlockExpression
    defined_at: SourceRange | None = field(default=None, compare=False, repr=False)

    def invoke(
        self, node: FunctionCallExpression, arguments: list[Value], caller: Scope
    ) -> Value:
        """Run the template for one call site.

        Args:
            node: The call expression, including any attached block.
            arguments: The call's arguments, already evaluated.
            caller: The scope the call appears in.

        Returns:
            Nil; templates produce targets, not values.

        Raises:
            ExecutionError: If the call is nested inside an invocation of
                the same template.
        """
        from antimony.dsl.evaluator import evaluate

        if caller.within(self.name):
            raise ExecutionError(f"recursive template '{self.name}'", node.range)

        scope = caller.child()
        if arguments and (name := arguments[0].string) is not None:
            scope[Variable.TARGET_NAME] = StringValue(name)
        scope[Variable.INVOKER_ARGUMENTS] = ListValue.of(arguments)

        if node.scope is not None:
            evaluate(node.scope, scope)
        scope.invoking = self.name
        evaluate(self.body, scope)
        return NIL
