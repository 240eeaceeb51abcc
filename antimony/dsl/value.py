# SPDX-License-Identifier: MIT
"""Runtime values manipulated by the evaluator.

Values are immutable. Scalars compare structurally, lists compare
element by element, and scope references compare by the identity of the
scope they wrap.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from antimony.dsl.scope import Scope


class Value:
    """Base class for runtime values.

    The accessor properties return the Python payload when the value has
    the matching type and None otherwise, so callers can type-check and
    unwrap in one step.
    """

    type_name: ClassVar[str] = "value"

    @property
    def boolean(self) -> bool | None:
        return None

    @property
    def integer(self) -> int | None:
        return None

    @property
    def string(self) -> str | None:
        return None

    @property
    def list(self) -> tuple[Value, ...] | None:
        return None

    @property
    def scope(self) -> Scope | None:
        return None

    def strings(self) -> list[str] | None:
        """Unwrap a list whose elements are all strings."""
        elements = self.list
        if elements is None:
            return None
        strings = [element.string for element in elements]
        if any(string is None for string in strings):
            return None
        return [string for string in strings if string is not None]


@dataclass(frozen=True)
class NilValue(Value):
    type_name: ClassVar[str] = "nil"

    def __str__(self) -> str:
        return "nil"


@dataclass(frozen=True)
class BooleanValue(Value):
    data: bool
    type_name: ClassVar[str] = "boolean"

    @property
    def boolean(self) -> bool | None:
        return self.data

    def __str__(self) -> str:
        return "true" if self.data else "false"


@dataclass(frozen=True)
class IntegerValue(Value):
    data: int
    type_name: ClassVar[str] = "integer"

    @property
    def integer(self) -> int | None:
        return self.data

    def __str__(self) -> str:
        return str(self.data)


@dataclass(frozen=True)
class StringValue(Value):
    data: str
    type_name: ClassVar[str] = "string"

    @property
    def string(self) -> str | None:
        return self.data

    def __str__(self) -> str:
        escaped = self.data.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


@dataclass(frozen=True)
class ListValue(Value):
    data: tuple[Value, ...] = ()
    type_name: ClassVar[str] = "list"

    @classmethod
    def of(cls, values: Iterable[Value]) -> ListValue:
        return cls(tuple(values))

    @classmethod
    def of_strings(cls, strings: Iterable[str]) -> ListValue:
        return cls(tuple(StringValue(string) for string in strings))

    @property
    def list(self) -> tuple[Value, ...] | None:
        return self.data

    def __len__(self) -> int:
        return len(self.data)

    def __str__(self) -> str:
        return "[" + ", ".join(str(value) for value in self.data) + "]"


class ScopeValue(Value):
    """A reference to a Scope (used for configs)."""

    type_name: ClassVar[str] = "scope"

    __slots__ = ("data",)

    def __init__(self, data: Scope) -> None:
        self.data = data

    @property
    def scope(self) -> Scope | None:
        return self.data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScopeValue):
            return NotImplemented
        return self.data is other.data

    def __hash__(self) -> int:
        return id(self.data)

    def __repr__(self) -> str:
        return f"ScopeValue({self.data!r})"

    def __str__(self) -> str:
        return "{ ... }"


NIL = NilValue()
TRUE = BooleanValue(True)
FALSE = BooleanValue(False)


def boolean(value: bool) -> BooleanValue:
    return TRUE if value else FALSE
