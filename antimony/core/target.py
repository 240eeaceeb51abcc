# SPDX-License-Identifier: MIT
"""Target records produced by evaluating description files.

A Target represents something that can be built (a library, an
executable) or a named group of other targets. Targets are created by
"reifying" the scope in which a rule's block was evaluated: the block's
own variable bindings become the target's attributes.

Dependencies are kept as the label strings written in the description
file; the resolver turns them into Labels relative to the directory of
the declaring target.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Literal

from antimony.core.errors import ExecutionError, ResolutionError
from antimony.core.label import Label
from antimony.dsl.scope import Variable

if TYPE_CHECKING:
    from antimony.dsl.scope import Scope
    from antimony.dsl.source import SourceRange

# Valid target types
TargetType = Literal[
    "executable",
    "static_library",
    "shared_library",
    "group",
]


@dataclass(frozen=True)
class Dependencies:
    """Dependency label strings, split by visibility.

    Public dependencies propagate to dependents (their modules and
    libraries are visible to anything depending on this target); private
    ones are used by this target only.
    """

    private: tuple[str, ...] = ()
    public: tuple[str, ...] = ()

    def __iter__(self) -> Iterator[str]:
        yield from self.public
        yield from self.private

    def __len__(self) -> int:
        return len(self.public) + len(self.private)


def _string(
    scope: Scope, variable: Variable, at: SourceRange | None, *, local: bool = True
) -> str | None:
    value = scope.local(variable) if local else scope.lookup(variable)
    if value is None:
        return None
    if value.string is None:
        raise ExecutionError(f"'{variable}' is not of type 'string'", at)
    return value.string


def _strings(scope: Scope, variable: Variable, at: SourceRange | None) -> list[str]:
    value = scope.local(variable)
    if value is None:
        return []
    strings = value.strings()
    if strings is None:
        raise ExecutionError(f"'{variable}' is not of type '[string]'", at)
    return strings


def _config_strings(
    scope: Scope, variable: Variable, at: SourceRange | None
) -> list[str]:
    """Collect ``variable`` from every config listed in ``configs``."""
    value = scope.local(Variable.CONFIGS)
    if value is None:
        return []
    elements = value.list
    if elements is None or any(element.scope is None for element in elements):
        raise ExecutionError(f"'{Variable.CONFIGS}' is not of type '[scope]'", at)
    strings: list[str] = []
    for element in elements:
        assert element.scope is not None
        strings.extend(_strings(element.scope, variable, at))
    return strings


def _target_name(scope: Scope, at: SourceRange | None) -> str:
    name = _string(scope, Variable.TARGET_NAME, at)
    if name is None:
        raise ExecutionError(f"'{Variable.TARGET_NAME}' is not defined", at)
    return name


@dataclass(frozen=True, kw_only=True)
class Target:
    """A named build target.

    Attributes:
        label: The unique label of the target.
        dependencies: Dependency label strings as written.
        defined_at: Where the target was declared.
    """

    target_type: ClassVar[TargetType]

    label: Label
    dependencies: Dependencies = field(default_factory=Dependencies)
    defined_at: SourceRange | None = field(default=None, compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.label.name

    def dependency_labels(self, root: Path) -> list[Label]:
        """Resolve the dependency references, public ones first.

        ``//`` references are rooted at ``root``; others are relative to
        the directory this target was declared in.

        Raises:
            ResolutionError: If a reference is malformed.
        """
        labels = []
        for reference in self.dependencies:
            try:
                labels.append(Label.resolve(reference, root, self.label.directory))
            except ResolutionError as e:
                raise ResolutionError(e.message, self.defined_at) from e
        return labels

    @classmethod
    def reify(cls, scope: Scope, at: SourceRange | None = None) -> Target:
        """Build a target from the bindings of an evaluated rule block."""
        raise NotImplementedError

    def attributes(self) -> list[tuple[str, list[str]]]:
        """List-valued attributes, in the order they are printed."""
        return [
            (str(Variable.PUBLIC_DEPS), list(self.dependencies.public)),
            (str(Variable.DEPS), list(self.dependencies.private)),
        ]

    def format(self) -> str:
        """Render the target back into description file syntax."""
        lines = [f'{self.target_type}("{self.name}") {{']
        for name, values in self.attributes():
            if not values:
                continue
            lines.append(f"  {name} = [")
            lines.extend(f'    "{value}",' for value in values)
            lines.append("  ]")
        lines.append("}")
        return "\n".join(lines)


@dataclass(frozen=True, kw_only=True)
class GroupTarget(Target):
    """A named collection of other targets; produces no output itself."""

    target_type = "group"

    @classmethod
    def reify(cls, scope: Scope, at: SourceRange | None = None) -> GroupTarget:
        name = _target_name(scope, at)
        return cls(
            label=Label(scope.directory, name),
            dependencies=Dependencies(
                private=tuple(_strings(scope, Variable.DEPS, at)),
                public=tuple(_strings(scope, Variable.PUBLIC_DEPS, at)),
            ),
            defined_at=at,
        )


@dataclass(frozen=True, kw_only=True)
class Module(Target):
    """A target compiled from sources into a single output file.

    Attributes:
        module_name: Name of the compiled module (defaults to the target name).
        output_name: Output file name without extension.
        output_extension: Output file extension, possibly empty.
        sources: Absolute source file paths.
        swiftflags: Extra compiler flags.
        defines: Conditional compilation definitions.
        libs: System libraries to link.
    """

    # (windows, everything else)
    default_extensions: ClassVar[tuple[str, str]]

    module_name: str
    output_name: str
    output_extension: str
    sources: tuple[str, ...] = ()
    swiftflags: tuple[str, ...] = ()
    defines: tuple[str, ...] = ()
    libs: tuple[str, ...] = ()

    @property
    def output_file(self) -> str:
        if not self.output_extension:
            return self.output_name
        return f"{self.output_name}.{self.output_extension}"

    @classmethod
    def reify(cls, scope: Scope, at: SourceRange | None = None) -> Module:
        name = _target_name(scope, at)
        host = _string(scope, Variable.HOST_OS, at, local=False)
        if host is None:
            raise ExecutionError(f"'{Variable.HOST_OS}' is not defined", at)

        extension = _string(scope, Variable.OUTPUT_EXTENSION, at)
        if extension is None:
            windows, other = cls.default_extensions
            extension = windows if host == "windows" else other

        sources = tuple(
            os.path.normpath(scope.directory / source)
            for source in _strings(scope, Variable.SOURCES, at)
        )

        return cls(
            label=Label(scope.directory, name),
            dependencies=Dependencies(
                private=tuple(_strings(scope, Variable.DEPS, at)),
                public=tuple(_strings(scope, Variable.PUBLIC_DEPS, at)),
            ),
            defined_at=at,
            module_name=_string(scope, Variable.MODULE_NAME, at) or name,
            output_name=_string(scope, Variable.OUTPUT_NAME, at) or name,
            output_extension=extension,
            sources=sources,
            swiftflags=tuple(
                _config_strings(scope, Variable.SWIFTFLAGS, at)
                + _strings(scope, Variable.SWIFTFLAGS, at)
            ),
            defines=tuple(
                _config_strings(scope, Variable.DEFINES, at)
                + _strings(scope, Variable.DEFINES, at)
            ),
            libs=tuple(
                _config_strings(scope, Variable.LIBS, at)
                + _strings(scope, Variable.LIBS, at)
            ),
        )

    def attributes(self) -> list[tuple[str, list[str]]]:
        sources = []
        for source in self.sources:
            try:
                relative = Path(source).relative_to(self.label.directory)
                sources.append(relative.as_posix())
            except ValueError:
                sources.append(source)
        return [
            (str(Variable.SOURCES), sources),
            (str(Variable.DEFINES), list(self.defines)),
            (str(Variable.SWIFTFLAGS), list(self.swiftflags)),
            (str(Variable.LIBS), list(self.libs)),
            *super().attributes(),
        ]


@dataclass(frozen=True, kw_only=True)
class StaticLibraryTarget(Module):
    target_type = "static_library"
    default_extensions = ("lib", "a")


@dataclass(frozen=True, kw_only=True)
class DynamicLibraryTarget(Module):
    target_type = "shared_library"
    default_extensions = ("dll", "so")


@dataclass(frozen=True, kw_only=True)
class ExecutableTarget(Module):
    target_type = "executable"
    default_extensions = ("exe", "")
