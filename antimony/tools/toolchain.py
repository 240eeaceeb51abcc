# SPDX-License-Identifier: MIT
"""Toolchain protocol and base implementation.

A Toolchain turns a resolved target into the ordered list of build
actions that produce it. It works in two steps:

1. ``invocation(target, graph)`` builds the flat compiler argument list
   for the target (module name, output mode and path, search paths for
   dependency modules, definitions, libraries, sources and extra flags).
2. ``plan(arguments, objdir)`` parses such a list and splits it into
   actions (compile, emit-module, link, ...), each with its inputs,
   outputs and command line.

Paths produced by a toolchain are relative to the build directory, except
for sources, which stay absolute.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from antimony.core.target import ExecutableTarget, Module, StaticLibraryTarget

if TYPE_CHECKING:
    from antimony.core.graph import BuildGraph
    from antimony.core.target import Target


class ActionKind(Enum):
    COMPILE = "compile"
    EMIT_MODULE = "emit-module"
    MERGE_MODULE = "merge-module"
    LINK = "link"
    OTHER = "other"


def quote(argument: str) -> str:
    """Wrap an argument containing a space in double quotes."""
    if " " not in argument:
        return argument
    return f'"{argument}"'


@dataclass(frozen=True)
class BuildAction:
    """One step of building a target.

    Attributes:
        kind: What the action does.
        description: Human readable summary shown while building.
        inputs: Files the action reads.
        outputs: Files the action writes.
        command: The command line, one argument per element.
        implicit_inputs: Files that must be up to date first but do not
            appear in the command's input list.
    """

    kind: ActionKind
    description: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]
    command: tuple[str, ...]
    implicit_inputs: tuple[str, ...] = ()

    @property
    def command_line(self) -> str:
        return " ".join(quote(argument) for argument in self.command)


@runtime_checkable
class Toolchain(Protocol):
    """Protocol for toolchains."""

    @property
    def name(self) -> str:
        """Toolchain name (e.g., 'swift')."""
        ...

    def invocation(self, target: Module, graph: BuildGraph) -> list[str]:
        """The flat compiler argument list for a target.

        Args:
            target: The target to build.
            graph: The resolved graph the target belongs to.
        """
        ...

    def plan(self, arguments: list[str], objdir: str) -> list[BuildAction]:
        """Split an invocation into ordered build actions.

        Args:
            arguments: An argument list produced by ``invocation``. Anything
                after a ``--`` separator is a user flag, passed through
                without option parsing.
            objdir: Directory for intermediate files.
        """
        ...

    def actions(self, target: Target, graph: BuildGraph) -> list[BuildAction]:
        """All build actions for a target, in order."""
        ...


class BaseToolchain(ABC):
    """Abstract base class for toolchains.

    Provides the build directory layout and the generic parts of an
    invocation. Subclasses supply the output mode flags and the planner.

    Layout, relative to the build directory:
        ``<token>.dir/``  intermediate files of one target
        ``bin/``          executables and shared libraries
        ``lib/``          static libraries
    """

    def __init__(self, name: str, program: str) -> None:
        """Initialize a toolchain.

        Args:
            name: Toolchain name.
            program: The compiler driver to invoke.
        """
        self._name = name
        self.program = program

    @property
    def name(self) -> str:
        return self._name

    @staticmethod
    def token(target: Target, root: Path) -> str:
        """A name for the target that is unique within the workspace."""
        try:
            relative = target.label.directory.relative_to(root).as_posix()
        except ValueError:
            relative = target.label.directory.as_posix().lstrip("/")
        if relative == ".":
            return target.name
        return f"{relative}/{target.name}"

    def objdir(self, target: Target, root: Path) -> str:
        return f"{self.token(target, root)}.dir"

    def output(self, target: Module, root: Path) -> str:
        """Path of the target's final output file."""
        directory = "lib" if isinstance(target, StaticLibraryTarget) else "bin"
        return f"{directory}/{target.output_file}"

    def module_dir(self, target: Module, root: Path) -> str:
        """Directory holding the target's compiled module interface."""
        return f"{self.objdir(target, root)}/swift"

    @abstractmethod
    def mode(self, target: Module) -> list[str]:
        """Flags selecting what kind of output the target produces."""
        ...

    def invocation(self, target: Module, graph: BuildGraph) -> list[str]:
        root = graph.root
        arguments = [self.program, "-module-name", target.module_name]
        arguments += self.mode(target)
        arguments += ["-o", self.output(target, root)]

        dependencies = [
            dependency
            for dependency in graph.transitive_dependencies(target)
            if isinstance(dependency, Module)
            and not isinstance(dependency, ExecutableTarget)
        ]
        for dependency in dependencies:
            arguments += ["-I", self.module_dir(dependency, root)]
        for define in target.defines:
            arguments += ["-D", define]
        for lib in target.libs:
            arguments += ["-l", lib]
        # Dependents are listed before their dependencies.
        arguments += [
            self.output(dependency, root) for dependency in reversed(dependencies)
        ]
        arguments += target.sources
        if target.swiftflags:
            # Passed through verbatim; never parsed as toolchain options.
            arguments += ["--", *target.swiftflags]
        return arguments

    @abstractmethod
    def plan(self, arguments: list[str], objdir: str) -> list[BuildAction]:
        ...

    def actions(self, target: Target, graph: BuildGraph) -> list[BuildAction]:
        if not isinstance(target, Module):
            return []
        objdir = self.objdir(target, graph.root)
        return self.plan(self.invocation(target, graph), objdir)

    def __repr__(self) -> str:
        program = os.path.basename(self.program)
        return f"{self.__class__.__name__}({self.name!r}, {program!r})"
