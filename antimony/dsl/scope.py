# SPDX-License-Identifier: MIT
"""Lexical scopes for description file evaluation.

A Scope is one node in a tree of environments. Lookups walk up the
parent chain; assignments always bind in the scope they are made in.
Every scope created while evaluating one file shares that file's
TargetCollector, so rule functions in nested blocks all append to the
same list.
"""

from __future__ import annotations

import platform
import sys
from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from antimony import __version__
from antimony.dsl.value import StringValue, Value

if TYPE_CHECKING:
    from antimony.core.target import Target
    from antimony.dsl.template import Template


class Variable(str, Enum):
    """Well-known variable names."""

    # Platform description, seeded into every root scope.
    ANTIMONY_VERSION = "antimony_version"
    BUILD_CPU = "build_cpu"
    BUILD_OS = "build_os"
    HOST_CPU = "host_cpu"
    HOST_OS = "host_os"
    TARGET_CPU = "target_cpu"
    TARGET_OS = "target_os"

    # Target attributes, read from a rule's block.
    CONFIGS = "configs"
    DEFINES = "defines"
    DEPS = "deps"
    LIBS = "libs"
    MODULE_NAME = "module_name"
    OUTPUT_EXTENSION = "output_extension"
    OUTPUT_NAME = "output_name"
    PUBLIC_DEPS = "public_deps"
    SOURCES = "sources"
    SWIFTFLAGS = "swiftflags"
    TARGET_NAME = "target_name"

    # Template invocation.
    INVOKER_ARGUMENTS = "invoker_arguments"

    def __str__(self) -> str:
        return self.value


def host_cpu() -> str:
    """Normalised name of the CPU architecture we are running on."""
    machine = platform.machine().lower()
    if machine in ("arm64", "aarch64"):
        return "arm64"
    if machine in ("x86_64", "amd64", "x64"):
        return "x86_64"
    return machine


def host_os() -> str:
    """Normalised name of the operating system we are running on."""
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def default_variables() -> list[tuple[Variable, Value]]:
    """The ordered table of variables every root scope starts with."""
    cpu = StringValue(host_cpu())
    os_name = StringValue(host_os())
    return [
        (Variable.ANTIMONY_VERSION, StringValue(__version__)),
        (Variable.BUILD_CPU, cpu),
        (Variable.BUILD_OS, os_name),
        (Variable.HOST_CPU, cpu),
        (Variable.HOST_OS, os_name),
        (Variable.TARGET_CPU, cpu),
        (Variable.TARGET_OS, os_name),
    ]


class TargetCollector:
    """Append-only list of targets declared while evaluating one file."""

    def __init__(self) -> None:
        self._targets: list[Target] = []

    def append(self, target: Target) -> None:
        self._targets.append(target)

    @property
    def targets(self) -> list[Target]:
        return list(self._targets)

    def __iter__(self) -> Iterator[Target]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)


class Scope:
    """A lexical environment.

    Attributes:
        parent: The enclosing scope, or None for a root scope.
        directory: Directory of the description file being evaluated.
        collector: Targets declared anywhere in this scope tree.
        importing: An import is being processed; targets are not permitted.
        configuring: A configuration is being built; targets are not permitted.
        invoking: Name of the template whose invocation created this scope.
    """

    def __init__(
        self,
        directory: Path,
        *,
        parent: Scope | None = None,
        collector: TargetCollector | None = None,
        importing: bool = False,
        configuring: bool = False,
    ) -> None:
        self.parent = parent
        self.directory = Path(directory)
        if collector is None:
            collector = parent.collector if parent is not None else TargetCollector()
        self.collector = collector
        self.importing = importing
        self.configuring = configuring
        self.invoking: str | None = None
        self._values: dict[str, Value] = {}
        self._templates: dict[str, Template] = {}

    @classmethod
    def root(cls, directory: Path, **variables: Value) -> Scope:
        """Create a root scope seeded with the default variable table.

        Keyword arguments override individual defaults.
        """
        scope = cls(directory)
        for variable, value in default_variables():
            scope[variable] = value
        for name, value in variables.items():
            scope[name] = value
        return scope

    def child(self, directory: Path | None = None, **flags: bool) -> Scope:
        """Create a child scope sharing this scope's collector and flags."""
        return Scope(
            directory if directory is not None else self.directory,
            parent=self,
            collector=self.collector,
            importing=flags.get("importing", self.importing),
            configuring=flags.get("configuring", self.configuring),
        )

    def lookup(self, name: str) -> Value | None:
        """Find a binding, walking up the parent chain."""
        name = str(name)
        scope: Scope | None = self
        while scope is not None:
            value = scope._values.get(name)
            if value is not None:
                return value
            scope = scope.parent
        return None

    def local(self, name: str) -> Value | None:
        """Find a binding in this scope only."""
        return self._values.get(str(name))

    def bindings(self) -> dict[str, Value]:
        """A copy of this scope's own bindings."""
        return dict(self._values)

    def define_template(self, name: str, template: Template) -> None:
        self._templates[name] = template

    def template(self, name: str) -> Template | None:
        name = str(name)
        scope: Scope | None = self
        while scope is not None:
            template = scope._templates.get(name)
            if template is not None:
                return template
            scope = scope.parent
        return None

    def within(self, template: str) -> bool:
        """Whether an invocation of ``template`` encloses this scope."""
        scope: Scope | None = self
        while scope is not None:
            if scope.invoking == template:
                return True
            scope = scope.parent
        return False

    def __getitem__(self, name: str) -> Value:
        value = self.lookup(str(name))
        if value is None:
            raise KeyError(name)
        return value

    def __setitem__(self, name: str, value: Value) -> None:
        self._values[str(name)] = value

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(str(name)) is not None

    def __repr__(self) -> str:
        return f"Scope({str(self.directory)!r}, {sorted(self._values)})"
