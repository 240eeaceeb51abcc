# SPDX-License-Identifier: MIT
"""Ninja build file generation.

NinjaWriter is a small append-only writer for the ninja file format:
rules, build edges, pools, includes and defaults. Paths written into
``build``, ``include``, ``subninja`` and ``default`` lines are escaped;
rule names are reduced to characters ninja accepts in identifiers.

NinjaGenerator walks a BuildGraph in label order and emits, for every
target, one rule plus one build edge per toolchain action and a phony
alias named after the target.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from antimony import __version__
from antimony.core.errors import GenerateError
from antimony.core.target import Module
from antimony.generators.generator import BaseGenerator, write_atomic
from antimony.toolchains.swift import SwiftToolchain

if TYPE_CHECKING:
    from antimony.core.graph import BuildGraph
    from antimony.core.target import Target
    from antimony.tools.toolchain import Toolchain

logger = logging.getLogger(__name__)

NINJA_REQUIRED_VERSION = "1.7"


def escape(text: str) -> str:
    """Escape ``$`` in free text such as commands and descriptions."""
    return text.replace("$", "$$")


def escape_path(path: str) -> str:
    """Escape a path for a ``build``, ``include`` or ``default`` line.

    ``$`` is doubled, spaces become ``$ `` and colons become ``$:``.
    """
    return path.replace("$", "$$").replace(" ", "$ ").replace(":", "$:")


def escape_rule_name(name: str) -> str:
    """Make ``name`` a valid ninja identifier."""
    return name.replace("+", "_").replace(" ", "_")


def _as_list(value: str | Iterable[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class NinjaWriter:
    """Builds the text of a ninja file.

    Example:
        writer = NinjaWriter()
        writer.rule("cc", command="cc -c $in -o $out")
        writer.build("main.o", "cc", "main.c")
        writer.write(Path("build.ninja"))
    """

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._rules: set[str] = set()

    def newline(self) -> None:
        self._lines.append("")

    def comment(self, text: str) -> None:
        for line in text.splitlines():
            self._lines.append(f"# {line}".rstrip())

    def variable(
        self,
        key: str,
        value: str | int | Iterable[str] | None,
        indent: int = 0,
    ) -> None:
        if value is None:
            return
        if not isinstance(value, (str, int)):
            value = " ".join(item for item in value if item)
        self._lines.append(f"{'  ' * indent}{key} = {value}")

    def pool(self, name: str, depth: int) -> None:
        self._lines.append(f"pool {name}")
        self.variable("depth", depth, indent=1)

    def rule(
        self,
        name: str,
        command: str,
        description: str | None = None,
        depfile: str | None = None,
        generator: bool = False,
        pool: str | None = None,
        restat: bool = False,
        rspfile: str | None = None,
        rspfile_content: str | None = None,
        deps: str | None = None,
    ) -> str:
        """Write a rule.

        Names that collide after escaping get a numeric suffix.

        Returns:
            The unique escaped rule name, for use in ``build``.
        """
        base = name = escape_rule_name(name)
        suffix = 1
        while name in self._rules:
            suffix += 1
            name = f"{base}_{suffix}"
        self._rules.add(name)
        self._lines.append(f"rule {name}")
        self.variable("command", command, indent=1)
        self.variable("description", description, indent=1)
        self.variable("depfile", depfile, indent=1)
        if generator:
            self.variable("generator", 1, indent=1)
        self.variable("pool", pool, indent=1)
        if restat:
            self.variable("restat", 1, indent=1)
        self.variable("rspfile", rspfile, indent=1)
        self.variable("rspfile_content", rspfile_content, indent=1)
        self.variable("deps", deps, indent=1)
        return name

    def build(
        self,
        outputs: str | Iterable[str],
        rule: str,
        inputs: str | Iterable[str] | None = None,
        implicit: str | Iterable[str] | None = None,
        order_only: str | Iterable[str] | None = None,
        variables: Mapping[str, str | Iterable[str]] | None = None,
        implicit_outputs: str | Iterable[str] | None = None,
        pool: str | None = None,
        dyndep: str | None = None,
    ) -> list[str]:
        """Write a build edge.

        Returns:
            The (unescaped) explicit outputs.
        """
        outputs = _as_list(outputs)
        out = [escape_path(output) for output in outputs]
        if implicit_outputs := _as_list(implicit_outputs):
            out += ["|"] + [escape_path(output) for output in implicit_outputs]

        ins = [escape_path(path) for path in _as_list(inputs)]
        if implicit := _as_list(implicit):
            ins += ["|"] + [escape_path(path) for path in implicit]
        if order_only := _as_list(order_only):
            ins += ["||"] + [escape_path(path) for path in order_only]

        self._lines.append(
            f"build {' '.join(out)}: {' '.join([escape_rule_name(rule), *ins])}"
        )
        self.variable("pool", pool, indent=1)
        if dyndep is not None:
            self.variable("dyndep", escape_path(dyndep), indent=1)
        for key, value in (variables or {}).items():
            self.variable(key, value, indent=1)
        return outputs

    def phony(self, output: str, outputs: str | Iterable[str]) -> list[str]:
        """Write a phony edge aliasing ``outputs`` as ``output``."""
        return self.build(output, "phony", outputs)

    def include(self, path: str) -> None:
        self._lines.append(f"include {escape_path(path)}")

    def subninja(self, path: str) -> None:
        self._lines.append(f"subninja {escape_path(path)}")

    def default(self, paths: str | Iterable[str]) -> None:
        paths = _as_list(paths)
        if paths:
            self._lines.append(f"default {' '.join(escape_path(p) for p in paths)}")

    def getvalue(self) -> str:
        return "\n".join(self._lines) + "\n"

    def write(self, path: Path | str) -> None:
        """Write the file atomically.

        Raises:
            GenerateError: If the file cannot be written.
        """
        try:
            write_atomic(Path(path), self.getvalue())
        except OSError as e:
            raise GenerateError(f"cannot write '{path}': {e}") from e


class NinjaGenerator(BaseGenerator):
    """Generator that produces build.ninja files.

    Attributes:
        toolchain: Plans the actions for each target.
    """

    def __init__(self, toolchain: Toolchain | None = None) -> None:
        super().__init__("ninja", "build.ninja")
        self.toolchain: Toolchain = toolchain or SwiftToolchain()

    @staticmethod
    def alias(target: Target, root: Path) -> str:
        """The phony name that builds a target.

        Targets declared in the workspace root are aliased by name alone;
        others by ``relative/dir:name``.
        """
        if target.label.directory == root:
            return target.name
        label = target.label.format(root)
        return label[2:] if label.startswith("//") else label

    def render(self, graph: BuildGraph, output_dir: Path) -> str:
        writer = NinjaWriter()
        writer.comment(f"Generated by antimony {__version__}; do not edit.")
        writer.variable("ninja_required_version", NINJA_REQUIRED_VERSION)
        writer.variable("builddir", ".")
        writer.newline()

        producers: dict[str, Target] = {}
        for target in graph:
            self._emit(writer, target, graph, producers)

        writer.default(
            [
                self.alias(graph[label], graph.root)
                for label in graph.roots
                if label in graph
            ]
        )
        return writer.getvalue()

    def _emit(
        self,
        writer: NinjaWriter,
        target: Target,
        graph: BuildGraph,
        producers: dict[str, Target],
    ) -> None:
        root = graph.root
        alias = self.alias(target, root)
        writer.comment(f"{target.target_type} {target.label.format(root)}")

        if not isinstance(target, Module):
            dependencies = [self.alias(dep, root) for dep in graph.dependencies(target)]
            writer.phony(alias, dependencies)
            writer.newline()
            return

        token = self.toolchain.token(target, root).replace("/", "_")
        outputs: tuple[str, ...] = ()
        for index, action in enumerate(self.toolchain.actions(target, graph)):
            for output in action.outputs:
                if (other := producers.setdefault(output, target)) is not target:
                    raise GenerateError(
                        f"'{output}' is produced by both "
                        f"'{other.label.format(root)}' and "
                        f"'{target.label.format(root)}'",
                        target.defined_at,
                    )
            rule = writer.rule(
                f"{token}_{action.kind.value}_{index}",
                command=escape(action.command_line),
                description=escape(action.description),
            )
            outputs = tuple(
                writer.build(
                    action.outputs, rule, action.inputs, implicit=action.implicit_inputs
                )
            )
            logger.debug("%s: %s -> %s", alias, action.kind.value, ", ".join(outputs))
        writer.phony(alias, outputs)
        writer.newline()
