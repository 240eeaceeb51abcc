# SPDX-License-Identifier: MIT
"""Label resolution and dependency closure.

The Resolver is responsible for:
1. Loading a directory's description file on first use and caching the
   targets it declares (directory -> targets)
2. Finding targets by label and caching the result (label -> target)
3. Computing the transitive dependency closure of a set of labels
4. Handing the closure to a generator to write the build file

Everything runs on one asyncio event loop. Only reading a description
file leaves the loop (``asyncio.to_thread``); the caches are mutated on
the loop thread alone, so no locking is needed. Concurrent first requests
for the same directory await one shared task, so every description file
is evaluated at most once per resolver.

Example:
    resolver = Resolver(root)
    graph = asyncio.run(resolver.closure(Label.resolve("//app:app", root)))
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING

from antimony.core.errors import (
    DependencyCycleError,
    MissingDependencyError,
    ResolutionError,
)
from antimony.core.graph import BuildGraph
from antimony.core.label import Label
from antimony.dsl.evaluator import evaluate_file
from antimony.dsl.source import SourceFile

if TYPE_CHECKING:
    from antimony.core.target import Target
    from antimony.dsl.value import Value
    from antimony.generators.generator import Generator

logger = logging.getLogger(__name__)

DEFAULT_BUILD_FILE = "BUILD.gn"


def _normalize(path: Path | str) -> Path:
    return Path(os.path.normpath(os.path.abspath(path)))


class Resolver:
    """Loads description files on demand and resolves labels to targets.

    Attributes:
        root: The workspace root ``//`` refers to.
        build_file: Name of the description file in each directory.
        variables: Overrides for the default variable table.
        loads: Number of times each directory's file was evaluated.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        build_file: str = DEFAULT_BUILD_FILE,
        variables: dict[str, Value] | None = None,
    ) -> None:
        self.root = _normalize(root)
        self.build_file = build_file
        self.variables = dict(variables or {})
        self.loads: Counter[Path] = Counter()
        self._directories: dict[Path, list[Target]] = {}
        self._pending: dict[Path, asyncio.Task[list[Target]]] = {}
        self._targets: dict[Label, Target] = {}

    def label(self, reference: str, directory: Path | str | None = None) -> Label:
        """Resolve a textual reference against this workspace."""
        return Label.resolve(reference, self.root, directory)

    async def load(self, directory: Path | str) -> list[Target]:
        """Targets declared by ``directory``'s description file.

        Raises:
            ResolutionError: If the file cannot be read.
            ParseError: If the file has syntax errors.
            ExecutionError: If evaluating the file fails.
        """
        directory = _normalize(directory)
        if (targets := self._directories.get(directory)) is not None:
            return targets

        task = self._pending.get(directory)
        if task is None:
            task = asyncio.create_task(self._load(directory))
            self._pending[directory] = task
        return await task

    async def _load(self, directory: Path) -> list[Target]:
        path = directory / self.build_file
        try:
            logger.debug("Loading %s", path)
            try:
                source = await asyncio.to_thread(SourceFile.from_path, path)
            except (OSError, UnicodeDecodeError) as e:
                raise ResolutionError(f"cannot read '{path}': {e}") from e

            self.loads[directory] += 1
            targets = evaluate_file(source, directory, **self.variables)
            logger.debug("%s declares %d target(s)", path, len(targets))
            self._directories[directory] = targets
            return targets
        finally:
            del self._pending[directory]

    async def resolve(self, label: Label) -> Target | None:
        """Find the target a label names.

        Returns:
            The target, or None if the label's directory declares no
            target of that name.
        """
        if (target := self._targets.get(label)) is not None:
            return target

        for target in await self.load(label.directory):
            if target.label == label:
                self._targets[label] = target
                return target
        return None

    async def closure(self, *labels: Label, missing_ok: bool = False) -> BuildGraph:
        """Resolve ``labels`` and everything they depend on.

        The closure is computed breadth first: each frontier of dependency
        labels is resolved concurrently and their dependencies form the
        next frontier. Labels already visited are never expanded again, so
        the traversal terminates even when the references form a cycle.

        Args:
            *labels: The root labels.
            missing_ok: Log and skip unknown dependencies instead of
                failing. Unknown roots always fail.

        Raises:
            MissingDependencyError: If a label names no target.
        """
        graph = BuildGraph(self.root, roots=tuple(labels))
        visited: set[Label] = set()
        frontier: list[tuple[Label, Target | None]] = [
            (label, None) for label in labels
        ]

        while frontier:
            pending: list[tuple[Label, Target | None]] = []
            for label, dependent in frontier:
                if label not in visited:
                    visited.add(label)
                    pending.append((label, dependent))

            targets = await asyncio.gather(
                *(self.resolve(label) for label, _ in pending)
            )

            frontier = []
            for (label, dependent), target in zip(pending, targets):
                if target is None:
                    self._missing(label, dependent, missing_ok)
                    continue
                graph.targets[label] = target
                frontier.extend(
                    (dependency, target)
                    for dependency in target.dependency_labels(self.root)
                    if dependency not in visited
                )
            if frontier:
                graph.expansions += 1

        return graph

    def _missing(
        self, label: Label, dependent: Target | None, missing_ok: bool
    ) -> None:
        name = label.format(self.root)
        if dependent is None:
            raise MissingDependencyError(name)
        if not missing_ok:
            raise MissingDependencyError(
                name, dependent.label.format(self.root), dependent.defined_at
            )
        logger.warning(
            "Skipping unknown target '%s' (referenced by '%s')",
            name,
            dependent.label.format(self.root),
        )

    async def build(
        self,
        labels: list[Label],
        output_dir: Path | str,
        generator: Generator | None = None,
    ) -> Path:
        """Resolve ``labels`` and write a build file for them.

        Args:
            labels: The root labels to build.
            output_dir: Directory to write the build file into.
            generator: Generator to use. Defaults to NinjaGenerator.

        Returns:
            Path of the written build file.

        Raises:
            MissingDependencyError: If a label names no target.
            DependencyCycleError: If the targets depend on each other.
            GenerateError: If the build file cannot be written.
        """
        graph = await self.closure(*labels)
        if (cycle := graph.find_cycle()) is not None:
            raise DependencyCycleError(
                [label.format(self.root) for label in cycle],
                graph[cycle[0]].defined_at,
            )

        if generator is None:
            from antimony.generators.ninja import NinjaGenerator

            generator = NinjaGenerator()
        output_dir = _normalize(output_dir)
        return await asyncio.to_thread(generator.generate, graph, output_dir)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self.root)!r})"
