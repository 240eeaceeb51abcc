# SPDX-License-Identifier: MIT
"""The resolved build graph.

A BuildGraph is the result of dependency closure: every target reachable
from the requested roots, keyed by Label. Edges are not stored; they are
recomputed from each target's dependency references, so the graph is
exactly the set of resolved targets.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from antimony.core.label import Label
from antimony.core.target import Target


@dataclass
class BuildGraph:
    """Targets reachable from a set of root labels.

    Attributes:
        root: The workspace root ``//`` refers to.
        roots: The labels the closure was computed from.
        targets: Every resolved target, keyed by label.
        expansions: Number of dependency frontiers that were expanded.
    """

    root: Path
    roots: tuple[Label, ...] = ()
    targets: dict[Label, Target] = field(default_factory=dict)
    expansions: int = 0

    def __contains__(self, label: object) -> bool:
        return label in self.targets

    def __getitem__(self, label: Label) -> Target:
        return self.targets[label]

    def __iter__(self) -> Iterator[Target]:
        """Iterate targets in label order."""
        for label in sorted(self.targets):
            yield self.targets[label]

    def __len__(self) -> int:
        return len(self.targets)

    @property
    def labels(self) -> set[Label]:
        return set(self.targets)

    def dependencies(
        self, target: Target, *, public: bool | None = None
    ) -> list[Target]:
        """Direct dependencies of ``target`` present in the graph.

        Args:
            target: The dependent target.
            public: True for public dependencies only, False for private
                only, None for both (public first).
        """
        labels = target.dependency_labels(self.root)
        if public is not None:
            count = len(target.dependencies.public)
            labels = labels[:count] if public else labels[count:]
        return [self.targets[label] for label in labels if label in self.targets]

    def transitive_dependencies(self, target: Target) -> list[Target]:
        """All targets ``target`` depends on, dependencies before dependents."""
        order: list[Target] = []
        seen: set[Label] = {target.label}
        # Each entry is a target and the dependencies it has left to visit.
        stack = [(target, iter(self.dependencies(target)))]
        while stack:
            node, pending = stack[-1]
            for dependency in pending:
                if dependency.label not in seen:
                    seen.add(dependency.label)
                    stack.append((dependency, iter(self.dependencies(dependency))))
                    break
            else:
                stack.pop()
                if stack:
                    order.append(node)
        return order

    def find_cycle(self) -> list[Label] | None:
        """Find a dependency cycle.

        Returns:
            The labels on the cycle with the first repeated at the end
            (``[a, b, a]``), or None if the graph is acyclic.
        """
        done: set[Label] = set()
        for start in sorted(self.targets):
            if start in done:
                continue
            path = [start]
            on_path = {start}
            pending = [iter(self.targets[start].dependency_labels(self.root))]
            while pending:
                for dependency in pending[-1]:
                    if dependency not in self.targets or dependency in done:
                        continue
                    if dependency in on_path:
                        return path[path.index(dependency) :] + [dependency]
                    path.append(dependency)
                    on_path.add(dependency)
                    labels = self.targets[dependency].dependency_labels(self.root)
                    pending.append(iter(labels))
                    break
                else:
                    pending.pop()
                    label = path.pop()
                    on_path.discard(label)
                    done.add(label)
        return None
