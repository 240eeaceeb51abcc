# SPDX-License-Identifier: MIT
"""Tests for antimony.core.graph."""

from pathlib import Path

from antimony.core.graph import BuildGraph
from antimony.core.label import Label
from antimony.core.target import Dependencies, GroupTarget

ROOT = Path("/workspace")

# Deeper than the default interpreter recursion limit.
CHAIN = 5000


def group(name: str, *deps: str, public: tuple[str, ...] = ()) -> GroupTarget:
    return GroupTarget(
        label=Label(ROOT, name),
        dependencies=Dependencies(private=deps, public=public),
    )


def graph_of(*targets: GroupTarget) -> BuildGraph:
    return BuildGraph(ROOT, targets={target.label: target for target in targets})


def chain(length: int, *, closed: bool = False) -> BuildGraph:
    """Groups t0 -> t1 -> ... -> t<length - 1>, optionally back to t0."""
    names = [f"t{i:05}" for i in range(length)]
    targets = [group(name, f":{after}") for name, after in zip(names, names[1:])]
    targets.append(group(names[-1], *([f":{names[0]}"] if closed else [])))
    return graph_of(*targets)


class TestBuildGraph:
    def test_container_protocol(self):
        """Test membership, lookup and length."""
        a = group("a")
        graph = graph_of(a)
        assert Label(ROOT, "a") in graph
        assert Label(ROOT, "b") not in graph
        assert graph[Label(ROOT, "a")] is a
        assert len(graph) == 1
        assert graph.labels == {Label(ROOT, "a")}

    def test_iterates_in_label_order(self):
        graph = graph_of(group("c"), group("a"), group("b"))
        assert [target.name for target in graph] == ["a", "b", "c"]

    def test_dependencies(self):
        """Test that public dependencies come first and missing ones are skipped."""
        graph = graph_of(
            group("app", ":priv", ":missing", public=(":pub",)),
            group("priv"),
            group("pub"),
        )
        app = graph[Label(ROOT, "app")]
        assert [t.name for t in graph.dependencies(app)] == ["pub", "priv"]
        assert [t.name for t in graph.dependencies(app, public=True)] == ["pub"]
        assert [t.name for t in graph.dependencies(app, public=False)] == ["priv"]

    def test_transitive_dependencies(self):
        """Test that shared dependencies appear once, before their dependents."""
        graph = graph_of(
            group("app", ":ui", ":net"),
            group("ui", ":base"),
            group("net", ":base"),
            group("base"),
        )
        order = graph.transitive_dependencies(graph[Label(ROOT, "app")])
        names = [target.name for target in order]
        assert names == ["base", "ui", "net"]

    def test_transitive_dependencies_excludes_self_on_cycle(self):
        """Test that a target is never its own transitive dependency."""
        graph = graph_of(group("a", ":b"), group("b", ":a"))
        order = graph.transitive_dependencies(graph[Label(ROOT, "a")])
        assert [target.name for target in order] == ["b"]

    def test_transitive_dependencies_of_long_chain(self):
        """Test that a chain longer than the recursion limit is walked."""
        graph = chain(CHAIN)
        order = graph.transitive_dependencies(graph[Label(ROOT, "t00000")])
        assert len(order) == CHAIN - 1
        assert order[0].name == f"t{CHAIN - 1:05}"
        assert order[-1].name == "t00001"


class TestFindCycle:
    def test_acyclic(self):
        """Test that a simple chain has no cycle."""
        graph = graph_of(group("a", ":b"), group("b", ":c"), group("c"))
        assert graph.find_cycle() is None

    def test_diamond_is_acyclic(self):
        """Test that reaching a target twice is not a cycle."""
        graph = graph_of(
            group("a", ":b", ":c"), group("b", ":d"), group("c", ":d"), group("d")
        )
        assert graph.find_cycle() is None

    def test_cycle(self):
        """Test that the cycle is reported with its first label repeated."""
        graph = graph_of(group("a", ":b"), group("b", ":c"), group("c", ":a"))
        cycle = graph.find_cycle()
        assert cycle == [
            Label(ROOT, "a"),
            Label(ROOT, "b"),
            Label(ROOT, "c"),
            Label(ROOT, "a"),
        ]

    def test_cycle_reachable_from_acyclic_prefix(self):
        graph = graph_of(group("a", ":b"), group("b", ":c"), group("c", ":b"))
        assert graph.find_cycle() == [
            Label(ROOT, "b"),
            Label(ROOT, "c"),
            Label(ROOT, "b"),
        ]

    def test_self_dependency(self):
        """Test that a target depending on itself is a cycle of one."""
        graph = graph_of(group("a", ":a"))
        assert graph.find_cycle() == [Label(ROOT, "a"), Label(ROOT, "a")]

    def test_ignores_missing_targets(self):
        """Test that edges to labels outside the graph are ignored."""
        graph = graph_of(group("a", ":gone"))
        assert graph.find_cycle() is None

    def test_long_acyclic_chain(self):
        """Test that a chain longer than the recursion limit has no cycle."""
        assert chain(CHAIN).find_cycle() is None

    def test_long_cycle(self):
        cycle = chain(CHAIN, closed=True).find_cycle()
        assert cycle is not None
        assert len(cycle) == CHAIN + 1
        assert cycle[0] == cycle[-1] == Label(ROOT, "t00000")
