"""Generic dependency graph abstraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ._algorithms import topological_sort

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class DependencyGraph(Generic[T]):
    """A directed graph representing dependencies between nodes.

    This is a pure, immutable data structure generic over the node type T
    (e.g., ref-path strings, workflow node ids). ``successors[a] = (b,)``
    means "b depends on a".

    Nodes and adjacency lists keep the order in which they were first
    declared, so every ordering derived from the graph is reproducible.

    Attributes:
        _successors: Mapping from node to nodes that depend on it.

    """

    _successors: dict[T, tuple[T, ...]] = field(default_factory=dict)

    @classmethod
    def from_edges(
        cls,
        edges: list[tuple[T, T]],
        nodes: list[T] | None = None,
    ) -> DependencyGraph[T]:
        """Build a graph from a list of (source, target) edges.

        An edge (a, b) means "b depends on a" (a -> b in the DAG).
        Duplicate edges are collapsed.

        Args:
            edges: List of (source, target) tuples.
            nodes: Optional nodes to declare up front, including isolated ones.
                Declared nodes come first in the tie-break order.

        Returns:
            A new DependencyGraph instance.

        Example:
            >>> # b depends on a, c depends on b
            >>> graph = DependencyGraph.from_edges([("b", "c"), ("a", "b")])
            >>> graph.topological_order()
            ['a', 'b', 'c']

        """
        successors: dict[T, list[T]] = {}

        for node in nodes or ():
            successors.setdefault(node, [])

        for src, dst in edges:
            successors.setdefault(src, [])
            successors.setdefault(dst, [])
            if dst not in successors[src]:
                successors[src].append(dst)

        return cls(_successors={k: tuple(v) for k, v in successors.items()})

    def topological_order(self) -> list[T]:
        """Return nodes in topological order (dependencies before dependents).

        Returns:
            List of nodes where each node appears before all nodes that depend on it.

        Raises:
            ValueError: If the graph contains a cycle.

        """
        return topological_sort(self._successors)
