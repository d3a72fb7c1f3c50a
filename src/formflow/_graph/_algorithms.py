"""Graph algorithms for dependency graph operations."""

from collections import deque
from collections.abc import Hashable, Mapping, Sequence
from typing import TypeVar

T = TypeVar("T", bound=Hashable)


def topological_sort(successors: Mapping[T, Sequence[T]]) -> list[T]:
    """Sort a graph topologically (dependencies before dependents).

    Given a graph represented as a mapping from nodes to their successors
    (nodes that depend on them), return nodes in an order where each node
    appears before all nodes that depend on it.

    Ties are broken by declaration order: among nodes that are ready at the
    same time, the one that appears first in ``successors`` (or first in a
    successor list, for nodes that are only targets) comes first. The result
    is therefore the same on every run for the same input.

    Args:
        successors: Mapping from node to sequence of nodes that depend on it.
            An edge (a -> b) means "b depends on a".

    Returns:
        List of nodes in topological order.

    Raises:
        ValueError: If the graph contains a cycle.

    Example:
        >>> # a -> b -> c means c depends on b, b depends on a
        >>> topological_sort({"a": ["b"], "b": ["c"], "c": []})
        ['a', 'b', 'c']

    """
    # dict keeps first-seen order for the tie-break
    indegree: dict[T, int] = {}
    for node, deps in successors.items():
        indegree.setdefault(node, 0)
        for dep in deps:
            indegree[dep] = indegree.get(dep, 0) + 1

    queue = deque(node for node, deg in indegree.items() if deg == 0)
    order: list[T] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for successor in successors.get(node, ()):
            indegree[successor] -= 1
            if indegree[successor] == 0:
                queue.append(successor)

    if len(order) != len(indegree):
        seen = set(order)
        remaining = [node for node in indegree if node not in seen]
        msg = f"Cycle detected in graph among: {remaining}"
        raise ValueError(msg)

    return order
