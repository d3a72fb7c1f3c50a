"""Graph module providing dependency graph abstractions.

This module contains:
- DependencyGraph[T]: An immutable directed graph with declaration-ordered nodes
- topological_sort: Algorithm for ordering nodes by dependencies
"""

from ._algorithms import topological_sort
from ._dependency_graph import DependencyGraph

__all__ = ["DependencyGraph", "topological_sort"]
