"""Evaluation order for node preconditions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from formflow._errors import ConfigError
from formflow._graph import DependencyGraph
from formflow._path import PREFIX, RELATIVE, WILDCARD, is_ref_path, parse_ref_path

if TYPE_CHECKING:
    from collections.abc import Generator

    from formflow._config import ConfigIndex

logger = logging.getLogger(__name__)


def collect_ref_paths(expr: Any) -> Generator[str]:
    """Yield every ref-path string found anywhere inside an expression.

    Mapping values and list items are searched; mapping keys are not.
    """
    if is_ref_path(expr):
        yield expr
    elif isinstance(expr, dict):
        for value in expr.values():
            yield from collect_ref_paths(value)
    elif isinstance(expr, list):
        for item in expr:
            yield from collect_ref_paths(item)


def _governing_pattern(ref_path: str) -> str:
    """Normalise a reference so that it names the node whose data it reads.

    Relative ``^`` tokens become ``*``: ``$.people.^.age`` reads data governed
    by the ``$.people.*.age`` node.
    """
    tokens = parse_ref_path(ref_path)
    return PREFIX + ".".join(WILDCARD if token == RELATIVE else token for token in tokens)


def order_preconditions(index: ConfigIndex) -> list[str]:
    """Order node paths so that referenced paths come before their dependents.

    For a node at path P whose preconditions reference R, R is ordered
    before P. Every node carrying preconditions appears in the result.
    Independent nodes keep configuration order.

    Args:
        index: The configuration index.

    Returns:
        Ref-path patterns in evaluation order.

    Raises:
        ConfigError: If a ref-path is malformed or the references form a cycle.

    """
    declared: list[str] = []
    edges: list[tuple[str, str]] = []

    for config_node in index.iter_config_nodes():
        preconditions = config_node.get("preconditions")
        if not preconditions:
            continue
        path = config_node.get("path")
        if path is None:
            logger.warning("Config node %r has preconditions but no path; it is never pruned", config_node.get("id"))
            continue
        parse_ref_path(path)
        declared.append(path)
        for ref_path in collect_ref_paths(preconditions):
            dependency = _governing_pattern(ref_path)
            declared.append(dependency)
            edges.append((dependency, path))

    graph = DependencyGraph.from_edges(edges, nodes=declared)
    try:
        order = graph.topological_order()
    except ValueError as e:
        msg = f"Precondition dependencies contain a cycle: {e}"
        raise ConfigError(msg) from e

    logger.debug("Precondition order: %s", order)
    return order
