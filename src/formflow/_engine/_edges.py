"""Activation state of workflow nodes and edges."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from formflow._config import END, START, TERMINAL_NODES, Edge, NodeType
from formflow._errors import ConfigError
from formflow._graph import DependencyGraph
from formflow._resolver import resolve_or_none

if TYPE_CHECKING:
    from formflow._config import ConfigIndex
    from formflow._functions import FunctionContext

    from ._validation import SectionState

logger = logging.getLogger(__name__)


class EdgeStatus(StrEnum):
    """Activation of a workflow node or edge."""

    ACTIVE = auto()
    INACTIVE = auto()


class EdgeState(Edge):
    """An edge together with its activation status."""

    status: EdgeStatus


@dataclass(frozen=True, slots=True)
class NodeState:
    """Evaluation result of one workflow node.

    Attributes:
        status: Whether the node is reached.
        output: The resolved output of a decision node, None otherwise.

    """

    status: EdgeStatus
    output: Any = None


def node_evaluation_order(edges: tuple[Edge, ...] | list[Edge]) -> list[str]:
    """Order workflow node ids so that every node follows its predecessors.

    ``START -> END`` is always part of the graph. Independent nodes keep the
    order in which edges declare them.

    Raises:
        ConfigError: If the workflow graph contains a cycle.

    """
    graph = DependencyGraph.from_edges([(START, END)] + [(edge.from_, edge.to) for edge in edges])
    try:
        return graph.topological_order()
    except ValueError as e:
        msg = f"Workflow graph contains a cycle: {e}"
        raise ConfigError(msg) from e


def evaluate_node_states(
    data: Any,
    index: ConfigIndex,
    context: FunctionContext,
    section_states: dict[str, SectionState],
    order: list[str],
    errors: list[tuple[str, str]] | None = None,
) -> dict[str, NodeState]:
    """Evaluate workflow nodes in order, stopping at the first invalid section.

    Once an input section is invalid (the frontier), every later node in the
    order is inactive without its rule being evaluated.
    """
    states: dict[str, NodeState] = {}
    frontier_found = False

    for node_id in order:
        if node_id in TERMINAL_NODES:
            states[node_id] = NodeState(EdgeStatus.ACTIVE)
            continue
        if frontier_found:
            states[node_id] = NodeState(EdgeStatus.INACTIVE)
            continue

        node = index.get_workflow_node(node_id)
        if node is None:
            logger.warning("Workflow node '%s' is not configured; treating it as inactive", node_id)
            states[node_id] = NodeState(EdgeStatus.INACTIVE)
            continue

        match node.type:
            case NodeType.INPUT_SECTION:
                section_state = section_states.get(node.id)
                if section_state is not None and section_state.is_valid:
                    states[node_id] = NodeState(EdgeStatus.ACTIVE)
                else:
                    logger.debug("Frontier found at section '%s'", node_id)
                    frontier_found = True
                    states[node_id] = NodeState(EdgeStatus.INACTIVE)
            case NodeType.DECISION:
                output = resolve_or_none(node.output, data, context, errors=errors, location=node_id)
                states[node_id] = NodeState(EdgeStatus.ACTIVE, output)

    return states


def evaluate_edge_states(
    data: Any,
    index: ConfigIndex,
    context: FunctionContext,
    section_states: dict[str, SectionState],
    order: list[str] | None = None,
    errors: list[tuple[str, str]] | None = None,
) -> list[EdgeState]:
    """Compute the status of every configured edge.

    An edge inherits the status of its ``from`` node. An edge leaving an
    active decision node is active only when the decision's output matches
    its ``when_input_is`` tag.
    """
    if order is None:
        order = node_evaluation_order(index.edges)
    node_states = evaluate_node_states(data, index, context, section_states, order, errors)

    result: list[EdgeState] = []
    for edge in index.edges:
        from_state = node_states.get(edge.from_, NodeState(EdgeStatus.INACTIVE))
        status = from_state.status
        from_node = index.get_workflow_node(edge.from_)
        if from_node is not None and from_node.type == NodeType.DECISION and status == EdgeStatus.ACTIVE:
            matched = bool(from_state.output) == bool(edge.when_input_is)
            status = EdgeStatus.ACTIVE if matched else EdgeStatus.INACTIVE
        result.append(EdgeState.model_validate({**edge.model_dump(by_alias=True), "status": status}))
    return result
