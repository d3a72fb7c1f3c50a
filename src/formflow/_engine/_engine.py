"""Workflow state evaluation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from formflow._config import ConfigIndex
from formflow._functions import build_function_context
from formflow._resolver import resolve_or_none

from ._edges import evaluate_edge_states, node_evaluation_order
from ._ordering import order_preconditions
from ._pruning import prune_data
from ._validation import evaluate_section_states

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from formflow._functions import Capability, FunctionContext

    from ._edges import EdgeState
    from ._validation import SectionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WorkflowState:
    """Runtime state of a workflow for one data snapshot.

    Attributes:
        data: The data with inapplicable values removed.
        derived: Derived values by id.
        input_section_states: Validation outcome by section id.
        edge_states: Every configured edge with its activation status.
        errors: ``(location, message)`` for capabilities that failed during
            evaluation. Failed expressions resolve to None.

    """

    data: Any = None
    derived: dict[str, Any] = field(default_factory=dict)
    input_section_states: dict[str, SectionState] = field(default_factory=dict)
    edge_states: list[EdgeState] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if evaluation completed without capability errors."""
        return len(self.errors) == 0

    def to_dict(self) -> dict[str, Any]:
        """Render the state as plain JSON-compatible data."""
        return {
            "data": self.data,
            "derived": dict(self.derived),
            "input_section_states": {
                section_id: state.to_dict() for section_id, state in self.input_section_states.items()
            },
            "edge_states": [edge.to_dict() for edge in self.edge_states],
        }


def evaluate_derived(
    data: Any,
    derived: tuple[dict[str, Any], ...] | list[dict[str, Any]],
    context: FunctionContext,
    errors: list[tuple[str, str]] | None = None,
) -> dict[str, Any]:
    """Resolve every derived value definition without a target path."""
    return {
        entry["id"]: resolve_or_none(entry, data, context, errors=errors, location=f"derived:{entry['id']}")
        for entry in derived
    }


class WorkflowEngine:
    """Evaluates workflow state for data snapshots against a fixed configuration.

    All construction-time state is read-only, so one engine can serve
    concurrent callers.
    """

    __slots__ = ("_config", "_context", "_node_order", "_precondition_order")

    def __init__(self, config: ConfigIndex, context: FunctionContext) -> None:
        self._config = config
        self._context = context
        self._precondition_order = tuple(order_preconditions(config))
        self._node_order = tuple(node_evaluation_order(config.edges))

    @property
    def config(self) -> ConfigIndex:
        """The indexed workflow configuration."""
        return self._config

    @property
    def context(self) -> FunctionContext:
        """Capabilities available to rules."""
        return self._context

    @property
    def precondition_order(self) -> tuple[str, ...]:
        """Ref-paths with preconditions, dependencies first."""
        return self._precondition_order

    @property
    def node_order(self) -> tuple[str, ...]:
        """Workflow node ids in evaluation order."""
        return self._node_order

    def prune(self, data: Any, errors: list[tuple[str, str]] | None = None) -> Any:
        """Return a copy of ``data`` without values whose preconditions fail."""
        return prune_data(data, self._config, list(self._precondition_order), self._context, errors)

    def get_workflow_state(self, data: Any) -> WorkflowState:
        """Evaluate the workflow for one data snapshot.

        Args:
            data: The user-entered data tree. Not modified.

        Returns:
            The pruned data, derived values, section states and edge states.

        """
        errors: list[tuple[str, str]] = []
        pruned = self.prune(data, errors)
        section_states = evaluate_section_states(pruned, self._config, self._context, errors)
        derived = evaluate_derived(pruned, self._config.derived, self._context, errors)
        edge_states = evaluate_edge_states(
            pruned,
            self._config,
            self._context,
            section_states,
            list(self._node_order),
            errors,
        )
        logger.debug("Evaluated workflow state with %d error(s)", len(errors))
        return WorkflowState(
            data=pruned,
            derived=derived,
            input_section_states=section_states,
            edge_states=edge_states,
            errors=errors,
        )


def create(
    config: Mapping[str, Any] | ConfigIndex,
    context: Mapping[str, Callable[..., Any] | Capability] | FunctionContext | None = None,
) -> WorkflowEngine:
    """Build an engine for a workflow configuration.

    Args:
        config: Raw configuration mapping (``nodes``, ``edges``, ``derived``)
            or an already built ConfigIndex.
        context: Capabilities merged over the defaults.

    Returns:
        A WorkflowEngine.

    Raises:
        ConfigError: If the configuration is invalid or contains a cycle.

    Example:
        >>> engine = create({"nodes": [], "edges": []})
        >>> engine.get_workflow_state({}).to_dict()["edge_states"]
        []

    """
    index = config if isinstance(config, ConfigIndex) else ConfigIndex.from_config(config)
    return WorkflowEngine(index, build_function_context(context))
