"""Workflow state evaluation engine.

This module computes, for a configuration and a data snapshot:
- The data pruned of values whose preconditions do not hold
- Derived values
- The validity of every input section
- The activation status of every workflow edge

Key types:
- WorkflowEngine: Engine bound to one configuration and function context
- WorkflowState: Result of evaluating one data snapshot
- create: Build a WorkflowEngine from a raw configuration
"""

from ._edges import EdgeState, EdgeStatus, NodeState, evaluate_edge_states, node_evaluation_order
from ._engine import WorkflowEngine, WorkflowState, create, evaluate_derived
from ._ordering import collect_ref_paths, order_preconditions
from ._pruning import preconditions_met, prune_data
from ._validation import SectionState, SectionStatus, ValidationMessage, evaluate_section_states

__all__ = [
    "EdgeState",
    "EdgeStatus",
    "NodeState",
    "SectionState",
    "SectionStatus",
    "ValidationMessage",
    "WorkflowEngine",
    "WorkflowState",
    "collect_ref_paths",
    "create",
    "evaluate_derived",
    "evaluate_edge_states",
    "evaluate_section_states",
    "node_evaluation_order",
    "order_preconditions",
    "preconditions_met",
    "prune_data",
]
