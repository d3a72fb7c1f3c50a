"""Runtime state of multi-section data-entry workflows."""

__all__ = [
    "DEFAULT_CAPABILITIES",
    "Capability",
    "ConfigError",
    "ConfigIndex",
    "DependencyGraph",
    "Edge",
    "EdgeState",
    "EdgeStatus",
    "FunctionContext",
    "NodeType",
    "RefPathError",
    "ResolutionError",
    "SectionState",
    "SectionStatus",
    "ValidationMessage",
    "WorkflowEngine",
    "WorkflowNode",
    "WorkflowState",
    "apply_relative_indexes",
    "build_function_context",
    "create",
    "match_paths",
    "pattern_for",
    "resolve",
]

from ._config import ConfigIndex, Edge, NodeType, WorkflowNode
from ._engine import (
    EdgeState,
    EdgeStatus,
    SectionState,
    SectionStatus,
    ValidationMessage,
    WorkflowEngine,
    WorkflowState,
    create,
)
from ._errors import ConfigError, RefPathError, ResolutionError
from ._functions import DEFAULT_CAPABILITIES, Capability, FunctionContext, build_function_context
from ._graph import DependencyGraph
from ._path import apply_relative_indexes, match_paths, pattern_for
from ._resolver import resolve
