"""Workflow configuration models and the path index built over them."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._errors import ConfigError
from ._path import PREFIX, is_ref_path

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping

logger = logging.getLogger(__name__)

START = "START"
END = "END"
TERMINAL_NODES = frozenset({START, END})


class NodeType(StrEnum):
    """The kind of node in the workflow graph."""

    INPUT_SECTION = auto()  # Section of user-entered data
    DECISION = auto()  # Branch on a resolved boolean output


class WorkflowNode(BaseModel):
    """A node of the workflow graph.

    Extra keys (nested field configuration, rules) are kept as-is so that
    the node can be walked as a plain configuration tree.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    type: NodeType
    path: str | None = None
    output: Any = None

    @property
    def ref_path(self) -> str:
        """The ref-path addressing this node's data (``$.<id>`` by default)."""
        return self.path if self.path is not None else f"{PREFIX}{self.id}"


class Edge(BaseModel):
    """A directed transition between two workflow nodes.

    Keys beyond ``from``, ``to`` and ``when_input_is`` (labels, ids) are kept
    and carried through to the edge state.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    when_input_is: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render the edge with its wire key names, omitting unset tags."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WorkflowConfig(BaseModel):
    """Top-level shape of a workflow configuration."""

    nodes: list[dict[str, Any]] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    derived: list[dict[str, Any]] = Field(default_factory=list)


def iter_config_nodes(tree: Any) -> Generator[dict[str, Any]]:
    """Yield every mapping in a configuration tree in pre-order."""
    if isinstance(tree, dict):
        yield tree
        for value in tree.values():
            yield from iter_config_nodes(value)
    elif isinstance(tree, list):
        for item in tree:
            yield from iter_config_nodes(item)


@dataclass(frozen=True, slots=True)
class ConfigIndex:
    """Read-only view of a workflow configuration keyed by ref-path.

    Attributes:
        nodes: Workflow nodes in declaration order.
        edges: Workflow edges in declaration order.
        derived: Derived value definitions, each carrying an ``id``.
        raw_nodes: The configuration tree of each workflow node, by node id.

    """

    nodes: tuple[WorkflowNode, ...] = ()
    edges: tuple[Edge, ...] = ()
    derived: tuple[dict[str, Any], ...] = ()
    raw_nodes: dict[str, dict[str, Any]] = field(default_factory=dict)
    _by_path: dict[str, dict[str, Any]] = field(default_factory=dict)
    _by_id: dict[str, WorkflowNode] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> ConfigIndex:
        """Validate a raw configuration mapping and index it.

        The configuration is deep-copied, so later changes to ``config`` do
        not affect the index.

        Raises:
            ConfigError: If the configuration does not have the expected shape.

        """
        try:
            parsed = WorkflowConfig.model_validate(copy.deepcopy(dict(config)))
            workflow_nodes = [WorkflowNode.model_validate(raw) for raw in parsed.nodes]
        except ValidationError as e:
            msg = f"Invalid workflow configuration: {e}"
            raise ConfigError(msg) from e

        by_id: dict[str, WorkflowNode] = {}
        raw_nodes: dict[str, dict[str, Any]] = {}
        by_path: dict[str, dict[str, Any]] = {}
        for node, raw in zip(workflow_nodes, parsed.nodes, strict=True):
            if node.id in TERMINAL_NODES:
                msg = f"Node id '{node.id}' is reserved"
                raise ConfigError(msg)
            if node.id in by_id:
                msg = f"Duplicate workflow node id: '{node.id}'"
                raise ConfigError(msg)
            by_id[node.id] = node
            raw.setdefault("path", node.ref_path)
            raw_nodes[node.id] = raw
            for config_node in iter_config_nodes(raw):
                path = config_node.get("path")
                if not is_ref_path(path):
                    continue
                if path in by_path and by_path[path] is not config_node:
                    logger.debug("Ignoring duplicate config node for %s", path)
                    continue
                by_path[path] = config_node

        for edge in parsed.edges:
            for node_id in (edge.from_, edge.to):
                if node_id not in by_id and node_id not in TERMINAL_NODES:
                    logger.warning("Edge references unknown node '%s'", node_id)

        for entry in parsed.derived:
            if "id" not in entry:
                msg = f"Derived value definition has no 'id': {entry!r}"
                raise ConfigError(msg)

        return cls(
            nodes=tuple(workflow_nodes),
            edges=tuple(parsed.edges),
            derived=tuple(parsed.derived),
            raw_nodes=raw_nodes,
            _by_path=by_path,
            _by_id=by_id,
        )

    def get_config_node_by_path(self, ref_path: str) -> dict[str, Any] | None:
        """Get the configuration node governing a ref-path, or None."""
        return self._by_path.get(ref_path)

    def get_workflow_node(self, node_id: str) -> WorkflowNode | None:
        """Get a workflow node by id, or None."""
        return self._by_id.get(node_id)

    @property
    def sections(self) -> tuple[WorkflowNode, ...]:
        """Workflow nodes of type ``input_section``."""
        return tuple(node for node in self.nodes if node.type == NodeType.INPUT_SECTION)

    def iter_config_nodes(self) -> Generator[dict[str, Any]]:
        """Yield every mapping under the workflow nodes in declaration order."""
        for raw in self.raw_nodes.values():
            yield from iter_config_nodes(raw)
