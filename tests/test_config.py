"""Tests for the configuration index."""

import pytest

from formflow import ConfigError, ConfigIndex, Edge, NodeType


def _config() -> dict:
    return {
        "nodes": [
            {
                "id": "personal",
                "type": "input_section",
                "fields": [
                    {"path": "$.personal.name", "required": "Enter your name"},
                    {"path": "$.personal.pets.*.kind", "required": "Enter the kind"},
                ],
            },
            {"id": "check", "type": "decision", "output": "$.personal.ok"},
            {"id": "custom", "type": "input_section", "path": "$.elsewhere"},
        ],
        "edges": [
            {"from": "START", "to": "personal"},
            {"from": "personal", "to": "check"},
            {"from": "check", "to": "END", "when_input_is": True},
        ],
        "derived": [{"id": "total", "fn": "sum", "args": []}],
    }


class TestConfigIndex:
    def test_nodes_and_edges(self) -> None:
        index = ConfigIndex.from_config(_config())
        assert [node.id for node in index.nodes] == ["personal", "check", "custom"]
        assert index.nodes[1].type == NodeType.DECISION
        assert index.edges[2] == Edge(from_="check", to="END", when_input_is=True)

    def test_sections(self) -> None:
        index = ConfigIndex.from_config(_config())
        assert [section.id for section in index.sections] == ["personal", "custom"]

    def test_lookup_by_path(self) -> None:
        index = ConfigIndex.from_config(_config())
        assert index.get_config_node_by_path("$.personal.name")["required"] == "Enter your name"
        assert index.get_config_node_by_path("$.personal.pets.*.kind") is not None
        assert index.get_config_node_by_path("$.personal.unknown") is None

    def test_workflow_node_default_path(self) -> None:
        index = ConfigIndex.from_config(_config())
        assert index.get_workflow_node("personal").ref_path == "$.personal"
        assert index.get_config_node_by_path("$.personal")["id"] == "personal"
        assert index.get_workflow_node("custom").ref_path == "$.elsewhere"
        assert index.get_workflow_node("missing") is None

    def test_config_is_copied(self) -> None:
        raw = _config()
        index = ConfigIndex.from_config(raw)
        raw["nodes"][0]["fields"][0]["required"] = "changed"
        assert index.get_config_node_by_path("$.personal.name")["required"] == "Enter your name"

    def test_edge_serialisation(self) -> None:
        index = ConfigIndex.from_config(_config())
        assert index.edges[0].to_dict() == {"from": "START", "to": "personal"}
        assert index.edges[2].to_dict() == {"from": "check", "to": "END", "when_input_is": True}

    def test_iter_config_nodes_preorder(self) -> None:
        index = ConfigIndex.from_config(_config())
        paths = [node.get("path") for node in index.iter_config_nodes() if "path" in node]
        assert paths == ["$.personal", "$.personal.name", "$.personal.pets.*.kind", "$.check", "$.elsewhere"]


class TestConfigErrors:
    def test_unknown_node_type(self) -> None:
        with pytest.raises(ConfigError, match="Invalid workflow configuration"):
            ConfigIndex.from_config({"nodes": [{"id": "x", "type": "page"}]})

    def test_edge_without_target(self) -> None:
        with pytest.raises(ConfigError):
            ConfigIndex.from_config({"edges": [{"from": "START"}]})

    def test_duplicate_node_id(self) -> None:
        nodes = [{"id": "x", "type": "input_section"}, {"id": "x", "type": "decision"}]
        with pytest.raises(ConfigError, match="Duplicate"):
            ConfigIndex.from_config({"nodes": nodes})

    def test_reserved_node_id(self) -> None:
        with pytest.raises(ConfigError, match="reserved"):
            ConfigIndex.from_config({"nodes": [{"id": "START", "type": "decision"}]})

    def test_derived_without_id(self) -> None:
        with pytest.raises(ConfigError, match="no 'id'"):
            ConfigIndex.from_config({"derived": [{"fn": "sum"}]})
