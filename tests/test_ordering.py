"""Tests for the precondition evaluation order."""

import pytest

from formflow import ConfigError, ConfigIndex, RefPathError
from formflow._engine import collect_ref_paths, order_preconditions


def _index(fields: list[dict]) -> ConfigIndex:
    return ConfigIndex.from_config({"nodes": [{"id": "s", "type": "input_section", "fields": fields}]})


class TestCollectRefPaths:
    def test_nested_expression(self) -> None:
        expr = [
            {"fn": "equals", "args": ["$.a", "yes"]},
            {"fn": "and", "args": [{"fn": "not", "args": ["$.b.*.c"]}, "$value"]},
        ]
        assert list(collect_ref_paths(expr)) == ["$.a", "$.b.*.c"]

    def test_mapping_keys_ignored(self) -> None:
        assert list(collect_ref_paths({"$.key": "literal"})) == []


class TestOrderPreconditions:
    def test_referenced_paths_come_first(self) -> None:
        index = _index(
            [
                {"path": "$.s.c", "preconditions": [{"fn": "equals", "args": ["$.s.b", True]}]},
                {"path": "$.s.b", "preconditions": [{"fn": "equals", "args": ["$.s.a", True]}]},
                {"path": "$.s.a"},
            ],
        )
        order = order_preconditions(index)
        assert order.index("$.s.a") < order.index("$.s.b") < order.index("$.s.c")

    def test_nodes_without_references_are_included(self) -> None:
        index = _index([{"path": "$.s.x", "preconditions": [{"fn": "is_present", "args": ["$value"]}]}])
        assert order_preconditions(index) == ["$.s.x"]

    def test_order_is_deterministic(self) -> None:
        fields = [
            {"path": f"$.s.f{i}", "preconditions": [{"fn": "equals", "args": [f"$.s.g{i}", 1]}]}
            for i in range(5)
        ]
        orders = {tuple(order_preconditions(_index(fields))) for _ in range(5)}
        assert len(orders) == 1

    def test_relative_reference_names_governing_node(self) -> None:
        index = _index(
            [
                {"path": "$.s.items.*.detail", "preconditions": [{"fn": "equals", "args": ["$.s.items.^.kind", "x"]}]},
                {"path": "$.s.items.*.kind"},
            ],
        )
        order = order_preconditions(index)
        assert order == ["$.s.items.*.kind", "$.s.items.*.detail"]

    def test_cycle_is_config_error(self) -> None:
        index = _index(
            [
                {"path": "$.s.a", "preconditions": ["$.s.b"]},
                {"path": "$.s.b", "preconditions": ["$.s.a"]},
            ],
        )
        with pytest.raises(ConfigError, match="cycle"):
            order_preconditions(index)

    def test_malformed_ref_path(self) -> None:
        index = _index([{"path": "$.s.a", "preconditions": ["$.s..b"]}])
        with pytest.raises(RefPathError):
            order_preconditions(index)
