"""Tests for expression resolution."""

import logging

import pytest

from formflow import ResolutionError, build_function_context, resolve
from formflow._resolver import resolve_or_none

DATA = {
    "applicant": {"name": "Ada", "age": 36},
    "children": [
        {"name": "Bo", "age": 4, "school": "North"},
        {"name": "Cy", "age": 9},
    ],
}


@pytest.fixture
def context():
    return build_function_context({"upper": lambda s: s.upper(), "boom": lambda: 1 / 0, "first": lambda xs: xs[0]})


class TestResolveStrings:
    def test_literal(self, context) -> None:
        assert resolve("hello", DATA, context) == "hello"

    def test_static_ref(self, context) -> None:
        assert resolve("$.applicant.name", DATA, context) == "Ada"

    def test_missing_ref(self, context) -> None:
        assert resolve("$.applicant.email", DATA, context) is None

    def test_indexed_ref(self, context) -> None:
        assert resolve("$.children.1.name", DATA, context) == "Cy"

    def test_wildcard_collects_in_order(self, context) -> None:
        assert resolve("$.children.*.name", DATA, context) == ["Bo", "Cy"]

    def test_wildcard_skips_missing_leaves(self, context) -> None:
        assert resolve("$.children.*.school", DATA, context) == ["North"]

    def test_relative_index(self, context) -> None:
        target = ("children", 1, "name")
        assert resolve("$.children.^.age", DATA, context, target) == 9

    def test_value_sentinel(self, context) -> None:
        assert resolve("$value", DATA, context, ("applicant", "age")) == 36

    def test_value_sentinel_without_target(self, context, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="formflow._resolver"):
            assert resolve("$value", DATA, context) is None
        assert "without a target path" in caplog.text


class TestResolveStructures:
    def test_function_call(self, context) -> None:
        expr = {"fn": "upper", "args": ["$.applicant.name"]}
        assert resolve(expr, DATA, context) == "ADA"

    def test_nested_function_call(self, context) -> None:
        expr = {"fn": "greater_than", "args": [{"fn": "sum", "args": ["$.children.*.age"]}, 10]}
        assert resolve(expr, DATA, context) is True

    def test_non_list_args_means_no_args(self, context) -> None:
        expr = {"fn": "and", "args": "$.applicant.name"}
        assert resolve(expr, DATA, context) is True

    def test_unknown_function_resolves_as_mapping(self, context) -> None:
        expr = {"fn": "missing", "args": ["$.applicant.name"]}
        assert resolve(expr, DATA, context) == {"fn": "missing", "args": ["Ada"]}

    def test_list(self, context) -> None:
        assert resolve(["$.applicant.age", "x", 3], DATA, context) == [36, "x", 3]

    def test_mapping_keys_pass_through(self, context) -> None:
        assert resolve({"$.applicant.name": "$.applicant.age"}, DATA, context) == {"$.applicant.name": 36}

    @pytest.mark.parametrize("value", [1, 2.5, True, False, None])
    def test_scalars_unchanged(self, context, value: object) -> None:
        assert resolve(value, DATA, context) == value

    def test_does_not_mutate_inputs(self, context) -> None:
        expr = {"fn": "upper", "args": ["$.applicant.name"]}
        resolve(expr, DATA, context)
        assert expr == {"fn": "upper", "args": ["$.applicant.name"]}
        assert DATA["applicant"]["name"] == "Ada"


class TestResolutionErrors:
    def test_capability_error_is_wrapped(self, context) -> None:
        with pytest.raises(ResolutionError, match="boom") as exc_info:
            resolve({"fn": "boom"}, DATA, context)
        assert isinstance(exc_info.value.cause, ZeroDivisionError)

    def test_arity_mismatch_is_wrapped(self, context) -> None:
        with pytest.raises(ResolutionError, match="equals"):
            resolve({"fn": "equals", "args": [1]}, DATA, context)

    def test_resolve_or_none_records_error(self, context) -> None:
        errors: list[tuple[str, str]] = []
        assert resolve_or_none({"fn": "boom"}, DATA, context, errors=errors, location="x") is None
        assert errors == [("x", "Capability 'boom' failed: division by zero")]

    def test_index_error_is_wrapped(self, context) -> None:
        with pytest.raises(ResolutionError, match="first") as exc_info:
            resolve({"fn": "first", "args": [[]]}, DATA, context)
        assert isinstance(exc_info.value.cause, IndexError)

    def test_invalid_regex_is_wrapped(self, context) -> None:
        errors: list[tuple[str, str]] = []
        expr = {"fn": "matches", "args": ["$.applicant.name", "("]}
        assert resolve_or_none(expr, DATA, context, errors=errors, location="applicant.name") is None
        assert len(errors) == 1
        assert errors[0][0] == "applicant.name"
        assert errors[0][1].startswith("Capability 'matches' failed:")
