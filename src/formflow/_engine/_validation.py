"""Per-section validation of required values and custom rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from formflow._config import iter_config_nodes
from formflow._path import (
    PREFIX,
    WILDCARD,
    data_path_from_ref,
    format_data_path,
    get_value,
    iter_leaves,
    match_paths,
    pattern_for,
    split_ref_path,
)
from formflow._resolver import resolve_or_none

from ._pruning import preconditions_met

if TYPE_CHECKING:
    from formflow._config import ConfigIndex, WorkflowNode
    from formflow._functions import FunctionContext
    from formflow._path import DataPath

logger = logging.getLogger(__name__)


class SectionStatus(StrEnum):
    """Validity of an input section."""

    VALID = auto()
    INVALID = auto()


@dataclass(frozen=True, slots=True)
class ValidationMessage:
    """A message attached to a concrete data path.

    Attributes:
        path: Dotted concrete path without the ``$.`` prefix (``people.0.name``).
        message: The resolved message.

    """

    path: str
    message: Any

    def to_dict(self) -> dict[str, Any]:
        """Render the message as plain data."""
        return {"path": self.path, "message": self.message}


@dataclass(frozen=True, slots=True)
class SectionState:
    """Validation outcome of one input section."""

    status: SectionStatus
    validation_messages: tuple[ValidationMessage, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        """Whether the section has no messages."""
        return self.status == SectionStatus.VALID

    def to_dict(self) -> dict[str, Any]:
        """Render the state with camel-case ``validationMessages``."""
        return {
            "status": str(self.status),
            "validationMessages": [message.to_dict() for message in self.validation_messages],
        }


def is_blank(value: Any) -> bool:
    """Check whether a leaf value counts as not filled in."""
    return value is None or value == ""


def data_node_is_blank(value: Any) -> bool:
    """Check whether a required value is missing.

    Lists are blank when empty or when their first item is blank.
    """
    if is_blank(value):
        return True
    if isinstance(value, list):
        return len(value) == 0 or is_blank(value[0])
    return False


def required_data_paths(ref_path: str, data: Any) -> list[DataPath]:
    """Expand the ref-path of a required node into the concrete paths to check.

    A node whose path ends in ``*`` (a list of scalars) is checked on the list
    itself. A path without wildcards is checked directly. Otherwise the
    nearest ``*``-terminated prefix is expanded against ``data`` and the
    remaining tokens are appended to every match.

    Example:
        >>> required_data_paths("$.people.*.name", {"people": [{}, {}]})
        [('people', 0, 'name'), ('people', 1, 'name')]

    """
    tokens = split_ref_path(ref_path)
    if tokens and tokens[-1] == WILDCARD:
        tokens = tokens[:-1]
    if WILDCARD not in tokens:
        return [tuple(tokens)]

    last_wildcard = len(tokens) - 1 - tokens[::-1].index(WILDCARD)
    ancestor = PREFIX + ".".join(tokens[: last_wildcard + 1])
    remaining = tuple(tokens[last_wildcard + 1 :])
    return [(*item_path, *remaining) for item_path in match_paths(ancestor, data)]


def _resolve_required_message(
    required: Any,
    data: Any,
    context: FunctionContext,
    data_path: DataPath,
    errors: list[tuple[str, str]] | None,
) -> Any:
    location = format_data_path(data_path)
    resolved = resolve_or_none(required, data, context, data_path, errors=errors, location=location)
    if isinstance(resolved, list):
        for rule, result in zip(required, resolved, strict=False):
            if result:
                return rule.get("message") if isinstance(rule, dict) else None
        return None
    return resolved


def _required_messages(
    section: WorkflowNode,
    raw_section: dict[str, Any],
    data: Any,
    context: FunctionContext,
    errors: list[tuple[str, str]] | None,
) -> list[ValidationMessage]:
    messages: list[ValidationMessage] = []
    for config_node in iter_config_nodes(raw_section):
        required = config_node.get("required")
        if not required:
            continue
        ref_path = config_node.get("path")
        if not isinstance(ref_path, str):
            logger.debug("Section %s: required rule without a path is ignored", section.id)
            continue
        for data_path in required_data_paths(ref_path, data):
            message = _resolve_required_message(required, data, context, data_path, errors)
            if (
                message
                and preconditions_met(config_node, data, context, data_path, errors)
                and data_node_is_blank(get_value(data, data_path))
            ):
                messages.append(ValidationMessage(path=format_data_path(data_path), message=message))
    return messages


def _custom_message(
    config_node: dict[str, Any] | None,
    value: Any,
    data: Any,
    context: FunctionContext,
    data_path: DataPath,
    errors: list[tuple[str, str]] | None,
) -> ValidationMessage | None:
    validations = config_node.get("validations") if config_node else None
    if not isinstance(validations, list):
        return None
    if is_blank(value) or not preconditions_met(config_node, data, context, data_path, errors):
        return None
    location = format_data_path(data_path)
    for validation in validations:
        result = resolve_or_none(validation, data, context, data_path, errors=errors, location=location)
        if result is False:
            message = validation.get("message") if isinstance(validation, dict) else None
            return ValidationMessage(path=location, message=message)
    return None


def evaluate_section_state(
    section: WorkflowNode,
    data: Any,
    index: ConfigIndex,
    context: FunctionContext,
    errors: list[tuple[str, str]] | None = None,
) -> SectionState:
    """Validate one input section against pruned data.

    Required checks run first over the section's configuration tree. Custom
    validations then run over every leaf of the section's data; a custom
    failure is dropped when a message already exists for the same path.
    """
    raw_section = index.raw_nodes.get(section.id, {})
    messages = _required_messages(section, raw_section, data, context, errors)
    seen_paths = {message.path for message in messages}

    section_path = data_path_from_ref(section.ref_path)
    for leaf_path, value in iter_leaves(get_value(data, section_path), section_path):
        config_node = index.get_config_node_by_path(pattern_for(leaf_path))
        message = _custom_message(config_node, value, data, context, leaf_path, errors)
        if message is not None and message.path not in seen_paths:
            messages.append(message)
            seen_paths.add(message.path)

    status = SectionStatus.INVALID if messages else SectionStatus.VALID
    logger.debug("Section %s is %s with %d message(s)", section.id, status, len(messages))
    return SectionState(status=status, validation_messages=tuple(messages))


def evaluate_section_states(
    data: Any,
    index: ConfigIndex,
    context: FunctionContext,
    errors: list[tuple[str, str]] | None = None,
) -> dict[str, SectionState]:
    """Validate every input section, keyed by section id."""
    return {section.id: evaluate_section_state(section, data, index, context, errors) for section in index.sections}
