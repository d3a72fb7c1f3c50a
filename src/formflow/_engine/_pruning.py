"""Removal of data whose node preconditions do not hold."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any

from formflow._path import clear_value, format_data_path, match_paths
from formflow._resolver import resolve_or_none

if TYPE_CHECKING:
    from formflow._config import ConfigIndex
    from formflow._functions import FunctionContext
    from formflow._path import DataPath

logger = logging.getLogger(__name__)


def preconditions_met(
    config_node: dict[str, Any] | None,
    data: Any,
    context: FunctionContext,
    data_path: DataPath,
    errors: list[tuple[str, str]] | None = None,
) -> bool:
    """Check that every precondition of a node resolves truthy at a path.

    A missing node, or a node without a list of preconditions, is applicable.
    Evaluation stops at the first falsy precondition.
    """
    preconditions = config_node.get("preconditions") if config_node else None
    if not isinstance(preconditions, list):
        return True
    location = format_data_path(data_path)
    return all(
        resolve_or_none(precondition, data, context, data_path, errors=errors, location=location)
        for precondition in preconditions
    )


def prune_data(
    data: Any,
    index: ConfigIndex,
    order: list[str],
    context: FunctionContext,
    errors: list[tuple[str, str]] | None = None,
) -> Any:
    """Return a deep copy of ``data`` without values whose preconditions fail.

    Matching and precondition evaluation always read the original ``data``,
    never the partially pruned copy, so clearing one node does not cascade
    into the decisions made for other nodes.

    Args:
        data: The user-entered data tree. Not modified.
        index: The configuration index.
        order: Node paths in precondition evaluation order.
        context: Capabilities available to expressions.
        errors: Optional list collecting resolution failures.

    Returns:
        The pruned copy.

    """
    result = copy.deepcopy(data)
    for ref_path in order:
        config_node = index.get_config_node_by_path(ref_path)
        if config_node is None:
            continue
        for data_path in match_paths(ref_path, data):
            if not preconditions_met(config_node, data, context, data_path, errors):
                logger.debug("Pruning %s (preconditions of %s not met)", format_data_path(data_path), ref_path)
                clear_value(result, data_path)
    return result
