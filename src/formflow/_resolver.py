"""Expression resolution against a data tree.

Resolvable expressions are plain JSON-like values:

- ``"$value"`` reads the value at the target path.
- ``"$.a.b"`` reads a single value; ``"$.a.*.b"`` collects every match in
  traversal order; ``"$.a.^.b"`` addresses a sibling of the target path.
- ``{"fn": name, "args": [...]}`` invokes a capability with resolved args.
- Lists and other mappings resolve element-wise; anything else is a literal.

Expressions must form a finite tree. Resolution never mutates its inputs.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from ._errors import ResolutionError
from ._path import (
    RELATIVE,
    WILDCARD,
    apply_relative_indexes,
    data_path_from_ref,
    get_value,
    is_ref_path,
    match_paths,
    split_ref_path,
)

if TYPE_CHECKING:
    from ._functions import FunctionContext
    from ._path import DataPath

logger = logging.getLogger(__name__)

VALUE_SENTINEL = "$value"
FN_KEY = "fn"
ARGS_KEY = "args"

# Exceptions a capability may raise on unexpected data; anything else propagates.
CAPABILITY_ERRORS = (
    TypeError,
    ValueError,
    AttributeError,
    LookupError,
    RuntimeError,
    ArithmeticError,
    re.error,
)


def _resolve_string(string: str, data: Any, target_path: DataPath | None) -> Any:
    if string == VALUE_SENTINEL:
        if target_path is None:
            logger.warning("'%s' used without a target path; resolving to None", VALUE_SENTINEL)
            return None
        return get_value(data, target_path)
    if not is_ref_path(string):
        return string

    pattern = string
    if RELATIVE in split_ref_path(pattern):
        pattern = apply_relative_indexes(pattern, target_path)
    if WILDCARD in split_ref_path(pattern):
        return [get_value(data, path) for path in match_paths(pattern, data)]
    return get_value(data, data_path_from_ref(pattern))


def resolve(
    expr: Any,
    data: Any,
    context: FunctionContext,
    target_path: DataPath | None = None,
) -> Any:
    """Resolve an expression against a data tree.

    Args:
        expr: The resolvable expression.
        data: The data tree ref-paths are read from.
        context: Capabilities available to function-call nodes.
        target_path: Concrete path used by ``$value`` and ``^`` tokens.

    Returns:
        The resolved value. Absent data resolves to None.

    Raises:
        ResolutionError: If an invoked capability raises.

    """
    if isinstance(expr, dict):
        capability = context.get(expr.get(FN_KEY))
        if capability is not None:
            raw_args = expr.get(ARGS_KEY)
            args = [resolve(arg, data, context, target_path) for arg in raw_args] if isinstance(raw_args, list) else []
            try:
                return capability(*args)
            except CAPABILITY_ERRORS as e:
                raise ResolutionError(capability.name, e) from e
        if FN_KEY in expr:
            logger.debug("No capability named %r; resolving as a plain mapping", expr[FN_KEY])
        return {key: resolve(value, data, context, target_path) for key, value in expr.items()}
    if isinstance(expr, str):
        return _resolve_string(expr, data, target_path)
    if isinstance(expr, list):
        return [resolve(item, data, context, target_path) for item in expr]
    return expr


def resolve_or_none(
    expr: Any,
    data: Any,
    context: FunctionContext,
    target_path: DataPath | None = None,
    *,
    errors: list[tuple[str, str]] | None = None,
    location: str = "",
) -> Any:
    """Resolve an expression, turning a capability failure into None.

    The failure is logged and, when ``errors`` is given, appended to it as
    ``(location, message)`` so that evaluation of sibling paths can continue.
    """
    try:
        return resolve(expr, data, context, target_path)
    except ResolutionError as e:
        logger.warning("Resolution failed at %s: %s", location or "<root>", e)
        if errors is not None:
            errors.append((location, str(e)))
        return None
