"""Capability registry consulted by the expression resolver.

A function-call node such as ``{"fn": "equals", "args": ["$.a", "yes"]}``
names a capability; the resolver resolves the arguments and hands them to
the capability's handler in order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Capability:
    """A named function available to expressions.

    Attributes:
        name: The name used in the ``fn`` field of a function-call node.
        handler: Callable invoked with the resolved arguments.
        arity: Exact number of arguments, or None for variadic capabilities.

    """

    name: str
    handler: Callable[..., Any]
    arity: int | None = None

    def __call__(self, *args: Any) -> Any:
        """Invoke the handler, checking the argument count first."""
        if self.arity is not None and len(args) != self.arity:
            msg = f"Capability '{self.name}' takes {self.arity} argument(s), got {len(args)}"
            raise TypeError(msg)
        return self.handler(*args)


@dataclass(frozen=True, slots=True)
class FunctionContext:
    """Immutable mapping from capability name to Capability."""

    capabilities: Mapping[str, Capability] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "capabilities", MappingProxyType(dict(self.capabilities)))

    def get(self, name: object) -> Capability | None:
        """Get the capability registered under ``name``, or None."""
        if not isinstance(name, str):
            return None
        return self.capabilities.get(name)

    def __contains__(self, name: object) -> bool:
        """Check whether a capability is registered under ``name``."""
        return self.get(name) is not None

    def __iter__(self) -> Iterator[str]:
        """Iterate over capability names."""
        return iter(self.capabilities)

    def __len__(self) -> int:
        """Return the number of capabilities."""
        return len(self.capabilities)


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(a: Any, b: Any) -> bool:
        if a is None or b is None:
            return False
        return op(a, b)

    return compare


def _present(values: Any) -> list[Any]:
    if not isinstance(values, list):
        values = [values]
    return [value for value in values if value is not None]


def _matches(value: Any, pattern: Any) -> bool:
    if not isinstance(value, str) or not isinstance(pattern, str):
        return False
    return re.fullmatch(pattern, value) is not None


def _one_of(value: Any, options: Any) -> bool:
    if not isinstance(options, (list, tuple)):
        return False
    return value in options


def _length(value: Any) -> int:
    if value is None:
        return 0
    return len(value)


DEFAULT_CAPABILITIES: Mapping[str, Capability] = MappingProxyType(
    {
        capability.name: capability
        for capability in (
            Capability("equals", lambda a, b: a == b, arity=2),
            Capability("not_equals", lambda a, b: a != b, arity=2),
            Capability("not", lambda a: not a, arity=1),
            Capability("and", lambda *args: all(args)),
            Capability("or", lambda *args: any(args)),
            Capability("is_present", lambda a: not _is_blank(a), arity=1),
            Capability("is_blank", _is_blank, arity=1),
            Capability("greater_than", _compare(lambda a, b: a > b), arity=2),
            Capability("less_than", _compare(lambda a, b: a < b), arity=2),
            Capability("one_of", _one_of, arity=2),
            Capability("length", _length, arity=1),
            Capability("count", lambda values: len(_present(values)), arity=1),
            Capability("sum", lambda values: sum(_present(values)), arity=1),
            Capability("any", lambda values: any(_present(values)), arity=1),
            Capability("all", lambda values: all(_present(values)), arity=1),
            Capability("matches", _matches, arity=2),
            Capability("concat", lambda *args: "".join("" if a is None else str(a) for a in args)),
        )
    },
)


def build_function_context(
    overrides: Mapping[str, Callable[..., Any] | Capability] | FunctionContext | None = None,
    *,
    defaults: Mapping[str, Capability] = DEFAULT_CAPABILITIES,
) -> FunctionContext:
    """Merge caller capabilities over the defaults.

    Plain callables are wrapped as variadic capabilities under their key.
    A caller entry replaces the default of the same name.

    Example:
        >>> ctx = build_function_context({"is_adult": lambda age: age >= 18})
        >>> ctx.get("is_adult")(20)
        True

    """
    if isinstance(overrides, FunctionContext):
        return overrides

    merged: dict[str, Capability] = dict(defaults)
    for name, entry in (overrides or {}).items():
        if isinstance(entry, Capability):
            capability = entry if entry.name == name else Capability(name, entry.handler, entry.arity)
        elif callable(entry):
            capability = Capability(name, entry)
        else:
            msg = f"Capability '{name}' must be callable, got {type(entry).__name__}"
            raise TypeError(msg)
        if name in merged:
            logger.debug("Overriding default capability '%s'", name)
        merged[name] = capability
    return FunctionContext(merged)
