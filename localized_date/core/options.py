"""
Option parsing for LocalizedDate invocations.

Arguments are inspected, never evaluated: only literal tokens are
accepted and anything else leaves the option at its default.
"""

import ast
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .naming import to_snake_case
from .schema import InvocationShape
from ..logging_config import get_logger

logger = get_logger(__name__)


class _NotLiteral:
    """Marker for argument expressions that are not literal tokens."""

    def __repr__(self) -> str:
        return "NOT_LITERAL"


NOT_LITERAL = _NotLiteral()


class CachePolicy(Enum):
    """How the generated getter treats the cached local value."""

    STATIC = "static"  # memoize until the next write
    DYNAMIC = "dynamic"  # recompute on every read


@dataclass(frozen=True)
class Configuration:
    """Typed options for one invocation."""

    with_time_property: Optional[str] = None
    is_due_date: bool = True
    legacy_property_name: Optional[str] = None
    setter_side_effects: Optional[str] = None
    include_legacy_alias: bool = False
    base_name: Optional[str] = None

    @property
    def cache_policy(self) -> CachePolicy:
        if self.with_time_property is not None:
            return CachePolicy.DYNAMIC
        return CachePolicy.STATIC


# Normalized label -> (Configuration field, accepted literal type)
COMMON_OPTIONS: Dict[str, Tuple[str, type]] = {
    "with_time_property": ("with_time_property", str),
    "is_due_date": ("is_due_date", bool),
    "legacy_property_name": ("legacy_property_name", str),
    "setter_side_effects": ("setter_side_effects", str),
}

DECLARATION_OPTIONS: Dict[str, Tuple[str, type]] = {
    **COMMON_OPTIONS,
    "base_name": ("base_name", str),
    "include_legacy_computed_property": ("include_legacy_alias", bool),
}


def recognized_options(shape: InvocationShape) -> Dict[str, Tuple[str, type]]:
    """Get the option table for an invocation shape."""
    if shape == InvocationShape.DECLARATION_LEVEL:
        return DECLARATION_OPTIONS
    return COMMON_OPTIONS


def literal_value(node: ast.expr) -> Any:
    """Return the value of a literal token, or NOT_LITERAL."""
    if isinstance(node, ast.Constant):
        return node.value
    return NOT_LITERAL


def arguments_from_call(call: ast.Call) -> List[Tuple[Optional[str], Any]]:
    """
    Extract (label, literal value) pairs from a trigger call.

    Positional arguments get a None label; ``**kwargs`` expansions are
    dropped since they carry no label at all.
    """
    arguments: List[Tuple[Optional[str], Any]] = []

    for arg in call.args:
        arguments.append((None, literal_value(arg)))

    for keyword in call.keywords:
        if keyword.arg is None:
            continue
        arguments.append((keyword.arg, literal_value(keyword.value)))

    return arguments


def parse_options(
    arguments: Iterable[Tuple[Optional[str], Any]],
    shape: InvocationShape = InvocationShape.FIELD_ATTACHED,
) -> Configuration:
    """
    Build a Configuration from labeled literal arguments.

    Args:
        arguments: (label, value) pairs; value may be NOT_LITERAL
        shape: Invocation shape, which decides the recognized labels

    Returns:
        Configuration with defaults for anything unset or unusable
    """
    table = recognized_options(shape)
    values: Dict[str, Any] = {}

    for label, value in arguments:
        if label is None:
            logger.debug("Ignoring positional argument %r", value)
            continue

        key = to_snake_case(label)
        if key not in table:
            logger.debug("Ignoring unknown option %r", label)
            continue

        field_name, expected = table[key]

        if expected is bool:
            # Literal True/False only; anything else keeps the default
            if isinstance(value, bool):
                values[field_name] = value
            else:
                logger.debug("Option %r is not a boolean literal; using default", label)
            continue

        if value is None:
            values.pop(field_name, None)
        elif isinstance(value, expected):
            values[field_name] = value
        else:
            logger.debug("Option %r is not a string literal; ignoring", label)

    return Configuration(**values)
