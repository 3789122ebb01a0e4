"""
Declaration analysis for LocalizedDate triggers.

Classifies a single class-body statement as a field-attached trigger,
a declaration-level trigger, or not a trigger at all, and rejects
every other shape a trigger can appear in.
"""

import ast
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from .errors import InvalidDeclaration
from .options import arguments_from_call
from .schema import AccessLevel, DeclarationDescriptor, InvocationShape

DEFAULT_TRIGGER_NAMES = ("LocalizedDate",)


@dataclass(frozen=True)
class Invocation:
    """A recognized trigger with its raw, unparsed arguments."""

    shape: InvocationShape
    descriptor: Optional[DeclarationDescriptor]
    arguments: Tuple[Tuple[Optional[str], Any], ...]
    lineno: Optional[int] = None
    col_offset: Optional[int] = None


def access_level_for(identifier: str) -> AccessLevel:
    """Map Python naming conventions onto an access level."""
    if identifier.startswith("__") and not identifier.endswith("__"):
        return AccessLevel.PRIVATE
    if identifier.startswith("_"):
        return AccessLevel.INTERNAL
    return AccessLevel.PUBLIC


def is_trigger_call(node: Optional[ast.AST], trigger_names: Iterable[str]) -> bool:
    """Check whether a node is a call to one of the trigger names."""
    if not isinstance(node, ast.Call):
        return False
    return _is_trigger_reference(node.func, trigger_names)


def _is_trigger_reference(node: ast.AST, trigger_names: Iterable[str]) -> bool:
    names = set(trigger_names)
    if isinstance(node, ast.Name):
        return node.id in names
    if isinstance(node, ast.Attribute):
        return node.attr in names
    return False


def _is_class_var(annotation: ast.expr) -> bool:
    """Detect ClassVar, ClassVar[...] and typing.ClassVar[...] annotations."""
    if isinstance(annotation, ast.Subscript):
        annotation = annotation.value
    if isinstance(annotation, ast.Name):
        return annotation.id == "ClassVar"
    if isinstance(annotation, ast.Attribute):
        return annotation.attr == "ClassVar"
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        return annotation.value.strip().startswith("ClassVar")
    return False


def _fail(message: str, node: ast.AST) -> InvalidDeclaration:
    return InvalidDeclaration(
        message, getattr(node, "lineno", None), getattr(node, "col_offset", None)
    )


def _field_descriptor(target: ast.expr, statement: ast.stmt) -> DeclarationDescriptor:
    if isinstance(target, (ast.Tuple, ast.List, ast.Starred)):
        raise _fail("LocalizedDate cannot be attached to a tuple pattern", statement)
    if not isinstance(target, ast.Name):
        raise _fail(
            "LocalizedDate must be attached to a simple field name", statement
        )

    return DeclarationDescriptor(
        identifier=target.id,
        access_level=access_level_for(target.id),
        lineno=statement.lineno,
        col_offset=statement.col_offset,
    )


def analyze_statement(
    statement: ast.stmt,
    trigger_names: Iterable[str] = DEFAULT_TRIGGER_NAMES,
    in_class_body: bool = True,
) -> Optional[Invocation]:
    """
    Analyze one statement.

    Args:
        statement: Statement node from the host module
        trigger_names: Call names that mark a trigger
        in_class_body: Whether the statement sits directly in a class body

    Returns:
        Invocation for a valid trigger, None if the statement is not a trigger

    Raises:
        InvalidDeclaration: If the statement uses a trigger in an
            unsupported declaration shape
    """
    trigger_names = tuple(trigger_names)

    if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef)):
        for decorator in statement.decorator_list:
            target = decorator.func if isinstance(decorator, ast.Call) else decorator
            if _is_trigger_reference(target, trigger_names):
                raise _fail(
                    f"LocalizedDate cannot decorate computed member "
                    f"'{statement.name}'; attach it to a stored field",
                    decorator,
                )
        return None

    value = getattr(statement, "value", None)
    if not is_trigger_call(value, trigger_names):
        return None

    if not in_class_body:
        raise _fail("LocalizedDate can only be used inside a class body", statement)

    arguments = tuple(arguments_from_call(value))

    if isinstance(statement, ast.Expr):
        return Invocation(
            shape=InvocationShape.DECLARATION_LEVEL,
            descriptor=None,
            arguments=arguments,
            lineno=statement.lineno,
            col_offset=statement.col_offset,
        )

    if isinstance(statement, ast.AnnAssign):
        if _is_class_var(statement.annotation):
            raise _fail(
                "LocalizedDate cannot be attached to a ClassVar declaration",
                statement,
            )
        descriptor = _field_descriptor(statement.target, statement)

    elif isinstance(statement, ast.Assign):
        if len(statement.targets) != 1:
            raise _fail(
                "LocalizedDate must be attached to a single binding", statement
            )
        descriptor = _field_descriptor(statement.targets[0], statement)

    else:
        raise _fail(
            f"LocalizedDate cannot be used in a {type(statement).__name__} "
            f"statement",
            statement,
        )

    return Invocation(
        shape=InvocationShape.FIELD_ATTACHED,
        descriptor=descriptor,
        arguments=arguments,
        lineno=statement.lineno,
        col_offset=statement.col_offset,
    )
