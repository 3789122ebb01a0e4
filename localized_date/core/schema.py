"""
Core data structures shared by the analyzer, parser and emitter.

All of these are created per invocation and discarded once the
members have been rendered.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AccessLevel(Enum):
    """Declared visibility of a trigger field or an emitted member."""

    PRIVATE = "private"
    FILEPRIVATE = "fileprivate"
    INTERNAL = "internal"
    PUBLIC = "public"


class InvocationShape(Enum):
    """How a LocalizedDate trigger was written."""

    FIELD_ATTACHED = "field-attached"  # dueLocal = LocalizedDate(...)
    DECLARATION_LEVEL = "declaration-level"  # LocalizedDate(baseName="due")


class MemberKind(Enum):
    """Kinds of synthesized members."""

    STORED_FIELD = "stored"
    CACHED_FIELD = "cached"  # read-only outside the generated accessor
    COMPUTED_ACCESSOR = "computed"


@dataclass(frozen=True)
class DeclarationDescriptor:
    """The trigger field as seen by the generator."""

    identifier: str
    access_level: AccessLevel = AccessLevel.PUBLIC
    lineno: Optional[int] = None
    col_offset: Optional[int] = None


@dataclass(frozen=True)
class MemberDescriptor:
    """One emitted member: a storage field or a computed accessor."""

    name: str
    visibility: AccessLevel
    kind: MemberKind
    getter_body: Optional[str] = None
    setter_body: Optional[str] = None

    @property
    def is_field(self) -> bool:
        return self.kind in (MemberKind.STORED_FIELD, MemberKind.CACHED_FIELD)

    @property
    def readonly_externally(self) -> bool:
        return self.kind == MemberKind.CACHED_FIELD
