"""
Error taxonomy for LocalizedDate expansion.

Every error aborts the single invocation it was raised for; the
source adapter turns them into per-trigger diagnostics.
"""

from typing import Optional


class MacroError(Exception):
    """Base exception for LocalizedDate expansion errors."""

    code = "macro-error"

    def __init__(
        self,
        message: str,
        lineno: Optional[int] = None,
        col_offset: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.lineno = lineno
        self.col_offset = col_offset

    def at(self, lineno: Optional[int], col_offset: Optional[int]) -> "MacroError":
        """Attach a source location if none is recorded yet."""
        if self.lineno is None:
            self.lineno = lineno
            self.col_offset = col_offset
        return self


class InvalidDeclaration(MacroError):
    """Trigger is not a single simple-name field declaration."""

    code = "invalid-declaration"


class InvalidPropertyName(MacroError):
    """Identifier matches none of the naming rules."""

    code = "invalid-property-name"


class MissingBaseName(MacroError):
    """Declaration-level invocation without a baseName argument."""

    code = "missing-base-name"
