"""
Host adapters.

The source adapter rewrites module text; the runtime adapter installs
members on live classes. Both delegate to the core generator.
"""

from .source import (
    Diagnostic,
    ExpansionRecord,
    ExpansionResult,
    expand_file,
    expand_source,
)
from .runtime import LocalizedDate, install_members, localized_date, localized_dates

__all__ = [
    "Diagnostic",
    "ExpansionRecord",
    "ExpansionResult",
    "expand_file",
    "expand_source",
    "LocalizedDate",
    "install_members",
    "localized_date",
    "localized_dates",
]
