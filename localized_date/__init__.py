"""
localized_date

Synthesizes GMT-stored, locally computed, lazily cached date members
from terse LocalizedDate declarations in class bodies.
"""

from .core import (
    AccessLevel,
    CachePolicy,
    Configuration,
    DeclarationDescriptor,
    GenerationResult,
    GeneratorConfig,
    InvalidDeclaration,
    InvalidPropertyName,
    LocalizedDateGenerator,
    MacroError,
    MemberDescriptor,
    MemberKind,
    MissingBaseName,
    derive_names,
    generate_members,
    load_config,
    parse_options,
)
from .adapters import (
    ExpansionResult,
    LocalizedDate,
    expand_file,
    expand_source,
    localized_date,
    localized_dates,
)

# Version info
__version__ = "0.1.0"


def quick_expand(source, **options):
    """
    Expand a module's source with configuration overrides.

    Args:
        source: Python module source
        **options: GeneratorConfig overrides

    Returns:
        Expanded source

    Raises:
        MacroError: The error of the first trigger that failed to expand,
            or a plain MacroError when the module does not parse
    """
    result = expand_source(source, load_config(custom_config=options))
    if not result.success:
        first = result.diagnostics[0]
        if first.exception is not None:
            raise first.exception
        raise MacroError(first.message, first.lineno, first.col_offset)
    return result.code


__all__ = [
    "AccessLevel",
    "CachePolicy",
    "Configuration",
    "DeclarationDescriptor",
    "GenerationResult",
    "GeneratorConfig",
    "InvalidDeclaration",
    "InvalidPropertyName",
    "LocalizedDateGenerator",
    "MacroError",
    "MemberDescriptor",
    "MemberKind",
    "MissingBaseName",
    "derive_names",
    "generate_members",
    "load_config",
    "parse_options",
    "ExpansionResult",
    "LocalizedDate",
    "expand_file",
    "expand_source",
    "localized_date",
    "localized_dates",
    "quick_expand",
    "__version__",
]
