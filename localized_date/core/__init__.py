"""
Core generation components.

The pure pipeline: declaration analysis, name derivation, option
parsing and member emission, plus configuration and templates.
"""

from .errors import MacroError, InvalidDeclaration, InvalidPropertyName, MissingBaseName
from .schema import (
    AccessLevel,
    DeclarationDescriptor,
    InvocationShape,
    MemberDescriptor,
    MemberKind,
)
from .naming import (
    DEFAULT_RULES,
    NameDeriver,
    NamingRule,
    NamingRuleResult,
    PlaceholderRule,
    derive_names,
)
from .options import NOT_LITERAL, CachePolicy, Configuration, parse_options
from .declaration import Invocation, analyze_statement
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine
from .generator import (
    GenerationResult,
    LocalizedDateGenerator,
    generate_members,
)

__all__ = [
    # Errors
    "MacroError",
    "InvalidDeclaration",
    "InvalidPropertyName",
    "MissingBaseName",
    # Data model
    "AccessLevel",
    "DeclarationDescriptor",
    "InvocationShape",
    "MemberDescriptor",
    "MemberKind",
    # Name deriver
    "DEFAULT_RULES",
    "NameDeriver",
    "NamingRule",
    "NamingRuleResult",
    "PlaceholderRule",
    "derive_names",
    # Option parser
    "NOT_LITERAL",
    "CachePolicy",
    "Configuration",
    "parse_options",
    # Declaration analyzer
    "Invocation",
    "analyze_statement",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
    # Generator
    "GenerationResult",
    "LocalizedDateGenerator",
    "generate_members",
]
