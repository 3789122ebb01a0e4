"""
Member generation for LocalizedDate invocations.

Runs the Name Deriver, Option Parser and Code Emitter over one
analyzed invocation and renders the resulting member descriptors
as class-body source.
"""

import ast
import keyword
import textwrap
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import GeneratorConfig
from .declaration import Invocation
from .errors import InvalidPropertyName, MacroError, MissingBaseName
from .naming import NameDeriver, NamingRuleResult
from .options import CachePolicy, Configuration, parse_options
from .schema import (
    AccessLevel,
    DeclarationDescriptor,
    InvocationShape,
    MemberDescriptor,
    MemberKind,
)
from .templates import TemplateEngine, TemplateError, create_template_engine
from ..logging_config import get_logger

logger = get_logger(__name__)

Arguments = Sequence[Tuple[Optional[str], Any]]


class LocalizedDateGenerator:
    """Expands LocalizedDate invocations into member descriptors."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        deriver: Optional[NameDeriver] = None,
    ):
        """
        Initialize the generator.

        Args:
            config: Rendering configuration
            deriver: Name deriver with a custom rule table
        """
        self.config = config or GeneratorConfig()
        self.deriver = deriver or NameDeriver()
        self._template_engine = create_template_engine(
            self.config.indent_unit, self.config.custom
        )

    @property
    def template_engine(self) -> TemplateEngine:
        return self._template_engine

    # Pipeline entry points

    def expand(self, invocation: Invocation) -> List[MemberDescriptor]:
        """Expand an analyzed invocation of either shape."""
        try:
            if invocation.shape == InvocationShape.DECLARATION_LEVEL:
                return self.expand_declaration(invocation.arguments)
            return self.expand_field(invocation.descriptor, invocation.arguments)
        except MacroError as e:
            raise e.at(invocation.lineno, invocation.col_offset)

    def expand_field(
        self, descriptor: DeclarationDescriptor, arguments: Arguments = ()
    ) -> List[MemberDescriptor]:
        """Expand a field-attached invocation; names derive from the field."""
        names = self.deriver.derive(descriptor.identifier)
        configuration = parse_options(arguments, InvocationShape.FIELD_ATTACHED)
        return self.emit(names, configuration, descriptor.access_level)

    def expand_declaration(self, arguments: Arguments = ()) -> List[MemberDescriptor]:
        """Expand a declaration-level invocation; baseName is required."""
        configuration = parse_options(arguments, InvocationShape.DECLARATION_LEVEL)
        if configuration.base_name is None:
            raise MissingBaseName(
                "LocalizedDate declarations require a baseName string literal"
            )

        names = self.deriver.derive(
            configuration.base_name, explicit_base_name=configuration.base_name
        )
        return self.emit(names, configuration, AccessLevel.PUBLIC)

    # Code emitter

    def emit(
        self,
        names: NamingRuleResult,
        configuration: Configuration,
        access_level: AccessLevel = AccessLevel.PUBLIC,
    ) -> List[MemberDescriptor]:
        """
        Emit the member family for derived names and options.

        Args:
            names: Derived base and public names
            configuration: Parsed options
            access_level: Visibility of the computed accessor

        Returns:
            Members in emission order: legacy field, GMT field, cached
            field, computed accessor, legacy alias
        """
        self._check_names(names, configuration)

        members: List[MemberDescriptor] = []

        if configuration.legacy_property_name:
            members.append(
                MemberDescriptor(
                    name=configuration.legacy_property_name,
                    visibility=AccessLevel.PRIVATE,
                    kind=MemberKind.STORED_FIELD,
                )
            )

        members.append(
            MemberDescriptor(
                name=names.gmt_field_name,
                visibility=AccessLevel.PUBLIC,
                kind=MemberKind.STORED_FIELD,
            )
        )
        members.append(
            MemberDescriptor(
                name=names.cached_field_name,
                visibility=AccessLevel.PUBLIC,
                kind=MemberKind.CACHED_FIELD,
            )
        )

        context = self._body_context(names, configuration)
        members.append(
            MemberDescriptor(
                name=names.public_name,
                visibility=access_level,
                kind=MemberKind.COMPUTED_ACCESSOR,
                getter_body=self.template_engine.render_template("getter", context),
                setter_body=self.template_engine.render_template("setter", context),
            )
        )

        if configuration.include_legacy_alias:
            alias_context = {"target": names.public_name}
            members.append(
                MemberDescriptor(
                    name=names.legacy_alias_name,
                    visibility=access_level,
                    kind=MemberKind.COMPUTED_ACCESSOR,
                    getter_body=self.template_engine.render_template(
                        "alias_getter", alias_context
                    ),
                    setter_body=self.template_engine.render_template(
                        "alias_setter", alias_context
                    ),
                )
            )

        logger.debug(
            "Emitted %d members for %s (%s policy)",
            len(members),
            names.public_name,
            configuration.cache_policy.value,
        )
        return members

    def _check_names(self, names: NamingRuleResult, configuration: Configuration):
        """Reject option names that cannot appear as attributes."""
        for label, value in (
            ("withTimeProperty", configuration.with_time_property),
            ("legacyPropertyName", configuration.legacy_property_name),
        ):
            if value is not None and (not value.isidentifier() or keyword.iskeyword(value)):
                raise InvalidPropertyName(f"{label} '{value}' is not a valid identifier")

        generated = [names.gmt_field_name, names.cached_field_name, names.public_name]
        if configuration.include_legacy_alias:
            generated.append(names.legacy_alias_name)
        if configuration.legacy_property_name:
            generated.append(configuration.legacy_property_name)

        if len(set(generated)) != len(generated):
            raise InvalidPropertyName(
                f"Generated member names collide: {', '.join(generated)}"
            )

    def _body_context(
        self, names: NamingRuleResult, configuration: Configuration
    ) -> Dict[str, Any]:
        """Build the template context shared by getter and setter."""
        if configuration.cache_policy == CachePolicy.DYNAMIC:
            with_time = f"self.{configuration.with_time_property}"
        else:
            with_time = "False"

        side_effects = None
        if configuration.setter_side_effects:
            side_effects = textwrap.dedent(configuration.setter_side_effects).strip()

        return {
            "public_name": names.public_name,
            "gmt_field": names.gmt_field_name,
            "cached_field": names.cached_field_name,
            "legacy_field": configuration.legacy_property_name,
            "policy": configuration.cache_policy.value,
            "with_time": with_time,
            "is_due_date": "True" if configuration.is_due_date else "False",
            "local_fn": self.config.local_date_function,
            "gmt_fn": self.config.gmt_date_function,
            "side_effects": side_effects or None,
        }

    # Rendering

    def render(self, members: Sequence[MemberDescriptor], comment: Optional[str] = None) -> str:
        """
        Render members as class-body source at indentation level zero.

        Consecutive fields are grouped; accessors are separated by a
        blank line.
        """
        blocks: List[str] = []
        field_lines: List[str] = []
        value_type = self.config.value_type

        for member in members:
            if member.is_field:
                field_lines.append(
                    self.template_engine.render_template(
                        "field", {"name": member.name, "value_type": value_type}
                    )
                )
                continue

            if field_lines:
                blocks.append("\n".join(field_lines))
                field_lines = []

            blocks.append(
                self.template_engine.render_template(
                    "accessor",
                    {
                        "name": member.name,
                        "value_type": value_type,
                        "getter_body": member.getter_body,
                        "setter_body": member.setter_body,
                    },
                )
            )

        if field_lines:
            blocks.append("\n".join(field_lines))

        code = "\n\n".join(blocks)
        if comment and self.config.add_comments:
            header = self.template_engine.render_template("header", {"text": comment})
            code = f"{header}\n{code}"

        return format_code(code)

    def generate(self, invocation: Invocation) -> "GenerationResult":
        """
        Expand and render one invocation with error handling.

        Returns:
            GenerationResult; failures carry the MacroError instead of code
        """
        try:
            members = self.expand(invocation)
            public = next(
                m for m in members if m.kind == MemberKind.COMPUTED_ACCESSOR
            )
            code = self.render(members, comment=_describe(invocation, public.name))
        except (MacroError, TemplateError) as e:
            logger.info("LocalizedDate expansion failed: %s", e)
            return GenerationResult.error(str(e), exception=e)

        warnings = _side_effect_warnings(members)
        metadata = {
            "shape": invocation.shape.value,
            "public_name": public.name,
            "member_count": len(members),
            "members": [m.name for m in members],
        }
        return GenerationResult(code, members, warnings, metadata)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        code: str,
        members: Optional[List[MemberDescriptor]] = None,
        warnings: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize generation result.

        Args:
            code: Rendered member source
            members: Emitted member descriptors
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.members = members or []
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @classmethod
    def error(cls, message: str, exception: Optional[Exception] = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def _describe(invocation: Invocation, public_name: str) -> str:
    if invocation.descriptor is not None:
        return f"LocalizedDate: {invocation.descriptor.identifier} -> {public_name}"
    return f"LocalizedDate: {public_name}"


def _side_effect_warnings(members: Sequence[MemberDescriptor]) -> List[str]:
    """Flag setter bodies that will not compile."""
    warnings = []
    for member in members:
        if member.setter_body is None:
            continue
        try:
            ast.parse(member.setter_body)
        except SyntaxError as e:
            warnings.append(
                f"Setter of {member.name} does not parse (check setterSideEffects): {e.msg}"
            )
    return warnings


def format_code(code: str) -> str:
    """
    Remove trailing whitespace and excessive blank lines.

    Args:
        code: Raw generated code

    Returns:
        Formatted code
    """
    lines = code.split("\n")
    formatted_lines = []
    blank_count = 0

    for line in lines:
        stripped = line.rstrip()
        if not stripped:
            blank_count += 1
            if blank_count <= 1:
                formatted_lines.append("")
        else:
            blank_count = 0
            formatted_lines.append(stripped)

    return "\n".join(formatted_lines)


def generate_members(
    descriptor: Optional[DeclarationDescriptor],
    configuration: Configuration,
    config: Optional[GeneratorConfig] = None,
) -> List[MemberDescriptor]:
    """
    Pure generation entry point: descriptor and typed options in, members out.

    A None descriptor selects the declaration-level shape, which takes
    its names from ``configuration.base_name``.
    """
    generator = LocalizedDateGenerator(config)

    if descriptor is None:
        if configuration.base_name is None:
            raise MissingBaseName(
                "LocalizedDate declarations require a baseName string literal"
            )
        names = generator.deriver.derive(
            configuration.base_name, explicit_base_name=configuration.base_name
        )
        return generator.emit(names, configuration, AccessLevel.PUBLIC)

    names = generator.deriver.derive(descriptor.identifier)
    return generator.emit(names, configuration, descriptor.access_level)
