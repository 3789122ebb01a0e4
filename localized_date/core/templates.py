"""
Template engine wrapper for member rendering.

Provides a small interface over Jinja2 with the built-in templates
used to render getter/setter bodies and class-body members.
"""

from typing import Any, Dict, Optional

from jinja2 import DictLoader, Environment, TemplateNotFound, StrictUndefined


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


# Getter body. ``policy`` is a CachePolicy value.
GETTER_TEMPLATE = """\
{% if legacy_field %}
if self.{{ cached_field }} is None and self.{{ gmt_field }} is None and self.{{ legacy_field }} is not None:
{{ unit }}self.{{ public_name }} = self.{{ legacy_field }}
{{ unit }}self.{{ legacy_field }} = None
{% endif %}
{% if policy == "dynamic" %}
if self.{{ gmt_field }} is not None:
{{ unit }}self.{{ cached_field }} = self.{{ local_fn }}(self.{{ gmt_field }}, with_time={{ with_time }}, is_due_date={{ is_due_date }})
else:
{{ unit }}self.{{ cached_field }} = None
{% else %}
if self.{{ cached_field }} is None and self.{{ gmt_field }} is not None:
{{ unit }}self.{{ cached_field }} = self.{{ local_fn }}(self.{{ gmt_field }}, with_time={{ with_time }}, is_due_date={{ is_due_date }})
{% endif %}
return self.{{ cached_field }}
"""

SETTER_TEMPLATE = """\
self.{{ gmt_field }} = self.{{ gmt_fn }}(value, with_time={{ with_time }}, is_due_date={{ is_due_date }})
self.{{ cached_field }} = self.{{ local_fn }}(self.{{ gmt_field }}, with_time={{ with_time }}, is_due_date={{ is_due_date }})
{% if side_effects %}
{{ side_effects }}
{% endif %}
"""

ALIAS_GETTER_TEMPLATE = """\
return self.{{ target }}
"""

ALIAS_SETTER_TEMPLATE = """\
self.{{ target }} = value
"""

FIELD_TEMPLATE = """\
{{ name }}: {{ value_type }} = None
"""

ACCESSOR_TEMPLATE = """\
@property
def {{ name }}(self) -> {{ value_type }}:
{{ getter_body | indent }}

@{{ name }}.setter
def {{ name }}(self, value: {{ value_type }}) -> None:
{{ setter_body | indent }}
"""

HEADER_TEMPLATE = """\
{{ text | comment }}
"""

BUILTIN_TEMPLATES = {
    "getter": GETTER_TEMPLATE,
    "setter": SETTER_TEMPLATE,
    "alias_getter": ALIAS_GETTER_TEMPLATE,
    "alias_setter": ALIAS_SETTER_TEMPLATE,
    "field": FIELD_TEMPLATE,
    "accessor": ACCESSOR_TEMPLATE,
    "header": HEADER_TEMPLATE,
}


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(
        self,
        indent_unit: str = "    ",
        templates: Optional[Dict[str, str]] = None,
        custom: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize template engine.

        Args:
            indent_unit: One level of indentation in rendered code
            templates: Extra or replacement templates by name
            custom: Host-specific settings, visible to templates as ``custom``
        """
        self.indent_unit = indent_unit
        mapping = dict(BUILTIN_TEMPLATES)
        if templates:
            mapping.update(templates)

        self._env = Environment(
            loader=DictLoader(mapping),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

        # Add custom filters for code generation
        self._env.filters["indent"] = self._indent_filter
        self._env.filters["comment"] = self._comment_filter
        self._env.globals["custom"] = dict(custom or {})

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of a registered template
            context: Variables to pass to template

        Returns:
            Rendered content without surrounding blank lines
        """
        try:
            template = self._env.get_template(template_name)
            rendered = template.render(unit=self.indent_unit, **context)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {template_name}") from e
        except Exception as e:
            raise TemplateError(
                f"Failed to render template {template_name}: {e}"
            ) from e
        return rendered.strip("\n")

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        self._env.loader.mapping[name] = content
        # Drop any compiled copy of a replaced template
        if self._env.cache is not None:
            self._env.cache.clear()

    def template_exists(self, name: str) -> bool:
        """Check if a template exists."""
        return name in self._env.loader.mapping

    # Template filters for code generation

    def _indent_filter(self, value: str, levels: int = 1) -> str:
        """Indent all non-blank lines in a string."""
        indent = self.indent_unit * levels
        lines = str(value).split("\n")
        return "\n".join(indent + line if line.strip() else "" for line in lines)

    def _comment_filter(self, value: str, style: str = "#") -> str:
        """Add comment markers to each line."""
        lines = str(value).split("\n")
        return "\n".join(f"{style} {line}" if line.strip() else style for line in lines)


def create_template_engine(
    indent_unit: str = "    ", custom: Optional[Dict[str, Any]] = None
) -> TemplateEngine:
    """Create a template engine with the built-in templates."""
    return TemplateEngine(indent_unit=indent_unit, custom=custom)
