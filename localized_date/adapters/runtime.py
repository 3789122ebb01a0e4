"""
Runtime adapter: installs LocalizedDate members on live classes.

Field-attached use::

    @localized_dates
    class Task:
        dueLocal = LocalizedDate(withTimeProperty="hasDueTime")

Declaration-level use::

    @localized_date("recurringEnd", includeLegacyComputedProperty=True)
    class Task:
        ...

Members are rendered by the same generator the source adapter uses.
That generator output is compiled with ``exec`` inside a stand-in class
of the same name, and the resulting members are copied over.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.config import GeneratorConfig, import_names
from ..core.declaration import access_level_for
from ..core.errors import InvalidDeclaration
from ..core.generator import LocalizedDateGenerator
from ..core.naming import to_snake_case
from ..core.schema import DeclarationDescriptor, MemberDescriptor
from ..logging_config import get_logger

logger = get_logger(__name__)

Arguments = List[Tuple[Optional[str], Any]]


class LocalizedDate:
    """Marker assigned to a class attribute to request expansion."""

    def __init__(self, *args: Any, **options: Any):
        self.args = args
        self.options = options

    def arguments(self) -> Arguments:
        return [(None, arg) for arg in self.args] + list(self.options.items())

    def __repr__(self) -> str:
        options = ", ".join(f"{k}={v!r}" for k, v in self.options.items())
        return f"LocalizedDate({options})"


def _bind_side_effect_hooks(
    identifier: str, arguments: Arguments
) -> Tuple[Arguments, Dict[str, Callable]]:
    """
    Replace a callable setterSideEffects with a call to a hook.

    Returns:
        The rewritten arguments and the hooks to install, by attribute
        name. Each hook is a staticmethod receiving the instance after
        every write.
    """
    bound = []
    hooks = {}
    for label, value in arguments:
        if label is not None and to_snake_case(label) == "setter_side_effects" and callable(value):
            # No leading double underscore, so the name is never mangled
            hook_name = f"_did_set_{identifier.lstrip('_')}"
            hooks[hook_name] = staticmethod(value)
            value = f"self.{hook_name}(self)"
        bound.append((label, value))
    return bound, hooks


def install_members(
    cls: type,
    members: List[MemberDescriptor],
    generator: LocalizedDateGenerator,
    hooks: Optional[Dict[str, Callable]] = None,
) -> type:
    """
    Compile rendered members and set them, with any hooks, on ``cls``.

    Raises:
        InvalidDeclaration: If ``cls`` already defines a generated name
    """
    hooks = hooks or {}
    existing = [
        name for name in [m.name for m in members] + list(hooks) if name in vars(cls)
    ]
    if existing:
        raise InvalidDeclaration(
            f"{cls.__qualname__} already defines {', '.join(existing)}"
        )

    config = generator.config
    source = generator.render(members)
    body = "\n".join(
        config.indent_unit + line if line else "" for line in source.split("\n")
    )

    # Same class name so private names mangle the way they would in place
    class_name = cls.__name__ if cls.__name__.isidentifier() else "Generated"
    class_source = f"class {class_name}:\n{body}\n"

    namespace: dict = {}
    exec("\n".join(line for line in config.imports if import_names(line)), namespace)
    code = compile(class_source, f"<localized_date {cls.__qualname__}>", "exec")
    exec(code, namespace)

    for name, value in vars(namespace[class_name]).items():
        if name.startswith("__") and name.endswith("__"):
            continue
        setattr(cls, name, value)
    for name, hook in hooks.items():
        setattr(cls, name, hook)

    logger.debug(
        "Installed %s on %s", ", ".join(m.name for m in members), cls.__qualname__
    )
    return cls


def localized_dates(cls: Optional[type] = None, *, config: Optional[GeneratorConfig] = None):
    """
    Class decorator expanding every LocalizedDate marker in the class body.

    Usable bare (``@localized_dates``) or with a configuration
    (``@localized_dates(config=...)``).
    """

    def wrap(cls: type) -> type:
        generator = LocalizedDateGenerator(config)
        markers = [
            (name, value)
            for name, value in vars(cls).items()
            if isinstance(value, LocalizedDate)
        ]

        bindings = {}
        for name, marker in markers:
            bindings.setdefault(id(marker), []).append(name)

        for name, marker in markers:
            names = bindings[id(marker)]
            if len(names) > 1:
                raise InvalidDeclaration(
                    f"LocalizedDate must be attached to a single binding, "
                    f"got {', '.join(names)}"
                )

            descriptor = DeclarationDescriptor(name, access_level_for(name))
            arguments, hooks = _bind_side_effect_hooks(name, marker.arguments())
            members = generator.expand_field(descriptor, arguments)

            delattr(cls, name)
            install_members(cls, members, generator, hooks)

        return cls

    if cls is None:
        return wrap
    return wrap(cls)


def localized_date(
    base_name: Optional[str] = None,
    *,
    config: Optional[GeneratorConfig] = None,
    **options: Any,
):
    """
    Class decorator for the declaration-level shape.

    Args:
        base_name: Semantic root of the generated names; may also be
            given as ``baseName=`` among the options
        config: Rendering configuration
        **options: LocalizedDate options, camelCase or snake_case

    Raises:
        MissingBaseName: At decoration time when no base name is given
    """

    def decorator(cls: type) -> type:
        generator = LocalizedDateGenerator(config)
        arguments: Arguments = []
        if base_name is not None:
            arguments.append(("baseName", base_name))
        arguments.extend(options.items())

        identifier = base_name or options.get("baseName") or options.get("base_name") or ""
        arguments, hooks = _bind_side_effect_hooks(identifier, arguments)
        members = generator.expand_declaration(arguments)
        return install_members(cls, members, generator, hooks)

    return decorator
