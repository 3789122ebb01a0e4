"""
Name derivation for LocalizedDate members.

Applies an ordered suffix-matching rule table to a trigger identifier
(or takes an explicit base name) and produces the family of derived
names used by the emitter. Also hosts the case helpers used to
normalize option labels.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .errors import InvalidPropertyName
from ..logging_config import get_logger

logger = get_logger(__name__)

PUBLIC_SUFFIX = "LocalDate"
DATE_SUFFIX = "Date"
LOCAL_SUFFIX = "Local"
MACRO_SUFFIX = "Macro"
GMT_SUFFIX = "GMTDate"


def to_snake_case(name: str) -> str:
    """Convert a camelCase or kebab-case name to snake_case."""
    name = name.replace("-", "_")
    # Insert underscore before uppercase letters
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    name = name.lower()
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


@dataclass(frozen=True)
class NamingRuleResult:
    """Semantic root and public accessor name for one invocation."""

    base_name: str
    public_name: str

    @property
    def gmt_field_name(self) -> str:
        return f"{self.base_name}{GMT_SUFFIX}"

    @property
    def cached_field_name(self) -> str:
        return f"_{self.base_name}{PUBLIC_SUFFIX}"

    @property
    def legacy_alias_name(self) -> str:
        return f"{self.base_name}{DATE_SUFFIX}"


@dataclass(frozen=True)
class NamingRule:
    """
    One row of the suffix table.

    A rule matches when the identifier ends with ``suffix`` (and not
    with ``exclude_suffix``) and something is left once the suffix is
    removed. The public name is the identifier plus ``append``.
    """

    name: str
    suffix: str
    append: str = ""
    exclude_suffix: Optional[str] = None

    def apply(self, identifier: str) -> Optional[NamingRuleResult]:
        if not identifier.endswith(self.suffix):
            return None
        if self.exclude_suffix and identifier.endswith(self.exclude_suffix):
            return None

        base_name = identifier[: len(identifier) - len(self.suffix)]
        if not base_name:
            return None

        return NamingRuleResult(base_name, f"{identifier}{self.append}")


@dataclass(frozen=True)
class PlaceholderRule:
    """
    De-mangles placeholder identifiers ending in ``Macro``.

    The remainder is matched against ``inner_rules`` only; the public
    name then loses one leading underscore. A placeholder whose
    remainder matches no inner rule is an error rather than a miss.
    """

    name: str
    suffix: str
    inner_rules: Tuple[NamingRule, ...]

    def apply(self, identifier: str) -> Optional[NamingRuleResult]:
        if not identifier.endswith(self.suffix):
            return None

        remainder = identifier[: len(identifier) - len(self.suffix)]
        for rule in self.inner_rules:
            result = rule.apply(remainder)
            if result is None:
                continue
            public_name = result.public_name
            if public_name.startswith("_"):
                public_name = public_name[1:]
            return NamingRuleResult(result.base_name, public_name)

        raise InvalidPropertyName(
            f"Placeholder '{identifier}' must end in "
            f"'{PUBLIC_SUFFIX}{self.suffix}' or '{DATE_SUFFIX}{self.suffix}'"
        )


LOCAL_DATE_RULE = NamingRule("local-date", PUBLIC_SUFFIX)
DATE_RULE = NamingRule("date", DATE_SUFFIX, exclude_suffix=PUBLIC_SUFFIX)
LOCAL_RULE = NamingRule("local", LOCAL_SUFFIX, append=DATE_SUFFIX)
FALLBACK_RULE = NamingRule("fallback", "", append=DATE_SUFFIX)
PLACEHOLDER_RULE = PlaceholderRule(
    "placeholder", MACRO_SUFFIX, inner_rules=(LOCAL_DATE_RULE, DATE_RULE)
)

# Evaluated in order, first match wins
DEFAULT_RULES = (
    PLACEHOLDER_RULE,
    LOCAL_DATE_RULE,
    DATE_RULE,
    LOCAL_RULE,
    FALLBACK_RULE,
)


class NameDeriver:
    """Derives the member name family from a trigger identifier."""

    def __init__(self, rules: Optional[Sequence] = None):
        """
        Initialize the deriver.

        Args:
            rules: Ordered rule table; defaults to DEFAULT_RULES
        """
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES

    def derive(
        self, identifier: str, explicit_base_name: Optional[str] = None
    ) -> NamingRuleResult:
        """
        Derive base and public names.

        Args:
            identifier: Trigger field identifier (ignored when an explicit
                base name is supplied)
            explicit_base_name: Base name given by a declaration-level
                invocation

        Returns:
            NamingRuleResult for the invocation

        Raises:
            InvalidPropertyName: If no rule matches or a name is unusable
        """
        if explicit_base_name is not None:
            if not explicit_base_name.isidentifier():
                raise InvalidPropertyName(
                    f"Base name '{explicit_base_name}' is not a valid identifier"
                )
            result = NamingRuleResult(
                explicit_base_name, f"{explicit_base_name}{PUBLIC_SUFFIX}"
            )
            logger.debug("Explicit base name %r -> %r", explicit_base_name, result)
            return result

        for rule in self.rules:
            result = rule.apply(identifier)
            if result is None:
                continue
            if result.base_name.endswith(PUBLIC_SUFFIX):
                raise InvalidPropertyName(
                    f"Derived base name '{result.base_name}' for '{identifier}' "
                    f"still ends in '{PUBLIC_SUFFIX}'"
                )
            logger.debug("Rule %s matched %r -> %r", rule.name, identifier, result)
            return result

        raise InvalidPropertyName(
            f"Property name '{identifier}' matches no naming rule"
        )


_default_deriver = NameDeriver()


def derive_names(
    identifier: str, explicit_base_name: Optional[str] = None
) -> NamingRuleResult:
    """Convenience wrapper around the default rule table."""
    return _default_deriver.derive(identifier, explicit_base_name)
