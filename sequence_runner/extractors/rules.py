"""Extraction rule variants.

Raw rules from scenario files (strings, callables, mappings) are normalised
into one of the dataclasses below by ``parse_rule``. Each variant carries
an explicit ``kind`` so the engine dispatches on the discriminant instead
of inspecting mapping keys at evaluation time.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Optional

from ..errors import UnsupportedRuleError


class RuleKind(str, Enum):
    """Discriminant of an extraction rule."""
    PATH = "path"
    BUILTIN = "builtin"
    CUSTOM = "custom"
    FIELD = "field"
    MULTIPLE = "multiple"
    CONDITIONAL = "conditional"
    ARRAY = "array"
    REGEX = "regex"
    COMPUTED = "computed"


# Order in which mapping keys select a complex rule.
COMPLEX_RULE_KEYS = ("path", "multiple", "conditional", "array", "computed", "regex")


@dataclass(frozen=True)
class PathRule:
    """Plain dotted path string."""
    kind: ClassVar[RuleKind] = RuleKind.PATH
    path: str


@dataclass(frozen=True)
class BuiltinRef:
    """Reference to a named built-in extractor."""
    kind: ClassVar[RuleKind] = RuleKind.BUILTIN
    name: str


@dataclass(frozen=True)
class CustomFn:
    """Callable of the response (custom or registered extractor)."""
    kind: ClassVar[RuleKind] = RuleKind.CUSTOM
    func: Callable[[Any], Any]
    name: Optional[str] = None


@dataclass(frozen=True)
class FieldRule:
    """Path with optional transform, filter and default."""
    kind: ClassVar[RuleKind] = RuleKind.FIELD
    path: str
    transform: Optional[Callable[[Any, Any], Any]] = None
    filter: Optional[Callable[[Any, Any], Any]] = None
    default: Any = None


@dataclass(frozen=True)
class MultipleRule:
    """Several named sub-rules assembled into a nested mapping."""
    kind: ClassVar[RuleKind] = RuleKind.MULTIPLE
    rules: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Branch:
    """One ``{if, then}`` entry of a conditional rule."""
    condition: Any
    rule: Any


@dataclass(frozen=True)
class ConditionalRule:
    """First branch whose condition holds wins, else ``default``."""
    kind: ClassVar[RuleKind] = RuleKind.CONDITIONAL
    branches: tuple[Branch, ...] = ()
    default: Any = None


@dataclass(frozen=True)
class ArrayRule:
    """Operation on an array found at ``path``."""
    kind: ClassVar[RuleKind] = RuleKind.ARRAY
    path: str = "data"
    map: Any = None
    filter: Optional[Callable[[Any], Any]] = None
    find: Optional[Callable[[Any], Any]] = None
    pluck: Optional[str] = None
    default: Any = None


@dataclass(frozen=True)
class RegexRule:
    """Regular expression applied to a string source."""
    kind: ClassVar[RuleKind] = RuleKind.REGEX
    pattern: Any
    source: Optional[str] = None
    group: Any = 0
    default: Any = None


@dataclass(frozen=True)
class ComputedRule:
    """Arbitrary function of the whole response."""
    kind: ClassVar[RuleKind] = RuleKind.COMPUTED
    func: Callable[[Any], Any]


def parse_rule(
    raw: Any,
    builtins: Optional[Mapping[str, Any]] = None,
    custom: Optional[Mapping[str, Callable]] = None,
) -> Any:
    """Normalise a raw extraction rule into a rule variant.

    Args:
        raw: String, callable or mapping from an extraction spec.
        builtins: Names of built-in extractors.
        custom: Registered custom extractors by name.

    Returns:
        One of the rule dataclasses.

    Raises:
        UnsupportedRuleError: If the rule has no recognised shape.
    """
    builtins = builtins or {}
    custom = custom or {}

    if isinstance(raw, RULE_TYPES):
        return raw

    if isinstance(raw, str):
        if raw in custom:
            return CustomFn(func=custom[raw], name=raw)
        if raw in builtins:
            return BuiltinRef(name=raw)
        return PathRule(path=raw)

    if callable(raw):
        return CustomFn(func=raw)

    if isinstance(raw, Mapping):
        return _parse_complex(raw)

    raise UnsupportedRuleError(f"Unknown extractor type: {type(raw).__name__}")


def _parse_complex(raw: Mapping) -> Any:
    if raw.get("path"):
        return FieldRule(
            path=raw["path"],
            transform=raw.get("transform"),
            filter=raw.get("filter"),
            default=raw.get("default"),
        )

    if raw.get("multiple"):
        multiple = raw["multiple"]
        if not isinstance(multiple, Mapping):
            raise UnsupportedRuleError("'multiple' must be a mapping of name to rule")
        return MultipleRule(rules=dict(multiple))

    if raw.get("conditional"):
        branches = []
        for entry in raw["conditional"]:
            if not isinstance(entry, Mapping) or "if" not in entry or "then" not in entry:
                raise UnsupportedRuleError("'conditional' entries need 'if' and 'then'")
            branches.append(Branch(condition=entry["if"], rule=entry["then"]))
        return ConditionalRule(branches=tuple(branches), default=raw.get("default"))

    if raw.get("array"):
        array = raw["array"]
        if not isinstance(array, Mapping):
            raise UnsupportedRuleError("'array' must be a mapping")
        return ArrayRule(
            path=array.get("path") or "data",
            map=array.get("map"),
            filter=array.get("filter"),
            find=array.get("find"),
            pluck=array.get("pluck"),
            default=raw.get("default"),
        )

    if raw.get("computed"):
        if not callable(raw["computed"]):
            raise UnsupportedRuleError("'computed' must be callable")
        return ComputedRule(func=raw["computed"])

    if raw.get("regex"):
        return RegexRule(
            pattern=raw["regex"],
            source=raw.get("source"),
            group=raw.get("group", 0),
            default=raw.get("default"),
        )

    raise UnsupportedRuleError(
        f"Unsupported extraction rule, expected one of: {', '.join(COMPLEX_RULE_KEYS)}"
    )


RULE_TYPES = (
    PathRule,
    BuiltinRef,
    CustomFn,
    FieldRule,
    MultipleRule,
    ConditionalRule,
    ArrayRule,
    RegexRule,
    ComputedRule,
)
