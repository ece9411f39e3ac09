"""Variable substitution for request templates.

``{name}`` placeholders in strings are replaced with context values;
placeholders whose key is not in the context are left untouched.
``Generator`` values are called in place to produce dynamic data.
"""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z0-9\-_.]+)\}")


@dataclass(frozen=True)
class Generator:
    """Deferred call producing a live value during substitution.

    Example::

        body = {"email": Generator(random_email, ("example.com",))}
    """
    func: Callable[..., Any]
    params: tuple = field(default_factory=tuple)

    def __call__(self) -> Any:
        return self.func(*self.params)


def to_text(value: Any) -> str:
    """Render a context value for insertion into a string."""
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (bool, list, dict)):
        return json.dumps(value, default=str)
    return str(value)


def substitute_string(text: str, context: Mapping[str, Any]) -> str:
    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key in context:
            return to_text(context[key])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, text)


def substitute(value: Any, context: Mapping[str, Any]) -> Any:
    """Return a copy of ``value`` with placeholders resolved from ``context``.

    Args:
        value: String, Generator, list/tuple, mapping or any other value.
        context: Variables available for substitution.

    Returns:
        The substituted value; the input is never modified.
    """
    if isinstance(value, str):
        return substitute_string(value, context)

    if isinstance(value, Generator):
        return value()

    if isinstance(value, list):
        return [substitute(item, context) for item in value]

    if isinstance(value, tuple):
        return tuple(substitute(item, context) for item in value)

    if isinstance(value, Mapping):
        return {key: substitute(item, context) for key, item in value.items()}

    return value


def placeholders(value: Any) -> set[str]:
    """Names of all placeholders referenced anywhere in ``value``."""
    if isinstance(value, str):
        return set(PLACEHOLDER_PATTERN.findall(value))
    if isinstance(value, (list, tuple)):
        return set().union(*(placeholders(item) for item in value)) if value else set()
    if isinstance(value, Mapping):
        return set().union(*(placeholders(item) for item in value.values())) if value else set()
    return set()
