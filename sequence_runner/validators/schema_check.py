"""Recursive structural schema checks for response bodies.

A small JSON-Schema-like subset::

    {
        "type": "object",
        "required": ["id", "items"],
        "properties": {
            "id": {"type": "string", "pattern": "^[a-z0-9-]+$"},
            "items": {"type": "array", "min_items": 1, "items": {"type": "object"}},
        },
    }

Checks stop at the first violation, reported with its path
(``root.items[0].name``).
"""

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

logger = logging.getLogger(__name__)

_ALIASES = {
    "minItems": "min_items",
    "maxItems": "max_items",
    "minLength": "min_length",
    "maxLength": "max_length",
}


def data_type(data: Any) -> str:
    """Name of the JSON type of ``data``."""
    if data is None:
        return "null"
    if isinstance(data, bool):
        return "boolean"
    if isinstance(data, (int, float)):
        return "number"
    if isinstance(data, str):
        return "string"
    if isinstance(data, (list, tuple)):
        return "array"
    if isinstance(data, Mapping):
        return "object"
    return type(data).__name__


def _type_matches(expected: str, data: Any) -> bool:
    if expected == "integer":
        return data_type(data) == "number" and float(data).is_integer()
    return data_type(data) == expected


def check_schema(schema: Mapping[str, Any], data: Any, path: str = "root") -> Optional[str]:
    """Return the first violation of ``schema`` by ``data``, or None."""
    try:
        return _check(_normalize(schema), data, path)
    except Exception as e:
        return f"Schema validation error at {path}: {e}"


def validate_schema(schema: Mapping[str, Any], data: Any) -> bool:
    """Validate ``data`` against ``schema``, logging the first violation."""
    violation = check_schema(schema, data)
    if violation:
        logger.error(violation)
        return False
    return True


def _normalize(schema: Mapping[str, Any]) -> dict[str, Any]:
    return {_ALIASES.get(key, key): value for key, value in schema.items()}


def _check(schema: dict[str, Any], data: Any, path: str) -> Optional[str]:
    expected = schema.get("type")
    if expected and not _type_matches(expected, data):
        return f"Schema validation failed at {path}: expected {expected}, got {data_type(data)}"

    allowed = schema.get("enum")
    if isinstance(allowed, list) and data not in allowed:
        return (
            f"Schema validation failed at {path}: value {data!r} not in allowed values "
            f"[{', '.join(str(v) for v in allowed)}]"
        )

    required = schema.get("required")
    if isinstance(required, list):
        if not isinstance(data, Mapping):
            return f"Schema validation failed at {path}: expected object with required fields"
        for name in required:
            if name not in data:
                return f"Schema validation failed at {path}: missing required field '{name}'"

    properties = schema.get("properties")
    if isinstance(properties, Mapping) and isinstance(data, Mapping):
        for name, sub_schema in properties.items():
            if name in data:
                violation = _check(_normalize(sub_schema), data[name], f"{path}.{name}")
                if violation:
                    return violation

    items = schema.get("items")
    if isinstance(items, Mapping) and isinstance(data, (list, tuple)):
        item_schema = _normalize(items)
        for index, item in enumerate(data):
            violation = _check(item_schema, item, f"{path}[{index}]")
            if violation:
                return violation

    if isinstance(data, (list, tuple)):
        if schema.get("min_items") is not None and len(data) < schema["min_items"]:
            return (
                f"Schema validation failed at {path}: array length {len(data)} "
                f"is less than minimum {schema['min_items']}"
            )
        if schema.get("max_items") is not None and len(data) > schema["max_items"]:
            return (
                f"Schema validation failed at {path}: array length {len(data)} "
                f"is greater than maximum {schema['max_items']}"
            )

    if isinstance(data, str):
        if schema.get("min_length") is not None and len(data) < schema["min_length"]:
            return (
                f"Schema validation failed at {path}: string length {len(data)} "
                f"is less than minimum {schema['min_length']}"
            )
        if schema.get("max_length") is not None and len(data) > schema["max_length"]:
            return (
                f"Schema validation failed at {path}: string length {len(data)} "
                f"is greater than maximum {schema['max_length']}"
            )
        pattern = schema.get("pattern")
        if pattern and not re.search(pattern, data):
            return f"Schema validation failed at {path}: string {data!r} does not match pattern {pattern}"

    if data_type(data) == "number":
        if schema.get("minimum") is not None and data < schema["minimum"]:
            return f"Schema validation failed at {path}: value {data} is less than minimum {schema['minimum']}"
        if schema.get("maximum") is not None and data > schema["maximum"]:
            return f"Schema validation failed at {path}: value {data} is greater than maximum {schema['maximum']}"

    custom = schema.get("validate")
    if callable(custom):
        try:
            if not custom(data):
                return f"Custom schema validation failed at {path}"
        except Exception as e:
            return f"Custom schema validation error at {path}: {e}"

    return None
