"""Dotted/indexed path resolution against a response.

Examples::

    resolve_path("status", response)                -> response.status
    resolve_path("headers.Content-Type", response)  -> response.headers["content-type"]
    resolve_path("data.items[1].name", response)    -> response.data["items"][1]["name"]
    resolve_path("items[1].name", response)         -> same as above

Resolution never raises: anything missing along the way yields None.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional

_INDEXED_SEGMENT = re.compile(r"^(.*)\[(\d+)\]$")

_STATUS_TEXT_PATHS = {"statusText", "status_text"}


def resolve_path(path: str, response: Any) -> Any:
    """Resolve ``path`` against a Response (or a response-shaped mapping).

    Args:
        path: Dotted path, optionally with ``name[idx]`` segments.
        response: Response object or mapping with status/headers/data.

    Returns:
        The resolved value, or None when any segment is missing.
    """
    if not isinstance(path, str):
        return None

    if path == "status":
        return response_field(response, "status")

    if path in _STATUS_TEXT_PATHS:
        return response_field(response, "status_text")

    if path.startswith("headers."):
        return get_header(response_field(response, "headers"), path[len("headers."):])

    current = response_field(response, "data")
    parts = path.split(".")

    first = _INDEXED_SEGMENT.match(parts[0])
    if parts[0] == "data":
        parts = parts[1:]
    elif first and first.group(1) == "data":
        # "data[0]" indexes the root body itself
        parts = [f"[{first.group(2)}]"] + parts[1:]

    for part in parts:
        if current is None:
            return None
        current = _step(current, part)

    return current


def response_field(response: Any, name: str) -> Any:
    """Read a top-level field from a Response or a response-shaped mapping."""
    if response is None:
        return None
    if isinstance(response, Mapping):
        if name == "status_text" and name not in response:
            return response.get("statusText")
        return response.get(name)
    return getattr(response, name, None)


def get_header(headers: Any, name: str) -> Any:
    """Case-insensitive header lookup."""
    if not isinstance(headers, Mapping):
        return None
    lowered = name.lower()
    if lowered in headers:
        return headers[lowered]
    for key, value in headers.items():
        if str(key).lower() == lowered:
            return value
    return None


def _step(current: Any, part: str) -> Any:
    match = _INDEXED_SEGMENT.match(part)
    if match:
        name, index = match.group(1), int(match.group(2))
        if name:
            current = _field(current, name)
        if not _is_sequence(current):
            return None
        return current[index] if index < len(current) else None

    return _field(current, part)


def _field(current: Any, name: str) -> Optional[Any]:
    if isinstance(current, Mapping):
        return current.get(name)
    if _is_sequence(current) and name.isdigit():
        index = int(name)
        return current[index] if index < len(current) else None
    return None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))
