"""Factories for common extractors.

Every helper returns a callable of the response, so it can be used
directly as an extraction rule::

    extract = {
        "total": helpers.array_length("data.items"),
        "session": helpers.cookie_value("session"),
    }
"""

import re
from datetime import datetime
from typing import Any, Callable, Optional, Union
from urllib.parse import parse_qs, unquote, urlsplit

from .engine import Extractor
from .path_resolver import get_header, resolve_path, response_field


def _as_list(value: Any) -> Optional[list]:
    return value if isinstance(value, list) else None


def path(path_string: str) -> Callable[[Any], Any]:
    return lambda response: resolve_path(path_string, response)


def transform(path_string: str, transform_fn: Optional[Callable] = None) -> Callable[[Any], Any]:
    def extractor(response):
        value = resolve_path(path_string, response)
        return transform_fn(value, response) if transform_fn else value
    return extractor


def with_default(path_string: str, default: Any) -> Callable[[Any], Any]:
    def extractor(response):
        value = resolve_path(path_string, response)
        return default if value is None else value
    return extractor


def array_map(array_path: str, item_rule: Any) -> Callable[[Any], list]:
    return lambda response: Extractor().extract_value(
        {"array": {"path": array_path, "map": item_rule}}, response
    ) or []


def array_filter(array_path: str, predicate: Callable[[Any], Any]) -> Callable[[Any], list]:
    def extractor(response):
        items = _as_list(resolve_path(array_path, response))
        return [item for item in items if predicate(item)] if items is not None else []
    return extractor


def array_find(array_path: str, predicate: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def extractor(response):
        items = _as_list(resolve_path(array_path, response)) or []
        return next((item for item in items if predicate(item)), None)
    return extractor


def array_pluck(array_path: str, field_path: str) -> Callable[[Any], list]:
    def extractor(response):
        items = _as_list(resolve_path(array_path, response)) or []
        return [resolve_path(field_path, {"data": item}) for item in items]
    return extractor


def array_length(array_path: str) -> Callable[[Any], int]:
    def extractor(response):
        items = _as_list(resolve_path(array_path, response))
        return len(items) if items is not None else 0
    return extractor


def conditional(branches: list[dict], default: Any = None) -> Callable[[Any], Any]:
    """Conditional rule as a callable; see ConditionalRule."""
    return lambda response: Extractor().extract_value(
        {"conditional": branches, "default": default}, response
    )


def computed(compute_fn: Callable[[Any], Any]) -> Callable[[Any], Any]:
    return lambda response: compute_fn(response)


def regex(source: Optional[str], pattern: str, group: Union[int, str] = 0) -> Callable[[Any], Any]:
    return lambda response: Extractor().extract_value(
        {"regex": pattern, "source": source, "group": group}, response
    )


def cookie_value(cookie_name: str) -> Callable[[Any], Optional[str]]:
    """Value of a cookie set through Set-Cookie."""
    pattern = re.compile(rf"{re.escape(cookie_name)}=([^;]+)")

    def extractor(response):
        cookies = get_header(response_field(response, "headers"), "set-cookie")
        if isinstance(cookies, str):
            cookies = [cookies]
        if not isinstance(cookies, list):
            return None
        for cookie in cookies:
            if isinstance(cookie, str) and f"{cookie_name}=" in cookie:
                match = pattern.search(cookie)
                return unquote(match.group(1)) if match else None
        return None
    return extractor


def _location_parts(response: Any):
    location = get_header(response_field(response, "headers"), "location")
    if not location:
        return None
    return urlsplit(str(location))


def url_path(segment: Union[int, str, None] = None) -> Callable[[Any], Any]:
    """Read the Location header path.

    With an int, return that path segment; with a str, return the segment
    following it (``url_path("users")`` on ``/api/users/42`` gives ``"42"``);
    with None, return all segments.
    """
    def extractor(response):
        parts = _location_parts(response)
        if parts is None:
            return None
        segments = [s for s in parts.path.split("/") if s]
        if isinstance(segment, int):
            return segments[segment] if 0 <= segment < len(segments) else None
        if isinstance(segment, str):
            if segment in segments:
                index = segments.index(segment)
                return segments[index + 1] if index + 1 < len(segments) else None
            return None
        return segments
    return extractor


def url_query(param_name: str) -> Callable[[Any], Optional[str]]:
    def extractor(response):
        parts = _location_parts(response)
        if parts is None:
            return None
        values = parse_qs(parts.query).get(param_name)
        return values[0] if values else None
    return extractor


def json_path(expression: str) -> Callable[[Any], Any]:
    """Minimal JSONPath: only ``$.``-prefixed dotted paths are supported."""
    if not expression.startswith("$."):
        raise ValueError(f"Unsupported JSONPath expression: {expression}")
    return path(expression[2:])


def to_string(path_string: str) -> Callable[[Any], str]:
    def extractor(response):
        value = resolve_path(path_string, response)
        return "" if value is None else str(value)
    return extractor


def to_number(path_string: str) -> Callable[[Any], float]:
    def extractor(response):
        value = resolve_path(path_string, response)
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0
        return int(number) if number.is_integer() else number
    return extractor


def to_boolean(path_string: str) -> Callable[[Any], bool]:
    return lambda response: bool(resolve_path(path_string, response))


def _parse_date(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return None


def to_date(path_string: str) -> Callable[[Any], Optional[datetime]]:
    def extractor(response):
        try:
            return _parse_date(resolve_path(path_string, response))
        except ValueError:
            return None
    return extractor


def format_date(path_string: str, fmt: str = "ISO") -> Callable[[Any], Optional[str]]:
    """Format a date field as ``ISO``, ``date``, ``time`` or a strftime pattern."""
    def extractor(response):
        try:
            date = _parse_date(resolve_path(path_string, response))
        except ValueError:
            return None
        if date is None:
            return None
        if fmt == "ISO":
            return date.isoformat()
        if fmt == "date":
            return date.date().isoformat()
        if fmt == "time":
            return date.time().isoformat()
        return date.strftime(fmt)
    return extractor


def _numbers(items: list) -> list[float]:
    numbers = []
    for item in items:
        try:
            numbers.append(float(item))
        except (TypeError, ValueError):
            numbers.append(0.0)
    return numbers


def total(array_path: str) -> Callable[[Any], float]:
    def extractor(response):
        items = _as_list(resolve_path(array_path, response))
        return sum(_numbers(items)) if items else 0
    return extractor


def average(array_path: str) -> Callable[[Any], float]:
    def extractor(response):
        items = _as_list(resolve_path(array_path, response))
        if not items:
            return 0
        return sum(_numbers(items)) / len(items)
    return extractor


def constant(value: Any) -> Callable[[Any], Any]:
    return lambda response: value


def combine(*rules: Any) -> Callable[[Any], list]:
    def extractor(response):
        extractor_ = Extractor()
        return [extractor_.extract_value(rule, response) for rule in rules]
    return extractor


def template(text: str, *rules: Any) -> Callable[[Any], str]:
    """Fill ``{0}``, ``{1}``... in ``text`` with the extracted rule values."""
    def extractor(response):
        extractor_ = Extractor()
        values = [extractor_.extract_value(rule, response) for rule in rules]

        def replace(match):
            index = int(match.group(1))
            if index < len(values) and values[index] is not None:
                return str(values[index])
            return match.group(0)

        return re.sub(r"\{(\d+)\}", replace, text)
    return extractor
