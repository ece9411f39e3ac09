"""Predicate library for building validation specs.

Factories return predicates of the response; plain predicates are used
as-is::

    from sequence_runner import validators

    validate = validators.and_(validators.status(201), validators.has_field("data.id"))
    validate = {"created": validators.status(201), "json": validators.is_json}

Field paths are resolved like extraction paths, so ``"data.id"`` and
``"id"`` point at the same field.
"""

import re
from collections.abc import Mapping
from typing import Any, Callable, Iterable

from ..extractors.path_resolver import get_header, resolve_path, response_field
from .engine import Combinator, content_type
from .schema_check import data_type, validate_schema

Predicate = Callable[[Any], Any]

__all__ = [
    "status", "status_in", "status_range", "status_not",
    "status_success", "status_redirect", "status_client_error", "status_server_error",
    "has_data", "has_field", "has_id", "has_message", "has_error",
    "is_array", "is_object", "is_string", "is_number", "is_boolean",
    "not_empty", "is_empty",
    "field_equals", "field_not_equals", "field_matches", "field_exists", "field_type",
    "array_length", "array_min_length", "array_max_length",
    "array_contains", "array_not_contains",
    "has_header", "header_equals", "header_matches",
    "has_content_type", "is_json", "is_xml", "is_html",
    "schema", "and_", "or_", "not_", "custom", "always", "never",
]


def _status(response: Any) -> Any:
    return response_field(response, "status")


def _data(response: Any) -> Any:
    return response_field(response, "data")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Status codes

def status(code: int) -> Predicate:
    return lambda response: _status(response) == code


def status_in(codes: Iterable[int]) -> Predicate:
    allowed = set(codes)
    return lambda response: _status(response) in allowed


def status_range(low: int, high: int) -> Predicate:
    """Inclusive range check."""
    def predicate(response):
        value = _status(response)
        return _is_number(value) and low <= value <= high
    return predicate


def status_not(code: int) -> Predicate:
    return lambda response: _status(response) != code


def status_success(response: Any) -> bool:
    return status_range(200, 299)(response)


def status_redirect(response: Any) -> bool:
    return status_range(300, 399)(response)


def status_client_error(response: Any) -> bool:
    return status_range(400, 499)(response)


def status_server_error(response: Any) -> bool:
    return status_range(500, 599)(response)


# Data presence

def has_data(response: Any) -> bool:
    return _data(response) is not None


def has_field(field_path: str) -> Predicate:
    return lambda response: resolve_path(field_path, response) is not None


def has_id(response: Any) -> bool:
    return bool(resolve_path("id", response))


def has_message(response: Any) -> bool:
    return bool(resolve_path("message", response))


def has_error(response: Any) -> bool:
    return bool(resolve_path("error", response))


# Data types

def is_array(response: Any) -> bool:
    return isinstance(_data(response), list)


def is_object(response: Any) -> bool:
    return isinstance(_data(response), Mapping)


def is_string(response: Any) -> bool:
    return isinstance(_data(response), str)


def is_number(response: Any) -> bool:
    return _is_number(_data(response))


def is_boolean(response: Any) -> bool:
    return isinstance(_data(response), bool)


# Data content

def not_empty(response: Any) -> bool:
    data = _data(response)
    if isinstance(data, (list, Mapping)):
        return len(data) > 0
    return data is not None and data != ""


def is_empty(response: Any) -> bool:
    return not not_empty(response)


# Fields

def field_equals(field_path: str, value: Any) -> Predicate:
    return lambda response: resolve_path(field_path, response) == value


def field_not_equals(field_path: str, value: Any) -> Predicate:
    return lambda response: resolve_path(field_path, response) != value


def field_matches(field_path: str, pattern: Any) -> Predicate:
    def predicate(response):
        value = resolve_path(field_path, response)
        return isinstance(value, str) and re.search(pattern, value) is not None
    return predicate


def field_exists(field_path: str) -> Predicate:
    return has_field(field_path)


def field_type(field_path: str, expected_type: str) -> Predicate:
    """Compare against JSON type names: string, number, boolean, object, array, null."""
    return lambda response: data_type(resolve_path(field_path, response)) == expected_type


# Arrays

def array_length(expected: int) -> Predicate:
    return lambda response: is_array(response) and len(_data(response)) == expected


def array_min_length(minimum: int) -> Predicate:
    return lambda response: is_array(response) and len(_data(response)) >= minimum


def array_max_length(maximum: int) -> Predicate:
    return lambda response: is_array(response) and len(_data(response)) <= maximum


def array_contains(value: Any) -> Predicate:
    return lambda response: is_array(response) and value in _data(response)


def array_not_contains(value: Any) -> Predicate:
    return lambda response: is_array(response) and value not in _data(response)


# Headers

def _header(response: Any, name: str) -> Any:
    return get_header(response_field(response, "headers"), name)


def has_header(name: str) -> Predicate:
    return lambda response: _header(response, name) is not None


def header_equals(name: str, value: Any) -> Predicate:
    return lambda response: _header(response, name) == value


def header_matches(name: str, pattern: Any) -> Predicate:
    def predicate(response):
        value = _header(response, name)
        return isinstance(value, str) and re.search(pattern, value) is not None
    return predicate


# Content types

def has_content_type(response: Any) -> bool:
    return bool(content_type(response))


def is_json(response: Any) -> bool:
    return "application/json" in content_type(response)


def is_xml(response: Any) -> bool:
    value = content_type(response)
    return "application/xml" in value or "text/xml" in value


def is_html(response: Any) -> bool:
    return "text/html" in content_type(response)


# Schema

def schema(definition: Mapping[str, Any]) -> Predicate:
    return lambda response: validate_schema(definition, _data(response))


# Combinators

def and_(*specs: Any) -> Combinator:
    """All specs must pass; evaluation stops at the first failure."""
    return Combinator(
        lambda validator, response: all(validator.validate(spec, response) for spec in specs)
    )


def or_(*specs: Any) -> Combinator:
    """At least one spec must pass; evaluation stops at the first success."""
    return Combinator(
        lambda validator, response: any(validator.validate(spec, response) for spec in specs)
    )


def not_(spec: Any) -> Combinator:
    return Combinator(lambda validator, response: not validator.validate(spec, response))


# Utilities

def custom(predicate: Predicate) -> Predicate:
    return predicate


def always() -> Predicate:
    return lambda response: True


def never() -> Predicate:
    return lambda response: False
