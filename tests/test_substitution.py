from __future__ import annotations

from sequence_runner.substitution import Generator, placeholders, substitute


def test_string_without_placeholders_is_unchanged() -> None:
    assert substitute("/api/items", {"id": 1}) == "/api/items"


def test_missing_key_keeps_placeholder() -> None:
    assert substitute("/items/{id}/{missing}", {"id": "abc"}) == "/items/abc/{missing}"


def test_substitution_is_idempotent_once_resolved() -> None:
    context = {"id": "abc"}
    once = substitute("/items/{id}", context)
    assert substitute(once, context) == once


def test_non_string_values_are_rendered() -> None:
    context = {"n": 42, "flag": True, "nothing": None, "tags": ["a"]}
    assert substitute("{n}-{flag}-{nothing}", context) == "42-true-null"
    assert substitute("tags={tags}", context) == 'tags=["a"]'


def test_identifier_charset() -> None:
    context = {"user.id": 7, "api-key": "k", "a_b": "c"}
    assert substitute("{user.id}/{api-key}/{a_b}", context) == "7/k/c"
    assert substitute("{not valid}", {"not valid": 1}) == "{not valid}"


def test_nested_structures_are_copied() -> None:
    body = {"name": "{name}", "tags": ["{tag}", 3], "meta": {"owner": "{name}"}}
    result = substitute(body, {"name": "alice", "tag": "t1"})
    assert result == {"name": "alice", "tags": ["t1", 3], "meta": {"owner": "alice"}}
    assert body["name"] == "{name}"
    assert list(result) == ["name", "tags", "meta"]


def test_generator_is_called_in_place() -> None:
    calls = []

    def make_email(domain: str) -> str:
        calls.append(domain)
        return f"user@{domain}"

    body = {"email": Generator(make_email, ("example.com",))}
    assert substitute(body, {}) == {"email": "user@example.com"}
    assert calls == ["example.com"]


def test_other_values_pass_through() -> None:
    marker = object()
    assert substitute(5, {}) == 5
    assert substitute(None, {}) is None
    assert substitute(marker, {}) is marker


def test_placeholders_are_collected() -> None:
    value = {"url": "/a/{x}", "items": ["{y}", {"z": "{x}"}], "n": 1}
    assert placeholders(value) == {"x", "y"}
