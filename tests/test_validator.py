from __future__ import annotations

import pytest

from sequence_runner import validators
from sequence_runner.validators.engine import Validator
from tests.utils import make_response


@pytest.fixture
def validator() -> Validator:
    return Validator()


def test_composite_and(validator: Validator) -> None:
    rule = validators.and_(validators.status(200), validators.has_field("data.id"))
    assert not validator.validate(rule, make_response(status=200, data={}))
    assert not validator.validate(rule, make_response(status=404, data={"id": 1}))
    assert validator.validate(rule, make_response(status=200, data={"id": 1}))


def test_or_and_not(validator: Validator) -> None:
    response = make_response(status=204)
    assert validator.validate(validators.or_(validators.status(200), validators.status(204)), response)
    assert validator.validate(validators.not_(validators.status(500)), response)
    assert not validator.validate(validators.not_("status_204"), response)


def test_combinators_resolve_registered_names(validator: Validator) -> None:
    validator.register("has_owner", validators.has_field("data.owner"))
    response = make_response(status=200, data={"owner": "ann"})

    assert validator.validate(validators.and_("has_owner", validators.status(200)), response)
    assert validator.validate(validators.or_("status_404", "has_owner"), response)
    assert not validator.validate(validators.not_("has_owner"), response)
    nested = validators.and_(validators.or_("status_500", "has_owner"), "status_200")
    assert validator.validate(nested, response)


def test_combinator_called_directly_uses_builtins() -> None:
    rule = validators.and_("status_200", validators.has_field("id"))
    assert rule(make_response(status=200, data={"id": 1}))
    assert not validators.and_("unregistered")(make_response(status=200))


def test_has_field_prefix_equivalence() -> None:
    response = make_response(data={"id": "abc"})
    assert validators.has_field("data.id")(response) == validators.has_field("id")(response) is True


def test_named_builtins(validator: Validator) -> None:
    created = make_response(status=201, headers={"Content-Type": "application/json; charset=utf-8"})
    assert validator.validate("status_201", created)
    assert validator.validate("status_success", created)
    assert validator.validate("is_json", created)
    assert not validator.validate("status_200", created)
    assert not validator.validate("is_html", created)


def test_unknown_name_fails(validator: Validator) -> None:
    outcome = validator.check("no_such_validator", make_response())
    assert not outcome.passed
    assert "no_such_validator" in outcome.message


def test_custom_validator_shadows_builtin(validator: Validator) -> None:
    validator.register("status_200", lambda response: True)
    assert validator.validate("status_200", make_response(status=500))


def test_mapping_is_anded_and_reports_failed_key(validator: Validator) -> None:
    rule = {"ok": validators.status(200), "has_id": validators.has_id, "never": validators.never()}
    outcome = validator.check(rule, make_response(status=200, data={"id": 1}))
    assert not outcome.passed
    assert outcome.failed_key == "never"


def test_mapping_short_circuits(validator: Validator) -> None:
    calls = []

    def track(response):
        calls.append("second")
        return True

    assert not validator.validate({"first": validators.never(), "second": track}, make_response())
    assert calls == []


def test_exceptions_become_false(validator: Validator) -> None:
    def broken(response):
        raise RuntimeError("boom")

    outcome = validator.check(broken, make_response())
    assert not outcome.passed
    assert "boom" in outcome.message


def test_non_boolean_result_is_coerced(validator: Validator) -> None:
    assert validator.validate(lambda response: response.data, make_response(data={"x": 1}))
    assert not validator.validate(lambda response: response.data, make_response(data={}))


def test_invalid_spec_type(validator: Validator) -> None:
    assert not validator.validate(42, make_response())


def test_async_validator(validator: Validator) -> None:
    async def is_ok(response):
        return response.status == 200

    assert validator.validate(is_ok, make_response(status=200))
    assert not validator.validate(is_ok, make_response(status=500))


@pytest.mark.parametrize(
    "predicate, response, expected",
    [
        (validators.status_in([200, 201]), make_response(status=201), True),
        (validators.status_range(200, 299), make_response(status=300), False),
        (validators.status_not(404), make_response(status=404), False),
        (validators.status_client_error, make_response(status=422), True),
        (validators.status_server_error, make_response(status=503), True),
        (validators.status_redirect, make_response(status=302), True),
        (validators.has_data, make_response(data=0), True),
        (validators.has_message, make_response(data={"message": "hi"}), True),
        (validators.has_error, make_response(data={}), False),
        (validators.is_array, make_response(data=[]), True),
        (validators.is_object, make_response(data={}), True),
        (validators.is_string, make_response(data="x"), True),
        (validators.is_number, make_response(data=True), False),
        (validators.is_boolean, make_response(data=False), True),
        (validators.not_empty, make_response(data=[1]), True),
        (validators.is_empty, make_response(data=""), True),
        (validators.field_equals("user.name", "ann"), make_response(data={"user": {"name": "ann"}}), True),
        (validators.field_not_equals("n", 1), make_response(data={"n": 2}), True),
        (validators.field_matches("email", r"@example\.com$"), make_response(data={"email": "a@example.com"}), True),
        (validators.field_exists("missing"), make_response(data={}), False),
        (validators.field_type("items", "array"), make_response(data={"items": []}), True),
        (validators.array_length(2), make_response(data=[1, 2]), True),
        (validators.array_min_length(3), make_response(data=[1, 2]), False),
        (validators.array_max_length(2), make_response(data=[1, 2]), True),
        (validators.array_contains("b"), make_response(data=["a", "b"]), True),
        (validators.array_not_contains("b"), make_response(data=["a", "b"]), False),
        (validators.has_header("X-Trace"), make_response(headers={"x-trace": "1"}), True),
        (validators.header_equals("ETag", "v1"), make_response(headers={"ETag": "v1"}), True),
        (validators.header_matches("Content-Type", "xml"), make_response(headers={"Content-Type": "text/xml"}), True),
        (validators.has_content_type, make_response(), False),
        (validators.is_xml, make_response(headers={"content-type": "application/xml"}), True),
        (validators.is_html, make_response(headers={"content-type": "text/html"}), True),
        (validators.custom(lambda response: response.status == 200), make_response(), True),
        (validators.always(), make_response(status=500), True),
    ],
)
def test_predicates(predicate, response, expected) -> None:
    assert bool(predicate(response)) is expected


def test_schema_predicate() -> None:
    rule = validators.schema({"type": "object", "required": ["id"]})
    assert rule(make_response(data={"id": 1}))
    assert not rule(make_response(data={"name": "x"}))
