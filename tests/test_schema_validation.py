from __future__ import annotations

from sequence_runner.validators.schema_check import check_schema, data_type, validate_schema

USER_SCHEMA = {
    "type": "object",
    "required": ["id", "email", "roles"],
    "properties": {
        "id": {"type": "integer", "minimum": 1},
        "email": {"type": "string", "pattern": r"^[^@]+@[^@]+$", "max_length": 50},
        "roles": {
            "type": "array",
            "min_items": 1,
            "items": {"type": "string", "enum": ["admin", "user"]},
        },
        "nickname": {"type": "string", "minLength": 2},
    },
}


def test_valid_document() -> None:
    data = {"id": 3, "email": "a@b.c", "roles": ["user"]}
    assert check_schema(USER_SCHEMA, data) is None
    assert validate_schema(USER_SCHEMA, data)


def test_missing_required_field() -> None:
    violation = check_schema(USER_SCHEMA, {"id": 3, "roles": ["user"]})
    assert violation == "Schema validation failed at root: missing required field 'email'"


def test_nested_violation_reports_path() -> None:
    data = {"id": 3, "email": "a@b.c", "roles": ["user", "guest"]}
    violation = check_schema(USER_SCHEMA, data)
    assert violation.startswith("Schema validation failed at root.roles[1]:")
    assert "guest" in violation


def test_type_checks() -> None:
    assert not validate_schema({"type": "integer"}, 1.5)
    assert validate_schema({"type": "integer"}, 2.0)
    assert not validate_schema({"type": "number"}, True)
    assert validate_schema({"type": "null"}, None)
    assert data_type([]) == "array"
    assert data_type({}) == "object"


def test_bounds_and_camel_case_aliases() -> None:
    assert not validate_schema({"type": "array", "maxItems": 1}, [1, 2])
    assert not validate_schema({"minimum": 5}, 4)
    assert not validate_schema({"maximum": 5}, 6)
    data = {"id": 3, "email": "a@b.c", "roles": ["user"], "nickname": "x"}
    assert "root.nickname" in check_schema(USER_SCHEMA, data)


def test_custom_validate_hook() -> None:
    even = {"type": "number", "validate": lambda value: value % 2 == 0}
    assert validate_schema(even, 4)
    assert check_schema(even, 3) == "Custom schema validation failed at root"
