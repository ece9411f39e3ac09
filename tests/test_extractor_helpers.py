from __future__ import annotations

from datetime import datetime

import pytest

from sequence_runner.extractors import helpers
from sequence_runner.extractors.engine import Extractor
from tests.utils import make_response


@pytest.fixture
def listing():
    return make_response(
        status=200,
        data={
            "items": [
                {"id": 1, "price": "10", "tags": ["a"]},
                {"id": 2, "price": 5.5, "tags": []},
            ],
            "created": "2024-05-01T10:30:00Z",
            "count": "3",
        },
        headers={
            "Location": "https://api.example.com/api/users/42?tab=profile",
            "Set-Cookie": ["theme=dark; Path=/", "session=s%20id; HttpOnly"],
        },
    )


def test_path_transform_default(listing) -> None:
    assert helpers.path("items[0].id")(listing) == 1
    assert helpers.transform("count", lambda value, response: int(value) * 2)(listing) == 6
    assert helpers.with_default("missing", "d")(listing) == "d"


def test_array_helpers(listing) -> None:
    assert helpers.array_map("items", "id")(listing) == [1, 2]
    assert helpers.array_filter("items", lambda item: item["tags"])(listing) == [listing.data["items"][0]]
    assert helpers.array_find("items", lambda item: item["id"] == 2)(listing)["price"] == 5.5
    assert helpers.array_pluck("items", "id")(listing) == [1, 2]
    assert helpers.array_length("items")(listing) == 2
    assert helpers.array_length("missing")(listing) == 0


def test_aggregates(listing) -> None:
    assert helpers.total("items")(make_response(data={"items": [1, "2", 3.5]})) == 6.5
    assert helpers.average("items")(make_response(data={"items": [2, 4]})) == 3
    assert helpers.average("items")(make_response(data={"items": []})) == 0


def test_conditional_and_computed(listing) -> None:
    pick = helpers.conditional(
        [{"if": {"path": "count", "equals": "3"}, "then": "items[1].id"}],
        default="none",
    )
    assert pick(listing) == 2
    assert helpers.computed(lambda response: response.status + 1)(listing) == 201


def test_regex_helper(listing) -> None:
    assert helpers.regex("created", r"(\d{4})-(\d{2})", 2)(listing) == "05"


def test_cookie_and_location_helpers(listing) -> None:
    assert helpers.cookie_value("session")(listing) == "s id"
    assert helpers.cookie_value("missing")(listing) is None
    assert helpers.url_path("users")(listing) == "42"
    assert helpers.url_path(0)(listing) == "api"
    assert helpers.url_path()(listing) == ["api", "users", "42"]
    assert helpers.url_query("tab")(listing) == "profile"


def test_json_path(listing) -> None:
    assert helpers.json_path("$.items[1].id")(listing) == 2
    with pytest.raises(ValueError):
        helpers.json_path("items")


def test_conversions(listing) -> None:
    assert helpers.to_string("items[0].id")(listing) == "1"
    assert helpers.to_string("missing")(listing) == ""
    assert helpers.to_number("count")(listing) == 3
    assert helpers.to_number("items[1].price")(listing) == 5.5
    assert helpers.to_number("missing")(listing) == 0
    assert helpers.to_boolean("items[1].tags")(listing) is False
    assert isinstance(helpers.to_date("created")(listing), datetime)
    assert helpers.format_date("created", "date")(listing) == "2024-05-01"
    assert helpers.format_date("created", "%H:%M")(listing) == "10:30"


def test_constant_combine_template(listing) -> None:
    assert helpers.constant("v")(listing) == "v"
    assert helpers.combine("items[0].id", "status")(listing) == [1, 200]
    assert helpers.template("user {0} has {1} items", "data.count", helpers.array_length("items"))(listing) == (
        "user 3 has 2 items"
    )


def test_helpers_work_as_extraction_rules(listing) -> None:
    values = Extractor().extract(
        {"ids": helpers.array_pluck("items", "id"), "theme": helpers.cookie_value("theme")},
        listing,
    )
    assert values == {"ids": [1, 2], "theme": "dark"}
