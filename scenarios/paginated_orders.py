"""Walks an order listing and checks the first order in detail.

Python scenarios can use predicates, extractor helpers and generators
that YAML cannot express.
"""

import uuid

from sequence_runner import Generator, validators
from sequence_runner.extractors import helpers


def _reference(prefix):
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


scenario = {
    "name": "paginated_orders",
    "description": "List orders, then fetch and annotate the first one",
    "steps": [
        {
            "name": "list_orders",
            "method": "GET",
            "url": "/api/orders",
            "body": {"page": 1, "per_page": 20},
            "validate": validators.and_(
                validators.status(200),
                validators.field_type("data.items", "array"),
            ),
            "extract": {
                "order_id": "data.items[0].id",
                "order_total": helpers.total("data.items"),
                "order_ids": {"array": {"path": "data.items", "pluck": "id"}},
            },
        },
        {
            "name": "get_order",
            "method": "GET",
            "url": "/api/orders/{order_id}",
            "validate": {
                "ok": validators.status(200),
                "shape": validators.schema({
                    "type": "object",
                    "required": ["id", "status"],
                    "properties": {"status": {"enum": ["open", "paid", "shipped"]}},
                }),
            },
            "extract": {
                "order_status": "data.status",
                "etag": "etag",
            },
        },
        {
            "name": "annotate_order",
            "method": "PATCH",
            "url": "/api/orders/{order_id}",
            "headers": {"If-Match": "{etag}"},
            "body": {
                "note": "checked by sequence-runner",
                "reference": Generator(_reference, ("chk",)),
            },
            "validate": validators.status_in([200, 204]),
        },
    ],
}
