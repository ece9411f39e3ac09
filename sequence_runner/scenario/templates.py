"""Starter scenario templates used by ``ScenarioLoader`` and ``sequence-runner init``.

Templates only use named validators and path extractors so they can be
written out as YAML.
"""

from typing import Any, Callable


def _basic(name: str) -> dict[str, Any]:
    return {
        "name": name,
        "description": f"Basic scenario: {name}",
        "steps": [
            {
                "name": "step1",
                "method": "GET",
                "url": "/api/example",
                "validate": "status_200",
                "extract": {},
            },
        ],
    }


def _crud(name: str) -> dict[str, Any]:
    return {
        "name": name,
        "description": f"CRUD operations scenario: {name}",
        "steps": [
            {
                "name": "create",
                "method": "POST",
                "url": "/api/items",
                "body": {"name": "Test Item"},
                "validate": "status_201",
                "extract": {"item_id": "data.id"},
            },
            {
                "name": "read",
                "method": "GET",
                "url": "/api/items/{item_id}",
                "validate": "status_200",
            },
            {
                "name": "update",
                "method": "PUT",
                "url": "/api/items/{item_id}",
                "body": {"name": "Updated Item"},
                "validate": "status_200",
            },
            {
                "name": "delete",
                "method": "DELETE",
                "url": "/api/items/{item_id}",
                "validate": "status_204",
            },
        ],
    }


def _auth(name: str) -> dict[str, Any]:
    return {
        "name": name,
        "description": f"Authentication scenario: {name}",
        "steps": [
            {
                "name": "login",
                "method": "POST",
                "url": "/api/auth/login",
                "body": {"username": "testuser", "password": "testpass"},
                "validate": {"ok": "status_200"},
                "extract": {"auth_token": "data.token"},
            },
            {
                "name": "get_profile",
                "method": "GET",
                "url": "/api/auth/profile",
                "headers": {"Authorization": "Bearer {auth_token}"},
                "validate": "status_200",
            },
        ],
    }


TEMPLATES: dict[str, Callable[[str], dict[str, Any]]] = {
    "basic": _basic,
    "crud": _crud,
    "auth": _auth,
}


def create_from_template(name: str, template: str = "basic") -> dict[str, Any]:
    """Build a scenario mapping from a named template.

    Raises:
        ValueError: If the template is unknown.
    """
    if template not in TEMPLATES:
        raise ValueError(
            f"Unknown template: {template}. Available templates: {', '.join(TEMPLATES)}"
        )
    return TEMPLATES[template](name)
