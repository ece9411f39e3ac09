"""Shared test doubles."""

from __future__ import annotations

from typing import Any, Optional

from sequence_runner.transport.response import Response


class StubTransport:
    """Transport double returning queued responses and recording calls."""

    def __init__(self, responses: Optional[list[Any]] = None) -> None:
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []
        self.default_headers = {"Content-Type": "application/json", "Accept": "application/json"}
        self.base_url = "http://stub"

    def send(self, method: str, url: str, body: Any = None, headers: Optional[dict] = None) -> Any:
        self.calls.append({"method": method, "url": url, "body": body, "headers": headers})
        if not self.responses:
            return Response(status=200, status_text="OK", data={})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def set_auth_token(self, token: Optional[str]) -> None:
        self.default_headers["Authorization"] = f"Bearer {token}"

    def set_headers(self, headers: dict[str, str]) -> None:
        self.default_headers.update(headers)


def make_response(
    status: int = 200,
    data: Any = None,
    headers: Optional[dict[str, Any]] = None,
    status_text: str = "",
) -> Response:
    return Response(status=status, status_text=status_text, headers=headers or {}, data=data)
