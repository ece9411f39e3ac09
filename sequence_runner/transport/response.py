"""Response model shared by the transport and the engines."""

import json
from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass
class Response:
    """A response as seen by validators and extractors.

    Header names are stored lower-case so lookups are case-insensitive.
    """
    status: int = 0
    status_text: str = ""
    headers: dict[str, Any] = field(default_factory=dict)
    data: Any = None

    def __post_init__(self):
        self.headers = {str(k).lower(): v for k, v in (self.headers or {}).items()}

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any]) -> "Response":
        """Build a Response from a response-shaped mapping."""
        return cls(
            status=value.get("status", 0),
            status_text=value.get("status_text", value.get("statusText", "")),
            headers=dict(value.get("headers") or {}),
            data=value.get("data"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "status_text": self.status_text,
            "headers": dict(self.headers),
            "data": self.data,
        }

    def to_json(self) -> str:
        """Serialize the whole response, falling back to str() for odd values."""
        return json.dumps(self.to_dict(), default=str, ensure_ascii=False)

    def summary(self) -> dict[str, Any]:
        """Short description used in verbose logs."""
        data = self.data
        return {
            "status": self.status,
            "data_keys": list(data.keys()) if isinstance(data, dict) else [],
            "data_size": len(json.dumps(data, default=str)) if data is not None else 0,
        }
