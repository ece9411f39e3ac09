"""Shared variable context of one scenario run."""

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any, Optional


class Context(MutableMapping):
    """Variables visible to substitution, seeded from the initial variables.

    Steps add or overwrite keys; keys are never removed during a run.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._values: dict[str, Any] = dict(initial or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        raise TypeError("Context variables cannot be removed during a run")

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Context({self._values!r})"

    def merge(self, values: Mapping[str, Any]) -> None:
        """Add new keys and overwrite existing ones."""
        self._values.update(values)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)
