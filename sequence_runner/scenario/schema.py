"""Scenario data models for HTTP sequence scenarios.

Defines frozen dataclasses so a loaded scenario cannot change while it runs.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

DEFAULT_STEP_TYPE = "http"

VALID_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


@dataclass(frozen=True)
class Step:
    """One request-validate-extract unit of work."""
    name: str
    type: str = DEFAULT_STEP_TYPE
    method: Optional[str] = None
    url: Optional[str] = None
    body: Any = None
    headers: Optional[dict[str, Any]] = None
    validate: Any = None
    extract: Optional[dict[str, Any]] = None
    transform: Optional[Callable[[Any, Any], Any]] = None
    description: Optional[str] = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def is_http(self) -> bool:
        return self.type == DEFAULT_STEP_TYPE

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary, dropping unset fields and callables."""
        result: dict[str, Any] = {"name": self.name, "type": self.type}
        for key in ("method", "url", "body", "headers", "description"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if isinstance(self.validate, (str, dict)):
            result["validate"] = self.validate
        if self.extract and all(isinstance(v, (str, dict)) for v in self.extract.values()):
            result["extract"] = self.extract
        result.update(self.options)
        return result


@dataclass(frozen=True)
class Scenario:
    """A named, ordered sequence of steps."""
    name: str
    steps: tuple[Step, ...] = ()
    description: str = ""

    @property
    def total_steps(self) -> int:
        """Total number of steps."""
        return len(self.steps)

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self.steps]

    def to_dict(self) -> dict[str, Any]:
        """Convert scenario to dictionary for serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "steps": [step.to_dict() for step in self.steps],
        }


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of scenario validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"
