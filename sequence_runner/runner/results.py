"""Result models of a scenario run."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from ..scenario.schema import Step


@dataclass(frozen=True)
class StepResult:
    """Outcome of one executed step."""
    index: int
    step: Step
    success: bool
    result: Any = None
    error: Optional[str] = None
    duration_ms: float = 0.0

    @property
    def step_name(self) -> str:
        return self.step.name

    def to_dict(self) -> dict[str, Any]:
        response = self.result.to_dict() if hasattr(self.result, "to_dict") else self.result
        result: dict[str, Any] = {
            "index": self.index,
            "step": self.step.name,
            "success": self.success,
            "duration_ms": round(self.duration_ms, 2),
        }
        if response is not None:
            result["response"] = response
        if self.error:
            result["error"] = self.error
        return result


def summarize(results: list[StepResult]) -> dict[str, int]:
    """Summary counts over a result list."""
    successful = sum(1 for r in results if r.success)
    return {
        "total": len(results),
        "successful": successful,
        "failed": len(results) - successful,
    }


@dataclass
class ScenarioReport:
    """Bundle handed to reporters after a run completes or aborts."""
    scenario_name: str
    results: list[StepResult] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    summary: dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if not self.summary:
            self.summary = summarize(self.results)

    @property
    def success(self) -> bool:
        return self.summary.get("failed", 0) == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "scenario_name": self.scenario_name,
            "success": self.success,
            "timestamp": self.timestamp,
            "summary": dict(self.summary),
            "context": dict(self.context),
            "results": [r.to_dict() for r in self.results],
        }
