"""Runner module - scenario and step execution."""

from .context import Context
from .results import ScenarioReport, StepResult, summarize
from .step_executor import StepExecutor, StepOutcome, StepState, dry_run_response
from .scenario_runner import HOOKS, ScenarioRunner, build_transport

__all__ = [
    "Context",
    "ScenarioReport",
    "StepResult",
    "summarize",
    "StepExecutor",
    "StepOutcome",
    "StepState",
    "dry_run_response",
    "HOOKS",
    "ScenarioRunner",
    "build_transport",
]
