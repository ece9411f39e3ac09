"""Scenario module - scenario parsing, validation and loading."""

from .schema import (
    DEFAULT_STEP_TYPE,
    VALID_METHODS,
    Scenario,
    Step,
    ValidationError,
    ValidationResult,
)
from .parser import parse_scenario, parse_scenario_data
from .validator import ensure_valid, validate_scenario
from .loader import ScenarioLoader
from .templates import TEMPLATES, create_from_template

__all__ = [
    "DEFAULT_STEP_TYPE",
    "VALID_METHODS",
    "Scenario",
    "Step",
    "ValidationError",
    "ValidationResult",
    "parse_scenario",
    "parse_scenario_data",
    "ensure_valid",
    "validate_scenario",
    "ScenarioLoader",
    "TEMPLATES",
    "create_from_template",
]
