"""Scenario validator for sequence-runner.

Checks scenario structure before anything runs. Works on raw mappings
(as loaded from YAML/JSON/Python files) and on parsed Scenario objects.
"""

from collections.abc import Mapping
from typing import Any, Union

from ..errors import ScenarioStructureError
from .schema import (
    DEFAULT_STEP_TYPE,
    Scenario,
    ValidationError,
    ValidationResult,
    VALID_METHODS,
)


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def validate_scenario(scenario: Union[Scenario, Mapping[str, Any]]) -> ValidationResult:
    """Validate a scenario mapping or Scenario object.

    Checks:
    - Scenario name and a non-empty step list
    - Step names, types, HTTP method and URL for http steps
    - Types of validate / extract / transform / headers

    Args:
        scenario: Raw scenario mapping or parsed Scenario.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    if not isinstance(scenario, (Mapping, Scenario)):
        errors.append(ValidationError(
            path="",
            message=f"Scenario must be a mapping, got {type(scenario).__name__}.",
        ))
        return ValidationResult(valid=False, errors=errors)

    name = _get(scenario, "name")
    if not name or not isinstance(name, str):
        errors.append(ValidationError(
            path="name",
            message="Missing or invalid 'name' property.",
        ))

    description = _get(scenario, "description")
    if description is not None and not isinstance(description, str):
        errors.append(ValidationError(
            path="description",
            message="'description' must be a string.",
        ))

    steps = _get(scenario, "steps")
    if not isinstance(steps, (list, tuple)):
        errors.append(ValidationError(
            path="steps",
            message="Missing or invalid 'steps' list.",
        ))
    elif not steps:
        errors.append(ValidationError(
            path="steps",
            message="'steps' cannot be empty.",
        ))
    else:
        _validate_steps(steps, errors, warnings)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def ensure_valid(scenario: Union[Scenario, Mapping[str, Any]], source: str = "<inline>") -> ValidationResult:
    """Validate and raise ScenarioStructureError on the first problems found."""
    result = validate_scenario(scenario)
    if not result.valid:
        details = "; ".join(f"{e.path}: {e.message}" if e.path else e.message for e in result.errors)
        raise ScenarioStructureError(f"Invalid scenario '{source}': {details}")
    return result


def _validate_steps(
    steps: Any,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    """Validate scenario steps."""
    seen: set[str] = set()

    for i, step in enumerate(steps):
        path = f"steps[{i}]"

        if not isinstance(step, Mapping) and not hasattr(step, "name"):
            errors.append(ValidationError(path=path, message="Step must be a mapping."))
            continue

        name = _get(step, "name")
        if not name or not isinstance(name, str):
            errors.append(ValidationError(
                path=f"{path}.name",
                message="Missing or invalid 'name' property.",
            ))
        elif name in seen:
            warnings.append(ValidationError(
                path=f"{path}.name",
                message=f"Duplicate step name '{name}'.",
                severity="warning",
            ))
        else:
            seen.add(name)

        step_type = _get(step, "type") or DEFAULT_STEP_TYPE
        if not isinstance(step_type, str):
            errors.append(ValidationError(
                path=f"{path}.type",
                message="'type' must be a string.",
            ))
            continue

        if step_type == DEFAULT_STEP_TYPE:
            _validate_http_step(step, path, errors, warnings)

        validate = _get(step, "validate")
        if validate is not None and not (
            callable(validate) or isinstance(validate, (str, Mapping))
        ):
            errors.append(ValidationError(
                path=f"{path}.validate",
                message="'validate' must be a callable, string, or mapping.",
            ))

        extract = _get(step, "extract")
        if extract is not None and not isinstance(extract, Mapping):
            errors.append(ValidationError(
                path=f"{path}.extract",
                message="'extract' must be a mapping.",
            ))

        transform = _get(step, "transform")
        if transform is not None and not callable(transform):
            errors.append(ValidationError(
                path=f"{path}.transform",
                message="'transform' must be callable.",
            ))

        headers = _get(step, "headers")
        if headers is not None and not isinstance(headers, Mapping):
            errors.append(ValidationError(
                path=f"{path}.headers",
                message="'headers' must be a mapping.",
            ))


def _validate_http_step(
    step: Any,
    path: str,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    method = _get(step, "method")
    if not method or not isinstance(method, str):
        errors.append(ValidationError(
            path=f"{path}.method",
            message="Missing or invalid 'method' property.",
        ))
    elif method.upper() not in VALID_METHODS:
        errors.append(ValidationError(
            path=f"{path}.method",
            message=f"Invalid HTTP method '{method}'. Must be one of: {', '.join(VALID_METHODS)}",
        ))

    url = _get(step, "url")
    if not url or not isinstance(url, str):
        errors.append(ValidationError(
            path=f"{path}.url",
            message="Missing or invalid 'url' property.",
        ))

    if _get(step, "validate") is None:
        warnings.append(ValidationError(
            path=f"{path}.validate",
            message="No validation defined. Step passes on any successful response.",
            severity="warning",
        ))
