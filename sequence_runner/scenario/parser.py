"""Scenario file parser for sequence-runner.

Parses YAML, JSON and Python scenario files into Scenario objects.
Python files expose the scenario as a module-level ``scenario`` or
``SCENARIO`` mapping, which lets steps use callables for validate,
extract and transform.
"""

import importlib.util
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

import yaml

from ..errors import ScenarioStructureError
from .schema import DEFAULT_STEP_TYPE, Scenario, Step
from .validator import ensure_valid

SCENARIO_SUFFIXES = (".yaml", ".yml", ".json", ".py")

_STEP_FIELDS = {
    name for name in Step.__dataclass_fields__ if name != "options"
}


def parse_scenario(file_path: Union[str, Path]) -> Scenario:
    """Parse a scenario file into a Scenario object.

    Args:
        file_path: Path to a .yaml, .yml, .json or .py scenario file.

    Returns:
        Parsed Scenario object.

    Raises:
        FileNotFoundError: If the scenario file doesn't exist.
        ScenarioStructureError: If the file is malformed or fails validation.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Scenario file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix not in SCENARIO_SUFFIXES:
        raise ScenarioStructureError(
            f"Expected one of {', '.join(SCENARIO_SUFFIXES)} files, got: {file_path.suffix}"
        )

    data = load_scenario_file(file_path)
    if data is None:
        raise ScenarioStructureError(f"Empty scenario file: {file_path}")

    return parse_scenario_data(data, source=str(file_path))


def load_scenario_file(file_path: Path) -> Any:
    """Load the raw scenario data from a file without validating it."""
    suffix = file_path.suffix.lower()

    if suffix == ".py":
        return _load_python_scenario(file_path)

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            if suffix == ".json":
                return json.load(f)
            return yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ScenarioStructureError(f"Failed to parse {file_path}: {e}") from e


def parse_scenario_data(data: Any, source: str = "<inline>") -> Scenario:
    """Parse a scenario from a mapping (already loaded file or inline dict).

    Args:
        data: Scenario mapping, or an already parsed Scenario.
        source: Source identifier for error messages.

    Returns:
        Parsed Scenario object.

    Raises:
        ScenarioStructureError: If required fields are missing or malformed.
    """
    if isinstance(data, Scenario):
        ensure_valid(data, source)
        return data

    if not isinstance(data, Mapping):
        raise ScenarioStructureError(
            f"Scenario must be a mapping, got {type(data).__name__} ({source})"
        )

    ensure_valid(data, source)

    steps = tuple(_build_step(step_data) for step_data in data["steps"])
    return Scenario(
        name=data["name"],
        steps=steps,
        description=data.get("description") or "",
    )


def _build_step(step_data: Any) -> Step:
    if isinstance(step_data, Step):
        return step_data

    fields = {k: v for k, v in step_data.items() if k in _STEP_FIELDS}
    options = {k: v for k, v in step_data.items() if k not in _STEP_FIELDS}

    fields["type"] = fields.get("type") or DEFAULT_STEP_TYPE
    if isinstance(fields.get("method"), str):
        fields["method"] = fields["method"].upper()

    return Step(**fields, options=options)


def _load_python_scenario(file_path: Path) -> Any:
    module_name = f"_sequence_scenario_{file_path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    if spec is None or spec.loader is None:
        raise ScenarioStructureError(f"Cannot import scenario module: {file_path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ScenarioStructureError(f"Failed to load scenario module {file_path}: {e}") from e

    for attribute in ("scenario", "SCENARIO"):
        if hasattr(module, attribute):
            return getattr(module, attribute)

    raise ScenarioStructureError(
        f"Scenario module {file_path} must define 'scenario' or 'SCENARIO'"
    )
