"""Directory-backed scenario loader.

Scenarios live as ``<name>.yaml`` / ``.yml`` / ``.json`` / ``.py`` files
in a scenarios directory and are loaded by name.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..errors import ScenarioStructureError
from .parser import SCENARIO_SUFFIXES, parse_scenario, parse_scenario_data
from .schema import Scenario
from .templates import create_from_template

logger = logging.getLogger(__name__)


class ScenarioLoader:
    """Loads, lists and searches scenarios in a directory."""

    def __init__(self, scenarios_dir: Union[str, Path] = "./scenarios"):
        self.scenarios_dir = Path(scenarios_dir).resolve()

    def load(self, name: str) -> Scenario:
        """Load a scenario by name.

        Raises:
            FileNotFoundError: If no file with a known suffix exists.
            ScenarioStructureError: If the scenario is malformed.
        """
        path = self.get_scenario_path(name)
        if path is None:
            raise FileNotFoundError(
                f"Scenario file not found: {self.scenarios_dir / name}"
                f"{{{','.join(SCENARIO_SUFFIXES)}}}"
            )
        return self.load_file(path)

    def load_file(self, file_path: Union[str, Path]) -> Scenario:
        try:
            return parse_scenario(file_path)
        except ScenarioStructureError as e:
            raise ScenarioStructureError(f"Failed to load scenario from '{file_path}': {e}") from e

    def load_object(
        self,
        scenario: Union[Scenario, Mapping[str, Any]],
        name: str = "inline-scenario",
    ) -> Scenario:
        return parse_scenario_data(scenario, source=name)

    def resolve(self, name_or_path: Union[str, Path]) -> Scenario:
        """Load from a file path if it exists, otherwise by name."""
        path = Path(name_or_path)
        if path.is_file():
            return self.load_file(path)
        return self.load(str(name_or_path))

    def get_scenario_path(self, name: str) -> Optional[Path]:
        for suffix in SCENARIO_SUFFIXES:
            candidate = self.scenarios_dir / f"{name}{suffix}"
            if candidate.exists():
                return candidate
        return None

    def list_scenarios(self) -> list[str]:
        """Names of all scenario files in the directory, sorted."""
        if not self.scenarios_dir.exists():
            return []
        names = {
            path.stem
            for path in self.scenarios_dir.iterdir()
            if path.is_file() and path.suffix.lower() in SCENARIO_SUFFIXES
            and not path.name.startswith("_")
        }
        return sorted(names)

    def get_metadata(self, name: str) -> dict[str, Any]:
        """Describe a scenario without failing on broken files."""
        try:
            scenario = self.load(name)
        except (FileNotFoundError, ScenarioStructureError) as e:
            return {
                "name": name,
                "description": "Failed to load",
                "step_count": 0,
                "step_names": [],
                "error": str(e),
            }
        return {
            "name": scenario.name,
            "description": scenario.description,
            "step_count": scenario.total_steps,
            "step_names": scenario.step_names,
        }

    def search(self, query: str) -> list[str]:
        """Scenario names whose name, description or step names contain ``query``."""
        term = query.lower()
        matches = []
        for name in self.list_scenarios():
            metadata = self.get_metadata(name)
            haystack = [name, metadata["name"], metadata["description"], *metadata["step_names"]]
            if any(term in str(text).lower() for text in haystack):
                matches.append(name)
        return matches

    def ensure_directory(self) -> Path:
        self.scenarios_dir.mkdir(parents=True, exist_ok=True)
        return self.scenarios_dir

    def create_from_template(self, name: str, template: str = "basic") -> dict[str, Any]:
        return create_from_template(name, template)

    def write_template(self, name: str, template: str = "basic", overwrite: bool = False) -> Path:
        """Write a template scenario as ``<name>.yaml`` in the scenarios directory.

        Raises:
            FileExistsError: If the file exists and overwrite is False.
        """
        self.ensure_directory()
        path = self.scenarios_dir / f"{name}.yaml"
        if path.exists() and not overwrite:
            raise FileExistsError(f"Scenario file already exists: {path}")
        data = self.create_from_template(name, template)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        logger.info("Scenario template '%s' written to %s", template, path)
        return path
