"""JSON report generator for scenario runs.

Generates structured JSON reports from scenario reports and the flow CLI
output envelope.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from ..runner.results import ScenarioReport

logger = logging.getLogger(__name__)


class JsonReporter:
    """Generates JSON reports from scenario runs.

    Instances are reporters: registered with ``ScenarioRunner.add_reporter``
    they write every report to ``path``.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, pretty: bool = True):
        """Initialize JSON reporter.

        Args:
            path: Output file. ``{scenario}`` is replaced with the scenario name.
            pretty: If True, format with indentation.
        """
        self.path = path
        self.pretty = pretty
        self.last_path: Optional[Path] = None

    def __call__(self, report: ScenarioReport) -> Optional[Path]:
        if self.path is None:
            logger.info(self.to_json_string(self.generate(report), self.pretty))
            return None
        path = Path(str(self.path).replace("{scenario}", report.scenario_name))
        self.last_path = self.save(self.generate(report), path)
        logger.info("Report saved: %s", self.last_path)
        return self.last_path

    def generate(
        self,
        report: ScenarioReport,
        error: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate a JSON report from a scenario report.

        Args:
            report: Report of a completed or aborted run.
            error: Overall error message if the run failed.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        failed = [r for r in report.results if not r.success]
        if error is None and failed:
            error = failed[0].error

        return {
            "timestamp": report.timestamp,
            "scenario": report.scenario_name,
            "status": "passed" if report.success and error is None else "failed",
            "summary": {
                "total": report.summary["total"],
                "successful": report.summary["successful"],
                "failed": report.summary["failed"],
                "duration_ms": round(sum(r.duration_ms for r in report.results), 2),
            },
            "steps": [r.to_dict() for r in report.results],
            "context": report.context,
            "error": error,
        }

    def save(self, report: dict[str, Any], path: Union[str, Path]) -> Path:
        """Save report to a JSON file.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False, default=str)

        return path

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False, default=str)
        return json.dumps(report, ensure_ascii=False, default=str)

    def generate_flow_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
        command: str = "run",
    ) -> dict[str, Any]:
        """Generate flow CLI compatible JSON output.

        Follows the flow JSON output standard:
        {
            "success": bool,
            "command": "run",
            "data": { ... },
            "message": str
        }

        Args:
            report: Report dictionary from ``generate``.
            report_path: Path where the report was saved.
            command: Command name placed in the envelope.

        Returns:
            Flow-compatible JSON output.
        """
        summary = report["summary"]
        passed = report["status"] == "passed"

        data: dict[str, Any] = {
            "scenario": report["scenario"],
            "total_steps": summary["total"],
            "successful": summary["successful"],
            "failed": summary["failed"],
            "duration_ms": summary["duration_ms"],
            "context": report["context"],
        }

        if report_path:
            data["report_path"] = report_path

        if not passed and report.get("error"):
            message = f"Scenario failed: {report['error']}"
        elif not passed:
            message = f"{summary['failed']} of {summary['total']} steps failed"
        else:
            message = "All steps passed"

        return {
            "success": passed,
            "command": command,
            "data": data,
            "message": message,
        }
