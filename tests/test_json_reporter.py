from __future__ import annotations

from sequence_runner.reporting.json_reporter import JsonReporter
from sequence_runner.runner.results import ScenarioReport, StepResult
from sequence_runner.scenario.schema import Step
from tests.utils import make_response


def _report(success: bool) -> ScenarioReport:
    results = [StepResult(index=0, step=Step(name="first"), success=True, result=make_response(status=201))]
    if not success:
        results.append(StepResult(index=1, step=Step(name="second"), success=False, error="Validation failed for step: second"))
    return ScenarioReport(scenario_name="demo", results=results, context={"id": "abc"})


def test_generate_passed_report() -> None:
    report = JsonReporter().generate(_report(True))
    assert report["status"] == "passed"
    assert report["summary"]["total"] == 1
    assert report["steps"][0]["response"]["status"] == 201
    assert report["context"] == {"id": "abc"}


def test_flow_output_for_failed_run() -> None:
    reporter = JsonReporter()
    output = reporter.generate_flow_output(reporter.generate(_report(False)), report_path="r.json")
    assert output["success"] is False
    assert output["command"] == "run"
    assert output["message"] == "Scenario failed: Validation failed for step: second"
    assert output["data"]["failed"] == 1
    assert output["data"]["report_path"] == "r.json"


def test_reporter_writes_file(tmp_path) -> None:
    reporter = JsonReporter(tmp_path / "{scenario}-report.json")
    path = reporter(_report(True))
    assert path == tmp_path / "demo-report.json"
    assert reporter.last_path == path
    assert '"scenario": "demo"' in path.read_text(encoding="utf-8")
