"""CLI entry point for sequence-runner.

Usage:
    sequence-runner run <scenario> [options]
    sequence-runner validate <scenario>
    sequence-runner list
    sequence-runner init <name> --template crud

Every command prints a flow-compatible JSON envelope on stdout:
{"success": bool, "command": str, "data": ..., "message": str}
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click

from .config import load_config
from .errors import ConfigError, ScenarioFailure, ScenarioStructureError
from .logging_setup import configure_logging
from .reporting.json_reporter import JsonReporter
from .runner.scenario_runner import ScenarioRunner
from .scenario.loader import ScenarioLoader
from .scenario.parser import load_scenario_file
from .scenario.templates import TEMPLATES
from .scenario.validator import validate_scenario


def output(
    success: bool,
    command: str,
    data: Any = None,
    message: str = "",
    pretty: bool = False,
) -> None:
    """Print a flow JSON envelope."""
    envelope = {
        "success": success,
        "command": command,
        "data": data,
        "message": message,
    }
    indent = 2 if pretty else None
    click.echo(json.dumps(envelope, ensure_ascii=False, indent=indent, default=str))


def _split_pairs(values: tuple[str, ...], separator: str, option: str) -> dict[str, str]:
    pairs = {}
    for value in values:
        key, sep, item = value.partition(separator)
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY{separator}VALUE, got '{value}'", param_hint=option)
        pairs[key.strip()] = item.strip()
    return pairs


@click.group()
@click.option(
    "--scenarios-dir",
    default="./scenarios",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Directory holding named scenarios.",
)
@click.pass_context
def cli(ctx: click.Context, scenarios_dir: str):
    """Run sequential HTTP API scenarios."""
    ctx.ensure_object(dict)
    ctx.obj["loader"] = ScenarioLoader(scenarios_dir)


@cli.command()
@click.argument("scenario")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML configuration file.")
@click.option("--env", "environment", help="Environment section of the configuration file.")
@click.option("--base-url", help="Base URL for relative step URLs.")
@click.option("--timeout", type=float, help="Request timeout in seconds.")
@click.option("--header", "headers", multiple=True, help="Default header as KEY:VALUE.")
@click.option("--var", "variables", multiple=True, help="Initial variable as KEY=VALUE.")
@click.option("--dry-run", is_flag=True, default=None, help="Simulate responses, send nothing.")
@click.option("--verbose", is_flag=True, default=None, help="Log request and response details.")
@click.option("--delay", type=float, help="Seconds to wait before every request.")
@click.option("--retries", type=int, help="Retries for network errors and 5xx responses.")
@click.option("--insecure", is_flag=True, default=None, help="Skip TLS certificate verification.")
@click.option("--report", "report_path", type=click.Path(dir_okay=False), help="Write a JSON report here.")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
@click.pass_context
def run(
    ctx: click.Context,
    scenario: str,
    config_path: Optional[str],
    environment: Optional[str],
    base_url: Optional[str],
    timeout: Optional[float],
    headers: tuple[str, ...],
    variables: tuple[str, ...],
    dry_run: Optional[bool],
    verbose: Optional[bool],
    delay: Optional[float],
    retries: Optional[int],
    insecure: Optional[bool],
    report_path: Optional[str],
    pretty: bool,
):
    """Run SCENARIO (a file path or a name in the scenarios directory)."""
    configure_logging(bool(verbose))
    loader: ScenarioLoader = ctx.obj["loader"]

    try:
        config = load_config(
            config_path,
            environment,
            base_url=base_url,
            timeout=timeout,
            headers=_split_pairs(headers, ":", "--header") or None,
            dry_run=dry_run,
            verbose=verbose,
            request_delay=delay,
            retries=retries,
            verify_ssl=False if insecure else None,
        )
        loaded = loader.resolve(scenario)
    except (ConfigError, ScenarioStructureError, FileNotFoundError) as e:
        output(False, "run", message=str(e), pretty=pretty)
        sys.exit(1)

    runner = ScenarioRunner(config)
    reporter = JsonReporter()
    error = None
    try:
        runner.run(loaded, _split_pairs(variables, "=", "--var"))
    except ScenarioFailure as e:
        error = f"{e} ({e.cause})"
    except KeyboardInterrupt:
        output(False, "run", message="Run interrupted by user", pretty=pretty)
        sys.exit(130)

    if runner.last_report is None:
        output(False, "run", message=error or "Scenario did not produce a report", pretty=pretty)
        sys.exit(1)

    report = reporter.generate(runner.last_report, error=error)
    saved = None
    if report_path:
        saved = str(reporter.save(report, Path(report_path)))

    flow_output = reporter.generate_flow_output(report, saved)
    output(flow_output["success"], "run", flow_output["data"], flow_output["message"], pretty)
    if not flow_output["success"]:
        sys.exit(1)


@cli.command()
@click.argument("scenario")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
@click.pass_context
def validate(ctx: click.Context, scenario: str, pretty: bool):
    """Check the structure of SCENARIO without running it."""
    loader: ScenarioLoader = ctx.obj["loader"]
    path = Path(scenario)
    if not path.is_file():
        path = loader.get_scenario_path(scenario)
    if path is None:
        output(False, "validate", message=f"Scenario not found: {scenario}", pretty=pretty)
        sys.exit(1)

    try:
        result = validate_scenario(load_scenario_file(path))
    except ScenarioStructureError as e:
        output(False, "validate", message=str(e), pretty=pretty)
        sys.exit(1)

    data = {
        "scenario": str(path),
        "errors": [{"path": e.path, "message": e.message} for e in result.errors],
        "warnings": [{"path": w.path, "message": w.message} for w in result.warnings],
    }
    if result.valid:
        message = f"Scenario is valid ({result.warning_count} warnings)"
    else:
        message = f"Scenario is invalid ({result.error_count} errors)"
    output(result.valid, "validate", data, message, pretty)
    if not result.valid:
        sys.exit(1)


@cli.command("list")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
@click.pass_context
def list_scenarios(ctx: click.Context, pretty: bool):
    """List scenarios in the scenarios directory."""
    loader: ScenarioLoader = ctx.obj["loader"]
    scenarios = [loader.get_metadata(name) | {"file": name} for name in loader.list_scenarios()]
    output(True, "list", {"scenarios": scenarios}, f"{len(scenarios)} scenarios found", pretty)


@cli.command()
@click.argument("name")
@click.option(
    "--template",
    type=click.Choice(sorted(TEMPLATES)),
    default="basic",
    show_default=True,
    help="Starter template.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing scenario file.")
@click.pass_context
def init(ctx: click.Context, name: str, template: str, force: bool):
    """Create scenario NAME from a template."""
    loader: ScenarioLoader = ctx.obj["loader"]
    try:
        path = loader.write_template(name, template, overwrite=force)
    except FileExistsError as e:
        output(False, "init", message=str(e))
        sys.exit(1)
    output(True, "init", {"path": str(path), "template": template}, f"Scenario created: {path}")


def main():
    """Main CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
