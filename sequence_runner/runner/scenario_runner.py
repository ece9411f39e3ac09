"""Scenario runner - executes steps in order with fail-fast semantics.

Orchestrates a run:
1. Seed a fresh context from the initial variables
2. Run before_scenario hooks
3. For each step: before_step hooks, execute, after_step hooks
4. Run after_scenario hooks
5. Hand the report to every reporter

The first failing step aborts the run. Hooks and reporters still see the
partial results before ScenarioFailure is raised.
"""

import logging
import threading
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .. import awaitables
from ..config import RunnerConfig
from ..errors import ScenarioFailure, StepFailure, StepHandlerFailure, UnknownHookError
from ..extractors.engine import Extractor
from ..scenario.parser import parse_scenario, parse_scenario_data
from ..scenario.schema import Scenario, Step
from ..transport.http_client import HttpClient
from ..transport.retry_policy import linear_retry_policy
from ..validators.engine import Validator
from .context import Context
from .results import ScenarioReport, StepResult
from .step_executor import StepExecutor, StepOutcome

logger = logging.getLogger(__name__)

HOOKS = ("before_scenario", "before_step", "after_step", "after_scenario")

_HOOK_ALIASES = {
    "beforeScenario": "before_scenario",
    "beforeStep": "before_step",
    "afterStep": "after_step",
    "afterScenario": "after_scenario",
}


def build_transport(config: RunnerConfig) -> HttpClient:
    """Create the default HTTP transport for a configuration."""
    client = HttpClient(
        config.base_url,
        timeout=config.timeout,
        headers=config.headers,
        retry_policy=linear_retry_policy(config.retries, config.retry_delay),
        request_delay=config.request_delay,
        raise_for_status=config.raise_for_status,
        verify=config.verify_ssl,
    )
    if config.bearer_token:
        client.set_auth_token(config.bearer_token)
    if config.api_key:
        client.set_api_key(config.api_key, config.api_key_header)
    if config.username and config.password:
        client.set_basic_auth(config.username, config.password)
    return client


class ScenarioRunner:
    """Runs scenarios step by step against a transport.

    Registries (validators, extractors, step types, hooks, reporters) belong
    to the runner instance. Registering while a run is in progress blocks
    until the run finishes.
    """

    def __init__(self, config: Optional[RunnerConfig] = None, transport: Any = None):
        """Initialize scenario runner.

        Args:
            config: Runner configuration (defaults to RunnerConfig()).
            transport: Transport with ``send``; an HttpClient built from
                       ``config`` when omitted.
        """
        self.config = config or RunnerConfig()
        self.transport = transport if transport is not None else build_transport(self.config)
        self.validator = Validator()
        self.extractor = Extractor()
        self.step_types: dict[str, Callable] = {}
        self.middleware: dict[str, list[Callable]] = {hook: [] for hook in HOOKS}
        self.reporters: dict[str, Callable[[ScenarioReport], Any]] = {}

        self.results: list[StepResult] = []
        self.context = Context()
        self.last_report: Optional[ScenarioReport] = None

        self._lock = threading.RLock()

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    @property
    def verbose(self) -> bool:
        return self.config.verbose

    # Registries

    def add_validator(self, name: str, predicate: Callable[[Any], Any]) -> None:
        with self._lock:
            self.validator.register(name, predicate)

    def add_extractor(self, name: str, func: Callable[[Any], Any]) -> None:
        with self._lock:
            self.extractor.register(name, func)

    def add_step_type(self, step_type: str, handler: Callable[[Step, Context], Any]) -> None:
        """Register a handler that replaces HTTP execution for ``step_type`` steps."""
        with self._lock:
            self.step_types[step_type] = handler

    def use(self, hook: str, middleware: Callable) -> None:
        """Append a middleware to a hook.

        Raises:
            UnknownHookError: If ``hook`` is not a known hook name.
        """
        name = _HOOK_ALIASES.get(hook, hook)
        if name not in self.middleware:
            raise UnknownHookError(f"Unknown middleware hook: {hook}")
        with self._lock:
            self.middleware[name].append(middleware)

    def add_reporter(self, name: str, reporter: Callable[[ScenarioReport], Any]) -> None:
        with self._lock:
            self.reporters[name] = reporter

    # Transport configuration

    def set_auth_token(self, token: Optional[str]) -> None:
        with self._lock:
            self.transport.set_auth_token(token)

    def set_api_key(self, key: Optional[str], header_name: str = "X-API-Key") -> None:
        with self._lock:
            self.transport.set_api_key(key, header_name)

    def set_basic_auth(self, username: Optional[str], password: Optional[str]) -> None:
        with self._lock:
            self.transport.set_basic_auth(username, password)

    def set_headers(self, headers: dict[str, str]) -> None:
        with self._lock:
            self.transport.set_headers(headers)

    def set_base_url(self, base_url: str) -> None:
        with self._lock:
            self.config.base_url = base_url
            self.transport.base_url = base_url.rstrip("/")

    # Running

    def run_file(
        self,
        path: Union[str, Path],
        variables: Optional[Mapping[str, Any]] = None,
    ) -> ScenarioReport:
        """Load a scenario file and run it."""
        return self.run(parse_scenario(path), variables)

    def run(
        self,
        scenario: Union[Scenario, Mapping[str, Any]],
        variables: Optional[Mapping[str, Any]] = None,
    ) -> ScenarioReport:
        """Run a scenario to completion or to its first failing step.

        Args:
            scenario: Scenario or raw scenario mapping.
            variables: Initial context variables.

        Returns:
            ScenarioReport of the completed run.

        Raises:
            ScenarioStructureError: If ``scenario`` is malformed (before any step runs).
            ScenarioFailure: If a step fails; ``results`` holds the partial run.
        """
        if isinstance(scenario, Scenario):
            source = scenario.name
        else:
            source = scenario.get("name") if isinstance(scenario, Mapping) else None
        scenario = parse_scenario_data(scenario, source=str(source or "<inline>"))

        with self._lock:
            return self._run(scenario, variables or {})

    def _run(self, scenario: Scenario, variables: Mapping[str, Any]) -> ScenarioReport:
        logger.info("Running scenario: %s", scenario.name)
        if scenario.description:
            logger.info("Description: %s", scenario.description)
        if self.dry_run:
            logger.info("DRY RUN MODE - no requests will be sent")

        self.results = []
        self.context = Context(variables)
        self.last_report = None
        if self.verbose and self.context:
            logger.info("Available variables: %s", list(self.context))

        executor = StepExecutor(
            self.transport,
            validator=self.validator,
            extractor=self.extractor,
            step_types=self.step_types,
            dry_run=self.dry_run,
            verbose=self.verbose,
        )

        self._run_middleware("before_scenario", scenario, self.context)

        failure: Optional[ScenarioFailure] = None
        for index, step in enumerate(scenario.steps):
            step_number = index + 1
            logger.info("--- Step %d: %s ---", step_number, step.name)
            start_time = time.perf_counter()
            try:
                outcome = self._execute_step(executor, step)
            except StepFailure as e:
                logger.error("Step failed: %s", e)
                self.results.append(StepResult(
                    index=index,
                    step=step,
                    success=False,
                    error=str(e),
                    duration_ms=_elapsed_ms(start_time),
                ))
                failure = ScenarioFailure(step_number, step.name, e, self.results)
                break

            self.results.append(StepResult(
                index=index,
                step=step,
                success=True,
                result=outcome.response,
                duration_ms=_elapsed_ms(start_time),
            ))
            if self.verbose and hasattr(outcome.response, "summary"):
                logger.info("Step completed: %s", outcome.response.summary())
            else:
                logger.info("Success")

        self._run_middleware("after_scenario", scenario, self.context, list(self.results))

        report = ScenarioReport(
            scenario_name=scenario.name,
            results=list(self.results),
            context=self.context.to_dict(),
        )
        self.last_report = report
        self._generate_reports(report)
        self._log_summary(report)

        if failure is not None:
            logger.error("Scenario execution failed: %s", failure)
            raise failure from failure.cause
        return report

    def _execute_step(self, executor: StepExecutor, step: Step) -> StepOutcome:
        """Run one step with its hooks; every failure surfaces as a StepFailure."""
        try:
            self._run_step_middleware("before_step", step, self.context)
            outcome = executor.execute(step, self.context)
            self._run_step_middleware("after_step", step, self.context, outcome.response)
        except StepFailure:
            raise
        except Exception as e:
            raise StepHandlerFailure(
                f"Step raised {type(e).__name__}: {e}", step.name
            ) from e
        return outcome

    def _run_middleware(self, hook: str, *args: Any) -> None:
        for middleware in list(self.middleware[hook]):
            awaitables.call(middleware, *args)

    def _run_step_middleware(self, hook: str, step: Step, *args: Any) -> None:
        try:
            self._run_middleware(hook, step, *args)
        except Exception as e:
            raise StepHandlerFailure(f"{hook} hook failed: {e}", step.name) from e

    def _generate_reports(self, report: ScenarioReport) -> None:
        for name, reporter in list(self.reporters.items()):
            try:
                awaitables.call(reporter, report)
            except Exception as e:
                logger.warning("Reporter '%s' failed: %s", name, e)

    def _log_summary(self, report: ScenarioReport) -> None:
        summary = report.summary
        logger.info("SCENARIO SUMMARY: %s", report.scenario_name)
        logger.info("Successful steps: %d/%d", summary["successful"], summary["total"])
        if report.success:
            logger.info("All steps completed successfully")
        else:
            logger.info("Some steps failed")
        for key, value in report.context.items():
            logger.debug("  %s: %s", key, value)


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000
