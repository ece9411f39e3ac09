"""sequence-runner - sequential HTTP API scenario runner.

Runs ordered request steps, validating each response and threading
extracted values into later requests::

    from sequence_runner import ScenarioRunner, RunnerConfig, validators

    runner = ScenarioRunner(RunnerConfig(base_url="http://localhost:3000"))
    runner.run({
        "name": "create and read",
        "steps": [
            {"name": "create", "method": "POST", "url": "/items",
             "body": {"name": "x"}, "validate": validators.status(201),
             "extract": {"id": "data.id"}},
            {"name": "read", "method": "GET", "url": "/items/{id}",
             "validate": "status_200"},
        ],
    })
"""

__version__ = "0.1.0"

from . import validators
from .config import RunnerConfig, load_config
from .errors import (
    ConfigError,
    NetworkError,
    RequestSetupError,
    ScenarioFailure,
    ScenarioStructureError,
    SequenceRunnerError,
    ServerErrorResponse,
    StepDispatchFailure,
    StepFailure,
    StepHandlerFailure,
    StepValidationFailure,
    TransportError,
    UnknownHookError,
    UnsupportedRuleError,
)
from .extractors import Extractor, helpers, resolve_path
from .reporting import JsonReporter
from .runner import Context, ScenarioReport, ScenarioRunner, StepExecutor, StepResult
from .scenario import Scenario, ScenarioLoader, Step, parse_scenario, validate_scenario
from .substitution import Generator, substitute
from .transport import HttpClient, Response
from .validators import Validator

__all__ = [
    "__version__",
    "validators",
    "helpers",
    "RunnerConfig",
    "load_config",
    "ConfigError",
    "NetworkError",
    "RequestSetupError",
    "ScenarioFailure",
    "ScenarioStructureError",
    "SequenceRunnerError",
    "ServerErrorResponse",
    "StepDispatchFailure",
    "StepFailure",
    "StepHandlerFailure",
    "StepValidationFailure",
    "TransportError",
    "UnknownHookError",
    "UnsupportedRuleError",
    "Extractor",
    "resolve_path",
    "JsonReporter",
    "Context",
    "ScenarioReport",
    "ScenarioRunner",
    "StepExecutor",
    "StepResult",
    "Scenario",
    "ScenarioLoader",
    "Step",
    "parse_scenario",
    "validate_scenario",
    "Generator",
    "substitute",
    "HttpClient",
    "Response",
    "Validator",
]
