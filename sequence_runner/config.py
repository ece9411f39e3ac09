"""Runner configuration.

Values are merged with the priority::

    keyword overrides > SEQUENCE_RUNNER_* environment > file environment section
    > file default section > RunnerConfig defaults

A configuration file is YAML::

    default:
      timeout: 10
      headers: {Accept: application/json}
    environments:
      local:   {base_url: "http://localhost:3000"}
      staging: {base_url: "https://staging-api.example.com", retries: 2}
    auth:
      bearer_token: "..."
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SEQUENCE_RUNNER_"


@dataclass
class RunnerConfig:
    """Configuration bag consumed by ScenarioRunner."""
    base_url: str = "http://localhost:3000"
    timeout: float = 10.0
    headers: dict[str, str] = field(default_factory=dict)
    dry_run: bool = False
    verbose: bool = False
    request_delay: float = 0.0
    retries: int = 0
    retry_delay: float = 1.0
    raise_for_status: bool = True
    verify_ssl: bool = True
    bearer_token: Optional[str] = None
    api_key: Optional[str] = None
    api_key_header: str = "X-API-Key"
    username: Optional[str] = None
    password: Optional[str] = None

    def merged(self, **values: Any) -> "RunnerConfig":
        """Return a copy with ``values`` applied; None values are ignored and headers merge."""
        updates = {k: v for k, v in values.items() if v is not None}
        unknown = set(updates) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        if "headers" in updates:
            updates["headers"] = {**self.headers, **dict(updates["headers"])}
        return replace(self, **updates)


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"expected a boolean, got '{raw}'")


_ENV_MAPPING = {
    "BASE_URL": ("base_url", str),
    "TIMEOUT": ("timeout", float),
    "RETRIES": ("retries", int),
    "RETRY_DELAY": ("retry_delay", float),
    "REQUEST_DELAY": ("request_delay", float),
    "HEADERS": ("headers", json.loads),
    "BEARER_TOKEN": ("bearer_token", str),
    "API_KEY": ("api_key", str),
    "USERNAME": ("username", str),
    "PASSWORD": ("password", str),
    "VERIFY_SSL": ("verify_ssl", _parse_bool),
}

_AUTH_KEYS = {"bearer_token", "api_key", "api_key_header", "username", "password"}


def config_from_env(environ: Optional[dict[str, str]] = None) -> dict[str, Any]:
    """Read SEQUENCE_RUNNER_* variables into configuration values.

    Raises:
        ConfigError: If a value cannot be converted.
    """
    environ = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for suffix, (key, converter) in _ENV_MAPPING.items():
        raw = environ.get(f"{ENV_PREFIX}{suffix}")
        if not raw:
            continue
        try:
            values[key] = converter(raw)
        except ValueError as e:
            raise ConfigError(f"{ENV_PREFIX}{suffix} invalid: {e}") from e
    if "headers" in values and not isinstance(values["headers"], dict):
        raise ConfigError(f"{ENV_PREFIX}HEADERS must be a JSON object")
    return values


def read_config_file(path: Union[str, Path], environment: Optional[str] = None) -> dict[str, Any]:
    """Read a YAML configuration file and select an environment section.

    Raises:
        ConfigError: If the file is missing, malformed or lacks the environment.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    values: dict[str, Any] = dict(data.get("default") or {})

    if environment:
        environments = data.get("environments") or {}
        if environment not in environments:
            raise ConfigError(
                f"Unknown environment '{environment}'. "
                f"Available: {', '.join(environments) or 'none'}"
            )
        section = dict(environments[environment] or {})
        if "headers" in section:
            section["headers"] = {**values.get("headers", {}), **section["headers"]}
        values.update(section)

    auth = data.get("auth") or {}
    values.update({k: v for k, v in auth.items() if k in _AUTH_KEYS and v})

    # timeout_ms is accepted as an alternative spelling in milliseconds.
    if "timeout_ms" in values:
        values["timeout"] = float(values.pop("timeout_ms")) / 1000

    return values


def load_config(
    path: Optional[Union[str, Path]] = None,
    environment: Optional[str] = None,
    environ: Optional[dict[str, str]] = None,
    **overrides: Any,
) -> RunnerConfig:
    """Build a RunnerConfig from file, environment variables and overrides.

    Args:
        path: Optional YAML configuration file.
        environment: Name of an ``environments`` section in the file.
        environ: Environment mapping (defaults to os.environ).
        **overrides: Explicit values; None values are ignored.

    Returns:
        Merged RunnerConfig.
    """
    config = RunnerConfig()
    if path:
        config = config.merged(**read_config_file(path, environment))
        logger.debug("Loaded configuration from %s (environment=%s)", path, environment)
    elif environment:
        raise ConfigError("An environment was selected but no config file was given")

    config = config.merged(**config_from_env(environ))
    return config.merged(**overrides)
