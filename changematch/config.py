"""Typed configuration model and layered merge/validation helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from changematch.compare import HEAD_NOT_AHEAD_POLICIES, PROVIDERS
from changematch.errors import ConfigError

_SECRET_FIELD_MARKERS = ("key", "token", "secret", "password", "credential")

# Runner environment variables feeding each config field.
ENVIRONMENT_KEYS = {
    "pattern": "INPUT_PATTERN",
    "token": "INPUT_TOKEN",
    "provider": "INPUT_PROVIDER",
    "comparison_payload": "INPUT_COMPARISON_PAYLOAD",
    "on_head_not_ahead": "INPUT_ON_HEAD_NOT_AHEAD",
    "api_url": "GITHUB_API_URL",
}


@dataclass(slots=True)
class AppConfig:
    """Resolved action inputs."""

    pattern: str | None = None
    token: str | None = field(default=None, repr=False)
    provider: str = "github"
    comparison_payload: str | None = None
    on_head_not_ahead: str = "continue"
    api_url: str | None = None


@dataclass(frozen=True, slots=True)
class EventSource:
    """Where the triggering event is described."""

    event_name: str
    payload: dict[str, Any]
    owner: str
    repo: str


def default_config() -> AppConfig:
    """Build the default typed configuration."""
    return AppConfig()


def load_config_file(path: str | Path | None) -> dict[str, Any]:
    """Read an optional YAML configuration file."""
    if path is None:
        return {}
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(
            what=f"config file not found: {config_path}",
            why="--config must point to a readable YAML file",
            remediation="create the config file or drop the --config flag",
        )

    try:
        content = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(
            what=f"config file is not valid YAML: {config_path}",
            why=str(exc),
            remediation="fix the YAML syntax of the config file",
        ) from exc
    if content is None:
        content = {}
    if not isinstance(content, dict):
        raise ConfigError(
            what="config content must be a mapping.",
            why="changematch requires named options under top-level keys",
            remediation="use YAML object format, for example: pattern: '**/*.md'",
        )
    return content


def environment_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Pick config values from runner environment variables, ignoring empty ones."""
    overrides: dict[str, Any] = {}
    for key, variable in ENVIRONMENT_KEYS.items():
        value = environ.get(variable)
        if value:
            overrides[key] = value
    return overrides


def merge_config(
    *,
    defaults: AppConfig,
    file_config: Mapping[str, Any],
    environment: Mapping[str, Any],
    cli_args: Mapping[str, Any],
) -> AppConfig:
    """Merge layered configuration with precedence defaults < YAML < environment < CLI."""
    _validate_known_keys(file_config)

    merged = asdict(defaults)
    for layer in (file_config, environment, cli_args):
        for key, value in layer.items():
            if value is not None:
                merged[key] = value

    config = AppConfig(**merged)
    validate_config_values(config)
    return config


def validate_config_values(config: AppConfig) -> None:
    """Validate enum-like fields."""
    if config.provider not in PROVIDERS:
        options = ", ".join(sorted(PROVIDERS))
        raise ConfigError(
            what=f"provider must be one of: {options}.",
            why=f"unsupported comparison provider '{config.provider}' was provided",
            remediation=f"choose one of {options} in YAML, INPUT_PROVIDER or --provider",
        )
    if config.on_head_not_ahead not in HEAD_NOT_AHEAD_POLICIES:
        options = ", ".join(sorted(HEAD_NOT_AHEAD_POLICIES))
        raise ConfigError(
            what=f"on_head_not_ahead must be one of: {options}.",
            why="unsupported head-not-ahead handling policy was provided",
            remediation=f"choose one of {options} in YAML or CLI override",
        )


def validate_execution_requirements(config: AppConfig) -> str:
    """Return the pattern, failing when it was never provided."""
    if not config.pattern or not str(config.pattern).strip():
        raise ConfigError(
            what="missing required input: pattern.",
            why="changematch needs a glob to test changed files against",
            remediation="set pattern in the action inputs, INPUT_PATTERN, YAML or --pattern",
        )
    return str(config.pattern)


def warn_on_possible_secrets(file_config: Mapping[str, Any], *, logger: logging.Logger | None = None) -> list[str]:
    """Warn when key-like fields appear populated in a config file without echoing the value."""
    target_logger = logger or logging.getLogger(__name__)
    warnings: list[str] = []
    for key, value in file_config.items():
        if any(marker in str(key).lower() for marker in _SECRET_FIELD_MARKERS) and value not in (None, ""):
            message = (
                f"Potential secret material detected at '{key}'. "
                "Do not commit secrets in config files. Value is redacted."
            )
            target_logger.warning(message)
            warnings.append(message)
    return warnings


def parse_repository(value: str | None) -> tuple[str, str]:
    """Split an ``owner/repo`` string."""
    owner, _, repo = (value or "").strip().partition("/")
    if not owner or not repo or "/" in repo:
        raise ConfigError(
            what=f"repository must look like owner/repo, got {value!r}.",
            why="the compare API is scoped to a single repository",
            remediation="set GITHUB_REPOSITORY or pass --repository owner/repo",
        )
    return owner, repo


def load_event_source(*, event_name: str | None, event_path: str | Path | None, repository: str | None) -> EventSource:
    """Read the event name, payload and repository the runner describes."""
    if not event_name:
        raise ConfigError(
            what="missing event name.",
            why="changematch needs to know which event triggered the run",
            remediation="set GITHUB_EVENT_NAME or pass --event-name",
        )
    if not event_path:
        raise ConfigError(
            what="missing event payload path.",
            why="the triggering event is read from a JSON file",
            remediation="set GITHUB_EVENT_PATH or pass --event-path",
        )

    payload_path = Path(event_path)
    if not payload_path.exists():
        raise ConfigError(
            what=f"event payload file not found: {payload_path}",
            why="the runner did not provide a readable event file",
            remediation="point --event-path at the JSON payload of the triggering event",
        )
    try:
        payload = json.loads(payload_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(
            what=f"event payload is not valid JSON: {payload_path}",
            why=str(exc),
            remediation="pass the unmodified event payload written by the runner",
        ) from exc
    if not isinstance(payload, dict):
        raise ConfigError(
            what="event payload must be a JSON object.",
            why="event fields are looked up by name",
            remediation="pass the unmodified event payload written by the runner",
        )

    owner, repo = parse_repository(repository) if repository else ("", "")
    return EventSource(event_name=event_name, payload=payload, owner=owner, repo=repo)


def _validate_known_keys(file_config: Mapping[str, Any]) -> None:
    """Reject unknown top-level keys."""
    allowed = {item.name for item in fields(AppConfig)}
    unknown_keys = [key for key in file_config if key not in allowed]
    if unknown_keys:
        key = unknown_keys[0]
        raise ConfigError(
            what=f"unknown config key '{key}'.",
            why="configuration file contains unsupported fields",
            remediation=f"use only: {', '.join(sorted(allowed))}",
        )
