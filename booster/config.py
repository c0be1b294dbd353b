"""Loading and validation of bootstrap configuration files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

from booster.pathutil import expand

__all__ = [
    "ConfigError",
    "VariableDef",
    "When",
    "TaskSpec",
    "Config",
    "as_string_list",
    "load",
]

SUPPORTED_VERSION = "1"


class ConfigError(Exception):
    """The configuration could not be read, parsed or validated."""


@dataclass
class VariableDef:
    """A variable whose value may be prompted for at runtime."""

    prompt: str = ""
    default: str = ""


@dataclass
class When:
    """Conditions attached to a task."""

    os: list[str] = field(default_factory=list)
    profile: list[str] = field(default_factory=list)


@dataclass
class TaskSpec:
    """One action from the configuration, with its raw arguments."""

    action: str
    args: Any = None
    when: When | None = None


@dataclass
class Config:
    """The top-level bootstrap configuration."""

    version: str
    tasks: list[TaskSpec] = field(default_factory=list)
    profiles: list[str] | None = None
    variables: dict[str, VariableDef] | None = None


def _scalar(value: Any, what: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"{what} must be a string")


def as_string_list(value: Any) -> list[str]:
    """Accept either a single string or a list of strings."""
    if value is None:
        return []
    if isinstance(value, list):
        return [_scalar(item, "list item") for item in value]
    return [_scalar(value, "value")]


def _mapping(value: Any, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{what} must be a mapping")
    return value


def _parse_when(raw: Any) -> When | None:
    if raw is None:
        return None
    data = _mapping(raw, "when")
    return When(os=as_string_list(data.get("os")), profile=as_string_list(data.get("profile")))


def _parse_variables(raw: Any) -> dict[str, VariableDef] | None:
    if raw is None:
        return None
    result = {}
    for name, body in _mapping(raw, "variables").items():
        data = _mapping(body, f"variable {name}")
        result[str(name)] = VariableDef(
            prompt=_scalar(data.get("prompt"), "prompt"),
            default=_scalar(data.get("default"), "default"),
        )
    return result


def _parse_tasks(raw: Any) -> list[TaskSpec]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError("tasks must be a list")
    tasks = []
    for index, item in enumerate(raw, start=1):
        data = _mapping(item, f"task {index}")
        tasks.append(
            TaskSpec(
                action=_scalar(data.get("action"), "action"),
                args=data.get("args"),
                when=_parse_when(data.get("when")),
            )
        )
    return tasks


def _parse(document: Any) -> Config:
    data = _mapping(document, "document")
    profiles = data.get("profiles")
    return Config(
        version=_scalar(data.get("version"), "version"),
        tasks=_parse_tasks(data.get("tasks")),
        profiles=None if profiles is None else as_string_list(profiles),
        variables=_parse_variables(data.get("variables")),
    )


def load(path: str) -> Config:
    """Read, parse and validate the configuration file at ``path``."""
    try:
        with open(expand(path), encoding="utf-8") as fh:
            text = fh.read()
    except OSError as exc:
        raise ConfigError(f"read config: {exc}") from exc

    try:
        cfg = _parse(yaml.safe_load(text))
    except yaml.YAMLError as exc:
        raise ConfigError(f"parse config: {exc}") from exc
    except ConfigError as exc:
        raise ConfigError(f"parse config: {exc}") from exc

    if not cfg.version:
        raise ConfigError("config missing version field")
    if cfg.version != SUPPORTED_VERSION:
        raise ConfigError(f"unsupported config version: {cfg.version}")
    for index, task in enumerate(cfg.tasks, start=1):
        if not task.action:
            raise ConfigError(f"task {index}: action cannot be empty")
    return cfg