"""Setting macOS defaults from an external YAML file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import yaml

from booster.cmdexec import CommandError, Runner, default_runner
from booster.pathutil import expand
from booster.tasks.core import Result, Status, Task, TaskArgsError

__all__ = [
    "DefaultsEntry",
    "DarwinDefaults",
    "load_defaults_file",
    "new_darwin_defaults_factory",
]

_VALID_TYPES = ("bool", "int", "float", "string")


@dataclass(frozen=True)
class DefaultsEntry:
    """One macOS defaults setting."""

    domain: str
    key: str
    type: str
    value: Any


def _format(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if value is None:
        return "<nil>"
    return str(value)


def _text(data: bytes) -> str:
    return data.decode("utf-8", "replace")


def _failure(message: str, cause: BaseException | None = None) -> RuntimeError:
    error = RuntimeError(message)
    error.__cause__ = cause
    return error


@dataclass
class DarwinDefaults(Task):
    """Writes macOS defaults whose current value differs from the desired one."""

    runner: Runner | None = None
    os_name: str = ""
    entries: list[DefaultsEntry] = field(default_factory=list)

    def name(self) -> str:
        if not self.entries:
            return "set macOS defaults: (none)"
        if len(self.entries) == 1:
            entry = self.entries[0]
            return f"set macOS defaults: {entry.domain} {entry.key}"
        return f"set macOS defaults: {len(self.entries)} entries"

    def needs_sudo(self) -> bool:
        return False

    def run(self) -> Result:
        if self.os_name != "darwin":
            return Result(Status.SKIPPED, message="not macOS")
        if not self.entries:
            return Result(Status.SKIPPED, message="no defaults to set")

        runner = self.runner or default_runner()
        changed = 0
        already_set = 0
        outputs: list[str] = []

        for entry in self.entries:
            current = self._read(runner, entry.domain, entry.key)
            desired = self.normalize_value(entry.type, entry.value)
            if current and self.normalize_value(entry.type, current) == desired:
                already_set += 1
                continue

            output, error = self._write(runner, entry)
            if output:
                outputs.append(output)
            if error is not None:
                return Result(
                    Status.FAILED,
                    error=_failure(f"write {entry.domain} {entry.key}: {error}", error),
                    output="\n".join(outputs),
                )
            changed += 1

        if changed == 0:
            return Result(
                Status.SKIPPED,
                message=f"all {already_set} settings already configured",
                output="\n".join(outputs),
            )

        message = f"configured {changed} settings"
        if already_set > 0:
            message += f", {already_set} already set"
        return Result(Status.DONE, message=message, output="\n".join(outputs))

    @staticmethod
    def _read(runner: Runner, domain: str, key: str) -> str:
        try:
            return _text(runner.run("defaults", "read", domain, key)).strip()
        except (CommandError, OSError):
            return ""

    @staticmethod
    def _write(runner: Runner, entry: DefaultsEntry) -> tuple[str, Exception | None]:
        value = entry.value
        if entry.type == "bool":
            if isinstance(value, bool):
                value_str = _format(value)
            elif isinstance(value, int):
                value_str = _format(value != 0)
            elif isinstance(value, str):
                value_str = value
            else:
                return "", ValueError(f"invalid bool value: {_format(value)}")
        elif entry.type in ("int", "float", "string"):
            value_str = _format(value)
        else:
            return "", ValueError(f"unsupported type: {entry.type}")

        try:
            output = runner.run(
                "defaults", "write", entry.domain, entry.key, "-" + entry.type, value_str
            )
        except CommandError as exc:
            return _text(exc.output), exc
        except OSError as exc:
            return "", exc
        return _text(output), None

    def normalize_value(self, typ: str, value: Any) -> str:
        """Normalise a value for comparison; booleans become "1" or "0"."""
        if typ != "bool":
            return _format(value)
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, int):
            return "1" if value != 0 else "0"
        if isinstance(value, str):
            lower = value.strip().lower()
            if lower in ("true", "1"):
                return "1"
            if lower in ("false", "0"):
                return "0"
            return lower
        return _format(value)


def _field(data: dict, name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if isinstance(value, (str, bool, int, float)):
        return value if isinstance(value, str) else _format(value)
    raise TaskArgsError(f"parse YAML: '{name}' must be a string")


def load_defaults_file(path: str) -> list[DefaultsEntry]:
    """Read the ``defaults`` list from a YAML file."""
    try:
        with open(expand(path), encoding="utf-8") as fh:
            text = fh.read()
    except OSError as exc:
        raise TaskArgsError(f"read file: {exc}") from exc

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise TaskArgsError(f"parse YAML: {exc}") from exc

    if document is None:
        return []
    if not isinstance(document, dict):
        raise TaskArgsError("parse YAML: document must be a mapping")
    raw = document.get("defaults")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise TaskArgsError("parse YAML: 'defaults' must be a list")

    entries = []
    for item in raw:
        if item is None:
            item = {}
        if not isinstance(item, dict):
            raise TaskArgsError("parse YAML: each default must be a mapping")
        entries.append(
            DefaultsEntry(
                domain=_field(item, "domain"),
                key=_field(item, "key"),
                type=_field(item, "type"),
                value=item.get("value"),
            )
        )
    return entries


def _validate(entries: list[DefaultsEntry]) -> None:
    for index, entry in enumerate(entries, start=1):
        if not entry.domain:
            raise TaskArgsError(f"entry {index}: missing 'domain'")
        if not entry.key:
            raise TaskArgsError(f"entry {index}: missing 'key'")
        if not entry.type:
            raise TaskArgsError(f"entry {index}: missing 'type'")
        if entry.value is None:
            raise TaskArgsError(f"entry {index}: missing 'value'")
        if entry.type not in _VALID_TYPES:
            raise TaskArgsError(
                f'entry {index}: invalid type "{entry.type}" '
                "(must be bool, int, float, or string)"
            )


def new_darwin_defaults_factory(
    runner: Runner | None = None, os_name: str = "", config_dir: str = ""
) -> Callable[[Any], list[Task]]:
    """Return a factory that builds a DarwinDefaults task from ``{file: path}``.

    Relative paths are resolved against ``config_dir``.
    """

    def factory(args: Any) -> list[Task]:
        if not isinstance(args, dict):
            raise TaskArgsError("args must be a map with 'file' key")
        if "file" not in args:
            raise TaskArgsError("missing required 'file' argument")
        file_path = args["file"]
        if not isinstance(file_path, str):
            raise TaskArgsError("'file' must be a string")

        resolved = file_path
        if not file_path.startswith(("/", "~")) and config_dir:
            resolved = expand(config_dir) + "/" + file_path

        try:
            entries = load_defaults_file(resolved)
        except TaskArgsError as exc:
            raise TaskArgsError(f"load defaults file: {exc}") from exc

        _validate(entries)
        return [DarwinDefaults(runner=runner or default_runner(), os_name=os_name, entries=entries)]

    return factory