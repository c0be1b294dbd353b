"""Setting global git configuration values."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable

from booster.cmdexec import CommandError, Runner, default_runner
from booster.tasks.core import Result, Status, Task, TaskArgsError

__all__ = [
    "Prompter",
    "GitConfigItem",
    "GitConfig",
    "parse_git_config_args",
    "new_git_config",
]


class Prompter(ABC):
    """Asks the user for a value."""

    @abstractmethod
    def prompt(self, prompt_text: str) -> str:
        """Return the user's answer; raise when the prompt is cancelled."""


@dataclass(frozen=True)
class GitConfigItem:
    """One git configuration key with an explicit value or a prompt."""

    key: str
    value: str = ""
    prompt: str = ""


class _Abort(Exception):
    """Carries the failed Result out of the per-item loop."""

    def __init__(self, message: str, cause: BaseException | None = None, output: str = ""):
        super().__init__(message)
        failure = RuntimeError(message)
        failure.__cause__ = cause
        self.result = Result(Status.FAILED, error=failure, output=output)


@dataclass
class GitConfig(Task):
    """Sets global git configuration keys, leaving existing ones alone.

    Items with an explicit value are set whenever the current value differs.
    Items without one are prompted for only when the key is not yet set.
    """

    runner: Runner | None = None
    prompter: Prompter | None = None
    items: list[GitConfigItem] = field(default_factory=list)

    def name(self) -> str:
        keys = ", ".join(item.key for item in self.items)
        return "configure git: " + (keys or "(none)")

    def needs_sudo(self) -> bool:
        return False

    def run(self) -> Result:
        if not self.items:
            return Result(Status.SKIPPED, message="no items to configure")

        runner = self.runner or default_runner()
        try:
            outcomes = [self._apply(runner, item) for item in self.items]
        except _Abort as abort:
            return abort.result

        configured = outcomes.count(True)
        if not configured:
            return Result(Status.SKIPPED, message="all keys already configured")

        message = f"configured {configured} keys"
        skipped = len(outcomes) - configured
        if skipped:
            message += f" (skipped {skipped})"
        return Result(Status.DONE, message=message)

    def _apply(self, runner: Runner, item: GitConfigItem) -> bool:
        """Configure one item; return whether a value was written."""
        existing, found = _get(runner, item.key)

        if item.value:
            if existing == item.value:
                return False
            _set(runner, item.key, item.value)
            return True

        if (found and existing) or not item.prompt:
            return False

        if self.prompter is None:
            raise _Abort(f"cannot prompt for {item.key}: no prompter configured")
        try:
            answer = self.prompter.prompt(item.prompt)
        except Exception as exc:
            raise _Abort(f"prompt for {item.key}: {exc}", exc) from exc
        _set(runner, item.key, answer)
        return True


def _get(runner: Runner, key: str) -> tuple[str, bool]:
    try:
        raw = runner.run("git", "config", "--global", "--get", key)
    except CommandError as exc:
        return exc.output.decode("utf-8", "replace").strip(), False
    except OSError:
        return "", False
    return raw.decode("utf-8", "replace").strip(), True


def _set(runner: Runner, key: str, value: str) -> None:
    try:
        runner.run("git", "config", "--global", key, value)
    except CommandError as exc:
        raise _Abort(
            f"set {key}: {exc}", exc, exc.output.decode("utf-8", "replace")
        ) from exc
    except OSError as exc:
        raise _Abort(f"set {key}: {exc}", exc) from exc


def _item_at(position: int, entry: Any) -> GitConfigItem:
    if not isinstance(entry, dict):
        raise TaskArgsError(f"arg {position}: must be a map with 'key' field")
    key = entry.get("key")
    if not isinstance(key, str) or not key:
        raise TaskArgsError(f"arg {position}: 'key' is required and must be a string")
    optional = {
        name: entry[name]
        for name in ("value", "prompt")
        if isinstance(entry.get(name), str)
    }
    return GitConfigItem(key=key, **optional)


def parse_git_config_args(args: Any) -> list[GitConfigItem]:
    """Parse a list of ``{key, value, prompt}`` mappings."""
    if not isinstance(args, list):
        raise TaskArgsError("args must be a list")
    return [_item_at(pos, entry) for pos, entry in enumerate(args, start=1)]


def new_git_config(
    runner: Runner | None, prompter: Prompter | None
) -> Callable[[Any], list[Task]]:
    """Return a factory that builds one GitConfig task from its arguments."""

    def factory(args: Any) -> list[Task]:
        items = parse_git_config_args(args)
        return [GitConfig(runner=runner, prompter=prompter, items=items)] if items else []

    return factory