"""Task results, the task interface, conditional wrapping and shared argument parsing."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from booster.condition import Condition, Evaluator

__all__ = [
    "Status",
    "Result",
    "Task",
    "TaskArgsError",
    "ConditionalTask",
    "SourceTarget",
    "parse_source_target_args",
]


class Status(enum.Enum):
    """Outcome of a task."""

    PENDING = "pending"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Result:
    """What a task reports after running.

    ``duration`` is in seconds and is filled in by the executor.
    """

    status: Status
    message: str = ""
    error: BaseException | None = None
    output: str = ""
    duration: float = 0.0


class Task(ABC):
    """A single unit of bootstrap work."""

    @abstractmethod
    def name(self) -> str:
        """Return a human-readable description."""

    def needs_sudo(self) -> bool:
        """Return True when the task requires elevated privileges."""
        return False

    @abstractmethod
    def run(self) -> Result:
        """Perform the task and report the outcome."""


class TaskArgsError(ValueError):
    """Task arguments from the configuration are malformed."""


class ConditionalTask(Task):
    """Runs the wrapped task only when its condition holds."""

    def __init__(self, wrapped: Task, condition: Condition | None, evaluator: Evaluator) -> None:
        if evaluator is None:
            raise ValueError("evaluator cannot be nil")
        self.wrapped = wrapped
        self.condition = condition
        self.evaluator = evaluator

    def name(self) -> str:
        return self.wrapped.name()

    def needs_sudo(self) -> bool:
        return self.wrapped.needs_sudo()

    def run(self) -> Result:
        if not self.evaluator.matches(self.condition):
            reason = self.evaluator.failure_reason(self.condition)
            return Result(Status.SKIPPED, message="condition not met: " + reason)
        return self.wrapped.run()


@dataclass(frozen=True)
class SourceTarget:
    """A source/target pair from task arguments."""

    source: str
    target: str


def parse_source_target_args(args: Any) -> list[SourceTarget]:
    """Parse a list of ``{source, target}`` mappings.

    Raises TaskArgsError naming the 1-based position of the bad entry.
    """
    if not isinstance(args, list):
        raise TaskArgsError("args must be a list of {source, target} maps")

    pairs = []
    for index, item in enumerate(args, start=1):
        if not isinstance(item, dict):
            raise TaskArgsError(f"arg {index}: must be a map with 'source' and 'target'")
        if "source" not in item:
            raise TaskArgsError(f"arg {index}: missing 'source'")
        source = item["source"]
        if not isinstance(source, str):
            raise TaskArgsError(f"arg {index}: 'source' must be a string")
        if "target" not in item:
            raise TaskArgsError(f"arg {index}: missing 'target'")
        target = item["target"]
        if not isinstance(target, str):
            raise TaskArgsError(f"arg {index}: 'target' must be a string")
        pairs.append(SourceTarget(source, target))
    return pairs