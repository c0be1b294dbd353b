"""Sequential task execution with result tracking."""

from __future__ import annotations

import dataclasses
import time
from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from booster.tasks.core import Result, Status, Task

__all__ = ["Summary", "Executor"]


@dataclass(frozen=True)
class Summary:
    """Aggregate counts after execution."""

    done: int = 0
    skipped: int = 0
    failed: int = 0
    pending: int = 0
    has_failures: bool = False


class Executor:
    """Runs tasks one at a time and records their results.

    Not safe for use from several threads at once.
    """

    def __init__(self, tasks: Sequence[Task] | None) -> None:
        self._tasks: list[Task] = list(tasks or [])
        self._results: list[Result] = [Result(Status.PENDING) for _ in self._tasks]
        self._current = 0
        self._aborted = False
        self._start: float | None = None
        self._end: float | None = None

    def total(self) -> int:
        return len(self._tasks)

    def current(self) -> int:
        """Index of the next task to run."""
        return self._current

    def done(self) -> bool:
        """True once every task has run."""
        return self._current >= len(self._tasks)

    def abort(self) -> None:
        """Stop execution; later calls to run_next do nothing."""
        if not self._aborted:
            self._aborted = True
            self._end = time.perf_counter()

    def stopped(self) -> bool:
        """True when all tasks ran or execution was aborted."""
        return self._aborted or self.done()

    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def results(self) -> list[Result]:
        return list(self._results)

    def result_at(self, index: int) -> Result:
        """Result of the task at ``index``; pending when out of range."""
        if 0 <= index < len(self._results):
            return self._results[index]
        return Result(Status.PENDING)

    def run_next(self) -> Result | None:
        """Run the next task and return its result, or None when stopped."""
        if self.stopped():
            return None
        if self._current == 0:
            self._start = time.perf_counter()

        task = self._tasks[self._current]
        began = time.perf_counter()
        result = task.run()
        result = dataclasses.replace(result, duration=time.perf_counter() - began)
        self._results[self._current] = result
        self._current += 1

        if self.done():
            self._end = time.perf_counter()
        return result

    def elapsed_time(self) -> float:
        """Seconds since execution began; frozen once execution stops."""
        if self._start is None:
            return 0.0
        end = self._end if self._end is not None else time.perf_counter()
        return end - self._start

    def summary(self) -> Summary:
        counts = Counter(result.status for result in self._results)
        failed = counts[Status.FAILED]
        return Summary(
            done=counts[Status.DONE],
            skipped=counts[Status.SKIPPED],
            failed=failed,
            pending=counts[Status.PENDING],
            has_failures=failed > 0,
        )