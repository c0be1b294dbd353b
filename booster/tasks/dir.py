"""Directory creation task."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from booster.pathutil import expand
from booster.tasks.core import Result, Status, Task, TaskArgsError

__all__ = ["DirCreate", "new_dir_create"]


@dataclass
class DirCreate(Task):
    """Creates a directory, with parents, if it does not exist."""

    path: str

    def name(self) -> str:
        return "create " + self.path

    def needs_sudo(self) -> bool:
        return False

    def run(self) -> Result:
        target = expand(self.path)
        if os.path.isdir(target):
            return Result(Status.SKIPPED, message="already exists")
        if os.path.exists(target):
            return Result(
                Status.FAILED,
                error=NotADirectoryError("path exists but is not a directory"),
            )
        try:
            os.makedirs(target, mode=0o755, exist_ok=True)
        except OSError as exc:
            return Result(Status.FAILED, error=exc)
        return Result(Status.DONE, message="created")


def _path_at(position: int, item: Any) -> str:
    if isinstance(item, str):
        return item
    raise TaskArgsError(f"arg {position}: path must be a string")


def new_dir_create(args: Any) -> list[Task]:
    """Build one DirCreate task per path in ``args``."""
    if not isinstance(args, list):
        raise TaskArgsError("args must be a list of paths")
    return [DirCreate(_path_at(pos, item)) for pos, item in enumerate(args, start=1)]