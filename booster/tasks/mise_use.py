"""Installing toolchains and setting global defaults with mise."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from booster.cmdexec import CommandError, Runner, default_runner
from booster.tasks.core import Result, Status, Task, TaskArgsError

__all__ = ["ToolSpec", "parse_tool_spec", "MiseUse", "new_mise_use_factory"]

_INLINE_LIMIT = 3
_MISE_MISSING = "mise not found in PATH; install mise first (e.g., via pkg.install)"


@dataclass(frozen=True)
class ToolSpec:
    """A tool and the version it should be at."""

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


def parse_tool_spec(spec: str) -> ToolSpec:
    """Parse ``tool@version``; raise TaskArgsError when malformed."""
    name, sep, version = spec.partition("@")
    if not (sep and name and version):
        raise TaskArgsError(f'invalid tool spec "{spec}": expected format tool@version')
    return ToolSpec(name, version)


@dataclass
class MiseUse(Task):
    """Ensures tools are installed at given versions as global defaults."""

    runner: Runner | None = None
    tools: list[ToolSpec] = field(default_factory=list)

    def name(self) -> str:
        if not self.tools:
            return "mise use: (none)"
        if len(self.tools) > _INLINE_LIMIT:
            return f"mise use: {len(self.tools)} tools"
        return "mise use: " + ", ".join(map(str, self.tools))

    def needs_sudo(self) -> bool:
        return False

    def run(self) -> Result:
        runner = self.runner or default_runner()

        try:
            runner.look_path("mise")
        except (OSError, CommandError) as exc:
            missing_mise = FileNotFoundError(_MISE_MISSING)
            missing_mise.__cause__ = exc
            return Result(Status.FAILED, message="mise not installed", error=missing_mise)

        pending = [
            tool for tool in self.tools if _current_version(runner, tool.name) != tool.version
        ]
        if not pending:
            return Result(Status.SKIPPED, message="all tools at correct versions")

        outputs: list[str] = []
        for tool in pending:
            try:
                raw = runner.run("mise", "use", "--global", str(tool))
            except CommandError as exc:
                outputs.append(exc.output.decode("utf-8", "replace"))
                install_error = RuntimeError(f"mise use {tool}: {exc}")
                install_error.__cause__ = exc
                return Result(
                    Status.FAILED,
                    error=install_error,
                    output="\n".join(filter(None, outputs)),
                )
            outputs.append(raw.decode("utf-8", "replace"))

        return Result(
            Status.DONE,
            message=f"configured {len(pending)} tool(s)",
            output="\n".join(filter(None, outputs)),
        )


def _current_version(runner: Runner, tool_name: str) -> str:
    try:
        return runner.run("mise", "current", tool_name).decode("utf-8", "replace").strip()
    except (CommandError, OSError):
        return ""


def _spec_at(position: int, item: Any) -> ToolSpec:
    if not isinstance(item, str):
        raise TaskArgsError(f"arg {position}: must be a string")
    try:
        return parse_tool_spec(item)
    except TaskArgsError as exc:
        raise TaskArgsError(f"arg {position}: {exc}") from exc


def new_mise_use_factory(runner: Runner | None = None) -> Callable[[Any], list[Task]]:
    """Return a factory that builds a MiseUse task from a list of specs."""

    def factory(args: Any) -> list[Task]:
        if not isinstance(args, list):
            raise TaskArgsError("args must be a list of tool@version specs")
        tools = [_spec_at(pos, item) for pos, item in enumerate(args, start=1)]
        if not tools:
            return []
        return [MiseUse(runner=runner or default_runner(), tools=tools)]

    return factory