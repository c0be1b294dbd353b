"""Running external commands, with a recording double for tests."""

from __future__ import annotations

import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable

from booster.logstream import current_writer

__all__ = [
    "CommandError",
    "Runner",
    "RealRunner",
    "default_runner",
    "RunCall",
    "MockRunner",
]


class CommandError(Exception):
    """A command could not be started or exited with a non-zero status."""

    def __init__(
        self,
        name: str,
        args: tuple[str, ...] = (),
        returncode: int | None = None,
        output: bytes = b"",
        reason: str | None = None,
    ) -> None:
        self.command = (name, *args)
        self.returncode = returncode
        self.output = output
        if reason is None:
            reason = f"exit status {returncode}"
        super().__init__(f"{name}: {reason}")


class Runner(ABC):
    """Executes commands and finds executables."""

    @abstractmethod
    def run(self, name: str, *args: str) -> bytes:
        """Run a command and return its combined output.

        Raises CommandError when the command fails.
        """

    @abstractmethod
    def look_path(self, name: str) -> str:
        """Return the full path of an executable in PATH.

        Raises FileNotFoundError when it cannot be found.
        """


class RealRunner(Runner):
    """Runs commands on the actual system."""

    def run(self, name: str, *args: str) -> bytes:
        """Run the command, streaming output to the current stream writer."""
        stream = current_writer()
        chunks: list[bytes] = []
        try:
            proc = subprocess.Popen(
                [name, *args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as exc:
            raise CommandError(name, args, reason=str(exc)) from exc
        with proc:
            assert proc.stdout is not None
            for chunk in iter(lambda: proc.stdout.read1(4096), b""):
                chunks.append(chunk)
                if stream is not None:
                    stream.write(chunk)
            returncode = proc.wait()
        output = b"".join(chunks)
        if returncode != 0:
            raise CommandError(name, args, returncode, output)
        return output

    def look_path(self, name: str) -> str:
        found = shutil.which(name)
        if found is None:
            raise FileNotFoundError(f"executable file not found in PATH: {name}")
        return found


def default_runner() -> Runner:
    """Return a runner that executes real system commands."""
    return RealRunner()


@dataclass(frozen=True)
class RunCall:
    """One recorded invocation of MockRunner.run."""

    name: str
    args: tuple[str, ...]


@dataclass
class MockRunner(Runner):
    """A runner double that records calls and answers from callbacks."""

    run_func: Callable[..., bytes] | None = None
    look_path_func: Callable[[str], str] | None = None
    calls: list[RunCall] = field(default_factory=list)

    def run(self, name: str, *args: str) -> bytes:
        self.calls.append(RunCall(name, tuple(args)))
        if self.run_func is not None:
            return self.run_func(name, *args)
        return b""

    def look_path(self, name: str) -> str:
        if self.look_path_func is not None:
            return self.look_path_func(name)
        return ""