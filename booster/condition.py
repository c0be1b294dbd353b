"""Conditions that decide whether a task runs, and detection of the host."""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

__all__ = [
    "Context",
    "Condition",
    "Evaluator",
    "SystemDetector",
    "parse_os_release_content",
]

_OS_RELEASE = "/etc/os-release"


@dataclass(frozen=True)
class Context:
    """Facts about the running environment."""

    os: str = ""
    profile: str = ""


@dataclass
class Condition:
    """When a task should run: any value within a field, all fields together."""

    os: list[str] = field(default_factory=list)
    profile: list[str] = field(default_factory=list)


class Evaluator:
    """Checks conditions against a fixed context."""

    def __init__(self, ctx: Context) -> None:
        self.ctx = ctx

    def matches(self, cond: Condition | None) -> bool:
        """Return True when the condition holds; a missing condition always does."""
        if cond is None:
            return True
        if cond.os and self.ctx.os not in cond.os:
            return False
        if cond.profile and self.ctx.profile not in cond.profile:
            return False
        return True

    def failure_reason(self, cond: Condition | None) -> str:
        """Describe why the condition fails, or return "" if it holds."""
        if cond is None or self.matches(cond):
            return ""
        if cond.os and self.ctx.os not in cond.os:
            return f"os={self.ctx.os}, want {' or '.join(cond.os)}"
        if cond.profile and self.ctx.profile not in cond.profile:
            return f"profile={self.ctx.profile}, want {' or '.join(cond.profile)}"
        return ""


def parse_os_release_content(content: str) -> str:
    """Return the ID value from os-release content, or "" if there is none."""
    for line in content.split("\n"):
        line = line.strip()
        if line.startswith("ID="):
            return line[3:].strip("\"'")
    return ""


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


@dataclass
class SystemDetector:
    """Detects the current operating system or Linux distribution."""

    read_file: Callable[[str], str | bytes] | None = None

    def detect(self) -> Context:
        return Context(os=self._detect_os())

    def _detect_os(self) -> str:
        system = platform.system().lower()
        if system == "darwin":
            return "darwin"
        if system == "linux":
            distro = self._read_distro()
            if distro:
                return distro
        return system or "unknown"

    def _read_distro(self) -> str:
        reader = self.read_file or _read_text
        try:
            data = reader(_OS_RELEASE)
        except (OSError, ValueError):
            return ""
        if isinstance(data, bytes):
            data = data.decode("utf-8", "replace")
        return parse_os_release_content(data)