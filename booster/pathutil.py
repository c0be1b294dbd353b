"""Path helpers."""

from __future__ import annotations

import os

__all__ = ["expand"]


def _home_dir() -> str | None:
    home = os.environ.get("HOME")
    if home:
        return home
    if os.name == "nt":
        return os.environ.get("USERPROFILE") or None
    return None


def expand(path: str) -> str:
    """Expand a leading ``~/`` to the user's home directory.

    The path is returned unchanged when it has no such prefix or when the
    home directory cannot be determined.
    """
    if not path.startswith("~/"):
        return path
    home = _home_dir()
    if home is None:
        return path
    return os.path.normpath(os.path.join(home, path[2:]))