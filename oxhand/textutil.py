"""Small helpers for repository names, IDE commands and path containment."""

from __future__ import annotations

import os

_IDE_COMMANDS = {
    "windsurf": "windsurf",
    "cursor": "cursor",
    "code": "code",
    "vscode": "code",
    "zed": "zed",
    "idea": "idea",
    "goland": "goland",
}


def repo_name_from_url(url: str) -> str:
    """Derive a repository name from an HTTPS or SSH git URL."""
    url = url.removesuffix(".git")
    if ":" in url and "://" not in url:
        parts = url.split(":")
        if len(parts) == 2:
            return parts[1].split("/")[-1]
    return url.split("/")[-1]


def ide_command(ide: str) -> str | None:
    """Return the executable that opens a directory in the named IDE, or None."""
    return _IDE_COMMANDS.get(ide)


def is_subdir(parent: str | os.PathLike, child: str | os.PathLike) -> bool:
    """Tell whether child lies under parent; a symlinked child is judged by its target."""
    parent = os.fspath(parent)
    child = os.fspath(child)
    try:
        target = os.readlink(child)
    except OSError:
        return len(child) > len(parent) + 1 and child.startswith(parent + "/")
    return len(target) > len(parent) and target.startswith(parent)