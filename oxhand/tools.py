"""Helpers that drive external tools: yoke, mycroft, gh and the file system."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

MAX_SLUG_LENGTH = 30
DEFAULT_BASE_BRANCH = "origin/main"
_YOKE_FALLBACKS = ("go/bin/yoke",)
_SYSTEM_YOKE = "/usr/local/bin/yoke"


class ToolError(Exception):
    """Raised when an external tool is missing or fails."""


def slugify(s: str) -> str:
    """Turn a title into a lower-case, dash-separated slug of at most 30 characters."""
    slug = re.sub(r"[^a-z0-9]", "-", s.lower())
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    if len(slug) > MAX_SLUG_LENGTH:
        slug = slug[:MAX_SLUG_LENGTH].rstrip("-")
    return slug


def remote_base_branch(base_branch: str) -> str:
    """Return the remote ref a new worktree should start from."""
    if not base_branch:
        return DEFAULT_BASE_BRANCH
    if not base_branch.startswith("origin/") and "/" not in base_branch:
        return "origin/" + base_branch
    return base_branch


def find_yoke() -> str | None:
    """Locate the yoke executable on PATH or in its usual install places."""
    found = shutil.which("yoke")
    if found:
        return found
    home = os.environ.get("HOME", "")
    candidates = [os.path.join(home, rel) for rel in _YOKE_FALLBACKS]
    candidates.append(_SYSTEM_YOKE)
    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    return None


def run_yoke(args: Sequence[str]) -> int:
    """Run yoke with the given arguments on the current terminal; return its exit code."""
    yoke = find_yoke()
    if yoke is None:
        raise ToolError("yoke not found in PATH or ~/go/bin")
    try:
        return subprocess.run([yoke, *args], check=False).returncode
    except OSError as exc:
        raise ToolError(f"run yoke: {exc}") from exc


def review_directory(directory: str | os.PathLike) -> None:
    """Review a git working tree's uncommitted changes with mycroft."""
    directory = os.fspath(directory)
    if not os.path.exists(os.path.join(directory, ".git")):
        raise ToolError(f"{directory} is not a git repository")
    print(f"🔍 Reviewing {directory}...")
    try:
        result = subprocess.run(["mycroft", "review", "--local"], cwd=directory, check=False)
    except OSError as exc:
        raise ToolError(f"run mycroft: {exc}") from exc
    if result.returncode != 0:
        raise ToolError(f"mycroft exited with status {result.returncode}")


def create_pr(
    worktree_path: str | os.PathLike,
    repo_name: str,
    task_seq: int,
    task_title: str,
    draft: bool,
) -> str:
    """Open a pull request with gh and return its URL, reusing one that exists."""
    title = f"#{task_seq}: {task_title}"
    body = f"## Summary\nTask #{task_seq}: {task_title}\n\n---\nShipped via `ox ship`"
    args = ["gh", "pr", "create", "--title", title, "--body", body]
    if draft:
        args.append("--draft")
    try:
        result = subprocess.run(
            args,
            cwd=worktree_path,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise ToolError(f"create PR for {repo_name}: {exc}") from exc
    output = result.stdout or ""
    if result.returncode != 0:
        if "already exists" in output:
            return existing_pr_url(worktree_path)
        raise ToolError(f"{output.strip()}: exit status {result.returncode}")
    return output.strip()


def existing_pr_url(worktree_path: str | os.PathLike) -> str:
    """Return the URL of the pull request for the worktree's current branch."""
    try:
        result = subprocess.run(
            ["gh", "pr", "view", "--json", "url", "-q", ".url"],
            cwd=worktree_path,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise ToolError(f"view PR: {exc}") from exc
    if result.returncode != 0:
        raise ToolError(f"view PR: exit status {result.returncode}")
    return result.stdout.strip()


def find_repos_in_workspace(workspace_path: str | os.PathLike) -> list[str]:
    """Return the names of the symlinked repositories in a workspace, sorted."""
    try:
        entries = list(os.scandir(workspace_path))
    except OSError:
        return []
    return sorted(entry.name for entry in entries if entry.is_symlink())


def copy_path(src: str | os.PathLike, dst: str | os.PathLike) -> None:
    """Copy a file or a directory tree, keeping permission bits."""
    src_path = Path(src)
    if src_path.is_dir():
        _copy_dir(src_path, Path(dst))
    else:
        _copy_file(src_path, Path(dst))


def _copy_file(src: Path, dst: Path) -> None:
    if not src.exists():
        raise FileNotFoundError(src)
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dst)
    shutil.copymode(src, dst)


def _copy_dir(src: Path, dst: Path) -> None:
    dst.mkdir(mode=src.stat().st_mode & 0o777, parents=True, exist_ok=True)
    for entry in os.scandir(src):
        child_src = src / entry.name
        child_dst = dst / entry.name
        if entry.is_dir(follow_symlinks=False):
            _copy_dir(child_src, child_dst)
        else:
            _copy_file(child_src, child_dst)