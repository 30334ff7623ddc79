"""Generation of AGENTS.md context files for task workspaces."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

AGENTS_FILE = "AGENTS.md"
CLAUDE_FILE = "CLAUDE.md"
SKILLS_SUBDIR = ".skills"
MAX_EVENTS = 10
MAX_RELATED_FILES = 10

_STATUS_ICONS = {
    "pending": "○",
    "active": "◐",
    "in_progress": "●",
    "blocked": "⊘",
    "done": "✓",
    "dropped": "✗",
}

_STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "to", "for", "of", "in", "on", "with",
        "add", "fix", "update", "remove", "implement", "refactor", "create", "make",
    }
)
_KEYWORD_PUNCTUATION = ".,!?:;()[]{}\"'"


@dataclass
class TaskInfo:
    """The task fields that a context file shows."""

    id: str = ""
    seq: int = 0
    title: str = ""
    status: str = "pending"
    priority: int = 0
    tags: list[str] = field(default_factory=list)
    body: str = ""
    notion_url: str | None = None
    blockers: list[str] = field(default_factory=list)


@dataclass
class Note:
    """A dated note attached to a task."""

    content: str
    created_at: datetime


@dataclass
class Event:
    """A recorded change on a task."""

    event_type: str
    old_value: str = ""
    new_value: str = ""


@dataclass
class TaskContext:
    """Everything needed to generate AGENTS.md for one task."""

    task: TaskInfo
    notes: list[Note] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    parent: TaskInfo | None = None
    children: list[TaskInfo] = field(default_factory=list)
    blockers: list[TaskInfo] = field(default_factory=list)
    persona: str = ""
    skills: list[str] = field(default_factory=list)
    repos: list[str] = field(default_factory=list)
    task_type: str = ""


@dataclass
class RelatedFile:
    """A file touched by commits whose messages mention the task's keywords."""

    path: str
    commits: int


class _PersonaSource(Protocol):
    def get(self, name: str) -> Any: ...


class _SkillSource(Protocol):
    def match_for_task(self, tags: list[str], persona: str, task_type: str) -> list[Any]: ...

    def get(self, name: str) -> Any: ...

    def content(self, skill: Any) -> str: ...


@dataclass
class _WorkspaceSkill:
    name: str
    file: str
    description: str = ""


def task_status_icon(status: str) -> str:
    """Return the icon shown for a task status."""
    return _STATUS_ICONS.get(status, "?")


def extract_keywords(title: str) -> list[str]:
    """Return the meaningful lower-case words of a task title."""
    keywords = []
    for word in title.lower().split():
        word = word.strip(_KEYWORD_PUNCTUATION)
        if len(word) < 3 or word in _STOP_WORDS:
            continue
        keywords.append(word)
    return keywords


def _git_output(repo_path: str | os.PathLike, *args: str) -> str | None:
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=repo_path,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return result.stdout


def search_git_history(repo_path: str | os.PathLike, keyword: str) -> dict[str, int]:
    """Count, per file, the commits mentioning keyword that touched it."""
    files: dict[str, int] = {}
    log = _git_output(repo_path, "log", "--all", "--oneline", f"--grep={keyword}", "-n", "50")
    if not log:
        return files
    for line in log.strip().split("\n"):
        commit = line.split(" ", 1)[0]
        changed = _git_output(
            repo_path, "diff-tree", "--no-commit-id", "--name-only", "-r", commit
        )
        if changed is None:
            continue
        for name in changed.strip().split("\n"):
            if name:
                files[name] = files.get(name, 0) + 1
    return files


def find_related_files(
    workspace_path: str | os.PathLike, repos: list[str], task_title: str
) -> list[RelatedFile]:
    """Return up to ten files most often changed by commits matching the title."""
    keywords = extract_keywords(task_title)
    if not keywords:
        return []
    best: dict[str, int] = {}
    for repo in repos:
        repo_path = Path(workspace_path) / repo
        if not repo_path.exists():
            continue
        for keyword in keywords:
            for path, commits in search_git_history(repo_path, keyword).items():
                full = os.path.join(repo, path)
                best[full] = max(commits, best.get(full, 0))
    ranked = sorted(best.items(), key=lambda item: (-item[1], item[0]))
    return [RelatedFile(path, commits) for path, commits in ranked[:MAX_RELATED_FILES]]


class Generator:
    """Builds AGENTS.md files; persona and skill sources are optional lookups."""

    def __init__(
        self,
        ox_home: str | os.PathLike,
        personas: _PersonaSource | None = None,
        skills: _SkillSource | None = None,
    ) -> None:
        self.ox_home = Path(ox_home)
        self.persona_dir = self.ox_home / "personas"
        self.skills_dir = self.ox_home / "skills"
        self.personas = personas
        self.skills = skills

    def render(self, workspace_path: str | os.PathLike, ctx: TaskContext) -> str:
        """Return the text of AGENTS.md for the task."""
        task = ctx.task
        out: list[str] = [f"# Task #{task.seq}: {task.title}\n\n", "## Status\n"]
        status_line = f"{task.status.upper()} | P{task.priority}"
        if task.tags:
            status_line += f" | Tags: {', '.join(task.tags)}"
        out.append(status_line + "\n\n")

        if task.body:
            out.append(f"## Context\n{task.body}\n\n")

        if ctx.notes:
            out.append("## Notes\n")
            out.extend(
                f"- {note.created_at.strftime('%Y-%m-%d')}: {note.content}\n" for note in ctx.notes
            )
            out.append("\n")

        out.extend(self._dependencies(ctx))
        out.extend(self._hierarchy(ctx))

        if ctx.events:
            out.append("## Recent Activity\n")
            for event in ctx.events[-MAX_EVENTS:]:
                if event.old_value and event.new_value:
                    out.append(f"- {event.event_type}: {event.old_value} → {event.new_value}\n")
                elif event.new_value:
                    out.append(f"- {event.event_type}: {event.new_value}\n")
                else:
                    out.append(f"- {event.event_type}\n")
            out.append("\n")

        if ctx.repos:
            related = find_related_files(workspace_path, ctx.repos, task.title)
            if related:
                out.append("## Related Files (from git history)\n")
                out.extend(f"- {rf.path} ({rf.commits} commits)\n" for rf in related)
                out.append("\n")

        if task.notion_url:
            out.append(f"## External\nNotion: {task.notion_url}\n\n")

        if ctx.repos:
            out.append("## Workspace Repos\n")
            out.extend(f"- {repo}/\n" for repo in ctx.repos)
            out.append("\n")

        if ctx.persona:
            out.append("---\n\n")
            out.extend(self._persona(ctx.persona))

        out.extend(self._skills(Path(workspace_path), ctx))

        stamp = datetime.now().astimezone().isoformat(timespec="seconds")
        out.append("---\n")
        out.append(f"Generated by ox at {stamp}\n")
        return "".join(out)

    def generate(self, workspace_path: str | os.PathLike, ctx: TaskContext) -> Path:
        """Write AGENTS.md into the workspace and point CLAUDE.md at it."""
        workspace = Path(workspace_path)
        agents_path = workspace / AGENTS_FILE
        agents_path.write_text(self.render(workspace, ctx), encoding="utf-8")
        claude_path = workspace / CLAUDE_FILE
        if claude_path.is_symlink() or claude_path.exists():
            claude_path.unlink()
        claude_path.symlink_to(AGENTS_FILE)
        return agents_path

    def list_skills(self) -> list[str]:
        """Return the names of the markdown skill files in the skills directory."""
        return sorted(
            entry.name.removesuffix(".md")
            for entry in os.scandir(self.skills_dir)
            if not entry.is_dir() and entry.name.endswith(".md")
        )

    @staticmethod
    def _dependencies(ctx: TaskContext) -> list[str]:
        if not ctx.blockers and not ctx.task.blockers:
            return []
        out = ["## Blocked By\n"]
        if ctx.blockers:
            out.extend(
                f"- #{b.seq}: {b.title} [{b.status.lower()}]\n" for b in ctx.blockers
            )
        else:
            out.extend(f"- {blocker_id}\n" for blocker_id in ctx.task.blockers)
        out.append("\n")
        return out

    @staticmethod
    def _hierarchy(ctx: TaskContext) -> list[str]:
        if ctx.parent is None and not ctx.children:
            return []
        out = ["## Hierarchy\n"]
        if ctx.parent is not None:
            out.append(f"Parent: #{ctx.parent.seq} {ctx.parent.title}\n")
        if ctx.children:
            out.append("Children:\n")
            out.extend(
                f"  {task_status_icon(child.status)} #{child.seq}: {child.title}\n"
                for child in ctx.children
            )
        out.append("\n")
        return out

    def _persona(self, name: str) -> list[str]:
        if self.personas is None:
            return []
        persona = self.personas.get(name)
        if persona is None:
            return []
        out = [f"# Persona: {persona.name}\n"]
        role = getattr(persona, "role", "")
        if role:
            out.append(f"**Role:** {role}\n\n")
        out.append(f"{getattr(persona, 'content', '')}\n")
        return out

    def _skills(self, workspace: Path, ctx: TaskContext) -> list[str]:
        chosen: dict[str, Any] = {}
        if self.skills is not None:
            for skill in self.skills.match_for_task(ctx.task.tags, ctx.persona, ctx.task_type):
                chosen.setdefault(skill.name, skill)
            for name in ctx.skills:
                if name in chosen:
                    continue
                skill = self.skills.get(name)
                if skill is not None:
                    chosen[name] = skill

        injected_dir = workspace / SKILLS_SUBDIR
        if injected_dir.is_dir():
            for entry in sorted(os.scandir(injected_dir), key=lambda e: e.name):
                if entry.is_dir() or not entry.name.endswith(".md"):
                    continue
                name = entry.name.removesuffix(".md")
                chosen.setdefault(name, _WorkspaceSkill(name=name, file=entry.name))

        if not chosen:
            return []

        out = ["---\n\n", "# Skills\n\n"]
        for skill in chosen.values():
            content = self._skill_content(injected_dir, skill)
            if content is None:
                continue
            out.append(f"## {skill.name}\n")
            description = getattr(skill, "description", "")
            if description:
                out.append(f"_{description}_\n\n")
            out.append(f"{content}\n\n")
        return out

    def _skill_content(self, injected_dir: Path, skill: Any) -> str | None:
        try:
            return (injected_dir / skill.file).read_text(encoding="utf-8")
        except OSError:
            pass
        if self.skills is None:
            return None
        try:
            return self.skills.content(skill)
        except (OSError, LookupError, ValueError):
            return None