"""System prompts and context documents handed to Claude sessions."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

AGENTS_FILE = "AGENTS.md"
_PERSONA_PREFIXES = ("# Persona: ", "Persona: ")

# A command listing entry: the command and an optional trailing comment.
_Entry = Tuple[str, Optional[str]]


@dataclass(frozen=True)
class _Guidance:
    """Persona-specific guidance appended to a workspace prompt."""

    title: str
    mode: str
    job: str
    responsibilities: Sequence[Tuple[str, str]]
    commands: Sequence[str]
    rules: Sequence[str]
    template: Sequence[str] = ()

    def render(self) -> str:
        lines = [
            "",
            f"## {self.title} Persona - {self.mode} Mode",
            "",
            f"You are in {self.title.upper()} mode. Your job is to {self.job}",
            "",
            "### Your Responsibilities",
        ]
        lines += [
            f"{number}. **{word}** - {text}"
            for number, (word, text) in enumerate(self.responsibilities, 1)
        ]
        lines += ["", f"### Key Commands for {self.title}s"]
        lines += [f"- {command}" for command in self.commands]
        lines += ["", f"### {self.title} Rules"]
        lines += [f"- {rule}" for rule in self.rules]
        if self.template:
            lines += ["", "### Planning Template", "When starting:"]
            lines += [f"{number}. {step}" for number, step in enumerate(self.template, 1)]
        return "\n".join(lines) + "\n"


_COMMON_SECTIONS: Sequence[Tuple[str, Sequence[Tuple[str, str]]]] = (
    (
        "Progress & Memory",
        (
            ('ox checkpoint --done "what you did" --next "what\'s next"',
             "IMPORTANT: Save progress regularly"),
            ('ox learn "insight" -c category', "Capture learnings"),
            ("ox resume", "See last checkpoint"),
        ),
    ),
    (
        "Task Management",
        (
            ("ox tree", "See task hierarchy"),
            ('ox subtask <parent> "title"', "Create subtask"),
            ("ox block <id> --by <blocker>", "Add dependency"),
            ("ox unblock <id> <blocker>", "Remove dependency"),
            ("ox done", "Complete current task"),
        ),
    ),
    (
        "Code Review & Ship",
        (
            ("ox review", "AI code review before shipping"),
            ("ox ship", "Push and create PR"),
        ),
    ),
)

_CAPTAIN = _Guidance(
    title="Captain",
    mode="Orchestration",
    job="ORCHESTRATE, not implement.",
    responsibilities=(
        ("Plan", "Break down the task into subtasks"),
        ("Organize", "Set up dependencies between tasks"),
        ("Delegate", "Create clear subtasks for builders"),
        ("Track", "Monitor progress, update blockers"),
        ("Coordinate", "Ensure pieces fit together"),
    ),
    commands=(
        'ox subtask <this-task> "Implementation: X"  # Create work items',
        "ox block <task> --by <other>  # Model dependencies",
        "ox tree  # Visualize the plan",
        'ox checkpoint --done "Planned X" --next "Coordinate Y"',
    ),
    rules=(
        "Do NOT write implementation code yourself",
        "DO create detailed subtasks with clear acceptance criteria",
        "DO think about order of operations and dependencies",
        "DO check on progress: ox tree, ox status",
        "DO document decisions in checkpoints",
    ),
    template=(
        "Read the task/epic description",
        "Identify major components",
        "Create subtasks for each component",
        "Set up blocking relationships",
        "Document the plan in a checkpoint",
    ),
)

_EXPLORER = _Guidance(
    title="Explorer",
    mode="Research",
    job="INVESTIGATE and UNDERSTAND.",
    responsibilities=(
        ("Research", "Dig into code, docs, systems"),
        ("Document", "Record findings clearly"),
        ("Analyze", "Understand how things work"),
        ("Report", "Summarize for others"),
    ),
    commands=(
        'ox learn "discovered X" -c finding  # Capture insights',
        'ox checkpoint --done "Investigated X" --next "Explore Y"',
        'ox note <task> "Finding: ..."  # Add notes to task',
    ),
    rules=(
        "DO read extensively before concluding",
        "DO document your findings",
        "DO capture learnings for future reference",
        "AVOID making changes unless asked",
        "FOCUS on understanding, not implementing",
    ),
)

_REVIEWER = _Guidance(
    title="Reviewer",
    mode="Quality",
    job="ensure QUALITY.",
    responsibilities=(
        ("Review", "Check code changes thoroughly"),
        ("Test", "Verify functionality works"),
        ("Validate", "Ensure requirements are met"),
        ("Feedback", "Provide constructive feedback"),
    ),
    commands=(
        "ox review  # Run AI code review",
        "ox skill inject writing-tests  # Load test expertise",
        'ox checkpoint --done "Reviewed X" --next "Verify Y"',
    ),
    rules=(
        "DO run ox review before approving",
        "DO check for edge cases",
        "DO verify tests exist and pass",
        "DO look for security issues",
        "FOCUS on correctness and quality",
    ),
)

_BUILDER = _Guidance(
    title="Builder",
    mode="Implementation",
    job="SHIP working code.",
    responsibilities=(
        ("Understand", "Read existing code first"),
        ("Implement", "Write clean, minimal code"),
        ("Test", "Verify your changes work"),
        ("Ship", "Commit and push"),
    ),
    commands=(
        "ox review  # Review before shipping",
        "ox ship  # Push and create PR",
        'ox checkpoint --done "Implemented X" --next "Test Y"',
        "ox skill inject <name>  # Load expertise as needed",
    ),
    rules=(
        "DO follow existing patterns in the codebase",
        "DO write tests for new functionality",
        "DO keep changes focused and reviewable",
        "DO use ox review before shipping",
        "AVOID over-engineering - keep it simple",
    ),
)

_PERSONA_GUIDANCE = {
    "captain": _CAPTAIN,
    "explorer": _EXPLORER,
    "reviewer": _REVIEWER,
}

_ASSISTANT_COMMANDS: Sequence[Tuple[str, Sequence[_Entry]]] = (
    (
        "Task Workflow",
        (
            ("ox pickup <id> --repos <repo>", "Create workspace for yoke task"),
            ("ox status", "Show active workspaces"),
            ("ox open [task-id]", "Open workspace in IDE"),
            ("ox review [task-id]", "AI code review with Mycroft"),
            ("ox review --local", "Review current directory (any git repo)"),
            ("ox ship", "Push branches and create PRs"),
            ("ox done [id]", "Complete task, cleanup workspace"),
        ),
    ),
    (
        "Personas (Mindsets)",
        (
            ("ox personas", "List available personas"),
            ("ox morph <persona>", "Switch persona in current workspace"),
            ("# Personas: builder, explorer, reviewer, captain", None),
        ),
    ),
    (
        "Skills (Expertise)",
        (
            ("ox skill list", "List all skills"),
            ("ox skill inject <name>", "Add skill to workspace"),
            ("ox skill eject <name>", "Remove skill from workspace"),
        ),
    ),
    (
        "Progress & Memory",
        (
            ('ox checkpoint --done "..." --next "..."', "Save progress"),
            ("ox checkpoints", "List checkpoints for task"),
            ("ox resume", "Show latest checkpoint context"),
            ('ox learn "insight" -c category', "Capture a learning"),
            ("ox learnings", "List all learnings"),
        ),
    ),
    (
        "Task Management (yoke integration)",
        (
            ('ox add "title"', "Create task"),
            ('ox subtask <parent> "title"', "Create subtask"),
            ("ox tree", "Show task hierarchy"),
            ("ox ready", "Show unblocked tasks"),
            ('ox search "query"', "Search tasks"),
            ("ox task <id>", "Show task details"),
            ("ox edit <id>", "Edit task"),
            ("ox tag <id> <tag>", "Add tag"),
            ("ox untag <id> <tag>", "Remove tag"),
            ("ox block <id> --by <blocker>", "Add dependency"),
            ("ox unblock <id> <blocker>", "Remove dependency"),
            ('ox note <id> "text"', "Add note"),
            ("ox notes <id>", "Show notes"),
            ("ox log <id>", "Show task history"),
        ),
    ),
    (
        "Repository Management",
        (
            ("ox repo list", "Show registered repos"),
            ("ox repo add <url> --name <name>", "Register a codebase"),
            ("ox repo remove <name>", "Unregister repo"),
            ("ox worktree list", "Show git worktrees"),
        ),
    ),
    (
        "Dashboard & Hooks",
        (
            ("ox dashboard", "Start web dashboard"),
            ("ox hooks", "List Claude Code hooks"),
            ("ox hooks init", "Install hooks to Claude Code"),
        ),
    ),
)

_PERSONA_TABLE: Sequence[Tuple[str, str, str]] = (
    ("builder", "Ship code, bias to action", "Implementing features, fixing bugs"),
    ("explorer", "Research, investigate", "Understanding code, spikes, learning"),
    ("reviewer", "Quality, correctness", "Code review, audits, testing"),
    ("captain", "Plan, delegate, orchestrate", "Epic planning, architecture, coordination"),
)

_KEY_SKILLS: Sequence[Tuple[str, str]] = (
    ("backend-engineer", "Java/Spring, Python, MongoDB patterns"),
    ("debug-engineer", "Systematic debugging methodology"),
    ("writing-tests", "Test writing (backend + API automation)"),
    ("mongodb", "MongoDB queries and operations"),
    ("temporal", "Temporal workflow debugging"),
    ("aws-cli", "CloudWatch, AWS debugging"),
    ("local-stack", "Local development environment"),
    ("oodle", "Metrics and alerts"),
)

_WORKFLOWS: Sequence[Tuple[str, Sequence[_Entry]]] = (
    (
        "Starting a Task",
        (
            ("ox ready", "See what's unblocked"),
            ("ox pickup 28 --repos backend", "Create workspace"),
            ("cd ~/.ox/tasks/28-*/", "Enter workspace"),
            ("# Claude reads AGENTS.md automatically", None),
        ),
    ),
    (
        "During Work",
        (
            ('ox checkpoint --done "Added API" --next "Write tests"', None),
            ("ox morph reviewer", "Switch to review mode"),
            ("ox skill inject writing-tests", "Load test expertise"),
        ),
    ),
    (
        "Finishing",
        (
            ("ox review", "AI code review"),
            ("ox ship", "Push and create PR"),
            ('ox done 28 --learn "Pattern X works well"', None),
        ),
    ),
)

_PATHS: Sequence[Tuple[str, str]] = (
    ("Ox home", ""),
    ("Skills", "/skills/"),
    ("Personas", "/personas/"),
    ("Tasks", "/tasks/"),
    ("Worktrees", "/worktrees/"),
    ("Config", "/ox.yaml"),
)

_COMMENT_COLUMN = 31


def _bracket_list(items: Iterable[object]) -> str:
    return "[" + " ".join(str(item) for item in items) + "]"


def _entry_line(entry: _Entry) -> str:
    command, comment = entry
    if comment is None:
        return command
    return f"{command:<{_COMMENT_COLUMN}}  # {comment}"


def _bash_block(title: str, entries: Sequence[_Entry]) -> str:
    body = "".join(_entry_line(entry) + "\n" for entry in entries)
    return f"### {title}\n```bash\n{body}```"


def _persona_table() -> str:
    headers = ("Persona", "Mindset", "Use When")
    rows = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("-" * (len(header) + 2) for header in headers) + "|",
    ]
    rows += [f"| **{name}** | {mindset} | {use} |" for name, mindset, use in _PERSONA_TABLE]
    return "\n".join(rows)


def _common_commands() -> str:
    blocks = [
        f"### {title}\n" + "".join(f"- {command}  # {comment}\n" for command, comment in entries)
        for title, entries in _COMMON_SECTIONS
    ]
    return "\n" + "\n".join(blocks)


def find_line(content: str, prefix: str) -> str:
    """Return the rest of the line after the first occurrence of prefix, or ""."""
    index = content.find(prefix)
    if index == -1:
        return ""
    start = index + len(prefix)
    end = content.find("\n", start)
    return content[start:] if end == -1 else content[start:end]


def detect_persona_from_workspace(ws_path: str | os.PathLike) -> str:
    """Read the persona named in a workspace's AGENTS.md, or "" if none."""
    try:
        content = (Path(ws_path) / AGENTS_FILE).read_text(encoding="utf-8")
    except OSError:
        return ""
    for prefix in _PERSONA_PREFIXES:
        found = find_line(content, prefix)
        if found:
            return found
    return ""


def build_persona_prompt(
    persona: str,
    ox_home: str | os.PathLike,
    slug: str,
    ws_path: str | os.PathLike,
    repos: Iterable[str],
) -> str:
    """Build the system prompt for a Claude session in a task workspace."""
    guidance = _PERSONA_GUIDANCE.get(persona, _BUILDER)
    parts = [
        f"You are an ox-powered AI assistant working in task workspace: {slug}\n\n"
        "## Ox Commands Available\n",
        _common_commands(),
        guidance.render(),
        "\n## Skills Directory\n"
        "Load skills with: ox skill inject <name>\n"
        f"Skills at: {os.fspath(ox_home)}/skills/\n\n"
        "## Workspace Info\n"
        f"- Path: {os.fspath(ws_path)}\n"
        f"- Repos: {_bracket_list(repos)}\n",
    ]
    return "".join(parts)


def assistant_context(ox_home: str | os.PathLike) -> str:
    """Return the ASSISTANT.md document describing ox to an assistant."""
    home = os.fspath(ox_home)
    paragraphs = [
        "# Ox Assistant",
        "You are an AI assistant powered by ox - an agent workspace manager "
        "for AI-assisted development.",
        "## All Ox Commands",
        *(_bash_block(title, entries) for title, entries in _ASSISTANT_COMMANDS),
        "## Personas",
        _persona_table(),
        f"Read persona files at: {home}/personas/",
        "## Skills",
        f"Read skill files at: {home}/skills/",
        "Key skills:\n" + "\n".join(f"- **{name}** - {text}" for name, text in _KEY_SKILLS),
        "## Workflow Examples",
        *(_bash_block(title, entries) for title, entries in _WORKFLOWS),
        "## Important Paths\n"
        + "\n".join(f"- {label}: {home}{suffix}" for label, suffix in _PATHS),
        "You are a capable general assistant AND an ox expert. Help with anything!",
    ]
    return "\n\n".join(paragraphs) + "\n"


def write_assistant_context(ox_home: str | os.PathLike, output_path: str | os.PathLike) -> Path:
    """Write the assistant context document to output_path."""
    path = Path(output_path)
    path.write_text(assistant_context(ox_home), encoding="utf-8")
    return path


def assist_system_prompt(
    ox_home: str | os.PathLike,
    context_file: str | os.PathLike,
    skills: Iterable[str] = (),
) -> str:
    """Build the system prompt for a general assistant session."""
    prompt = (
        "You are an ox-powered AI assistant. "
        f"Read {os.fspath(context_file)} for your full capabilities. "
        "You can execute ox commands, use skills, and help with any coding task."
    )
    skills_dir = Path(ox_home) / "skills"
    skill_paths = [
        os.fspath(skills_dir / f"{skill}.md")
        for skill in skills
        if (skills_dir / f"{skill}.md").exists()
    ]
    if skill_paths:
        prompt += f" Read these skills for expertise: {_bracket_list(skill_paths)}"
    return prompt