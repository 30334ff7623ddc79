"""Command-line entry point for the ox workspace manager."""

from __future__ import annotations

import argparse
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, Sequence

from . import config
from .prompts import assist_system_prompt, write_assistant_context
from .textutil import repo_name_from_url
from .tools import ToolError, review_directory, run_yoke

YOKE_ALIASES = {
    "tree": "Show task hierarchy (alias for: yoke tree)",
    "search": "Search tasks (alias for: yoke search)",
    "add": "Add a new task (alias for: yoke add)",
    "edit": "Edit a task (alias for: yoke edit)",
    "subtask": "Create a subtask (alias for: yoke subtask)",
    "block": "Add a blocker (alias for: yoke block)",
    "unblock": "Remove a blocker (alias for: yoke unblock)",
    "tag": "Add a tag (alias for: yoke tag)",
    "untag": "Remove a tag (alias for: yoke untag)",
    "note": "Add a note (alias for: yoke note)",
    "notes": "Show notes (alias for: yoke notes)",
    "log": "Show task history (alias for: yoke log)",
    "tags": "List all tags (alias for: yoke tags)",
    "ready": "Show ready tasks (alias for: yoke ready)",
}

_DESCRIPTION = """Ox is an agent workspace manager built on yoke.

It provides structured workspaces, personas, skills, and lifecycle
management for AI-assisted development."""

_INIT_HINT = "Run 'ox init' to initialize ox."


class _CliError(Exception):
    """A command failure reported as 'Error: ...', with an optional hint line."""

    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.hint = hint


def _require_config() -> config.Config:
    try:
        return config.load()
    except config.ConfigError as exc:
        raise _CliError(str(exc), _INIT_HINT) from exc


def _split_csv(values: Sequence[str] | None) -> list[str]:
    if not values:
        return []
    return [item for value in values for item in value.split(",") if item]


def _bracket(items: Sequence[str]) -> str:
    return "[" + " ".join(items) + "]"


def _cmd_init(args: argparse.Namespace) -> int:
    ox_home = config.resolve_home()
    if config.config_path(ox_home).exists():
        print(f"ox already initialized at {ox_home}")
        return 0
    try:
        config.ensure_dirs(ox_home)
    except config.ConfigError as exc:
        raise _CliError(f"create directories: {exc}") from exc
    cfg = config.default_config()
    cfg.home = ox_home
    try:
        config.save(cfg)
    except config.ConfigError as exc:
        raise _CliError(f"save config: {exc}") from exc
    print(f"Initialized ox at {ox_home}")
    print("\nNext steps:")
    print("  ox repo add <url>              # Register a codebase")
    print("  ox pickup <task-id> --repos x  # Create workspace for yoke task")
    return 0


def _clone(url: str, dest: Path) -> None:
    try:
        result = subprocess.run(["git", "clone", url, os.fspath(dest)], check=False)
    except OSError as exc:
        raise _CliError(f"clone failed: {exc}") from exc
    if result.returncode != 0:
        raise _CliError(f"clone failed: exit status {result.returncode}")


def _cmd_repo_add(args: argparse.Namespace) -> int:
    cfg = _require_config()
    url = args.url
    name = args.name or repo_name_from_url(url)
    if not name:
        raise _CliError("cannot derive repo name from URL, use --name")
    if name in cfg.repos:
        raise _CliError(f'repo "{name}" already registered')
    dest = Path(cfg.home) / "repos" / name
    if dest.exists():
        raise _CliError(f"directory {dest} already exists")
    print(f"Cloning {url} to {dest}...")
    _clone(url, dest)
    cfg.repos[name] = config.RepoConfig(url=url, base_branch=args.base_branch or "main")
    try:
        config.save(cfg)
    except config.ConfigError as exc:
        raise _CliError(f"save config: {exc}") from exc
    print(f'Registered repo "{name}"')
    return 0


def _cmd_repo_list(args: argparse.Namespace) -> int:
    cfg = _require_config()
    if not cfg.repos:
        print("No repos registered")
        print("\nRun 'ox repo add <url>' to register a codebase")
        return 0
    print(f"{'NAME':<15} {'BRANCH':<12} URL")
    print("-" * 60)
    for name, rc in sorted(cfg.repos.items()):
        print(f"{name:<15} {rc.base_branch or 'main':<12} {rc.url}")
    return 0


def _cmd_repo_remove(args: argparse.Namespace) -> int:
    cfg = _require_config()
    name = args.name
    if name not in cfg.repos:
        raise _CliError(f'repo "{name}" not registered')
    if args.delete:
        dest = Path(cfg.home) / "repos" / name
        print(f"Removing {dest}...")
        try:
            shutil.rmtree(dest, ignore_errors=False) if dest.exists() else None
        except OSError as exc:
            raise _CliError(f"remove failed: {exc}") from exc
    del cfg.repos[name]
    try:
        config.save(cfg)
    except config.ConfigError as exc:
        raise _CliError(f"save config: {exc}") from exc
    print(f'Unregistered repo "{name}"')
    if not args.delete:
        print("(files kept, use --delete to remove)")
    return 0


def _cmd_assist(args: argparse.Namespace) -> int:
    cfg = _require_config()
    home = Path(cfg.home)
    context_file = home / "ASSISTANT.md"
    try:
        write_assistant_context(home, context_file)
    except OSError as exc:
        raise _CliError(f"generate context: {exc}") from exc

    skills = _split_csv(args.skill)
    prompt = assist_system_prompt(home, context_file)
    if args.persona:
        persona_path = home / "personas" / f"{args.persona}.md"
        if persona_path.exists():
            prompt += (
                f" Adopt the {args.persona} persona. "
                f"Read {persona_path} for your mindset and approach."
            )
    skill_prompt = assist_system_prompt(home, context_file, skills)
    prompt += skill_prompt[len(assist_system_prompt(home, context_file)):]

    print("🐂 Starting ox assistant...")
    if args.persona:
        print(f"   Persona: {args.persona}")
    if skills:
        print(f"   Skills: {_bracket(skills)}")
    print("   Type 'exit' or Ctrl+C to quit")
    print()

    command = [
        "claude",
        "--dangerously-skip-permissions",
        "--append-system-prompt",
        prompt,
        "--add-dir",
        os.fspath(home),
    ]
    try:
        return subprocess.run(command, check=False).returncode
    except OSError as exc:
        raise _CliError(f"run claude: {exc}") from exc


def _cmd_review(args: argparse.Namespace) -> int:
    _require_config()
    directory = args.dir if args.dir else os.getcwd()
    review_directory(directory)
    return 0


def _cmd_passthrough(args: argparse.Namespace) -> int:
    return run_yoke(args.yoke_args)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for every ox command this package provides."""
    parser = argparse.ArgumentParser(
        prog="ox",
        description=_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    sub = parser.add_subparsers(dest="command", metavar="<command>")

    init = sub.add_parser("init", help="Initialize ox")
    init.set_defaults(handler=_cmd_init)

    repo = sub.add_parser("repo", help="Manage registered codebases")
    repo_sub = repo.add_subparsers(dest="repo_command", metavar="<subcommand>")
    repo.set_defaults(handler=lambda a: (repo.print_help(), 0)[1])

    repo_add = repo_sub.add_parser("add", help="Register and clone a codebase")
    repo_add.add_argument("url")
    repo_add.add_argument("-n", "--name", default="", help="Name for the repo")
    repo_add.add_argument("-b", "--base-branch", default="", help="Base branch (default: main)")
    repo_add.set_defaults(handler=_cmd_repo_add)

    repo_list = repo_sub.add_parser("list", help="List registered codebases")
    repo_list.set_defaults(handler=_cmd_repo_list)

    repo_remove = repo_sub.add_parser("remove", help="Unregister a codebase")
    repo_remove.add_argument("name")
    repo_remove.add_argument("--delete", action="store_true", help="Also delete cloned files")
    repo_remove.set_defaults(handler=_cmd_repo_remove)

    assist = sub.add_parser("assist", help="Start an AI assistant session with ox capabilities")
    assist.add_argument("--skill", action="append", help="Skills to load (comma-separated)")
    assist.add_argument("--persona", default="", help="Persona to adopt")
    assist.set_defaults(handler=_cmd_assist)

    review = sub.add_parser("review", help="Review local changes with Mycroft")
    review.add_argument("--local", action="store_true", help="Review current directory")
    review.add_argument("--dir", default="", help="Review specific directory")
    review.set_defaults(handler=_cmd_review)

    yoke = sub.add_parser("yoke", help="Pass-through to yoke CLI", add_help=False)
    yoke.add_argument("yoke_args", nargs=argparse.REMAINDER)
    yoke.set_defaults(handler=_cmd_passthrough)

    for alias, help_text in YOKE_ALIASES.items():
        alias_parser = sub.add_parser(alias, help=help_text, add_help=False)
        alias_parser.add_argument("rest", nargs=argparse.REMAINDER)
        alias_parser.set_defaults(
            handler=_alias_handler(alias),
        )
    return parser


def _alias_handler(alias: str) -> Callable[[argparse.Namespace], int]:
    def handler(args: argparse.Namespace) -> int:
        return run_yoke([alias, *args.rest])

    return handler


def _report(message: str, hint: str = "") -> int:
    print(f"Error: {message}", file=sys.stderr)
    if hint:
        print(hint, file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ox command line and return its exit status."""
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        if argv and argv[0] == "yoke":
            return run_yoke(argv[1:])
        if argv and argv[0] in YOKE_ALIASES:
            return run_yoke([argv[0], *argv[1:]])
        parser = build_parser()
        args = parser.parse_args(argv)
        handler = getattr(args, "handler", None)
        if handler is None:
            parser.print_help()
            return 0
        return handler(args)
    except _CliError as exc:
        return _report(str(exc), exc.hint)
    except (ToolError, config.ConfigError) as exc:
        return _report(str(exc))


if __name__ == "__main__":
    sys.exit(main())