# oxhand

oxhand helps manage workspaces for AI-assisted development. It keeps a home
directory with an `ox.yaml` configuration and a set of registered codebases,
starts assistant sessions, reviews changes, passes commands through to the
`yoke` task tracker, and can write an `AGENTS.md` file that tells a coding
agent about a task.

## Installation

```
pip install oxhand
```

## Home directory

Everything lives under `~/.ox`, or under the directory named by the `OX_HOME`
environment variable. The configuration file is `ox.yaml` in that directory:

```yaml
agent: claude
ide: windsurf
defaults:
  persona: builder
repos:
  backend:
    url: https://git.example.com/org/backend.git
    base_branch: main
    copy_files: [.env]
    post_setup: make deps
multi:
  default_model: sonnet
  captain_model: opus
```

## Commands

Create the home directory with its `repos`, `tasks`, `worktrees`, `skills`,
`personas`, `hooks` and `agents` subdirectories and a default `ox.yaml`.
Nothing is changed if `ox.yaml` already exists:

```
oxhand init
```

Register, list and remove codebases. `repo add` clones the URL with `git` into
`repos/<name>` under the home directory; the name comes from the URL unless
`--name` is given, and the base branch defaults to `main`. `repo remove`
keeps the clone unless `--delete` is given:

```
oxhand repo add https://git.example.com/org/backend.git
oxhand repo add https://git.example.com/org/api.git --name api --base-branch develop
oxhand repo list
oxhand repo remove api --delete
```

Start a `claude` session with a system prompt that points at a freshly
written `ASSISTANT.md` in the home directory. `--persona` adds the persona's
file from `personas/` when it exists; `--skill` (repeatable, comma-separated)
adds those skill files from `skills/` that exist:

```
oxhand assist
oxhand assist --persona explorer --skill debug,temporal
```

Review uncommitted changes of a git repository with `mycroft review --local`,
in the current directory or in the one given with `--dir`:

```
oxhand review --local
oxhand review --dir ~/code/myproject
```

Pass any command straight through to `yoke`, found on `PATH`, in
`~/go/bin` or in `/usr/local/bin`. The common yoke commands `tree`, `search`,
`add`, `edit`, `subtask`, `block`, `unblock`, `tag`, `untag`, `note`, `notes`,
`log`, `tags` and `ready` can also be given directly:

```
oxhand yoke tree
oxhand yoke search "login"
oxhand ready
```

Errors are printed as `Error: ...` and the command exits with status 1.
Run `oxhand --help` or `oxhand <command> --help` for the options.

## As a library

- `oxhand.config`: `Config`, `RepoConfig`, `MultiConfig`, `Defaults`,
  `load()`, `save()`, `default_config()`, `resolve_home()`, `config_path()`,
  `ensure_dirs()`; problems raise `ConfigError`.
- `oxhand.context`: `Generator` renders and writes `AGENTS.md` (with a
  `CLAUDE.md` symlink to it) from a `TaskContext` built of `TaskInfo`, `Note`
  and `Event` values. Related files are looked up in the git history of the
  workspace repos with `find_related_files()`.
- `oxhand.prompts`: `build_persona_prompt()`, `detect_persona_from_workspace()`,
  `assistant_context()`, `write_assistant_context()`, `assist_system_prompt()`.
- `oxhand.tools`: `slugify()`, `remote_base_branch()`, `find_yoke()`,
  `run_yoke()`, `review_directory()`, `create_pr()` and `existing_pr_url()`
  (via `gh`), `find_repos_in_workspace()`, `copy_path()`; failures raise
  `ToolError`.
- `oxhand.textutil`: `repo_name_from_url()`, `ide_command()`, `is_subdir()`.

```python
from oxhand import config
from oxhand.context import Generator, TaskContext, TaskInfo

cfg = config.load()
gen = Generator(cfg.home)
ctx = TaskContext(task=TaskInfo(seq=9, title="Token refresh"), persona="builder")
print(gen.render("/path/to/workspace", ctx))
```

`Generator` takes optional `personas` and `skills` lookup objects; without
them the persona and registry skill sections are left out, and only skill
files placed in the workspace's `.skills/` directory are included.

## What it does not do

oxhand has no commands for picking up a task into a workspace, creating
worktrees, shipping branches, completing tasks, opening an IDE, switching
personas or launching a workspace session; the helpers above are the pieces
such commands would use. It has no persona or skill registry of its own, no
hooks, checkpoints, learnings, dashboard or multi-agent orchestration, and it
does not store tasks: task data comes from `yoke`, which must be installed
separately.