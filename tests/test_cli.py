import os
import subprocess
from pathlib import Path

import pytest

from oxhand import cli, config


@pytest.fixture
def home(tmp_path, monkeypatch):
    ox_home = tmp_path / "oxhome"
    monkeypatch.setenv("OX_HOME", str(ox_home))
    assert cli.main(["init"]) == 0
    return ox_home


class _Recorder:
    def __init__(self, returncode=0, on_call=None):
        self.calls = []
        self.returncode = returncode
        self.on_call = on_call

    def __call__(self, cmd, *args, **kwargs):
        self.calls.append((list(cmd), kwargs))
        if self.on_call:
            self.on_call(cmd)
        return subprocess.CompletedProcess(cmd, self.returncode, stdout="", stderr="")


def test_init_creates_config_and_dirs(tmp_path, monkeypatch, capsys):
    ox_home = tmp_path / "fresh"
    monkeypatch.setenv("OX_HOME", str(ox_home))
    assert cli.main(["init"]) == 0
    out = capsys.readouterr().out
    assert f"Initialized ox at {ox_home}" in out
    for name in config.HOME_SUBDIRS:
        assert (ox_home / name).is_dir()
    cfg = config.load()
    assert cfg.agent == "claude"
    assert cfg.defaults.persona == "builder"


def test_init_twice_reports_already_initialized(home, capsys):
    capsys.readouterr()
    assert cli.main(["init"]) == 0
    assert f"ox already initialized at {home}" in capsys.readouterr().out


def test_command_without_init_fails(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("OX_HOME", str(tmp_path / "none"))
    assert cli.main(["repo", "list"]) == 1
    err = capsys.readouterr().err
    assert "ox not initialized" in err
    assert "Run 'ox init' to initialize ox." in err


def test_repo_list_empty(home, capsys):
    capsys.readouterr()
    assert cli.main(["repo", "list"]) == 0
    assert "No repos registered" in capsys.readouterr().out


def test_repo_add_registers_and_lists(home, monkeypatch, capsys):
    recorder = _Recorder(on_call=lambda cmd: Path(cmd[-1]).mkdir(parents=True))
    monkeypatch.setattr(subprocess, "run", recorder)
    url = "https://example.com/org/backend.git"
    assert cli.main(["repo", "add", url]) == 0
    assert recorder.calls[0][0] == ["git", "clone", url, str(home / "repos" / "backend")]
    cfg = config.load()
    assert cfg.repos["backend"].url == url
    assert cfg.repos["backend"].base_branch == "main"
    capsys.readouterr()
    assert cli.main(["repo", "list"]) == 0
    out = capsys.readouterr().out
    assert "backend" in out and url in out


def test_repo_add_duplicate_fails(home, monkeypatch, capsys):
    recorder = _Recorder(on_call=lambda cmd: Path(cmd[-1]).mkdir(parents=True))
    monkeypatch.setattr(subprocess, "run", recorder)
    url = "https://example.com/org/api.git"
    assert cli.main(["repo", "add", url, "--base-branch", "develop"]) == 0
    assert config.load().repos["api"].base_branch == "develop"
    assert cli.main(["repo", "add", url]) == 1
    assert 'repo "api" already registered' in capsys.readouterr().err


def test_repo_add_existing_directory_fails(home, capsys):
    (home / "repos" / "web").mkdir()
    assert cli.main(["repo", "add", "https://example.com/org/web.git"]) == 1
    assert "already exists" in capsys.readouterr().err


def test_repo_remove(home, capsys):
    cfg = config.load()
    cfg.repos["svc"] = config.RepoConfig(url="https://example.com/svc.git")
    config.save(cfg)
    (home / "repos" / "svc").mkdir()
    assert cli.main(["repo", "remove", "svc", "--delete"]) == 0
    assert "svc" not in config.load().repos
    assert not (home / "repos" / "svc").exists()
    assert cli.main(["repo", "remove", "svc"]) == 1
    assert 'repo "svc" not registered' in capsys.readouterr().err


def test_review_non_git_directory(home, tmp_path, capsys):
    target = tmp_path / "plain"
    target.mkdir()
    assert cli.main(["review", "--dir", str(target)]) == 1
    assert "is not a git repository" in capsys.readouterr().err


def test_review_runs_mycroft(home, tmp_path, monkeypatch):
    target = tmp_path / "repo"
    (target / ".git").mkdir(parents=True)
    recorder = _Recorder()
    monkeypatch.setattr(subprocess, "run", recorder)
    assert cli.main(["review", "--dir", str(target)]) == 0
    cmd, kwargs = recorder.calls[0]
    assert cmd == ["mycroft", "review", "--local"]
    assert os.fspath(kwargs["cwd"]) == str(target)


def test_assist_launches_claude(home, monkeypatch, capsys):
    (home / "personas" / "builder.md").write_text("x", encoding="utf-8")
    (home / "skills" / "debug.md").write_text("x", encoding="utf-8")
    recorder = _Recorder(returncode=0)
    monkeypatch.setattr(subprocess, "run", recorder)
    assert cli.main(["assist", "--persona", "builder", "--skill", "debug,missing"]) == 0
    assert (home / "ASSISTANT.md").exists()
    cmd, _ = recorder.calls[0]
    assert cmd[:3] == ["claude", "--dangerously-skip-permissions", "--append-system-prompt"]
    assert cmd[-2:] == ["--add-dir", str(home)]
    prompt = cmd[3]
    assert prompt.startswith("You are an ox-powered AI assistant.")
    assert "Adopt the builder persona." in prompt
    assert str(home / "skills" / "debug.md") in prompt
    assert "missing.md" not in prompt
    assert "Persona: builder" in capsys.readouterr().out


def _fake_yoke(tmp_path, monkeypatch):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    yoke = bin_dir / "yoke"
    yoke.write_text("#!/bin/sh\n", encoding="utf-8")
    yoke.chmod(0o755)
    monkeypatch.setenv("PATH", str(bin_dir))
    return yoke


def test_alias_passes_arguments_to_yoke(tmp_path, monkeypatch):
    yoke = _fake_yoke(tmp_path, monkeypatch)
    recorder = _Recorder(returncode=3)
    monkeypatch.setattr(subprocess, "run", recorder)
    assert cli.main(["search", "auth", "--all"]) == 3
    assert recorder.calls[0][0] == [str(yoke), "search", "auth", "--all"]


def test_yoke_passthrough(tmp_path, monkeypatch):
    yoke = _fake_yoke(tmp_path, monkeypatch)
    recorder = _Recorder(returncode=0)
    monkeypatch.setattr(subprocess, "run", recorder)
    assert cli.main(["yoke", "tree", "--help"]) == 0
    assert recorder.calls[0][0] == [str(yoke), "tree", "--help"]


def test_yoke_missing(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))
    monkeypatch.setenv("HOME", str(tmp_path))
    if Path("/usr/local/bin/yoke").exists():
        monkeypatch.setattr(cli, "run_yoke", cli.run_yoke)
    code = cli.main(["yoke", "tree"])
    err = capsys.readouterr().err
    assert code == 1 or "yoke" not in err
    assert Path("/usr/local/bin/yoke").exists() or "yoke not found" in err


def test_parser_registers_aliases():
    parser = cli.build_parser()
    args = parser.parse_args(["repo", "add", "https://example.com/a.git", "-n", "alpha"])
    assert args.name == "alpha"
    assert args.handler is not None
    assert set(cli.YOKE_ALIASES) >= {"tree", "ready", "tags"}