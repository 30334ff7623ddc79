import pytest

from oxhand.config import (
    Config,
    ConfigError,
    Defaults,
    MultiConfig,
    RepoConfig,
    config_from_dict,
    config_path,
    default_config,
    ensure_dirs,
    load,
    resolve_home,
    save,
)


def test_default_config_values():
    cfg = default_config()
    assert cfg.agent == "claude"
    assert cfg.ide == "windsurf"
    assert cfg.defaults.persona == "builder"
    assert cfg.multi.default_model == "sonnet"
    assert cfg.multi.captain_model == "opus"
    assert cfg.multi.max_agents == 5
    assert cfg.multi.max_budget_per_agent == 10.0
    assert cfg.multi.max_total_budget == 80.0
    assert cfg.multi.default_max_turns == 100
    assert cfg.repos == {}


def test_empty_config_serialises_to_empty_dict():
    assert Config().to_dict() == {}


def test_to_dict_uses_yaml_keys():
    cfg = default_config()
    data = cfg.to_dict()
    assert data["multi"]["max_budget_per_agent_usd"] == 10.0
    assert data["multi"]["max_total_budget_usd"] == 80.0
    assert data["defaults"] == {"persona": "builder"}
    assert "home" not in data


def test_repo_config_keeps_url_and_drops_empty_fields():
    assert RepoConfig(url="u").to_dict() == {"url": "u"}


def test_resolve_home_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("OX_HOME", str(tmp_path))
    assert resolve_home() == tmp_path


def test_resolve_home_default(monkeypatch, tmp_path):
    monkeypatch.delenv("OX_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert resolve_home() == tmp_path / ".ox"


def test_config_path(tmp_path):
    assert config_path(tmp_path) == tmp_path / "ox.yaml"


def test_save_and_load_round_trip(monkeypatch, tmp_path):
    monkeypatch.setenv("OX_HOME", str(tmp_path))
    cfg = default_config()
    cfg.home = tmp_path
    cfg.repos["backend"] = RepoConfig(
        url="https://example.com/org/backend.git",
        base_branch="develop",
        copy_files=[".env", ".vscode"],
        post_setup="make deps",
        build_command="make build",
    )
    cfg.dashboard_port = 9000
    save(cfg)
    loaded = load()
    assert loaded == cfg
    assert loaded.home == tmp_path


def test_load_missing_config(monkeypatch, tmp_path):
    monkeypatch.setenv("OX_HOME", str(tmp_path))
    with pytest.raises(ConfigError, match="not initialized"):
        load()


def test_load_invalid_yaml(monkeypatch, tmp_path):
    monkeypatch.setenv("OX_HOME", str(tmp_path))
    (tmp_path / "ox.yaml").write_text("repos: [1, 2\n")
    with pytest.raises(ConfigError, match="parse config"):
        load()


def test_load_empty_file_gives_empty_repos(monkeypatch, tmp_path):
    monkeypatch.setenv("OX_HOME", str(tmp_path))
    (tmp_path / "ox.yaml").write_text("")
    cfg = load()
    assert cfg.repos == {}
    assert cfg.home == tmp_path


def test_save_without_home():
    with pytest.raises(ConfigError, match="home not set"):
        save(Config())


def test_config_from_dict_rejects_bad_repos():
    with pytest.raises(ConfigError):
        config_from_dict({"repos": ["a", "b"]}, None)


def test_config_from_dict_reads_nested():
    cfg = config_from_dict(
        {
            "ide": "zed",
            "defaults": {"persona": "explorer"},
            "multi": {"max_agents": 3, "max_budget_per_agent_usd": 2.5},
            "repos": {"web": {"url": "x", "copy_files": [".env"]}},
        },
        "/tmp/home",
    )
    assert cfg.ide == "zed"
    assert cfg.defaults == Defaults(persona="explorer")
    assert cfg.multi == MultiConfig(max_agents=3, max_budget_per_agent=2.5)
    assert cfg.repos["web"].copy_files == [".env"]


def test_ensure_dirs_creates_layout(tmp_path):
    home = tmp_path / "ox"
    ensure_dirs(home)
    for name in ("repos", "tasks", "worktrees", "skills", "personas", "hooks", "agents"):
        assert (home / name).is_dir()
    ensure_dirs(home)
    assert (home / "agents").is_dir()