"""Loading, saving and defaults for the ox.yaml configuration file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILE = "ox.yaml"
HOME_SUBDIRS = ("repos", "tasks", "worktrees", "skills", "personas", "hooks", "agents")


class ConfigError(Exception):
    """Raised when the configuration cannot be resolved, read, parsed or written."""


def _str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"parse config: expected a list, got {type(value).__name__}")
    return [str(item) for item in value]


def _mapping(value: Any, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"parse config: {what} must be a mapping")
    return value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class RepoConfig:
    """Per-repository settings."""

    url: str = ""
    base_branch: str = ""
    copy_files: list[str] = field(default_factory=list)
    post_setup: str = ""
    build_command: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url}
        if self.base_branch:
            data["base_branch"] = self.base_branch
        if self.copy_files:
            data["copy_files"] = list(self.copy_files)
        if self.post_setup:
            data["post_setup"] = self.post_setup
        if self.build_command:
            data["build_command"] = self.build_command
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "RepoConfig":
        data = _mapping(data, "repo entry")
        return cls(
            url=_text(data.get("url")),
            base_branch=_text(data.get("base_branch")),
            copy_files=_str_list(data.get("copy_files")),
            post_setup=_text(data.get("post_setup")),
            build_command=_text(data.get("build_command")),
        )


@dataclass
class MultiConfig:
    """Multi-agent orchestration settings."""

    default_model: str = ""
    captain_model: str = ""
    max_agents: int = 0
    max_budget_per_agent: float = 0.0
    max_total_budget: float = 0.0
    default_max_turns: int = 0

    def to_dict(self) -> dict[str, Any]:
        pairs = (
            ("default_model", self.default_model),
            ("captain_model", self.captain_model),
            ("max_agents", self.max_agents),
            ("max_budget_per_agent_usd", self.max_budget_per_agent),
            ("max_total_budget_usd", self.max_total_budget),
            ("default_max_turns", self.default_max_turns),
        )
        return {key: value for key, value in pairs if value}

    @classmethod
    def from_dict(cls, data: Any) -> "MultiConfig":
        data = _mapping(data, "multi")
        try:
            return cls(
                default_model=_text(data.get("default_model")),
                captain_model=_text(data.get("captain_model")),
                max_agents=int(data.get("max_agents") or 0),
                max_budget_per_agent=float(data.get("max_budget_per_agent_usd") or 0),
                max_total_budget=float(data.get("max_total_budget_usd") or 0),
                default_max_turns=int(data.get("default_max_turns") or 0),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"parse config: {exc}") from exc


@dataclass
class Defaults:
    """Default settings applied when nothing more specific is given."""

    persona: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"persona": self.persona} if self.persona else {}

    @classmethod
    def from_dict(cls, data: Any) -> "Defaults":
        data = _mapping(data, "defaults")
        return cls(persona=_text(data.get("persona")))


@dataclass
class Config:
    """The contents of ox.yaml plus the resolved home directory (not persisted)."""

    agent: str = ""
    ide: str = ""
    yoke_home: str = ""
    repos: dict[str, RepoConfig] = field(default_factory=dict)
    defaults: Defaults = field(default_factory=Defaults)
    dashboard_port: int = 0
    slack_webhook_url: str = ""
    feedback_password: str = ""
    multi: MultiConfig = field(default_factory=MultiConfig)
    home: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the persisted form, leaving out empty values."""
        data: dict[str, Any] = {}
        if self.agent:
            data["agent"] = self.agent
        if self.ide:
            data["ide"] = self.ide
        if self.yoke_home:
            data["yoke_home"] = self.yoke_home
        if self.repos:
            data["repos"] = {name: rc.to_dict() for name, rc in sorted(self.repos.items())}
        defaults = self.defaults.to_dict()
        if defaults:
            data["defaults"] = defaults
        if self.dashboard_port:
            data["dashboard_port"] = self.dashboard_port
        if self.slack_webhook_url:
            data["slack_webhook_url"] = self.slack_webhook_url
        if self.feedback_password:
            data["feedback_password"] = self.feedback_password
        multi = self.multi.to_dict()
        if multi:
            data["multi"] = multi
        return data


def config_from_dict(data: Any, home: Path | str | None) -> Config:
    """Build a Config from parsed YAML data."""
    data = _mapping(data, "config")
    repos = {
        str(name): RepoConfig.from_dict(entry)
        for name, entry in _mapping(data.get("repos"), "repos").items()
    }
    try:
        port = int(data.get("dashboard_port") or 0)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"parse config: {exc}") from exc
    return Config(
        agent=_text(data.get("agent")),
        ide=_text(data.get("ide")),
        yoke_home=_text(data.get("yoke_home")),
        repos=repos,
        defaults=Defaults.from_dict(data.get("defaults")),
        dashboard_port=port,
        slack_webhook_url=_text(data.get("slack_webhook_url")),
        feedback_password=_text(data.get("feedback_password")),
        multi=MultiConfig.from_dict(data.get("multi")),
        home=Path(home) if home else None,
    )


def default_config() -> Config:
    """Return a Config with the standard defaults."""
    return Config(
        agent="claude",
        ide="windsurf",
        defaults=Defaults(persona="builder"),
        multi=MultiConfig(
            default_model="sonnet",
            captain_model="opus",
            max_agents=5,
            max_budget_per_agent=10.0,
            max_total_budget=80.0,
            default_max_turns=100,
        ),
    )


def resolve_home() -> Path:
    """Return OX_HOME from the environment, or ~/.ox."""
    env = os.environ.get("OX_HOME")
    if env:
        return Path(env)
    try:
        return Path.home() / ".ox"
    except RuntimeError as exc:
        raise ConfigError(f"get home dir: {exc}") from exc


def config_path(ox_home: Path | str) -> Path:
    """Return the path of ox.yaml inside the given home."""
    return Path(ox_home) / CONFIG_FILE


def load() -> Config:
    """Load the configuration from OX_HOME/ox.yaml."""
    ox_home = resolve_home()
    path = config_path(ox_home)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError("ox not initialized (run 'ox init')") from exc
    except OSError as exc:
        raise ConfigError(f"read config: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"parse config: {exc}") from exc
    return config_from_dict(data, ox_home)


def save(cfg: Config) -> None:
    """Write the configuration to its home's ox.yaml."""
    if not cfg.home:
        raise ConfigError("config home not set")
    text = yaml.safe_dump(cfg.to_dict(), sort_keys=False, allow_unicode=True)
    try:
        config_path(cfg.home).write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"write config: {exc}") from exc


def ensure_dirs(ox_home: Path | str) -> None:
    """Create the home directory and its standard subdirectories."""
    root = Path(ox_home)
    for directory in (root, *(root / name for name in HOME_SUBDIRS)):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"create {directory}: {exc}") from exc