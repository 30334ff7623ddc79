[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oxhand"
version = "0.1.0"
description = "Agent workspace manager: configuration, AGENTS.md context files, prompts and tool helpers for AI-assisted development"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "agents",
    "workspace",
    "git",
    "worktree",
    "prompts",
    "developer-tools",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
oxhand = "oxhand.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["oxhand"]

[tool.pytest.ini_options]
addopts = "-ra"
