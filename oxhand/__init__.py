"""Agent workspace manager: configuration, AGENTS.md generation, prompts and tool helpers."""

__version__ = "0.1.0"