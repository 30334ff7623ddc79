import pytest

from oxhand.prompts import (
    assist_system_prompt,
    assistant_context,
    build_persona_prompt,
    detect_persona_from_workspace,
    find_line,
    write_assistant_context,
)


def test_find_line_returns_rest_of_line():
    content = "# Task\n# Persona: explorer\nmore text\n"
    assert find_line(content, "# Persona: ") == "explorer"


def test_find_line_missing_prefix_is_empty():
    assert find_line("nothing here", "Persona: ") == ""


def test_find_line_at_end_without_newline():
    assert find_line("x\nPersona: reviewer", "Persona: ") == "reviewer"


def test_detect_persona_from_agents_file(tmp_path):
    (tmp_path / "AGENTS.md").write_text("# Task #1\n\n# Persona: captain\n**Role:** x\n")
    assert detect_persona_from_workspace(tmp_path) == "captain"


def test_detect_persona_falls_back_to_plain_prefix(tmp_path):
    (tmp_path / "AGENTS.md").write_text("Persona: builder\n")
    assert detect_persona_from_workspace(tmp_path) == "builder"


def test_detect_persona_without_file(tmp_path):
    assert detect_persona_from_workspace(tmp_path) == ""


@pytest.mark.parametrize(
    "persona, heading",
    [
        ("captain", "## Captain Persona - Orchestration Mode"),
        ("explorer", "## Explorer Persona - Research Mode"),
        ("reviewer", "## Reviewer Persona - Quality Mode"),
        ("builder", "## Builder Persona - Implementation Mode"),
        ("anything-else", "## Builder Persona - Implementation Mode"),
    ],
)
def test_build_persona_prompt_picks_guidance(persona, heading):
    prompt = build_persona_prompt(persona, "/home/ox", "9-slug", "/home/ox/tasks/9", ["api"])
    assert heading in prompt
    assert prompt.count("Persona - ") == 1


def test_build_persona_prompt_workspace_info():
    prompt = build_persona_prompt(
        "builder", "/oxh", "12-thing", "/oxh/tasks/12", ["backend", "frontend"]
    )
    assert prompt.startswith("You are an ox-powered AI assistant working in task workspace: 12-thing\n")
    assert "Skills at: /oxh/skills/\n" in prompt
    assert "- Path: /oxh/tasks/12\n" in prompt
    assert prompt.endswith("- Repos: [backend frontend]\n")


def test_build_persona_prompt_includes_common_commands():
    prompt = build_persona_prompt("explorer", "/h", "s", "/p", [])
    assert "### Progress & Memory" in prompt
    assert "- ox ship  # Push and create PR" in prompt
    assert prompt.endswith("- Repos: []\n")


def test_assistant_context_mentions_home_paths():
    text = assistant_context("/srv/ox")
    assert text.startswith("# Ox Assistant\n")
    assert "- Config: /srv/ox/ox.yaml" in text
    assert "Read persona files at: /srv/ox/personas/" in text
    assert "{home}" not in text


def test_write_assistant_context_round_trip(tmp_path):
    out = tmp_path / "ASSISTANT.md"
    written = write_assistant_context(tmp_path, out)
    assert written == out
    assert out.read_text(encoding="utf-8") == assistant_context(tmp_path)


def test_assist_system_prompt_without_skills(tmp_path):
    prompt = assist_system_prompt(tmp_path, tmp_path / "ASSISTANT.md")
    assert f"Read {tmp_path / 'ASSISTANT.md'} for your full capabilities." in prompt
    assert "Read these skills" not in prompt


def test_assist_system_prompt_lists_only_existing_skills(tmp_path):
    skills_dir = tmp_path / "skills"
    skills_dir.mkdir()
    (skills_dir / "debug.md").write_text("debug")
    (skills_dir / "mongodb.md").write_text("mongo")
    prompt = assist_system_prompt(tmp_path, "ctx.md", ["debug", "missing", "mongodb"])
    expected = f" Read these skills for expertise: [{skills_dir / 'debug.md'} {skills_dir / 'mongodb.md'}]"
    assert prompt.endswith(expected)
    assert "missing" not in prompt


def test_assist_system_prompt_no_matching_skills(tmp_path):
    prompt = assist_system_prompt(tmp_path, "ctx.md", ["nope"])
    assert "Read these skills" not in prompt