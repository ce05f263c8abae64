from __future__ import annotations

from pathlib import Path

from ai_relay.common.templates import (
    DEFAULT_ICS_SYSTEM,
    build_response_format,
    load_schemas,
    load_template,
    render_prompt,
    split_template,
)

CONFIGS = Path(__file__).resolve().parents[1] / "configs"


def test_render_prompt_substitution() -> None:
    tpl = "Hello {{input}}!"
    out = render_prompt(tpl, "world")
    assert out == "Hello world!"


def test_split_repo_template() -> None:
    tpl = load_template(str(CONFIGS / "ics_prompt_template.txt"))
    system, user = split_template(tpl)
    assert "iCalendar" in system
    assert "<|user|>" not in system
    assert user.endswith("{{input}}")


def test_split_template_without_tags_uses_default_system() -> None:
    system, user = split_template("  just {{input}}  ")
    assert system == DEFAULT_ICS_SYSTEM
    assert user == "just {{input}}"


def test_semester_schema_in_registry() -> None:
    schemas = load_schemas(str(CONFIGS / "schemas.yaml"))
    fmt = build_response_format("semester_dates", schemas["semester_dates"])
    props = fmt["json_schema"]["schema"]["properties"]
    assert set(props) == {"semester_start", "semester_end"}
    assert props["semester_start"]["required"] == ["year", "month", "day"]
