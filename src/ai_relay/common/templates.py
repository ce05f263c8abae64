"""Prompt templating and structured-output schema helpers."""
from __future__ import annotations
from pathlib import Path
from typing import Any

import yaml

SYS_TAG, USER_TAG = "<|system|>", "<|user|>"
DEFAULT_ICS_SYSTEM = "You convert event listings into iCalendar files."


def load_template(path: str = "configs/ics_prompt_template.txt") -> str:
    """
    Load a prompt template file.

    Args:
        path: Path to template.
    """
    return Path(path).read_text(encoding="utf-8")


def render_prompt(template: str, user_input: str) -> str:
    """
    Render user input into the template.

    Args:
        template: Template content containing {{input}}.
        user_input: Input string.

    Returns:
        Rendered prompt.
    """
    return template.replace("{{input}}", user_input)


def split_template(template: str, default_system: str = DEFAULT_ICS_SYSTEM) -> tuple[str, str]:
    """Split a template into its system and user sections.

    The system part sits between <|system|> and <|user|>; everything after
    <|user|> is the user part. Without both tags the whole template is the
    user part and ``default_system`` is returned.
    """
    if SYS_TAG in template and USER_TAG in template:
        start = template.index(SYS_TAG) + len(SYS_TAG)
        end = template.find(USER_TAG, start)
        if end != -1:
            return template[start:end].strip(), template[end + len(USER_TAG):].strip()
    return default_system, template.strip()


def load_schemas(path: str = "configs/schemas.yaml") -> dict[str, Any]:
    """Load the named JSON-schema registry.

    Each top-level key is a schema name mapping to ``{strict?, schema}``.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"schema registry {path} must be a mapping, got {type(data).__name__}")
    return data


def build_response_format(name: str, entry: dict[str, Any]) -> dict[str, Any]:
    """Wrap a registry entry in the OpenAI-style ``json_schema`` response format."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "strict": bool(entry.get("strict", True)),
            "schema": entry["schema"],
        },
    }
