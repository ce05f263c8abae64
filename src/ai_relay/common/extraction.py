"""Pulling text, JSON and calendar data out of provider responses.

Providers put the generated text in different places. ``TEXT_EXTRACTORS`` is
the ordered list of places we look; the first one that yields a non-empty
string wins:

1. ``choices[0].message.content``  chat completions (OpenRouter, OpenAI)
2. ``choices[0].text``             legacy completions
3. ``output[0].content[0].text``   responses API
4. ``result.response``             Workers AI ``ai/run`` envelope
"""
from __future__ import annotations
import base64
import json
import re
from typing import Any, Callable

_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL)
_VCALENDAR_RE = re.compile(r"BEGIN:VCALENDAR.*?END:VCALENDAR", re.DOTALL)


def _path(body: Any, *keys: str | int) -> Any:
    cur = body
    for key in keys:
        if isinstance(key, int):
            if not isinstance(cur, list) or len(cur) <= key:
                return None
        elif not isinstance(cur, dict):
            return None
        cur = cur[key] if isinstance(key, int) else cur.get(key)
        if cur is None:
            return None
    return cur


TEXT_EXTRACTORS: list[tuple[str, Callable[[Any], Any]]] = [
    ("choices.message.content", lambda b: _path(b, "choices", 0, "message", "content")),
    ("choices.text", lambda b: _path(b, "choices", 0, "text")),
    ("output.content.text", lambda b: _path(b, "output", 0, "content", 0, "text")),
    ("result.response", lambda b: _path(b, "result", "response")),
]


def extract_text(body: Any) -> str | None:
    """Return the model's text from a provider response, or None if no strategy matches.

    A strategy that finds an already-decoded object (Workers AI does this in
    JSON mode) has it re-serialised so callers always get text.
    """
    for _name, extractor in TEXT_EXTRACTORS:
        value = extractor(body)
        if isinstance(value, str):
            if value.strip():
                return value
        elif isinstance(value, (dict, list)):
            return json.dumps(value)
    return None


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ``` / ```json fence if present."""
    text = text.strip()
    m = _FENCE_RE.match(text)
    if m:
        return m.group(1).strip()
    return text


def parse_json_text(text: str) -> Any:
    """Strip fences and decode. Raises ``json.JSONDecodeError`` on bad input."""
    return json.loads(strip_code_fences(text))


def extract_ics(text: str) -> str:
    """Cut the VCALENDAR block out of model text; fall back to the fence-stripped text."""
    m = _VCALENDAR_RE.search(text)
    if m:
        return m.group(0).strip()
    return strip_code_fences(text)


def encode_base64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
