from __future__ import annotations

import json

import pytest

from ai_relay.common.extraction import extract_ics, extract_text, parse_json_text, strip_code_fences


@pytest.mark.parametrize(
    "body, expected",
    [
        ({"choices": [{"message": {"content": "chat"}}]}, "chat"),
        ({"choices": [{"text": "legacy"}]}, "legacy"),
        ({"output": [{"content": [{"type": "output_text", "text": "responses"}]}]}, "responses"),
        ({"result": {"response": "workers"}}, "workers"),
    ],
)
def test_extract_text_shapes(body: dict, expected: str) -> None:
    assert extract_text(body) == expected


def test_extract_text_first_match_wins() -> None:
    body = {"choices": [{"message": {"content": "first"}, "text": "second"}]}
    assert extract_text(body) == "first"


def test_extract_text_skips_empty_content() -> None:
    body = {"choices": [{"message": {"content": ""}, "text": "fallback"}]}
    assert extract_text(body) == "fallback"


def test_extract_text_serialises_decoded_objects() -> None:
    body = {"result": {"response": {"a": 1}}}
    assert json.loads(extract_text(body)) == {"a": 1}


@pytest.mark.parametrize("body", [None, [], "text", {"choices": "nope"}, {"output": [{}]}])
def test_extract_text_none_for_unknown_shapes(body: object) -> None:
    assert extract_text(body) is None


def test_strip_code_fences() -> None:
    assert strip_code_fences('```json\n{"a":1}\n```') == '{"a":1}'
    assert strip_code_fences("```\n[1]\n```") == "[1]"
    assert strip_code_fences('  {"a":1} ') == '{"a":1}'


def test_parse_json_text_raises_on_garbage() -> None:
    with pytest.raises(ValueError):
        parse_json_text("```json\nnope\n```")


def test_extract_ics_falls_back_to_stripped_text() -> None:
    assert extract_ics("```\nVERSION:2.0\n```") == "VERSION:2.0"
