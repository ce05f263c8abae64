"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel


class GenerationRequest(BaseModel):
    """Body accepted by the generation routes.

    ``prompt`` is optional at the model level so that a missing prompt is
    reported by the dispatcher as a 400 rather than a validation error.
    """
    prompt: str | None = None
    model: str | None = None
    system: str | None = None
    temperature: float | None = None
    max_output_tokens: int | None = None
    parse_json: bool = False
    response_format: dict[str, Any] | None = None
    schema_name: str | None = None

    def wants_parsing(self) -> bool:
        if self.parse_json or self.schema_name:
            return True
        return bool(self.response_format) and self.response_format.get("type") == "json_schema"


class CfGenerateRequest(GenerationRequest):
    """``/cf-generate`` also accepts raw HTML to turn into a calendar."""
    html: str | None = None


class SentimentRequest(BaseModel):
    text: str | None = None


class PromptOnlyRequest(BaseModel):
    prompt: str | None = None


@dataclass(frozen=True)
class UpstreamTarget:
    """Where one outbound call goes and what it carries."""
    provider: str
    url: str
    payload: dict[str, Any]


@dataclass
class ParsedResult:
    """Outcome of structured-output parsing."""
    success: bool
    raw: Any
    parsed: Any = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if self.success:
            out["parsed"] = self.parsed
        if self.error is not None:
            out["error"] = self.error
        out["raw"] = self.raw
        return out


@dataclass
class DispatchResult:
    """Status and JSON body handed back to the HTTP layer unchanged."""
    body: Any
    status_code: int = 200
