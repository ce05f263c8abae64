"""Upstream providers: credentials, default models and payload shapes."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from ai_relay.common.errors import Misconfigured
from ai_relay.common.schema import GenerationRequest, UpstreamTarget
from ai_relay.common.settings import Settings

# Workers AI model ids live under a namespace such as @cf/ or @hf/.
RUN_MODEL_MARKER = "@"

DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_OUTPUT_TOKENS = 512


def _chat_messages(system: str, prompt: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt},
    ]


@dataclass(frozen=True)
class CloudflareProvider:
    """Cloudflare Workers AI.

    Models named with the ``@`` namespace marker are invoked directly through
    ``ai/run/<model>`` with a chat payload; any other model name goes to the
    generic ``ai/v1/responses`` endpoint with a flat payload.
    """
    account_id: str | None
    api_token: str | None
    base_url: str
    default_model: str
    sentiment_model: str
    default_system: str = "You are a friendly assistant"
    name: str = "cloudflare"

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudflareProvider":
        return cls(
            account_id=settings.cloudflare_account_id,
            api_token=settings.cloudflare_api_token,
            base_url=settings.cloudflare_base_url,
            default_model=settings.cloudflare_model,
            sentiment_model=settings.cloudflare_sentiment_model,
        )

    def token(self) -> str:
        if not self.account_id or not self.api_token:
            raise Misconfigured(
                "cloudflare account id and token must be set in env "
                "(CLOUDFLARE_ACCOUNT_ID / CLOUDFLARE_API_TOKEN or CF_ACCOUNT_ID / CF_TOKEN)"
            )
        return self.api_token

    def _account_url(self, suffix: str) -> str:
        return f"{self.base_url}/accounts/{self.account_id}/ai/{suffix}"

    def run_target(self, model: str, payload: dict[str, Any]) -> UpstreamTarget:
        # "?" and "#" in a model id stay part of the path.
        return UpstreamTarget(self.name, self._account_url(f"run/{quote(model, safe='@/')}"), payload)

    def target(
        self,
        req: GenerationRequest,
        prompt: str,
        response_format: dict[str, Any] | None = None,
    ) -> UpstreamTarget:
        model = req.model or self.default_model
        if model.startswith(RUN_MODEL_MARKER):
            payload: dict[str, Any] = {
                "messages": _chat_messages(req.system or self.default_system, prompt),
            }
            if response_format:
                payload["response_format"] = response_format
            return self.run_target(model, payload)

        # The responses endpoint has no response_format field; parsing still
        # applies to whatever text comes back.
        return UpstreamTarget(
            self.name,
            self._account_url("v1/responses"),
            {
                "input": prompt,
                "model": model,
                "temperature": DEFAULT_TEMPERATURE if req.temperature is None else req.temperature,
                "max_output_tokens": (
                    DEFAULT_MAX_OUTPUT_TOKENS if req.max_output_tokens is None else req.max_output_tokens
                ),
            },
        )


@dataclass(frozen=True)
class OpenRouterProvider:
    """OpenRouter chat completions; every model takes the same chat payload."""
    api_key: str | None
    url: str
    default_model: str
    default_system: str = "You are a helpful assistant"
    name: str = "openrouter"

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenRouterProvider":
        return cls(
            api_key=settings.openrouter_api_key,
            url=settings.openrouter_url,
            default_model=settings.openrouter_model,
        )

    def token(self) -> str:
        if not self.api_key:
            raise Misconfigured(
                "openrouter api key must be set in env (OPENROUTER_API_KEY or OR_API_KEY)"
            )
        return self.api_key

    def target(
        self,
        req: GenerationRequest,
        prompt: str,
        response_format: dict[str, Any] | None = None,
    ) -> UpstreamTarget:
        payload: dict[str, Any] = {
            "model": req.model or self.default_model,
            "messages": _chat_messages(req.system or self.default_system, prompt),
            "temperature": DEFAULT_TEMPERATURE if req.temperature is None else req.temperature,
            "max_tokens": (
                DEFAULT_MAX_OUTPUT_TOKENS if req.max_output_tokens is None else req.max_output_tokens
            ),
        }
        if response_format:
            payload["response_format"] = response_format
        return UpstreamTarget(self.name, self.url, payload)
