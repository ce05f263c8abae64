"""Request dispatcher: one inbound request, one outbound provider call.

Each public method validates its input, resolves credentials from the
``Settings`` given at construction, builds an ``UpstreamTarget`` through the
matching provider, POSTs it once and maps the result back to a
``DispatchResult``. Failures are raised as ``RelayError`` subclasses and are
never retried.
"""
from __future__ import annotations
import logging
import time
from typing import Any

import httpx
import yaml

from ai_relay.common.errors import InternalError, InvalidRequest, Misconfigured, ParseError, UpstreamError
from ai_relay.common.extraction import encode_base64, extract_ics, extract_text, parse_json_text
from ai_relay.common.schema import (
    DispatchResult,
    GenerationRequest,
    ParsedResult,
    SentimentRequest,
    UpstreamTarget,
)
from ai_relay.common.settings import Settings
from ai_relay.common.templates import build_response_format, load_schemas, load_template, render_prompt, split_template
from ai_relay.serve.providers import CloudflareProvider, OpenRouterProvider

LOGGER = logging.getLogger("ai_relay.serve.dispatcher")

DEFAULT_SENTIMENT_TEXT = "I really enjoyed working with this service today."


def _require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidRequest(f'request body must include string "{field}"')
    return value


class Dispatcher:
    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None) -> None:
        """
        Args:
            settings: Credentials, defaults and file locations.
            transport: Optional httpx transport, used by tests to fake the provider.
        """
        self.settings = settings
        self.cloudflare = CloudflareProvider.from_settings(settings)
        self.openrouter = OpenRouterProvider.from_settings(settings)
        self._transport = transport

    # -- routes ---------------------------------------------------------

    def generate(self, req: GenerationRequest) -> DispatchResult:
        """Cloudflare Workers AI generation (``/cf-generate``)."""
        return self._generate(self.cloudflare, req)

    def sonar_generate(self, req: GenerationRequest) -> DispatchResult:
        """OpenRouter chat completion, Perplexity Sonar by default (``/sonar-generate``)."""
        return self._generate(self.openrouter, req)

    def sentiment(self, req: SentimentRequest) -> DispatchResult:
        token = self.cloudflare.token()
        text = req.text or DEFAULT_SENTIMENT_TEXT
        target = self.cloudflare.run_target(self.cloudflare.sentiment_model, {"text": text})
        return DispatchResult(self._call(target, token))

    def calendar_from_html(self, html: Any) -> DispatchResult:
        """Ask the model for an .ics file describing the events in ``html``."""
        html = _require_text(html, "html")
        token = self.cloudflare.token()
        try:
            template = load_template(self.settings.ics_template_path)
        except OSError as e:
            raise Misconfigured("calendar prompt template could not be read", detail=str(e))
        system, user = split_template(template)
        prompt = render_prompt(user, html)
        target = self.cloudflare.target(GenerationRequest(prompt=prompt, system=system), prompt)
        return self._calendar(target, token)

    def calendar_from_prompt(self, prompt: Any) -> DispatchResult:
        """Like ``calendar_from_html`` but the caller writes the prompt."""
        prompt = _require_text(prompt, "prompt")
        token = self.cloudflare.token()
        target = self.cloudflare.target(GenerationRequest(prompt=prompt), prompt)
        return self._calendar(target, token)

    # -- internals ------------------------------------------------------

    def _generate(self, provider: CloudflareProvider | OpenRouterProvider, req: GenerationRequest) -> DispatchResult:
        prompt = _require_text(req.prompt, "prompt")
        token = provider.token()
        target = provider.target(req, prompt, self._response_format(req))
        body = self._call(target, token)
        if req.wants_parsing():
            return self._parse_structured(body)
        return DispatchResult(body)

    def _response_format(self, req: GenerationRequest) -> dict[str, Any] | None:
        if req.response_format:
            return req.response_format
        if not req.schema_name:
            return None
        try:
            schemas = load_schemas(self.settings.schemas_path)
        except (OSError, yaml.YAMLError, ValueError) as e:
            raise Misconfigured("schema registry could not be loaded", detail=str(e))
        entry = schemas.get(req.schema_name)
        if entry is None:
            raise InvalidRequest(
                f'unknown schema "{req.schema_name}"',
                detail="known schemas: " + ", ".join(sorted(schemas)),
            )
        if not isinstance(entry, dict) or "schema" not in entry:
            raise Misconfigured(f'schema "{req.schema_name}" has no "schema" key')
        return build_response_format(req.schema_name, entry)

    def _call(self, target: UpstreamTarget, token: str) -> Any:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        start = time.time()
        try:
            with httpx.Client(timeout=self.settings.request_timeout, transport=self._transport) as client:
                r = client.post(target.url, headers=headers, json=target.payload)
        except Exception as e:
            LOGGER.error("%s request failed: %s", target.provider, e)
            raise InternalError(str(e))
        latency = int((time.time() - start) * 1000)

        try:
            body = r.json()
        except ValueError:
            body = None

        if not r.is_success:
            LOGGER.warning("%s returned %s after %sms", target.provider, r.status_code, latency)
            if body is None:
                body = {"error": f"{target.provider} returned non-JSON response"}
            raise UpstreamError(target.provider, r.status_code, body)

        LOGGER.info("%s %s -> %s in %sms", target.provider, target.url, r.status_code, latency)
        return body

    def _parse_structured(self, body: Any) -> DispatchResult:
        text = extract_text(body)
        if text is None:
            result = ParsedResult(success=False, raw=body, error="no textual content found to parse")
            return DispatchResult(result.as_dict())
        try:
            parsed = parse_json_text(text)
        except ValueError as e:
            LOGGER.warning("failed to parse model JSON output: %s", e)
            raise ParseError("failed to parse JSON from model output", detail=str(e), raw=body)
        return DispatchResult(ParsedResult(success=True, raw=body, parsed=parsed).as_dict())

    def _calendar(self, target: UpstreamTarget, token: str) -> DispatchResult:
        body = self._call(target, token)
        text = extract_text(body)
        if text is None:
            raise ParseError("no textual content found in model output", raw=body)
        ics = extract_ics(text)
        if not ics:
            raise ParseError("model output contained no calendar data", raw=body)
        return DispatchResult({"base64": encode_base64(ics)})
