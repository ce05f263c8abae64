"""FastAPI front for the relay dispatcher.

Endpoints:
- GET  /health
- POST /cf-generate          { "prompt": "..." } or { "html": "..." }
- POST /sonar-generate       { "prompt": "...", "parse_json"?: true, "schema_name"?: "..." }
- POST /sentiment            { "text"?: "..." }
- POST /api/process-with-ai  { "prompt": "..." }
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ai_relay.common.errors import RelayError
from ai_relay.common.schema import CfGenerateRequest, DispatchResult, GenerationRequest, PromptOnlyRequest, SentimentRequest
from ai_relay.common.settings import Settings, load_env_file
from ai_relay.common.templates import USER_TAG, load_template
from ai_relay.serve.dispatcher import Dispatcher

LOGGER = logging.getLogger("ai_relay.serve.app")


def _validate_template(settings: Settings) -> None:
    """Warn at startup if the calendar prompt template is missing or malformed."""
    try:
        template = load_template(settings.ics_template_path)
    except OSError as e:
        LOGGER.warning("Failed to read calendar prompt template: %s", e)
        return
    if "{{input}}" not in template or USER_TAG not in template:
        LOGGER.warning(
            "Calendar prompt template missing expected markers; found input=%s user=%s",
            "{{input}}" in template,
            USER_TAG in template,
        )


def _to_response(result: DispatchResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


def create_app(settings: Settings | None = None, dispatcher: Dispatcher | None = None) -> FastAPI:
    """
    Build the app around one dispatcher.

    Args:
        settings: Defaults to ``Settings.from_env()``; ignored when ``dispatcher`` is given.
        dispatcher: Prebuilt dispatcher, e.g. one with a fake transport.
    """
    if dispatcher is None:
        dispatcher = Dispatcher(settings or Settings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        _validate_template(app.state.dispatcher.settings)
        yield

    app = FastAPI(title="AI Relay", lifespan=lifespan)
    app.state.dispatcher = dispatcher

    @app.exception_handler(RelayError)
    async def _relay_error(request: Request, exc: RelayError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.body())

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": "invalid request body", "detail": detail})

    @app.get("/health")
    def health(d: Dispatcher = Depends(get_dispatcher)) -> dict[str, str]:
        return {
            "status": "ok",
            "cloudflare_model": d.cloudflare.default_model,
            "openrouter_model": d.openrouter.default_model,
        }

    @app.post("/cf-generate")
    def cf_generate(body: CfGenerateRequest, d: Dispatcher = Depends(get_dispatcher)) -> JSONResponse:
        if body.prompt is None and body.html is not None:
            return _to_response(d.calendar_from_html(body.html))
        return _to_response(d.generate(body))

    @app.post("/sonar-generate")
    def sonar_generate(body: GenerationRequest, d: Dispatcher = Depends(get_dispatcher)) -> JSONResponse:
        return _to_response(d.sonar_generate(body))

    @app.post("/sentiment")
    def sentiment(body: SentimentRequest | None = None, d: Dispatcher = Depends(get_dispatcher)) -> JSONResponse:
        return _to_response(d.sentiment(body or SentimentRequest()))

    @app.post("/api/process-with-ai")
    def process_with_ai(body: PromptOnlyRequest, d: Dispatcher = Depends(get_dispatcher)) -> JSONResponse:
        return _to_response(d.calendar_from_prompt(body.prompt))

    return app


def app_from_env() -> FastAPI:
    """App for `uvicorn ai_relay.serve.fastapi_app:app`; picks up `.env` first."""
    load_env_file()
    return create_app(Settings.from_env())


app = app_from_env()
