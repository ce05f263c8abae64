"""Error taxonomy for the relay.

Every error carries the HTTP status it maps to and knows how to render its
JSON body; the FastAPI app installs a single handler for ``RelayError``.
"""
from __future__ import annotations
from typing import Any


class RelayError(Exception):
    """Base class for all errors surfaced to the caller."""

    status_code: int = 500

    def __init__(self, error: str, detail: str | None = None) -> None:
        super().__init__(error)
        self.error = error
        self.detail = detail

    def body(self) -> Any:
        out: dict[str, Any] = {"error": self.error}
        if self.detail is not None:
            out["detail"] = self.detail
        return out


class InvalidRequest(RelayError):
    """Missing or malformed client input."""

    status_code = 400


class Misconfigured(RelayError):
    """Credentials or config files the request needs are not available."""

    status_code = 500


class UpstreamError(RelayError):
    """Provider answered with a non-2xx status; status and body are relayed verbatim."""

    def __init__(self, provider: str, status_code: int, payload: Any) -> None:
        super().__init__(f"{provider} returned status {status_code}")
        self.provider = provider
        self.status_code = status_code
        self.payload = payload

    def body(self) -> Any:
        return self.payload


class ParseError(RelayError):
    """The model's text could not be turned into the requested structure."""

    status_code = 502

    def __init__(self, error: str, detail: str | None = None, raw: Any = None) -> None:
        super().__init__(error, detail)
        self.raw = raw

    def body(self) -> Any:
        out = super().body()
        out["raw"] = self.raw
        return out


class InternalError(RelayError):
    """Transport or unexpected failure while talking to the provider."""

    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__("internal error", detail)
