"""Environment-derived configuration, read once and passed to the dispatcher."""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

DEFAULT_CLOUDFLARE_MODEL = "@cf/meta/llama-3.1-8b-instruct-fast"
DEFAULT_SENTIMENT_MODEL = "@cf/huggingface/distilbert-sst-2-int8"
DEFAULT_OPENROUTER_MODEL = "perplexity/sonar"


def _first(env: Mapping[str, str], *names: str, default: str | None = None) -> str | None:
    """Return the first non-empty value among ``names``; older deployments used CF_* / OR_* names."""
    for name in names:
        value = env.get(name)
        if value:
            return value
    return default


@dataclass(frozen=True)
class Settings:
    cloudflare_account_id: str | None = None
    cloudflare_api_token: str | None = None
    cloudflare_model: str = DEFAULT_CLOUDFLARE_MODEL
    cloudflare_sentiment_model: str = DEFAULT_SENTIMENT_MODEL
    cloudflare_base_url: str = "https://api.cloudflare.com/client/v4"

    openrouter_api_key: str | None = None
    openrouter_model: str = DEFAULT_OPENROUTER_MODEL
    openrouter_url: str = "https://openrouter.ai/api/v1/chat/completions"

    host: str = "0.0.0.0"
    port: int = 8787
    request_timeout: float = 120.0

    ics_template_path: str = "configs/ics_prompt_template.txt"
    schemas_path: str = "configs/schemas.yaml"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from; defaults to ``os.environ``.
        """
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            cloudflare_account_id=_first(env, "CLOUDFLARE_ACCOUNT_ID", "CF_ACCOUNT_ID"),
            cloudflare_api_token=_first(
                env, "CLOUDFLARE_API_TOKEN", "CF_TOKEN", "CLOUDFLARE_AUTH_TOKEN"
            ),
            cloudflare_model=_first(env, "CLOUDFLARE_MODEL", default=defaults.cloudflare_model),
            cloudflare_sentiment_model=_first(
                env, "CLOUDFLARE_SENTIMENT_MODEL", default=defaults.cloudflare_sentiment_model
            ),
            cloudflare_base_url=_first(
                env, "CLOUDFLARE_BASE_URL", default=defaults.cloudflare_base_url
            ).rstrip("/"),
            openrouter_api_key=_first(env, "OPENROUTER_API_KEY", "OR_API_KEY"),
            openrouter_model=_first(
                env, "OPENROUTER_PERPLEXITY_MODEL", default=defaults.openrouter_model
            ),
            openrouter_url=_first(env, "OPENROUTER_URL", default=defaults.openrouter_url),
            host=_first(env, "HOST", default=defaults.host),
            port=int(_first(env, "PORT", default=str(defaults.port))),
            request_timeout=float(
                _first(env, "REQUEST_TIMEOUT", default=str(defaults.request_timeout))
            ),
            ics_template_path=_first(env, "ICS_TEMPLATE_PATH", default=defaults.ics_template_path),
            schemas_path=_first(env, "SCHEMAS_PATH", default=defaults.schemas_path),
            log_level=_first(env, "LOG_LEVEL", default=defaults.log_level),
        )


def load_env_file() -> None:
    """Load ``.env`` from the working directory (or a parent) without overriding real env vars."""
    load_dotenv(find_dotenv(usecwd=True))
