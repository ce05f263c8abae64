from __future__ import annotations

from ai_relay.common.settings import DEFAULT_CLOUDFLARE_MODEL, Settings


def test_defaults_from_empty_env() -> None:
    s = Settings.from_env({})
    assert s.cloudflare_account_id is None
    assert s.cloudflare_model == DEFAULT_CLOUDFLARE_MODEL
    assert s.openrouter_model == "perplexity/sonar"
    assert s.port == 8787


def test_primary_names_win_over_legacy() -> None:
    s = Settings.from_env(
        {
            "CLOUDFLARE_ACCOUNT_ID": "new",
            "CF_ACCOUNT_ID": "old",
            "CF_TOKEN": "legacy-token",
            "OR_API_KEY": "or",
            "PORT": "9000",
            "CLOUDFLARE_BASE_URL": "http://localhost:8080/",
        }
    )
    assert s.cloudflare_account_id == "new"
    assert s.cloudflare_api_token == "legacy-token"
    assert s.openrouter_api_key == "or"
    assert s.port == 9000
    assert s.cloudflare_base_url == "http://localhost:8080"


def test_empty_values_fall_through() -> None:
    s = Settings.from_env({"CLOUDFLARE_API_TOKEN": "", "CLOUDFLARE_AUTH_TOKEN": "third"})
    assert s.cloudflare_api_token == "third"
