"""Application settings loaded from the environment (or a ``.env`` file)."""

import os
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings

# Values shipped in the sample configuration; a backend still set to these
# has not been configured.
PLACEHOLDER_BACKEND_URL = "https://your-project-url.supabase.co"
PLACEHOLDER_BACKEND_KEY = "your-anon-key"

_ENV_PATH = os.path.join(os.path.dirname(__file__), "..", ".env")

DEFAULT_PROXY_ENDPOINTS = [
    "https://api.allorigins.win/raw?url={url}",
    "https://corsproxy.io/?url={url}",
    "https://api.codetabs.com/v1/proxy?quest={url}",
]


class Settings(BaseSettings):
    supabase_url: str = PLACEHOLDER_BACKEND_URL
    supabase_key: str = PLACEHOLDER_BACKEND_KEY

    gemini_api_key: str = ""
    gemini_endpoint: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-pro"
    temperature: float = 0.2
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 1024

    # Chat gateway retry policy: fixed delay, no backoff
    gateway_max_retries: int = 2
    retry_delay: float = 1.0

    # Each entry must contain a ``{url}`` placeholder for the encoded target URL
    proxy_endpoints: List[str] = DEFAULT_PROXY_ENDPOINTS
    http_timeout: float = 15.0

    # Directory for the JSON-file store; empty keeps everything in memory
    storage_dir: str = ""

    class Config:
        # .env in the repo root is optional; real deployments inject env vars
        env_file = _ENV_PATH if os.path.exists(_ENV_PATH) else None
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def is_backend_configured(settings: Settings) -> bool:
    """Return True when the auth backend URL and key are set to real values."""
    url = settings.supabase_url.strip()
    key = settings.supabase_key.strip()
    if not url or not key:
        return False
    return url != PLACEHOLDER_BACKEND_URL and key != PLACEHOLDER_BACKEND_KEY
