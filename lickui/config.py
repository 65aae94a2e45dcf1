"""Centralised settings for the LickUI backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_CHROME_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Proxy / fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    stylesheet_timeout: float = field(
        default_factory=lambda: float(os.environ.get("STYLESHEET_TIMEOUT", "10.0"))
    )
    max_stylesheets: int = field(
        default_factory=lambda: int(os.environ.get("MAX_STYLESHEETS", "5"))
    )
    cache_max_age: int = field(
        default_factory=lambda: int(os.environ.get("PROXY_CACHE_MAX_AGE", "300"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("PROXY_USER_AGENT", _CHROME_UA)
    )

    # ------------------------------------------------------------------
    # Preview rendering / selection
    # ------------------------------------------------------------------
    container_class: str = field(
        default_factory=lambda: os.environ.get("PREVIEW_CONTAINER_CLASS", "html-preview")
    )
    selection_max_depth: int = field(
        default_factory=lambda: int(os.environ.get("SELECTION_MAX_DEPTH", "4"))
    )

    # ------------------------------------------------------------------
    # Chat / language model
    # ------------------------------------------------------------------
    llm_provider: str = field(
        default_factory=lambda: os.environ.get("LLM_PROVIDER", "openai")
    )
    openai_chat_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    )
    openai_api_key: str = field(
        default_factory=lambda: os.environ.get("OPENAI_API_KEY", "")
    )
    ollama_chat_model: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_CHAT_MODEL", "llama3.1:8b")
    )
    llm_temperature: float = field(
        default_factory=lambda: float(os.environ.get("LLM_TEMPERATURE", "0.7"))
    )
    llm_max_tokens: int = field(
        default_factory=lambda: int(os.environ.get("LLM_MAX_TOKENS", "1024"))
    )
    chat_history_turns: int = field(
        default_factory=lambda: int(os.environ.get("CHAT_HISTORY_TURNS", "10"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )


# Module-level singleton, import this everywhere:
#   from lickui.config import settings
settings = Settings()


def configure_logging() -> None:
    """Initialise root logging from ``settings.log_level``.

    Called by the API factory and the CLI entry point, never at import time.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
