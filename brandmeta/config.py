"""Centralised settings for the brand metadata service.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / brand records
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("BRANDMETA_WORKSPACE", Path.home() / ".brandmeta")
        )
    )
    brands_file: str | None = field(
        default_factory=lambda: os.environ.get("BRANDS_FILE")
    )

    @property
    def brands_path(self) -> Path:
        """Absolute path to the JSON file holding brand contexts."""
        if self.brands_file:
            return Path(self.brands_file)
        return self.workspace_dir / "brands.json"

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "USER_AGENT",
            "Mozilla/5.0 (compatible; BrandMetaBot/1.0; +https://github.com/brandmeta-bot)",
        )
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "15.0"))
    )
    max_redirects: int = field(
        default_factory=lambda: int(os.environ.get("MAX_REDIRECTS", "5"))
    )

    # ------------------------------------------------------------------
    # Synthesizer
    # ------------------------------------------------------------------
    content_char_limit: int = field(
        default_factory=lambda: int(os.environ.get("CONTENT_CHAR_LIMIT", "6000"))
    )
    llm_provider: str = field(
        default_factory=lambda: os.environ.get("LLM_PROVIDER", "openai")
    )
    openai_chat_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_CHAT_MODEL", "gpt-4o")
    )
    ollama_base_url: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
    )
    ollama_chat_model: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_CHAT_MODEL", "ministral-3:8b")
    )
    llm_temperature: float = field(
        default_factory=lambda: float(os.environ.get("LLM_TEMPERATURE", "0.7"))
    )
    llm_timeout: float = field(
        default_factory=lambda: float(os.environ.get("LLM_TIMEOUT", "60.0"))
    )

    # ------------------------------------------------------------------
    # Orchestrator
    # ------------------------------------------------------------------
    max_concurrent_urls: int = field(
        default_factory=lambda: int(os.environ.get("MAX_CONCURRENT_URLS", "5"))
    )
    batch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("BATCH_TIMEOUT", "300.0"))
    )
    retry_backoff: float = field(
        default_factory=lambda: float(os.environ.get("RETRY_BACKOFF", "1.0"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )
    log_json: bool = field(default_factory=lambda: _env_bool("LOG_JSON", "false"))


# Module-level singleton — import this everywhere:
#   from brandmeta.config import settings
settings = Settings()
