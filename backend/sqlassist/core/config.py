"""
Application configuration loaded from environment variables.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Databases ─────────────────────────────────────────────────────────────
    DATABASE_DIR: Path = Path("data/databases")

    # ── LLM backends ──────────────────────────────────────────────────────────
    # Order matters: the first reachable backend wins.
    # Env accepts "openai,ollama" or '["openai", "ollama"]'.
    LLM_PROVIDERS: Annotated[List[str], NoDecode] = ["ollama"]
    LLM_HEALTH_CHECK: bool = True
    LLM_TIMEOUT: int = 60
    LLM_PING_TIMEOUT: int = 2

    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "qwen2.5-coder:0.5b"

    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"

    # ── App ───────────────────────────────────────────────────────────────────
    APP_NAME: str = "SQLite Browser Assistant"
    DEBUG: bool = False
    CORS_ORIGINS: List[str] = ["*"]

    @field_validator("LLM_PROVIDERS", mode="before")
    @classmethod
    def split_providers(cls, value: Any) -> Any:
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                return json.loads(text)
            return [item.strip() for item in text.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
