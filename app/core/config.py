from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "production", "staging", "test"]


def _resolve_env_files() -> tuple[str, ...]:
    env = os.getenv("CARTOONSTRIP_ENVIRONMENT", "development").lower()
    if env in {"prod", "production"}:
        return (".env", ".env.prod")
    if env in {"dev", "development"}:
        return (".env", ".env.dev")
    if env in {"test", "testing"}:
        return (".env", ".env.test")
    return (".env",)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CARTOONSTRIP_",
        env_file=_resolve_env_files(),
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Environment = "development"
    project_name: str = "Cartoon Strip Generator"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    log_json: bool = False
    rate_limit: str = "30/minute"
    allowed_hosts: list[str] = ["*"]
    cors_origins: list[str] = []
    enable_docs: bool = True

    reader_endpoint: str = "https://r.jina.ai"
    reader_api_key: str | None = None
    reader_timeout_seconds: float = 30.0

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    openai_max_output_tokens: int = 800

    fal_key: str | None = None
    image_model: str = "fal-ai/nano-banana-pro"
    image_size: str = "landscape_16_9"
    num_images: int = 1


@lru_cache
def get_settings() -> Settings:
    return Settings()
