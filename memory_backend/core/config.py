from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Memory Helper Backend"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./memory_helper.db"
    seed_demo_data: bool = True

    face_match_mode: str = "demo"
    face_match_url: str = ""
    face_match_api_key: str = ""
    face_match_timeout_seconds: float = 6.0
    demo_match_probability: float = 0.7

    llm_api_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    llm_api_key: str = ""
    llm_model: str = "google/gemini-2.5-flash"
    llm_timeout_seconds: float = 15.0
    memory_note_limit: int = 10
    conversation_limit: int = 5

    cors_origins_raw: str = "*"
    cors_headers_raw: str = "*"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins_raw.split(",") if origin.strip()]

    @property
    def cors_headers(self) -> List[str]:
        return [header.strip() for header in self.cors_headers_raw.split(",") if header.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
