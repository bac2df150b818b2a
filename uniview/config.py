from __future__ import annotations

import json

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_cors_any(v: str | None) -> list[str]:
    if not v:
        return []
    s = v.strip()
    if s.startswith("["):
        try:
            arr = json.loads(s)
        except ValueError:
            arr = None
        if isinstance(arr, list):
            return [str(x).strip() for x in arr if str(x).strip()]
    return [x.strip() for x in s.split(",") if x.strip()]


class Settings(BaseSettings):
    environment: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    # Seed dataset (JSON/CSV) loaded into the in-memory store on startup.
    # When it cannot be loaded the lot service serves fallback lots.
    data_path: str = "data/uniview_seed.json"

    cors_origins: str = "*"

    token_secret: str = "development-secret-change-me"
    access_token_ttl_s: int = 3600
    refresh_token_ttl_s: int = 7 * 24 * 3600

    # 0 disables prediction memoization
    prediction_cache_ttl_s: int = 300
    default_prediction_hours: int = 3
    max_prediction_hours: int = 12

    model_config = SettingsConfigDict(
        env_prefix="UNIVIEW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_list(self) -> list[str]:
        return _parse_cors_any(self.cors_origins) or ["*"]

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"


settings = Settings()
