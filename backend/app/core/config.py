from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PLUGINFORGE_", extra="ignore")

    app_name: str = "PluginForge Template API"
    app_version: str = "0.1.0"
    debug: bool = False

    api_prefix: str = "/api"

    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Off keeps widget binding to plain name matching; on adds the synonym table and prefix stripping.
    parameter_aliases_enabled: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
