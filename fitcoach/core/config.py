"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "FitCoach Workout Service"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://fitcoach@localhost:5432/fitcoach"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.6
    openai_max_tokens: int = 2400
    openai_timeout_seconds: float = 180.0
    rate_limit_cooldown_seconds: int = 15
    rate_limit_hourly_quota: int = 10
    rate_limit_window_seconds: int = 3600
    history_sample_limit: int = 10
    progress_sample_limit: int = 5
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "fitcoach"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
