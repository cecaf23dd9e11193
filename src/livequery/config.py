"""Configuration settings for livequery."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LIVEQUERY_LOG_LEVEL: str = "WARNING"

    LIVEQUERY_TRACE_VIEWS: bool = False
    LIVEQUERY_TRACE_MAX_EVENTS: int = 500

    LIVEQUERY_PREVIEW_ROWS: int = 20

    @property
    def trace_enabled(self) -> bool:
        return self.LIVEQUERY_TRACE_VIEWS and self.LIVEQUERY_TRACE_MAX_EVENTS > 0


settings = Settings()
