# ABOUTME: Centralized configuration using Pydantic Settings.
# ABOUTME: Loads all settings from environment variables and .env file.

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google / Gemini
    gcp_project: str = ""
    gemini_api_key: SecretStr | None = None
    narrative_model: str = "gemini-2.5-flash"
    speech_model: str = "gemini-2.5-flash-preview-tts"
    narrative_temperature: float = 1.0
    narrative_max_output_tokens: int = 1200
    speaker_a_voice: str = "Zephyr"
    speaker_b_voice: str = "Fenrir"
    ai_max_attempts: int = 3

    # NWS products API
    nws_base_url: str = "https://api.weather.gov"
    nws_product_type: str = "AFD"
    nws_user_agent: str = "FoulWeatherApp (rdspromo@gmail.com)"
    nws_timeout: int = 15

    # Audio storage (GCS)
    gcs_bucket: str | None = None
    audio_storage_prefix: str = "sarcastic_summaries"
    audio_cache_control: str = "public,max-age=3600"

    # Push notifications (FCM topics)
    notification_topic_prefix: str = "wfo_"
    notification_title: str = "CLICK HERE FOR FOUL WEATHER"
    notification_body: str = "Your latest foul weather summary is ready! Just click here and enjoy!"

    # Dispatch
    batch_concurrency: int = 6
    subscriber_concurrency: int = 5
    dispatch_timeout_seconds: float = 540
    deployed_batches: list[int] = []  # Empty means every registry batch
    dispatch_strategy: Literal["batches", "subscribers"] = "batches"  # Scheduled jobs to deploy

    # Per-run parameters (API keys, ad copy)
    parameter_source: Literal["env", "secret_manager"] = "env"
    preroll_ad_text: str = ""
    postroll_ad_text: str = ""

    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "foulweather"
    db_user: str = "foulweather"
    db_password: SecretStr | None = None
    db_pool_size: int = 5
    db_pool_max_overflow: int = 10

    @property
    def database_url(self) -> str:
        """Build async PostgreSQL connection URL."""
        password = self.db_password.get_secret_value() if self.db_password else ""
        return f"postgresql+asyncpg://{self.db_user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"

    # Web / API
    scheduler_audience: str = ""  # OIDC audience for Cloud Scheduler verification


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables and .env file.
    The Gemini key is optional here; it can also come from Secret Manager per run.
    """
    return Settings()
