"""
AdCarbon Backend — Configuration
Standalone settings for the banner CO2 estimator.
Values come from the environment (prefix ADCARBON_) or a local .env file.
"""
from dataclasses import dataclass

from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class EstimatorConfig:
    """Explicit configuration handed to the emission estimators."""
    api_key: str = ""
    model: str = "gpt-3.5-turbo"
    traditional_model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 30.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


class Settings(BaseSettings):
    # ── Application ──────────────────────────────────────────────────────
    APP_NAME: str = "AdCarbon"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # ── OpenAI-compatible estimation service ─────────────────────────────
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_TRADITIONAL_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_TIMEOUT_SECONDS: float = 30.0

    # ── File Upload ──────────────────────────────────────────────────────
    MAX_UPLOAD_SIZE_MB: int = 10

    # ── Analysis ─────────────────────────────────────────────────────────
    DEFAULT_VIEW_COUNT: int = 1_000_000
    REPORT_MAX_IMAGES: int = 20

    def estimator_config(self) -> EstimatorConfig:
        return EstimatorConfig(
            api_key=self.OPENAI_API_KEY,
            model=self.OPENAI_MODEL or EstimatorConfig.model,
            traditional_model=self.OPENAI_TRADITIONAL_MODEL or EstimatorConfig.traditional_model,
            base_url=self.OPENAI_BASE_URL.rstrip("/"),
            timeout_seconds=self.OPENAI_TIMEOUT_SECONDS,
        )

    class Config:
        env_file = ".env"
        env_prefix = "ADCARBON_"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
