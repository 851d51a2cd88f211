from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .llm_extract import STRATEGIES


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    genai_api_key: Optional[str] = Field(default=None, validation_alias="GENAI_API_KEY")
    genai_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1",
        validation_alias="GENAI_API_BASE",
    )
    genai_timeout_seconds: float = Field(
        default=120.0, validation_alias="GENAI_TIMEOUT_SECONDS"
    )
    plant_model: str = Field(default="gemini-1.5-flash", validation_alias="PLANT_MODEL")
    vision_model: str = Field(default="gemini-1.5-pro", validation_alias="VISION_MODEL")
    text_model: str = Field(default="gemini-1.0-pro", validation_alias="TEXT_MODEL")
    extraction_strategy: str = Field(
        default="balanced", validation_alias="EXTRACTION_STRATEGY"
    )
    progress_reset_seconds: float = Field(
        default=1.0, validation_alias="PROGRESS_RESET_SECONDS"
    )
    news_api_url: str = Field(
        default="https://gnews.io/api/v4/search", validation_alias="NEWS_API_URL"
    )
    news_api_key: Optional[str] = Field(default=None, validation_alias="NEWS_API_KEY")
    news_language: str = Field(default="en", validation_alias="NEWS_LANGUAGE")
    news_country: str = Field(default="us", validation_alias="NEWS_COUNTRY")
    news_max_articles: int = Field(default=9, validation_alias="NEWS_MAX_ARTICLES")
    news_timeout_seconds: float = Field(
        default=10.0, validation_alias="NEWS_TIMEOUT_SECONDS"
    )
    public_base_url: Optional[str] = Field(
        default=None, validation_alias="PUBLIC_BASE_URL"
    )
    log_path: Optional[str] = Field(default=None, validation_alias="LOG_PATH")
    api_error_log_path: Optional[str] = Field(
        default=None, validation_alias="API_ERROR_LOG_PATH"
    )
    fastapi_port: int = Field(default=8000, validation_alias="FASTAPI_PORT")
    camera_index: int = Field(default=0, validation_alias="CAMERA_INDEX")

    @field_validator("extraction_strategy", mode="after")
    @classmethod
    def normalize_extraction_strategy(cls, value: str) -> str:
        value = (value or "").strip().lower()
        if value not in STRATEGIES:
            raise ValueError(
                f"EXTRACTION_STRATEGY must be one of {', '.join(STRATEGIES)}, got {value!r}"
            )
        return value

    @field_validator("genai_api_base", "news_api_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/") if value else value


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return AppConfig()
