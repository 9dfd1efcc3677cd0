"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tts_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("http://translate.google.com/translate_tts"),
        validation_alias=AliasChoices("TTS_BASE_URL", "tts_base_url"),
    )
    # The remote endpoint rejects longer fragments
    max_chars: int = Field(
        default=100,
        ge=1,
        validation_alias=AliasChoices("TTS_MAX_CHARS", "max_chars"),
    )
    default_language: str = Field(
        default="en",
        validation_alias=AliasChoices("TTS_DEFAULT_LANGUAGE", "default_language"),
    )
    request_timeout: float = Field(
        default=30.0,
        ge=1,
        validation_alias=AliasChoices("TTS_REQUEST_TIMEOUT", "request_timeout"),
    )
    max_concurrent_fetches: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices(
            "TTS_MAX_CONCURRENT_FETCHES",
            "max_concurrent_fetches",
        ),
        description="Cap on in-flight fragment requests per live stream (None = one per chunk).",
    )
    stream_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("TTS_STREAM_TIMEOUT", "stream_timeout"),
    )

    host: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("HOST", "host"),
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "port"),
    )

    @property
    def base_url(self) -> str:
        return str(self.tts_base_url)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["Settings", "get_settings"]
