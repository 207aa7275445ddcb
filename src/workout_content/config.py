import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _bool(name: str, default: bool) -> bool:
    """
    Helper to parse boolean environment variables.
    Accepts: 1, true, yes, on (case-insensitive).
    """
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


def _strip_slash(url: str) -> str:
    return url.strip().rstrip("/")


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables.
    Uses pydantic for validation and parsing.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    WEBAPP_URL: str = Field("http://localhost:3000", description="Calling UI origin for CORS")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    EXERCISEDB_BASE_URL: str = Field(
        "https://exercisedb.p.rapidapi.com", description="ExerciseDB base URL"
    )
    EXERCISEDB_RAPIDAPI_KEY: str | None = Field(None, description="ExerciseDB RapidAPI key")
    EXERCISEDB_RAPIDAPI_HOST: str = Field(
        "exercisedb.p.rapidapi.com", description="ExerciseDB RapidAPI host"
    )

    WGER_BASE_URL: str = Field("https://wger.de/api/v2", description="wger API base URL")
    WGER_LANGUAGE_ID: int = Field(2, description="wger language id (2 = English)")
    WGER_SEARCH_LIMIT: int = Field(5, ge=1, le=50, description="wger candidates per lookup")

    LEGACY_MEDIA_CDN_URL: str = Field(
        "https://d205bpvrqc9yn1.cloudfront.net", description="Legacy GIF CDN base URL"
    )
    MEDIA_PROXY_PATH: str = Field(
        "/api/v1/workouts/media", description="Public path of the media proxy route"
    )

    HTTP_TIMEOUT_SECONDS: float = Field(10.0, gt=0, description="Timeout for outbound calls")
    ENRICHMENT_CONCURRENCY: int = Field(4, description="Concurrent wger lookups per search")

    # Feature flags
    FF_LEGACY_MEDIA: bool = Field(
        default_factory=lambda: _bool("FF_LEGACY_MEDIA", True),
        description="Try the legacy CDN when the provider image tier fails",
    )

    @field_validator("EXERCISEDB_BASE_URL", "WGER_BASE_URL", "LEGACY_MEDIA_CDN_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return _strip_slash(v)

    @field_validator("EXERCISEDB_RAPIDAPI_KEY", mode="before")
    @classmethod
    def empty_key_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("ENRICHMENT_CONCURRENCY")
    @classmethod
    def clamp_concurrency(cls, v: int) -> int:
        return min(max(v, 1), 6)


SETTINGS = Config()  # pyright: ignore[reportCallIssue]
