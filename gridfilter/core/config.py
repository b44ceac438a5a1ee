"""Library configuration loaded from environment variables."""

from functools import lru_cache

from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Filter engine settings loaded from environment variables."""

    # Logging
    LOG_LEVEL: str = "INFO"

    # Free-text search and LIKE-based text filters use ILIKE semantics
    SEARCH_CASE_INSENSITIVE: bool = True

    # Coerce both bounds of a number range to float before BETWEEN
    NUMBER_RANGE_COERCE_BOUNDS: bool = True

    # Operator used by input_text filters without an explicit option
    DEFAULT_TEXT_OPERATOR: str = "contains"

    model_config = ConfigDict(
        env_prefix="GRIDFILTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore unrelated variables from a shared .env
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a standard logging level. Got: {v}")
        return level

    @field_validator("DEFAULT_TEXT_OPERATOR")
    @classmethod
    def validate_default_text_operator(cls, v: str) -> str:
        """Lower-case the default operator name."""
        return v.lower()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
