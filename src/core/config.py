"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )

    # Namespaces - comma-separated "prefix=uri" pairs merged over the built-in prefixes
    namespaces_str: str = Field(default="", validation_alias="NAMESPACES")

    # Association types - comma-separated prefixed names merged over the built-in types
    association_types_str: str = Field(default="", validation_alias="ASSOCIATION_TYPES")

    # Paging for list endpoints
    default_page_size: int = Field(default=100, ge=1, validation_alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=1000, ge=1, validation_alias="MAX_PAGE_SIZE")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level name and reject unknown levels."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def namespaces(self) -> dict[str, str]:
        """
        Parse the NAMESPACES setting into a prefix -> URI mapping.

        Entries without an '=' are ignored. Later entries win for repeated prefixes.
        """
        result: dict[str, str] = {}
        for pair in self.namespaces_str.split(","):
            prefix, sep, uri = pair.partition("=")
            if sep and prefix.strip() and uri.strip():
                result[prefix.strip()] = uri.strip()
        return result

    @property
    def association_types(self) -> list[str]:
        """Parse the ASSOCIATION_TYPES setting into a list of prefixed names."""
        return [t.strip() for t in self.association_types_str.split(",") if t.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
