"""Application configuration using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_path: str = Field(default="puzzlescores.db", alias="DATABASE_PATH")
    seed_default_games: bool = Field(default=True, alias="SEED_DEFAULT_GAMES")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # API
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173", "http://localhost:8080"],
        alias="CORS_ORIGINS",
    )

    # All day bucketing happens in this timezone
    reference_timezone: str = Field(default="America/Los_Angeles", alias="REFERENCE_TIMEZONE")

    # Admin
    admin_password: str = Field(default="", alias="ADMIN_PASSWORD")
    admin_token_secret: str = Field(default="dev-secret-key-change-in-production", alias="ADMIN_TOKEN_SECRET")
    admin_token_algorithm: str = Field(default="HS256", alias="ADMIN_TOKEN_ALGORITHM")
    admin_token_ttl_hours: int = Field(default=24, alias="ADMIN_TOKEN_TTL_HOURS")

    # Score images
    max_image_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_IMAGE_BYTES")


# Global settings instance
settings = Settings()


class Config:
    """Uppercase config interface used across the services."""

    DATABASE_PATH = settings.database_path
    SEED_DEFAULT_GAMES = settings.seed_default_games
    LOG_LEVEL = settings.log_level.upper()
    API_HOST = settings.api_host
    API_PORT = settings.api_port
    CORS_ORIGINS = settings.cors_origins
    REFERENCE_TIMEZONE = settings.reference_timezone
    ADMIN_PASSWORD = settings.admin_password
    ADMIN_TOKEN_SECRET = settings.admin_token_secret
    ADMIN_TOKEN_ALGORITHM = settings.admin_token_algorithm
    ADMIN_TOKEN_TTL_HOURS = settings.admin_token_ttl_hours
    MAX_IMAGE_BYTES = settings.max_image_bytes
