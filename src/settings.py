"""App settings."""

from pydantic_settings import BaseSettings

from constants import (
    COMPLETION_API_URL,
    DATABASE_CONNECTION_STRING,
    DATABASE_NAME,
    DEFAULT_MODEL,
    ENVIRONMENT,
    LOGGING_LEVEL,
)


class Settings(BaseSettings):
    """API settings configuration."""

    # API settings
    api_title: str = "Relaychat API"
    api_version: str = "1.0.0"
    api_description: str = "Chat history persistence and completion relay"
    environment: str = ENVIRONMENT

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Database settings
    database_url: str = DATABASE_CONNECTION_STRING
    database_name: str = DATABASE_NAME

    # Logging
    logging_level: int = LOGGING_LEVEL

    # Completion API settings
    completion_api_url: str = COMPLETION_API_URL
    default_model: str = DEFAULT_MODEL


settings = Settings()
