"""
Configuration management for the identity service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Identity service configuration loaded from environment variables"""

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./identity.db"

    # Token Configuration
    JWT_SECRET: str = "change-this-secret-in-prod-0123456789abcdef"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "/app/logs"

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )


# Global settings instance
settings = Settings()
