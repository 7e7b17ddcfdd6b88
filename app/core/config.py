"""
Centralized application configuration.

Loads every environment variable and setting of the application through
Pydantic Settings for automatic validation.
"""

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from app.domain.models import DEFAULT_ITEM_TYPE_KEYWORDS


class Settings(BaseSettings):
    """
    Application configuration using Pydantic Settings.

    Values are read from environment variables (or a .env file) with
    defaults suitable for local development.
    """

    # === APP ===
    APP_NAME: str = "Print Shop Orders"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=True)

    # === SERVER ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    WORKERS: int = Field(default=1)
    LOG_LEVEL: str = Field(default="INFO")

    # === CORS ===
    # Comma separated list of origins; ignored in development, where every origin is allowed
    CORS_ALLOW_LIST: str = Field(default="")

    # === DATABASE ===
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./orders.db")
    DB_ECHO: bool = Field(default=False)
    DB_POOL_SIZE: int = Field(default=5)

    # === ORDERS ===
    DEFAULT_PAGE_SIZE: int = Field(default=10)
    SHIPPING_DEADLINE_DAYS: int = Field(default=5)
    SHIPPED_STATUS: str = Field(default="shipped")

    # === SPREADSHEET IMPORT ===
    IMPORT_DEFAULT_ITEM_COLOR: str = Field(default="default")
    IMPORT_FALLBACK_ITEM_TYPE: str = Field(default="Normal")
    # Ordered: the first keyword found in the product name wins
    IMPORT_ITEM_TYPE_KEYWORDS: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ITEM_TYPE_KEYWORDS))
    IMPORT_MAX_FILE_SIZE_MB: int = Field(default=10)
    IMPORT_ALLOWED_EXTENSIONS: List[str] = Field(default_factory=lambda: [".xlsx"])

    # === LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default="logs/app.log")
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)
    SLOW_REQUEST_THRESHOLD: float = Field(default=5.0)

    # === DOCS ===
    ENABLE_DOCS: bool = Field(default=True)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Check that the log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Check that the environment is valid."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("DEFAULT_PAGE_SIZE", "SHIPPING_DEADLINE_DAYS", "IMPORT_MAX_FILE_SIZE_MB")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("value must be a positive integer")
        return v

    @field_validator("IMPORT_ALLOWED_EXTENSIONS")
    @classmethod
    def normalize_extensions(cls, v):
        """Lowercase extensions and make sure they start with a dot."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def cors_allowed_origins(self) -> List[str]:
        """Origins allowed by CORS; every origin in development."""
        if self.is_development:
            return ["*"]
        return [origin.strip() for origin in self.CORS_ALLOW_LIST.split(",") if origin.strip()]

    @property
    def import_max_file_size_bytes(self) -> int:
        return self.IMPORT_MAX_FILE_SIZE_MB * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Return the cached settings instance.

    The LRU cache avoids re-reading the environment on every call.

    Returns:
        Settings: Configuration instance
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Reload configuration (useful in tests).

    Returns:
        Settings: New configuration instance
    """
    get_settings.cache_clear()
    return get_settings()


def get_environment_info() -> dict:
    """
    Summarize the current environment.

    Returns:
        dict: Environment information
    """
    settings = get_settings()

    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "is_production": settings.is_production,
        "log_level": settings.LOG_LEVEL,
        "features": {
            "docs": settings.ENABLE_DOCS,
            "file_logging": bool(settings.LOG_FILE_PATH),
        },
    }
