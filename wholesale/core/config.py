"""
Wholesale Configuration
Core settings for the wholesale order and allocation service
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Application Info
    APP_NAME: str = "Wholesale Order API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./wholesale.db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # CORS
    ALLOWED_HOSTS: List[str] = ["*"]
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # storefront / admin frontend
    ]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    LOG_DIR: Path = Path("logs")
    LOG_FILE: str = "app.log"
    ERROR_LOG_FILE: str = "error.log"

    # API Configuration
    API_V1_STR: str = "/api/v1"
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redoc"
    OPENAPI_URL: str = "/openapi.json"

    # Business Logic Settings
    PURCHASE_ORDER_PREFIX: str = "PO"
    VAT_RATE: float = 0.1
    # Statuses an order can hold while it still competes for stock
    OPEN_ORDER_STATUSES: List[str] = ["pending", "processing", "confirmed", "partial"]

    @field_validator("LOG_DIR", mode="before")
    @classmethod
    def create_log_dir(cls, v):
        """Ensure logs directory exists"""
        path = Path(v) if isinstance(v, str) else v
        path.mkdir(exist_ok=True, parents=True)
        return path


# Global settings instance
settings = Settings()
