"""
Application Configuration Module

This module defines all configuration settings for the billing API.
Settings are loaded from environment variables (via .env file) using Pydantic.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal


class Settings(BaseSettings):
    """
    Application-wide configuration settings.

    All settings can be overridden via environment variables.
    The .env file is automatically loaded if present.
    """
    # === Application Metadata ===
    PROJECT_NAME: str = "Billing Ledger API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api"  # Prefix for all REST routes

    # === Storage Configuration ===
    # "json" keeps one flat file per collection under DATA_DIR,
    # "sql" stores every collection in a single relational table
    STORAGE_BACKEND: Literal["json", "sql"] = "json"
    DATA_DIR: str = "./data"
    DATABASE_URL: str = "sqlite:///./billing.db"  # Only used when STORAGE_BACKEND == "sql"

    # === Session Configuration ===
    SESSION_EXPIRE_MINUTES: int = 60 * 24  # Session validity: 24 hours
    SESSION_COOKIE_NAME: str = "session_id"

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True  # One JSON object per line; plain text when False

    # === HTTP ===
    BACKEND_CORS_ORIGINS: List[str] = ["*"]  # In production, specify actual origins

    # === Domain Defaults ===
    DEFAULT_CATEGORY_COLOR: str = "#3B82F6"

    # Pydantic configuration
    model_config = SettingsConfigDict(
        env_file=".env",        # Load environment variables from .env file
        case_sensitive=True,    # Environment variable names must match case
        extra="ignore"          # Ignore extra environment variables not defined here
    )

# Create a single global settings instance
# This is imported throughout the application for configuration access
settings = Settings()
