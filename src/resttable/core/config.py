"""Configuration settings for the application.

This module defines the configuration settings using Pydantic's
SettingsConfigDict to load environment variables from a .env file.
"""

import logging
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("uvicorn")


class Settings(BaseSettings):
    """Settings class for the application."""

    # ENVIRONMENT CONFIG
    environment: str = "dev"
    testing: bool = bool(0)
    log_level: str = "INFO"

    # API CONFIG
    project_name: str = "REST Table API"
    api_prefix: str = "/apis"

    # TABLE CONFIG
    # Used in error messages when a request does not identify its resource
    default_group: str = ""
    default_resource: str = "objects"

    # REGISTRY CONFIG
    # Entries are "resource" or "resource.group"
    resources: List[str] = ["pods", "deployments.apps"]
    default_page_limit: int = 500

    model_config = SettingsConfigDict(
        env_prefix="RESTTABLE_",
        env_file=["../.env", ".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get the settings for the application."""
    logger.info("Loading config settings from the environment...")

    settings = Settings()

    logger.info(f"Registered resources from config: {', '.join(settings.resources) or 'none'}")

    return settings
