"""
Application settings using Pydantic.

Provides environment-based configuration loading with GRAPHSTACK_ prefix.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

NodeLowererLookup = Literal["registry", "legacy"]


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GRAPHSTACK_",
        extra="ignore",
    )

    # Lowering
    # "legacy" is the rollback switch back to the static lowerer list
    node_lowerer_lookup: NodeLowererLookup = "registry"

    # AWS
    aws_region: str = "us-east-1"

    # Deployment
    deploy_timeout_seconds: float | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
