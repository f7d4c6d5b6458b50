"""Application configuration using Pydantic Settings."""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FLOWFIX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App settings
    app_name: str = "FlowFix Workflow Normalizer"
    debug: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = True

    # Normalization defaults
    default_workflow_name: str = "Generated Workflow"

    # ==========================================================================
    # LAYOUT REPAIR
    # Grid used when two or more nodes share the same rounded position
    # ==========================================================================

    layout_origin_x: int = 250
    layout_origin_y: int = 300
    layout_column_gap: int = 350
    layout_row_gap: int = 220
    layout_columns: int = 5
    layout_max_attempts: int = 200


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
