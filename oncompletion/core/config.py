"""Configuration management for oncompletion."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ONCOMPLETION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Document store
    library_path: Path = Field(default=Path("."), description="Root directory holding markdown and board documents")

    # Archive defaults
    default_archive_file: str = Field(
        default="Archive/Completed Tasks.md",
        description="Archive document used when an archive action names none",
    )
    default_archive_section: str = Field(
        default="Completed Tasks",
        description="Archive section used when an archive action names none",
    )

    # Board layout for synthesized text nodes
    board_node_spacing: int = Field(default=300, description="Horizontal distance between synthesized board nodes")
    board_node_width: int = Field(default=250, description="Width of synthesized board text nodes")
    board_node_height: int = Field(default=60, description="Height of synthesized board text nodes")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name reported to Logfire")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Document kinds
    BOARD_EXTENSION: str = ".canvas"

    # Task markers
    COMPLETED_STATUS: str = "x"
    OPEN_STATUS: str = " "

    # Dates written into annotations (YYYY-MM-DD)
    DATE_FORMAT: str = "%Y-%m-%d"

    # Board serialization
    BOARD_JSON_INDENT: int = 2

    # Event names
    TASK_COMPLETED_EVENT: str = "task-completed"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
