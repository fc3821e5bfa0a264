"""Configuration management."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Maze generation settings pulled from ``MAZE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAZE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Generation defaults
    default_cell_count: int = Field(default=200, description="Default number of maze cells")
    default_size: float = Field(default=600.0, description="Default side length of the square domain")
    default_relaxation: int = Field(default=2, description="Default Lloyd relaxation iterations")
    default_seed: Optional[str] = Field(default=None, description="Default seed (empty for random mazes)")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")


settings = Settings()
