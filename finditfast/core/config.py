"""Configuration management for finditfast."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from finditfast import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(Path.home() / ".finditfast" / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    version: str = __version__

    # Data directories
    data_dir: Path = Field(default=Path.home() / ".finditfast", alias="FINDITFAST_DATA_DIR")

    @property
    def db_path(self) -> Path:
        return self.data_dir / "finditfast.db"

    @property
    def log_path(self) -> Path:
        return self.data_dir / "server.log"

    # Result cache
    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    cache_max_entries: int = Field(default=50, ge=1, le=10_000)

    # Search history
    history_max_items: int = Field(default=10, ge=1, le=100)
    recent_searches_count: int = Field(default=5, ge=1, le=100)

    # Queries warmed by `preload_popular_searches` and offered as suggestions
    popular_queries: list[str] = Field(
        default_factory=lambda: [
            "milk", "bread", "eggs", "water", "coffee", "cheese", "butter",
            "yogurt", "cereal", "juice", "bananas", "apples", "chicken",
            "rice", "pasta", "tomatoes", "onions", "potatoes",
        ]
    )
    preload_query_count: int = Field(default=5, ge=0, le=50)
    preload_on_startup: bool = Field(default=False, alias="PRELOAD_ON_STARTUP")

    # Web server settings
    web_host: str = Field(default="127.0.0.1", alias="WEB_HOST")
    web_port: int = Field(default=8730, alias="WEB_PORT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


# Global settings instance
settings = Settings()


def ensure_data_dirs():
    """Ensure all data directories exist."""
    settings.data_dir.mkdir(parents=True, exist_ok=True)
