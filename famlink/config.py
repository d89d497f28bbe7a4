"""Application configuration using Pydantic Settings."""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class LayoutSettings(BaseSettings):
    """Tree layout geometry (pixels)."""

    model_config = SettingsConfigDict(env_prefix="LAYOUT_", env_file=".env", extra="ignore")

    node_width: float = 100.0
    margin: float = 50.0
    top_offset: float = 80.0
    generation_gap: float = 180.0
    min_generation_gap: float = 120.0
    min_spacing: float = 140.0
    max_spacing: float = 280.0
    spread_factor: float = 1.5
    sibling_spacing: float = 120.0
    branch_gap: float = 40.0


class ApiSettings(BaseSettings):
    """Family backend connection settings."""

    model_config = SettingsConfigDict(env_prefix="FAMLINK_API_", env_file=".env", extra="ignore")

    base_url: str = "http://localhost:8000/api"
    timeout_seconds: float = 10.0


class DatabaseSettings(BaseSettings):
    """Database path settings."""

    model_config = SettingsConfigDict(env_prefix="FAMLINK_DB_", env_file=".env", extra="ignore")

    family_db_path: str = "data/families.db"

    def ensure_dirs(self) -> None:
        """Create data directory if needed."""
        Path(self.family_db_path).parent.mkdir(parents=True, exist_ok=True)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    layout: LayoutSettings = LayoutSettings()
    api: ApiSettings = ApiSettings()
    database: DatabaseSettings = DatabaseSettings()


settings = Settings()
