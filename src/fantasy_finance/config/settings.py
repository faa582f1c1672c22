"""Application settings and configuration."""

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / "Documents" / "Fantasy Finance Data"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FANTASY_FINANCE_",
    )

    app_name: str = "Fantasy Finance"

    # Data directory (ledger and market parquet files live here)
    data_dir: Optional[Path] = None

    log_level: str = "INFO"

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000

    # Market data settings
    market_provider: Literal["yahoo", "stub"] = "yahoo"
    refresher_enabled: bool = True
    refresh_interval_seconds: float = 120.0
    provider_timeout_seconds: float = 10.0
    provider_workers: int = 4

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_ledger_dir(self) -> Path:
        """Directory holding one sub-directory per user."""
        return self.get_data_dir() / "ledger"

    def get_market_dir(self) -> Path:
        """Directory holding one sub-directory per symbol."""
        return self.get_data_dir() / "market"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
