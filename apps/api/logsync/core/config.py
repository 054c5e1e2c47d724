"""
Core configuration module.
Loads environment variables with type safety using Pydantic Settings.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging
    log_level: str = "INFO"

    # Logs folder - absolute path from project root
    logs_folder: str = str(Path(__file__).parent.parent.parent.parent.parent / "Logs")

    # Format detection
    detect_prefix_bytes: int = 128 * 1024
    binary_sample_bytes: int = 1024
    binary_control_ratio: float = 0.3

    # Archive extraction limits
    archive_max_depth: int = 8
    archive_max_total_bytes: int = 4 * 1024 * 1024 * 1024
    archive_spool_max_bytes: int = 16 * 1024 * 1024  # Nested zips above this spill to disk

    # Batch ingestion
    ingest_max_workers: int = 4

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # CORS settings
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    cors_allow_credentials: bool = True

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_default: str = "100/minute"
    rate_limit_ingest: str = "20/minute"

    @property
    def logs_folder_resolved(self) -> Path:
        """Get absolute path to logs folder."""
        return Path(self.logs_folder).resolve()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()
