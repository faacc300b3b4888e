"""Configuration data models."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    catalog_path: Path
    log_level: str = "INFO"
    default_playlist_platform: str = "ps1"  # Used when no path hint matches a playlist
    igdb_client_id: str | None = None
    igdb_client_secret: str | None = None
    request_delay: float = 0.25  # IGDB allows 4 requests per second
