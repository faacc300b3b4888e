"""Data models for the retrovoid game library."""

from .config import AppConfig
from .game import Emulator, Game, LaunchResult, PlaySession
from .metadata import BatchScrapeResult, IgdbGameMetadata, IgdbSearchResult, ScrapeResult
from .platform import Platform
from .scan import (
    AggregationResult,
    DiscoveredFile,
    DiscoveryResult,
    PlatformResolution,
    PlaylistArtifact,
    ResolutionRule,
    ScanPath,
    ScanResult,
)

__all__ = [
    "AggregationResult",
    "AppConfig",
    "BatchScrapeResult",
    "DiscoveredFile",
    "DiscoveryResult",
    "Emulator",
    "Game",
    "IgdbGameMetadata",
    "IgdbSearchResult",
    "LaunchResult",
    "Platform",
    "PlatformResolution",
    "PlaylistArtifact",
    "PlaySession",
    "ResolutionRule",
    "ScanPath",
    "ScanResult",
    "ScrapeResult",
]
