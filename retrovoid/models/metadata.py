"""Metadata enrichment models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class IgdbSearchResult:
    """One hit from an IGDB title search."""
    igdb_id: int
    name: str
    release_date: str | None = None
    cover_url: str | None = None
    platforms: list[str] = field(default_factory=list)
    summary: str | None = None


@dataclass(frozen=True)
class IgdbGameMetadata:
    """Full metadata for a single IGDB game."""
    igdb_id: int
    name: str
    summary: str | None = None
    release_date: str | None = None
    genres: list[str] = field(default_factory=list)
    developer: str | None = None
    publisher: str | None = None
    cover_url: str | None = None
    screenshot_urls: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ScrapeResult:
    """Outcome of enriching one catalog entry."""
    success: bool
    game_id: str
    fields_updated: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class BatchScrapeResult:
    """Outcome of enriching several catalog entries."""
    total: int
    successful: int
    failed: int
    errors: list[str] = field(default_factory=list)
