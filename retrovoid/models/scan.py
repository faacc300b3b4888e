"""Scan-time data models.

Everything here except :class:`ScanPath` and :class:`ScanResult` is a
transient projection built during one scan and thrown away afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ScanPath:
    """A root directory to scan, optionally pinned to one platform."""
    path: str
    platform_override: str | None = None


class ResolutionRule(Enum):
    """Which rule decided a file's platform."""
    OVERRIDE = "override"
    UNIQUE_MATCH = "unique_match"
    HEURISTIC_MATCH = "heuristic_match"
    FALLBACK_FIRST = "fallback_first"


@dataclass(frozen=True)
class PlatformResolution:
    """A resolved platform id together with the rule that produced it."""
    platform_id: str
    rule: ResolutionRule


@dataclass(frozen=True)
class DiscoveredFile:
    """A candidate game file found while walking a scan root."""
    path: Path
    canonical_path: str
    extension: str
    resolution: PlatformResolution
    base_title: str
    disc_number: int | None = None

    @property
    def platform_id(self) -> str:
        return self.resolution.platform_id

    @property
    def group_key(self) -> tuple[Path, str]:
        """Key shared by every disc of one multi-disc title."""
        return (self.path.parent, self.base_title)


@dataclass(frozen=True)
class DiscoveryResult:
    """Output of walking one scan root.

    ``unreadable`` lists entries the walk could not read and skipped. A root
    that cannot be scanned at all is reported by raising ``ScanRootError``
    instead, so the two cases never mix.
    """
    files: list[DiscoveredFile]
    playlists: list[Path]
    unreadable: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PlaylistArtifact:
    """An ``.m3u`` playlist that stands in for the discs of one title."""
    path: Path
    base_title: str
    members: tuple[Path, ...] = ()
    generated: bool = False


@dataclass(frozen=True)
class AggregationResult:
    """Playlists to import, files to import on their own, and write failures.

    ``covered`` holds disc files represented by a playlist. ``stranded`` holds
    the discs of a set whose playlist could not be written; they are neither
    covered nor imported individually.
    """
    playlists: list[PlaylistArtifact]
    singletons: list[DiscoveredFile]
    covered: set[Path] = field(default_factory=set)
    stranded: set[Path] = field(default_factory=set)
    errors: list[str] = field(default_factory=list)


@dataclass
class ScanResult:
    """Counters and error strings accumulated across one scan call."""
    games_found: int = 0
    games_added: int = 0
    games_updated: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gamesFound": self.games_found,
            "gamesAdded": self.games_added,
            "gamesUpdated": self.games_updated,
            "errors": list(self.errors),
        }
