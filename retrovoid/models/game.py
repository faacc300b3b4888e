"""Catalog entry models: games, emulators and play sessions."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


def new_id() -> str:
    """Generate a fresh catalog identifier."""
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Game:
    """A game in the library, keyed by its ROM or playlist path."""
    id: str
    title: str
    rom_path: str
    platform_id: str
    cover_art_path: str | None = None
    background_path: str | None = None
    screenshots: list[str] = field(default_factory=list)
    description: str | None = None
    release_date: str | None = None
    genre: list[str] = field(default_factory=list)
    developer: str | None = None
    publisher: str | None = None
    total_play_time_seconds: int = 0
    last_played: str | None = None
    is_favorite: bool = False
    preferred_emulator_id: str | None = None
    collection_ids: list[str] = field(default_factory=list)

    @classmethod
    def create(cls, title: str, rom_path: str, platform_id: str) -> "Game":
        """Create a new, un-enriched entry with a generated id."""
        return cls(id=new_id(), title=title, rom_path=rom_path, platform_id=platform_id)


@dataclass(frozen=True)
class Emulator:
    """An external emulator executable and its argument template."""
    id: str
    name: str
    executable_path: str
    launch_arguments: str = "{rom}"  # {rom} and {title} are substituted at launch
    supported_platform_ids: list[str] = field(default_factory=list)

    @classmethod
    def create(cls, name: str, executable_path: str) -> "Emulator":
        return cls(id=new_id(), name=name, executable_path=executable_path)


@dataclass(frozen=True)
class PlaySession:
    """A single play session used for play time tracking."""
    id: str
    game_id: str
    start_time: str
    end_time: str | None = None
    duration_seconds: int = 0

    @classmethod
    def start(cls, game_id: str) -> "PlaySession":
        return cls(id=new_id(), game_id=game_id, start_time=utc_now())


@dataclass(frozen=True)
class LaunchResult:
    """Outcome of launching a game."""
    success: bool
    pid: int | None = None
    error: str | None = None
