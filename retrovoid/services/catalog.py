"""Persistent catalog of platforms, games, emulators and play sessions.

The catalog is a single JSON document. Every mutation rewrites it through a
temporary file that is then moved into place, and every read or write holds
one lock, so concurrent callers serialize on each operation. There is no
transaction spanning several operations.
"""

import json
import threading
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Protocol

import structlog

from ..models import Emulator, Game, PlaySession, Platform
from .errors import CatalogError, CatalogUnavailableError
from .platforms import DEFAULT_PLATFORMS

log = structlog.stdlib.get_logger()

CATALOG_VERSION = 1


class Catalog(Protocol):
    """What the library scanner needs from a catalog."""

    def get_all_platforms(self) -> list[Platform]: ...

    def find_by_path(self, rom_path: str) -> Game | None: ...

    def insert(self, game: Game) -> None: ...


class CatalogStore:
    """JSON-file backed catalog."""

    def __init__(self, path: Path) -> None:
        """Open the catalog at ``path``, creating and seeding it if absent.

        Raises:
            CatalogUnavailableError: If an existing catalog cannot be read
        """
        self.path = path
        self._lock = threading.Lock()
        self._platforms: dict[str, Platform] = {}
        self._games: dict[str, Game] = {}
        self._paths: dict[str, str] = {}
        self._emulators: dict[str, Emulator] = {}
        self._sessions: dict[str, PlaySession] = {}

        with self._lock:
            if self.path.exists():
                self._load()
            else:
                log.info("Catalog not found, creating it", path=str(self.path))
                self._platforms = {platform.id: platform for platform in DEFAULT_PLATFORMS}
                try:
                    self._save()
                except CatalogError as e:
                    raise CatalogUnavailableError(
                        e.message, catalog_path=str(self.path), original_error=e.original_error
                    ) from e

        log.info(
            "Catalog opened",
            path=str(self.path),
            platforms=len(self._platforms),
            games=len(self._games),
        )

    # ==================== PLATFORMS ====================

    def get_all_platforms(self) -> list[Platform]:
        with self._lock:
            return list(self._platforms.values())

    def get_platform(self, platform_id: str) -> Platform | None:
        with self._lock:
            return self._platforms.get(platform_id)

    def set_default_emulator(self, platform_id: str, emulator_id: str) -> None:
        with self._lock:
            platform = self._require(self._platforms, platform_id, "platform")
            self._commit(
                lambda: self._platforms.__setitem__(
                    platform_id, replace(platform, default_emulator_id=emulator_id)
                ),
                lambda: self._platforms.__setitem__(platform_id, platform),
            )

    # ==================== GAMES ====================

    def get_all_games(self) -> list[Game]:
        with self._lock:
            return sorted(self._games.values(), key=lambda game: game.title.lower())

    def get_game(self, game_id: str) -> Game | None:
        with self._lock:
            return self._games.get(game_id)

    def find_by_path(self, rom_path: str) -> Game | None:
        """Look up a game by its exact ROM or playlist path."""
        with self._lock:
            game_id = self._paths.get(rom_path)
            return self._games.get(game_id) if game_id else None

    def insert(self, game: Game) -> None:
        """Add a new game.

        Raises:
            CatalogError: If the id or ROM path is already taken, or the
                catalog cannot be written
        """
        with self._lock:
            if game.id in self._games:
                raise CatalogError(f"Game id already exists: {game.id}", rom_path=game.rom_path)
            if game.rom_path in self._paths:
                raise CatalogError(f"ROM path already in catalog: {game.rom_path}", rom_path=game.rom_path)

            def apply() -> None:
                self._games[game.id] = game
                self._paths[game.rom_path] = game.id

            def revert() -> None:
                del self._games[game.id]
                del self._paths[game.rom_path]

            self._commit(apply, revert)

        log.debug("Game inserted", game_id=game.id, rom_path=game.rom_path, platform_id=game.platform_id)

    def update_game(self, game_id: str, **changes: Any) -> Game:
        """Replace fields of a game; ``id`` and ``rom_path`` cannot change."""
        if "id" in changes or "rom_path" in changes:
            raise ValueError("id and rom_path of a game cannot be changed")

        with self._lock:
            current = self._require(self._games, game_id, "game")
            updated = replace(current, **changes)
            self._commit(
                lambda: self._games.__setitem__(game_id, updated),
                lambda: self._games.__setitem__(game_id, current),
            )
            return updated

    def update_game_play_time(self, game_id: str, additional_seconds: int, last_played: str) -> Game:
        with self._lock:
            current = self._require(self._games, game_id, "game")
            updated = replace(
                current,
                total_play_time_seconds=current.total_play_time_seconds + additional_seconds,
                last_played=last_played,
            )
            self._commit(
                lambda: self._games.__setitem__(game_id, updated),
                lambda: self._games.__setitem__(game_id, current),
            )
            return updated

    # ==================== EMULATORS ====================

    def get_all_emulators(self) -> list[Emulator]:
        with self._lock:
            return sorted(self._emulators.values(), key=lambda emulator: emulator.name.lower())

    def get_emulator(self, emulator_id: str) -> Emulator | None:
        with self._lock:
            return self._emulators.get(emulator_id)

    def add_emulator(self, emulator: Emulator) -> None:
        with self._lock:
            if emulator.id in self._emulators:
                raise CatalogError(f"Emulator id already exists: {emulator.id}")
            self._commit(
                lambda: self._emulators.__setitem__(emulator.id, emulator),
                lambda: self._emulators.pop(emulator.id),
            )

    # ==================== PLAY SESSIONS ====================

    def create_play_session(self, session: PlaySession) -> None:
        with self._lock:
            self._commit(
                lambda: self._sessions.__setitem__(session.id, session),
                lambda: self._sessions.pop(session.id),
            )

    def end_play_session(self, session_id: str, end_time: str, duration_seconds: int) -> None:
        with self._lock:
            current = self._require(self._sessions, session_id, "play session")
            ended = replace(current, end_time=end_time, duration_seconds=duration_seconds)
            self._commit(
                lambda: self._sessions.__setitem__(session_id, ended),
                lambda: self._sessions.__setitem__(session_id, current),
            )

    def get_play_sessions(self, game_id: str) -> list[PlaySession]:
        """Sessions of a game, most recent first."""
        with self._lock:
            sessions = [s for s in self._sessions.values() if s.game_id == game_id]
        return sorted(sessions, key=lambda s: s.start_time, reverse=True)

    # ==================== PERSISTENCE ====================

    @staticmethod
    def _require(table: dict[str, Any], key: str, kind: str) -> Any:
        try:
            return table[key]
        except KeyError:
            raise CatalogError(f"Unknown {kind}: {key}") from None

    def _commit(self, apply: Any, revert: Any) -> None:
        """Apply an in-memory change and persist it, undoing it if the write fails."""
        apply()
        try:
            self._save()
        except CatalogError:
            revert()
            raise

    def _load(self) -> None:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)

            if not isinstance(data, dict):
                raise ValueError(f"Expected JSON object (dict), got {type(data).__name__}")

            platforms = [
                Platform(**{**raw, "file_extensions": tuple(raw.get("file_extensions", ()))})
                for raw in data.get("platforms", [])
            ]
            games = [Game(**raw) for raw in data.get("games", [])]
            emulators = [Emulator(**raw) for raw in data.get("emulators", [])]
            sessions = [PlaySession(**raw) for raw in data.get("play_sessions", [])]
        except (OSError, ValueError, TypeError) as e:
            log.error("Failed to load catalog", path=str(self.path), error=str(e))
            raise CatalogUnavailableError(
                f"Catalog could not be read: {e}",
                catalog_path=str(self.path),
                original_error=e,
            ) from e

        self._platforms = {platform.id: platform for platform in platforms}
        self._games = {game.id: game for game in games}
        self._paths = {game.rom_path: game.id for game in games}
        self._emulators = {emulator.id: emulator for emulator in emulators}
        self._sessions = {session.id: session for session in sessions}

    def _snapshot(self) -> dict[str, Any]:
        return {
            "version": CATALOG_VERSION,
            "platforms": [asdict(platform) for platform in self._platforms.values()],
            "games": [asdict(game) for game in self._games.values()],
            "emulators": [asdict(emulator) for emulator in self._emulators.values()],
            "play_sessions": [asdict(session) for session in self._sessions.values()],
        }

    def _save(self) -> None:
        """Write the catalog atomically.

        Raises:
            CatalogError: If the file cannot be written
        """
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(self._snapshot(), f, indent=2, ensure_ascii=False)
            temp_path.replace(self.path)
        except OSError as e:
            log.error("Failed to save catalog", path=str(self.path), error=str(e))
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    log.warning("Failed to remove temporary catalog file", path=str(temp_path))
            raise CatalogError(f"Catalog could not be written: {e}", original_error=e) from e
