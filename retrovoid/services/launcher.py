"""Launching games in external emulators and tracking play time."""

import shlex
import subprocess
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

from ..models import Emulator, Game, LaunchResult, PlaySession
from .catalog import CatalogStore
from .errors import CatalogError, LaunchError

log = structlog.stdlib.get_logger()


@dataclass(frozen=True)
class ActiveSession:
    """A running game, remembered until its session is ended.

    ``recorded`` is False when the catalog refused the session row; play
    time is still added to the game when the session ends.
    """
    session_id: str
    game_id: str
    start_time: datetime
    pid: int | None
    process: subprocess.Popen | None = field(default=None, repr=False, compare=False)
    recorded: bool = True


def build_launch_command(emulator: Emulator, game: Game) -> list[str]:
    """Expand an emulator's argument template for a game.

    The template is split into arguments first, so a ROM path containing
    spaces stays a single argument.
    """
    arguments = [
        token.replace("{rom}", game.rom_path).replace("{title}", game.title)
        for token in shlex.split(emulator.launch_arguments)
    ]
    return [emulator.executable_path, *arguments]


class GameLauncherService:
    """Starts emulator processes and records play sessions."""

    def __init__(self, catalog: CatalogStore) -> None:
        self.catalog = catalog
        self._active: dict[str, ActiveSession] = {}
        self._lock = threading.Lock()

    def launch_game(self, game_id: str) -> LaunchResult:
        """Launch a game with its preferred or its platform's default emulator.

        Raises:
            LaunchError: If the game or the configured emulator does not exist
        """
        game = self._get_game(game_id)

        emulator_id = game.preferred_emulator_id
        if emulator_id is None:
            platform = self.catalog.get_platform(game.platform_id)
            emulator_id = platform.default_emulator_id if platform else None

        if emulator_id is None:
            return LaunchResult(success=False, error="No emulator configured for this game or platform")

        return self._launch(game, self._get_emulator(emulator_id))

    def launch_game_with_emulator(self, game_id: str, emulator_id: str) -> LaunchResult:
        """Launch a game with an explicitly chosen emulator."""
        return self._launch(self._get_game(game_id), self._get_emulator(emulator_id))

    def end_game_session(self, game_id: str) -> None:
        """Close the game's running session and add it to the total play time.

        Does nothing if the game has no running session.
        """
        with self._lock:
            session = self._active.pop(game_id, None)

        if session is None:
            log.debug("No active session to end", game_id=game_id)
            return

        end_time = datetime.now(timezone.utc)
        duration = int((end_time - session.start_time).total_seconds())

        if session.recorded:
            try:
                self.catalog.end_play_session(session.session_id, end_time.isoformat(), duration)
            except CatalogError as e:
                log.warning("Failed to close play session", game_id=game_id, session_id=session.session_id, error=str(e))

        self.catalog.update_game_play_time(game_id, duration, end_time.isoformat())
        log.info("Play session ended", game_id=game_id, duration_seconds=duration)

    def wait_for_game(self, game_id: str) -> int | None:
        """Block until the game's emulator exits, then end its session.

        Returns:
            The emulator's exit code, or None if the game is not running
        """
        with self._lock:
            session = self._active.get(game_id)

        if session is None or session.process is None:
            log.debug("No running emulator to wait for", game_id=game_id)
            return None

        try:
            exit_code = session.process.wait()
        finally:
            self.end_game_session(game_id)

        log.info("Emulator exited", game_id=game_id, pid=session.pid, exit_code=exit_code)
        return exit_code

    def active_sessions(self) -> list[ActiveSession]:
        with self._lock:
            return list(self._active.values())

    def _launch(self, game: Game, emulator: Emulator) -> LaunchResult:
        command = build_launch_command(emulator, game)
        log.info("Launching game", game_id=game.id, title=game.title, emulator=emulator.name, command=command)

        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            log.error("Failed to start emulator", game_id=game.id, executable=emulator.executable_path, error=str(e))
            return LaunchResult(success=False, error=str(e))

        session = PlaySession.start(game.id)
        recorded = True
        try:
            self.catalog.create_play_session(session)
        except CatalogError as e:
            # The emulator is already running at this point
            log.warning("Failed to create play session", game_id=game.id, error=str(e))
            recorded = False

        with self._lock:
            self._active[game.id] = ActiveSession(
                session_id=session.id,
                game_id=game.id,
                start_time=datetime.now(timezone.utc),
                pid=process.pid,
                process=process,
                recorded=recorded,
            )

        return LaunchResult(success=True, pid=process.pid)

    def _get_game(self, game_id: str) -> Game:
        game = self.catalog.get_game(game_id)
        if game is None:
            raise LaunchError("Game not found", game_id=game_id)
        return game

    def _get_emulator(self, emulator_id: str) -> Emulator:
        emulator = self.catalog.get_emulator(emulator_id)
        if emulator is None:
            raise LaunchError("Emulator not found", emulator_id=emulator_id)
        return emulator
