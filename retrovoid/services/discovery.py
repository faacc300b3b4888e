"""Discovery of candidate game files under a scan root."""

import os
import stat
from pathlib import Path

import structlog

from ..models import DiscoveredFile, DiscoveryResult
from .errors import ScanRootError
from .platforms import PLATFORM_PATH_HINTS, ExtensionIndex, HintTable, resolve_platform
from .titles import CUE_EXTENSION, PLAYLIST_EXTENSION, RAW_TRACK_EXTENSION, split_disc

log = structlog.stdlib.get_logger()


def canonical_path(path: Path) -> str:
    """Resolve symlinks and relative parts, falling back to the path as given."""
    try:
        return str(path.resolve(strict=True))
    except (OSError, RuntimeError) as e:
        log.warning("Could not canonicalize path, using it as given", path=str(path), error=str(e))
        return str(path)


def _has_cue_sheet(names: list[str]) -> bool:
    return any(Path(name).suffix.lower() == CUE_EXTENSION for name in names)


class FileDiscoverer:
    """Walks scan roots and labels every candidate file with a platform.

    The extension index and hint table are passed in rather than read from
    module state, so independent scans never share anything mutable.
    """

    def __init__(self, extension_index: ExtensionIndex, hints: HintTable = PLATFORM_PATH_HINTS) -> None:
        """Initialize the discoverer.

        Args:
            extension_index: Extension to platform ids mapping for this scan
            hints: Ordered path hint table used on ambiguous extensions
        """
        self.extension_index = extension_index
        self.hints = hints

    def discover(self, root: str | Path, platform_override: str | None = None) -> DiscoveryResult:
        """Walk ``root`` and collect game files and existing playlists.

        Symbolic links are followed. Entries that cannot be read are skipped
        and listed in the result's ``unreadable`` field; the walk carries on.

        Args:
            root: Directory to scan
            platform_override: Platform to assign to every file under root

        Returns:
            Discovered files and pre-existing playlist paths

        Raises:
            ScanRootError: If the root does not exist or cannot be listed
        """
        root_path = Path(root).expanduser().absolute()
        if not root_path.exists():
            raise ScanRootError(str(root_path))

        if root_path.is_dir():
            try:
                with os.scandir(root_path):
                    pass
            except OSError as e:
                log.warning("Scan root cannot be listed", root=str(root_path), error=str(e))
                raise ScanRootError(str(root_path), e) from e

        files: list[DiscoveredFile] = []
        playlists: list[Path] = []
        unreadable: list[str] = []

        for directory, filenames, has_cue in self._walk(root_path, unreadable):
            for name in filenames:
                path = directory / name
                try:
                    mode = os.stat(path).st_mode
                except OSError as e:
                    log.debug("Skipping unreadable entry", path=str(path), error=str(e))
                    unreadable.append(str(path))
                    continue

                if not stat.S_ISREG(mode):
                    continue

                discovered = self._inspect(path, has_cue, platform_override, playlists)
                if discovered is not None:
                    files.append(discovered)

        log.info(
            "Discovery finished",
            root=str(root_path),
            files=len(files),
            playlists=len(playlists),
            unreadable=len(unreadable),
        )
        return DiscoveryResult(files=files, playlists=playlists, unreadable=unreadable)

    def _inspect(
        self,
        path: Path,
        has_cue: bool,
        platform_override: str | None,
        playlists: list[Path],
    ) -> DiscoveredFile | None:
        """Classify one regular file, or return None if it is not a game."""
        extension = path.suffix.lower()
        if not extension:
            return None

        # The cue sheet is the game, its .bin tracks are not
        if extension == RAW_TRACK_EXTENSION and has_cue:
            log.debug("Skipping track with cue sheet sibling", path=str(path))
            return None

        if extension == PLAYLIST_EXTENSION:
            playlists.append(path)
            return None

        candidates = self.extension_index.get(extension)
        if not candidates:
            return None

        resolved = canonical_path(path)
        resolution = resolve_platform(resolved, candidates, platform_override, self.hints)
        disc_number, title = split_disc(path.stem, extension)

        return DiscoveredFile(
            path=path,
            canonical_path=resolved,
            extension=extension,
            resolution=resolution,
            base_title=title,
            disc_number=disc_number,
        )

    @staticmethod
    def _walk(root: Path, unreadable: list[str]) -> list[tuple[Path, list[str], bool]]:
        """List (directory, file names, has cue sheet) under root in a stable order."""
        if not root.is_dir():
            try:
                siblings = os.listdir(root.parent)
            except OSError as e:
                log.debug("Could not list siblings of scan root", root=str(root), error=str(e))
                siblings = [root.name]
            return [(root.parent, [root.name], _has_cue_sheet(siblings))]

        def on_error(error: OSError) -> None:
            log.debug("Skipping unreadable directory", path=error.filename, error=str(error))
            unreadable.append(str(error.filename))

        entries: list[tuple[Path, list[str], bool]] = []
        seen: set[tuple[int, int]] = set()

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error, followlinks=True):
            try:
                info = os.stat(dirpath)
            except OSError:
                unreadable.append(dirpath)
                dirnames[:] = []
                continue

            # Symlinked directories can loop back on themselves
            key = (info.st_dev, info.st_ino)
            if key in seen:
                dirnames[:] = []
                continue
            seen.add(key)

            dirnames.sort()
            entries.append((Path(dirpath), sorted(filenames), _has_cue_sheet(filenames)))

        return entries
