"""Library scanning: discover, aggregate discs, reconcile with the catalog.

A scan runs three phases per root, one after another: walk the root for
game files, fold multi-disc sets into playlists, then import every
remaining item that the catalog does not already hold. Problems with one
root, file or playlist end up as strings in the :class:`ScanResult`; only a
catalog that cannot be reached at all aborts the scan.
"""

from collections.abc import Iterable
from pathlib import Path

import structlog

from ..models import Game, ScanPath, ScanResult
from .catalog import Catalog
from .discovery import FileDiscoverer, canonical_path
from .errors import CatalogError, CatalogUnavailableError, ScanRootError
from .platforms import (
    PLATFORM_PATH_HINTS,
    HintTable,
    build_extension_index,
    detect_platform_from_path,
    normalize_extension,
)
from .playlists import MultiDiscAggregator
from .titles import clean_rom_title

log = structlog.stdlib.get_logger()

DEFAULT_PLAYLIST_PLATFORM = "ps1"


class LibraryScannerService:
    """Imports ROM folders into the catalog."""

    def __init__(
        self,
        catalog: Catalog,
        hints: HintTable = PLATFORM_PATH_HINTS,
        default_playlist_platform: str = DEFAULT_PLAYLIST_PLATFORM,
    ) -> None:
        """Initialize the scanner.

        Args:
            catalog: Catalog to check and insert games into
            hints: Ordered path hint table for ambiguous extensions
            default_playlist_platform: Platform for playlists no hint matches
        """
        self.catalog = catalog
        self.hints = hints
        self.default_playlist_platform = default_playlist_platform
        self.aggregator = MultiDiscAggregator()

    def scan_library(self, paths: Iterable[ScanPath]) -> ScanResult:
        """Scan every root and import what is new.

        Running the same scan twice without filesystem changes adds nothing
        the second time; every item is counted as updated instead.

        Args:
            paths: Roots to scan, in order

        Returns:
            Counters and error strings for the whole call

        Raises:
            CatalogUnavailableError: If the catalog cannot be used at all
        """
        paths = list(paths)
        extension_index = build_extension_index(self.catalog.get_all_platforms())
        discoverer = FileDiscoverer(extension_index, self.hints)
        result = ScanResult()

        log.info("Library scan started", roots=len(paths), extensions=len(extension_index))

        for scan_path in paths:
            try:
                discovery = discoverer.discover(scan_path.path, scan_path.platform_override)
            except ScanRootError as e:
                log.warning("Scan root unavailable", path=scan_path.path, error=e.message)
                result.errors.append(e.message)
                continue

            aggregation = self.aggregator.aggregate(discovery.files, discovery.playlists)
            result.errors.extend(aggregation.errors)

            for discovered in aggregation.singletons:
                self._reconcile(discovered.path, discovered.base_title, discovered.platform_id, result)

            for playlist in aggregation.playlists:
                platform_id = self._playlist_platform(playlist.path)
                self._reconcile(playlist.path, playlist.base_title, platform_id, result)

            log.info(
                "Scan root processed",
                path=scan_path.path,
                platform_override=scan_path.platform_override,
                singletons=len(aggregation.singletons),
                playlists=len(aggregation.playlists),
                stranded_discs=len(aggregation.stranded),
            )

        log.info(
            "Library scan finished",
            games_found=result.games_found,
            games_added=result.games_added,
            games_updated=result.games_updated,
            errors=len(result.errors),
        )
        return result

    def _playlist_platform(self, path: Path) -> str:
        hinted = detect_platform_from_path(canonical_path(path), self.hints)
        return hinted or self.default_playlist_platform

    def _reconcile(self, path: Path, base_title: str, platform_id: str, result: ScanResult) -> None:
        """Insert one importable item unless the catalog already has its path."""
        result.games_found += 1
        rom_path = canonical_path(path)

        try:
            existing = self.catalog.find_by_path(rom_path)
        except CatalogUnavailableError:
            raise
        except CatalogError as e:
            log.warning("Catalog lookup failed", path=rom_path, error=e.message)
            result.errors.append(f"Database error for {path}: {e.message}")
            return

        if existing is not None:
            result.games_updated += 1
            return

        game = Game.create(clean_rom_title(base_title), rom_path, platform_id)
        try:
            self.catalog.insert(game)
        except CatalogUnavailableError:
            raise
        except CatalogError as e:
            log.warning("Catalog insert failed", path=rom_path, error=e.message)
            result.errors.append(f"Failed to add {path}: {e.message}")
            return

        result.games_added += 1
        log.debug("Game added", title=game.title, path=rom_path, platform_id=platform_id)

    def get_rom_info(self, rom_path: str | Path) -> tuple[str, str] | None:
        """Cleaned title and first claiming platform for a single ROM file.

        Returns:
            (title, platform id), or None if the file is missing or no
            platform claims its extension
        """
        path = Path(rom_path)
        if not path.exists():
            return None

        extension = normalize_extension(path.suffix)
        if not extension:
            return None

        for platform in self.catalog.get_all_platforms():
            if any(normalize_extension(e) == extension for e in platform.file_extensions):
                return clean_rom_title(path.stem), platform.id

        return None
