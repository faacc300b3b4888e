"""Multi-disc aggregation and ``.m3u`` playlist generation.

Emulators load a multi-disc title through a playlist that lists one disc
image per line, relative to the playlist's own folder::

    Final Fantasy IX (Disc 1).cue
    Final Fantasy IX (Disc 2).cue

Discs are grouped by (folder, base title). Only groups of two or more discs
get a playlist; a lone ``(Disc 1)`` file is imported like any other game.
"""

from collections.abc import Iterable, Sequence
from pathlib import Path

import structlog

from ..models import AggregationResult, DiscoveredFile, PlaylistArtifact
from .errors import PlaylistError
from .titles import PLAYLIST_EXTENSION

log = structlog.stdlib.get_logger()


def playlist_path_for(directory: Path, base_title: str) -> Path:
    """Where the playlist for a disc set lives."""
    return directory / f"{base_title}{PLAYLIST_EXTENSION}"


def render_playlist(discs: Sequence[DiscoveredFile]) -> str:
    """Playlist text: bare file names in ascending disc order."""
    ordered = sorted(discs, key=lambda disc: (disc.disc_number or 0, disc.path.name))
    return "\n".join(disc.path.name for disc in ordered)


def write_playlist(path: Path, discs: Sequence[DiscoveredFile], base_title: str) -> None:
    """Write a playlist for ``discs`` to ``path``.

    Raises:
        PlaylistError: If the file cannot be written
    """
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(render_playlist(discs))
    except OSError as e:
        raise PlaylistError(base_title, str(path), e) from e

    log.info("Playlist created", path=str(path), discs=len(discs))


class MultiDiscAggregator:
    """Turns the disc files of one scan root into playlists."""

    def aggregate(
        self,
        files: Iterable[DiscoveredFile],
        existing_playlists: Iterable[Path] = (),
    ) -> AggregationResult:
        """Group discs, write missing playlists and split out singletons.

        A playlist already on disk at exactly ``<folder>/<base title>.m3u``
        is reused as is. Every pre-existing playlist is importable once,
        whether or not it belongs to a detected set.

        Args:
            files: Files discovered under one root
            existing_playlists: ``.m3u`` files found under the same root

        Returns:
            Importable playlists and singletons, plus per-set errors
        """
        files = list(files)
        artifacts: dict[Path, PlaylistArtifact] = {
            path: PlaylistArtifact(path=path, base_title=path.stem)
            for path in existing_playlists
        }

        groups: dict[tuple[Path, str], list[DiscoveredFile]] = {}
        for discovered in files:
            if discovered.disc_number is not None:
                groups.setdefault(discovered.group_key, []).append(discovered)

        covered: set[Path] = set()
        stranded: set[Path] = set()
        errors: list[str] = []

        for (directory, title), discs in groups.items():
            if len(discs) < 2:
                continue

            # Files named only by their disc tag take the folder's name
            title = title or directory.name
            if not title:
                continue

            target = playlist_path_for(directory, title)
            members = tuple(disc.path for disc in discs)

            if target in artifacts:
                log.debug("Reusing existing playlist", path=str(target), discs=len(discs))
                artifacts[target] = PlaylistArtifact(path=target, base_title=title, members=members)
                covered.update(members)
                continue

            try:
                write_playlist(target, discs, title)
            except PlaylistError as e:
                # TODO: decide whether stranded discs should fall back to individual imports
                log.warning("Playlist generation failed", base_title=title, path=str(target), error=str(e.original_error))
                errors.append(e.message)
                stranded.update(members)
                continue

            artifacts[target] = PlaylistArtifact(path=target, base_title=title, members=members, generated=True)
            covered.update(members)

        singletons = [f for f in files if f.path not in covered and f.path not in stranded]

        return AggregationResult(
            playlists=list(artifacts.values()),
            singletons=singletons,
            covered=covered,
            stranded=stranded,
            errors=errors,
        )
