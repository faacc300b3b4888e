"""Metadata enrichment of catalog entries from IGDB."""

from collections.abc import Iterable
from typing import Any

import structlog

from ..models import BatchScrapeResult, Game, IgdbGameMetadata, ScrapeResult
from .catalog import CatalogStore
from .errors import AppError
from .igdb import IgdbClient

log = structlog.stdlib.get_logger()


def metadata_changes(game: Game, metadata: IgdbGameMetadata) -> dict[str, Any]:
    """Fields of ``game`` that are empty and that ``metadata`` can fill."""
    candidates: dict[str, Any] = {
        "description": metadata.summary,
        "release_date": metadata.release_date,
        "genre": metadata.genres,
        "developer": metadata.developer,
        "publisher": metadata.publisher,
        "cover_art_path": metadata.cover_url,
        "screenshots": metadata.screenshot_urls,
    }
    return {
        name: value
        for name, value in candidates.items()
        if value and not getattr(game, name)
    }


class MetadataService:
    """Fills in descriptions, dates, companies and artwork for games."""

    def __init__(self, catalog: CatalogStore, igdb: IgdbClient) -> None:
        self.catalog = catalog
        self.igdb = igdb

    async def scrape_game_metadata(self, game_id: str) -> ScrapeResult:
        """Enrich one game from its best IGDB match.

        Fields that already have a value are left alone.
        """
        game = self.catalog.get_game(game_id)
        if game is None:
            return ScrapeResult(success=False, game_id=game_id, error="Game not found")

        try:
            results = await self.igdb.search_games(game.title, game.platform_id)
            if not results:
                return ScrapeResult(success=False, game_id=game_id, error=f"No IGDB match for {game.title}")

            metadata = await self.igdb.get_game_metadata(results[0].igdb_id)
            changes = metadata_changes(game, metadata)
            if changes:
                self.catalog.update_game(game_id, **changes)
        except AppError as e:
            log.warning("Metadata enrichment failed", game_id=game_id, title=game.title, error=e.message)
            return ScrapeResult(success=False, game_id=game_id, error=e.message)

        log.info("Game enriched", game_id=game_id, title=game.title, fields=sorted(changes))
        return ScrapeResult(success=True, game_id=game_id, fields_updated=sorted(changes))

    async def scrape_library_metadata(self, game_ids: Iterable[str] | None = None) -> BatchScrapeResult:
        """Enrich several games one after another.

        Args:
            game_ids: Games to enrich; defaults to every game without a description
        """
        if game_ids is None:
            ids = [game.id for game in self.catalog.get_all_games() if not game.description]
        else:
            ids = list(game_ids)

        successful = 0
        errors: list[str] = []
        for game_id in ids:
            result = await self.scrape_game_metadata(game_id)
            if result.success:
                successful += 1
            else:
                errors.append(f"{game_id}: {result.error}")

        return BatchScrapeResult(
            total=len(ids),
            successful=successful,
            failed=len(ids) - successful,
            errors=errors,
        )
