"""IGDB API client.

IGDB authenticates through Twitch client credentials and takes queries in
its own query language as the POST body. Reference:
https://api-docs.igdb.com/
"""

import time
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from ..models import IgdbGameMetadata, IgdbSearchResult
from .errors import NetworkError
from .http_client import HttpClientService

log = structlog.stdlib.get_logger()

TOKEN_URL = "https://id.twitch.tv/oauth2/token"
GAMES_URL = "https://api.igdb.com/v4/games"
IMAGE_URL = "https://images.igdb.com/igdb/image/upload/{size}/{image_id}.jpg"

TOKEN_EXPIRY_MARGIN = 60
MAX_SCREENSHOTS = 5


# Our platform ids to IGDB platform ids
IGDB_PLATFORM_IDS: dict[str, int] = {
    # Nintendo
    "nes": 18,
    "famicom": 99,
    "snes": 19,
    "n64": 4,
    "gamecube": 21,
    "wii": 5,
    "wiiu": 41,
    "switch": 130,
    "gb": 33,
    "gbc": 22,
    "gba": 24,
    "nds": 20,
    "3ds": 37,
    "virtualboy": 87,
    # Sony
    "ps1": 7,
    "ps2": 8,
    "ps3": 9,
    "ps4": 48,
    "psp": 38,
    "vita": 46,
    # Sega
    "genesis": 29,
    "megadrive": 29,
    "sms": 64,
    "mastersystem": 64,
    "gamegear": 35,
    "saturn": 32,
    "dreamcast": 23,
    "segacd": 78,
    "32x": 30,
    # Microsoft
    "xbox": 11,
    "xbox360": 12,
    "xboxone": 49,
    # Atari
    "atari2600": 59,
    "atari7800": 60,
    "atarijaguar": 62,
    "atarilynx": 61,
    # SNK
    "neogeo": 80,
    "neogeocd": 136,
    "ngp": 119,
    "ngpc": 120,
    # NEC
    "pce": 86,
    "pcengine": 86,
    "tg16": 86,
    "pcfx": 274,
    # Other
    "arcade": 52,
    "dos": 13,
    "pc": 6,
    "windows": 6,
    "3do": 50,
    "wonderswan": 57,
    "wonderswancolor": 123,
    "msx": 27,
    "msx2": 53,
    "coleco": 68,
    "intellivision": 67,
}


def get_igdb_platform_id(platform_id: str) -> int | None:
    return IGDB_PLATFORM_IDS.get(platform_id)


def _format_release_date(timestamp: int | None) -> str | None:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def _image_url(image: dict[str, Any] | None, size: str) -> str | None:
    if not image or "image_id" not in image:
        return None
    return IMAGE_URL.format(size=size, image_id=image["image_id"])


def _escape(query: str) -> str:
    return query.replace("\\", "\\\\").replace('"', '\\"')


class IgdbClient:
    """IGDB client with cached OAuth token."""

    def __init__(self, http_client: HttpClientService, client_id: str, client_secret: str) -> None:
        self.http_client = http_client
        self.client_id = client_id
        self.client_secret = client_secret
        self._access_token: str | None = None
        self._expires_at: float = 0.0

    async def get_token(self) -> str:
        """Return a valid access token, requesting a new one when expired.

        Raises:
            NetworkError: If Twitch rejects the credentials or is unreachable
        """
        if self._access_token and time.monotonic() < self._expires_at:
            return self._access_token

        try:
            response = await self.http_client.post(
                TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
            )
            payload = response.json()
            access_token = str(payload["access_token"])
            expires_in = int(payload["expires_in"])
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"Token request failed ({e.response.status_code})",
                original_error=e,
                url=TOKEN_URL,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise NetworkError("Failed to request token", original_error=e, url=TOKEN_URL) from e
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError("Failed to parse token response", original_error=e, url=TOKEN_URL) from e

        self._access_token = access_token
        self._expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        log.info("IGDB token acquired", expires_in=expires_in)
        return access_token

    async def validate_credentials(self) -> bool:
        try:
            await self.get_token()
        except NetworkError as e:
            log.warning("IGDB credentials rejected", error=e.message)
            return False
        return True

    async def search_games(self, query: str, platform_id: str | None = None) -> list[IgdbSearchResult]:
        """Search IGDB by title, optionally restricted to one platform.

        Exact (case-insensitive) name matches come first, then earlier
        releases, so originals rank above remakes and ports.
        """
        body = f'search "{_escape(query)}"; fields name, summary, first_release_date, cover.image_id, platforms.name;'
        igdb_platform = get_igdb_platform_id(platform_id) if platform_id else None
        if igdb_platform is not None:
            body += f" where platforms = ({igdb_platform});"
        body += " limit 20;"

        games = await self._query(body)
        log.info("IGDB search finished", query=query, platform_id=platform_id, results=len(games))

        results = [
            IgdbSearchResult(
                igdb_id=int(game["id"]),
                name=str(game.get("name", "")),
                release_date=_format_release_date(game.get("first_release_date")),
                cover_url=_image_url(game.get("cover"), "t_cover_big"),
                platforms=[p["name"] for p in game.get("platforms", []) if isinstance(p, dict) and "name" in p],
                summary=game.get("summary"),
            )
            for game in games
        ]

        query_lower = query.lower()
        results.sort(key=lambda r: (
            r.name.lower() != query_lower,
            r.release_date is None,
            r.release_date or "",
        ))
        return results

    async def get_game_metadata(self, igdb_id: int) -> IgdbGameMetadata:
        """Fetch full metadata for one IGDB game.

        Raises:
            NetworkError: If the request fails or the game does not exist
        """
        body = (
            "fields name, summary, first_release_date, cover.image_id, screenshots.image_id, "
            "genres.name, involved_companies.company.name, involved_companies.developer, "
            f"involved_companies.publisher; where id = {int(igdb_id)};"
        )
        games = await self._query(body)
        if not games:
            raise NetworkError("Game not found on IGDB", url=GAMES_URL, status_code=404)
        game = games[0]

        developer: str | None = None
        publisher: str | None = None
        for involved in game.get("involved_companies", []):
            name = (involved.get("company") or {}).get("name")
            if involved.get("developer") and developer is None:
                developer = name
            if involved.get("publisher") and publisher is None:
                publisher = name

        screenshots = [
            url
            for url in (_image_url(s, "t_screenshot_big") for s in game.get("screenshots", [])[:MAX_SCREENSHOTS])
            if url
        ]

        return IgdbGameMetadata(
            igdb_id=int(game["id"]),
            name=str(game.get("name", "")),
            summary=game.get("summary"),
            release_date=_format_release_date(game.get("first_release_date")),
            genres=[g["name"] for g in game.get("genres", []) if "name" in g],
            developer=developer,
            publisher=publisher,
            cover_url=_image_url(game.get("cover"), "t_cover_big"),
            screenshot_urls=screenshots,
        )

    async def _query(self, body: str) -> list[dict[str, Any]]:
        token = await self.get_token()
        headers = {
            "Client-ID": self.client_id,
            "Authorization": f"Bearer {token}",
            "Content-Type": "text/plain",
            "Accept": "application/json",
        }
        try:
            response = await self.http_client.post(GAMES_URL, headers=headers, content=body)
            games = response.json()
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"IGDB request failed ({e.response.status_code})",
                original_error=e,
                url=GAMES_URL,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise NetworkError("IGDB request failed", original_error=e, url=GAMES_URL) from e
        except ValueError as e:
            raise NetworkError("Failed to parse IGDB response", original_error=e, url=GAMES_URL) from e

        if not isinstance(games, list):
            raise NetworkError("Unexpected IGDB response", url=GAMES_URL)
        return games
