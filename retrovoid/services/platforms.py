"""Platform tables and extension-to-platform resolution.

An extension can be claimed by several platforms (``.iso`` belongs to the
PlayStation 2, GameCube, Wii, Xbox and others). When that happens the
containing folder names are checked against :data:`PLATFORM_PATH_HINTS` so
that ``~/ROMs/PS2 Games/Okami.iso`` lands on ``ps2``.
"""

from collections.abc import Iterable, Sequence

import structlog

from ..models import Platform, PlatformResolution, ResolutionRule

log = structlog.stdlib.get_logger()


ExtensionIndex = dict[str, list[str]]
HintTable = Sequence[tuple[str, Sequence[str]]]


# Platforms seeded into a new catalog
DEFAULT_PLATFORMS: tuple[Platform, ...] = (
    # Nintendo
    Platform("nes", "NES", "Nintendo", (".nes", ".unf"), color="#e60012"),
    Platform("snes", "SNES", "Nintendo", (".sfc", ".smc"), color="#7b5aa6"),
    Platform("n64", "Nintendo 64", "Nintendo", (".n64", ".z64", ".v64"), color="#009e60"),
    Platform("gamecube", "GameCube", "Nintendo", (".iso", ".gcz", ".rvz"), color="#6a5acd"),
    Platform("wii", "Wii", "Nintendo", (".iso", ".wbfs", ".rvz", ".wad"), color="#00a0dc"),
    Platform("switch", "Nintendo Switch", "Nintendo", (".nsp", ".xci"), color="#e60012"),
    Platform("gb", "Game Boy", "Nintendo", (".gb",), color="#8b956d"),
    Platform("gbc", "Game Boy Color", "Nintendo", (".gbc",), color="#6b5b95"),
    Platform("gba", "Game Boy Advance", "Nintendo", (".gba",), color="#5b5ea6"),
    Platform("nds", "Nintendo DS", "Nintendo", (".nds",), color="#c0c0c0"),
    Platform("3ds", "Nintendo 3DS", "Nintendo", (".3ds", ".cia"), color="#ce1141"),
    Platform("virtualboy", "Virtual Boy", "Nintendo", (".vb", ".vboy"), color="#e60012"),

    # Sony (.bin is left to the cue sheet, PS3 discs are folders rather than files)
    Platform("ps1", "PlayStation", "Sony", (".cue", ".chd", ".iso", ".m3u"), color="#003087"),
    Platform("ps2", "PlayStation 2", "Sony", (".iso", ".chd", ".m3u"), color="#003087"),
    Platform("ps3", "PlayStation 3", "Sony", (), color="#003087"),
    Platform("psp", "PlayStation Portable", "Sony", (".iso", ".cso"), color="#003087"),
    Platform("vita", "PlayStation Vita", "Sony", (".vpk", ".zip"), color="#003087"),

    # Sega
    Platform("genesis", "Sega Genesis", "Sega", (".md", ".gen", ".bin"), color="#0060a8"),
    Platform("saturn", "Sega Saturn", "Sega", (".iso", ".cue", ".chd", ".m3u"), color="#0060a8"),
    Platform("dreamcast", "Dreamcast", "Sega", (".cue", ".cdi", ".chd"), color="#ff6600"),
    Platform("mastersystem", "Master System", "Sega", (".sms",), color="#0060a8"),
    Platform("gamegear", "Game Gear", "Sega", (".gg",), color="#0060a8"),

    # Microsoft
    Platform("xbox", "Xbox", "Microsoft", (".iso",), color="#107c10"),
    Platform("xbox360", "Xbox 360", "Microsoft", (".iso", ".stfs"), color="#107c10"),

    # Other Systems
    Platform("arcade", "Arcade", "Various", (".zip",), color="#ff00ff"),
    Platform("dos", "DOS", "PC", (".exe", ".com"), color="#00ff00"),
    Platform("scummvm", "ScummVM", "PC", (), color="#8b4513"),
    Platform("windows", "Windows", "PC", (), color="#0078d4"),
    Platform("atari2600", "Atari 2600", "Atari", (".a26", ".bin"), color="#ff0000"),
    Platform("atari7800", "Atari 7800", "Atari", (".a78", ".bin"), color="#ff0000"),
    Platform("atarijaguar", "Atari Jaguar", "Atari", (".j64", ".jag", ".rom"), color="#ff0000"),
    Platform("3do", "3DO", "Panasonic", (".iso", ".chd", ".cue", ".m3u"), color="#d4af37"),
    Platform("neogeo", "Neo Geo", "SNK", (".zip",), color="#ffd700"),
    Platform("pcengine", "PC Engine", "NEC", (".pce",), color="#ff4500"),
)


# Folder keywords per platform, checked in order; the first match wins, so
# more specific entries (snes, gbc) sit before the ones they contain (nes, gb).
PLATFORM_PATH_HINTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("ps2", ("ps2", "playstation 2", "playstation2", "sony ps2")),
    ("ps1", ("ps1", "psx", "playstation 1", "playstation1", "psone")),
    ("psp", ("psp", "playstation portable")),
    ("ps3", ("ps3", "playstation 3", "playstation3")),
    ("vita", ("vita", "psvita", "ps vita")),
    ("gamecube", ("gamecube", "gcn", "ngc", "nintendo gamecube")),
    ("wii", ("wii", "nintendo wii")),
    ("switch", ("switch", "nintendo switch", "nx")),
    ("n64", ("n64", "nintendo 64", "nintendo64")),
    ("snes", ("snes", "super nintendo", "super nes", "sfc")),
    ("nes", ("nes", "nintendo entertainment", "famicom")),
    ("gba", ("gba", "gameboy advance", "game boy advance")),
    ("gbc", ("gbc", "gameboy color", "game boy color")),
    ("gb", ("gameboy", "game boy")),
    ("nds", ("nds", "nintendo ds", "ds")),
    ("3ds", ("3ds", "nintendo 3ds")),
    ("genesis", ("genesis", "mega drive", "megadrive", "sega genesis")),
    ("saturn", ("saturn", "sega saturn")),
    ("dreamcast", ("dreamcast", "sega dreamcast")),
    ("xbox", ("xbox", "original xbox")),
    ("xbox360", ("xbox 360", "xbox360", "x360")),
    ("arcade", ("arcade", "mame", "fba", "fbneo")),
)


def normalize_extension(extension: str) -> str:
    """Lowercase an extension and make sure it has a leading dot."""
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        extension = f".{extension}"
    return extension


def build_extension_index(platforms: Iterable[Platform]) -> ExtensionIndex:
    """Map each extension to the ids of the platforms that claim it.

    Platform order is kept, so the first id in each list is the first
    platform (in configuration order) that registered the extension.

    Args:
        platforms: Platform configuration records

    Returns:
        Mapping from normalized extension to platform ids
    """
    index: ExtensionIndex = {}
    for platform in platforms:
        for extension in platform.file_extensions:
            index.setdefault(normalize_extension(extension), []).append(platform.id)
    return index


def _segment_matches(segment: str, keyword: str) -> bool:
    return (
        segment == keyword
        or f"{keyword} " in segment
        or f" {keyword}" in segment
        or segment.startswith(f"{keyword}_")
        or segment.endswith(f"_{keyword}")
    )


def detect_platform_from_path(path: str, hints: HintTable = PLATFORM_PATH_HINTS) -> str | None:
    """Guess a platform from the folder names in a path.

    Args:
        path: File or directory path, either separator style
        hints: Ordered (platform id, keywords) table

    Returns:
        The platform id of the first hint whose keyword matches a path
        segment, or None
    """
    segments = path.lower().replace("\\", "/").split("/")

    for platform_id, keywords in hints:
        for keyword in keywords:
            if any(_segment_matches(segment, keyword) for segment in segments):
                return platform_id

    return None


def resolve_platform(
    path: str,
    candidates: Sequence[str],
    platform_override: str | None = None,
    hints: HintTable = PLATFORM_PATH_HINTS,
) -> PlatformResolution:
    """Pick the platform for a file whose extension maps to ``candidates``.

    Args:
        path: Canonical path of the file, used for hint matching
        candidates: Platform ids claiming the extension, in table order
        platform_override: Platform chosen by the caller for the whole root
        hints: Ordered path hint table

    Returns:
        The chosen platform and the rule that chose it

    Raises:
        ValueError: If there is no override and no candidate
    """
    if platform_override:
        return PlatformResolution(platform_override, ResolutionRule.OVERRIDE)

    if not candidates:
        raise ValueError(f"No platform claims the extension of {path}")

    if len(candidates) == 1:
        return PlatformResolution(candidates[0], ResolutionRule.UNIQUE_MATCH)

    hinted = detect_platform_from_path(path, hints)
    if hinted is not None and hinted in candidates:
        return PlatformResolution(hinted, ResolutionRule.HEURISTIC_MATCH)

    log.debug(
        "No usable path hint, falling back to first platform",
        path=path,
        candidates=list(candidates),
        hinted=hinted,
    )
    return PlatformResolution(candidates[0], ResolutionRule.FALLBACK_FIRST)
