"""ROM filename handling: display titles and disc numbering.

ROM sets name files like ``Chrono Trigger (USA) [T+Eng1.0].sfc`` or
``Final Fantasy IX (Disc 2 of 4).cue``. The helpers here turn such stems
into a display title, and recognise the disc indicator that ties the files
of a multi-disc title together.
"""

import re

# Optical image formats that can hold one disc of a multi-disc title
DISC_EXTENSIONS: frozenset[str] = frozenset({
    ".cue",  # cue sheet
    ".bin",  # raw track described by a cue sheet
    ".iso",  # ISO 9660 image
    ".img",  # raw mode image
    ".chd",  # MAME compressed hunks of data
    ".mds",  # media descriptor
    ".ccd",  # CloneCD control file
})

CUE_EXTENSION = ".cue"
RAW_TRACK_EXTENSION = ".bin"
PLAYLIST_EXTENSION = ".m3u"

# Release tags removed from display titles, in this order
_TAG_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\s*\([^)]*\)"),
    re.compile(r"\s*\[[^\]]*\]"),
    re.compile(r"\s*\{[^}]*\}"),
)

_DISC_WORD = r"(?:disc|disk|cd)"
_OF_TOTAL = r"(?:\s*of\s*\d+)?"

# Disc indicators, tried in order; group 1 is the disc number
_DISC_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Game (Disc 2), Game (Disc 2 of 4)
    re.compile(rf"\s*\(\s*{_DISC_WORD}\s*(\d+){_OF_TOTAL}\s*\)", re.IGNORECASE),
    # Game [Disk 1 of 3]
    re.compile(rf"\s*\[\s*{_DISC_WORD}\s*(\d+){_OF_TOTAL}\s*\]", re.IGNORECASE),
    # Game - CD1
    re.compile(rf"\s*-\s*{_DISC_WORD}\s*(\d+){_OF_TOTAL}", re.IGNORECASE),
    # Game Disc 1, optionally followed by release tags
    re.compile(rf"\s+{_DISC_WORD}\s*(\d+){_OF_TOTAL}(?=\s*(?:[(\[{{]|$))", re.IGNORECASE),
    # Game_CD2, Game_Disc_2_USA
    re.compile(rf"_{_DISC_WORD}_?(\d+)", re.IGNORECASE),
)

_WHITESPACE = re.compile(r"\s+")


def clean_rom_title(title: str) -> str:
    """Strip release tags such as ``(USA)``, ``[!]`` and ``{Hack}`` from a title.

    Nested brackets are not handled specially; an all-tag title comes back
    as an empty string.
    """
    clean = title
    for pattern in _TAG_PATTERNS:
        clean = pattern.sub("", clean)
    return _WHITESPACE.sub(" ", clean).strip()


def is_disc_extension(extension: str) -> bool:
    """Whether files with this extension can be one disc of a set."""
    return extension.lower() in DISC_EXTENSIONS


def detect_disc_number(stem: str) -> int | None:
    """Extract the disc number from a filename stem.

    Args:
        stem: Filename without extension

    Returns:
        The disc number from the first matching indicator, or None
    """
    for pattern in _DISC_PATTERNS:
        match = pattern.search(stem)
        if match:
            return int(match.group(1))
    return None


def base_title(stem: str) -> str:
    """Remove the disc indicator from a stem, leaving the grouping title.

    Only meaningful when :func:`detect_disc_number` found a disc number.

    >>> base_title("Final Fantasy IX (Disc 2 of 4)")
    'Final Fantasy IX'
    """
    title = stem
    for pattern in _DISC_PATTERNS:
        title = pattern.sub("", title)
    return title.strip()


def split_disc(stem: str, extension: str) -> tuple[int | None, str]:
    """Disc number and base title for a file.

    Files outside :data:`DISC_EXTENSIONS`, and disc images without an
    indicator, keep their stem as the base title.
    """
    if not is_disc_extension(extension):
        return None, stem

    disc_number = detect_disc_number(stem)
    if disc_number is None:
        return None, stem
    return disc_number, base_title(stem)
