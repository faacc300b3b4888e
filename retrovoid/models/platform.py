"""Platform configuration models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Platform:
    """A gaming platform and the file extensions it claims.

    Extensions are lowercase with a leading dot. The same extension may be
    claimed by several platforms (``.iso`` is the usual example).
    """
    id: str
    display_name: str
    manufacturer: str
    file_extensions: tuple[str, ...]
    default_emulator_id: str | None = None
    color: str = "#00f5ff"
