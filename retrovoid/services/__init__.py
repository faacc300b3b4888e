"""Service layer for scanning, the catalog and external integrations."""

from .catalog import Catalog, CatalogStore
from .config import ConfigurationService, ValidationResult
from .discovery import FileDiscoverer, canonical_path
from .errors import (
    AppError,
    CatalogError,
    CatalogUnavailableError,
    ConfigurationError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    FileSystemError,
    LaunchError,
    NetworkError,
    PlaylistError,
    ScanRootError,
    UserFriendlyError,
    get_error_service,
    handle_error,
)
from .http_client import HttpClientService
from .igdb import IgdbClient
from .launcher import GameLauncherService, build_launch_command
from .metadata import MetadataService
from .platforms import (
    DEFAULT_PLATFORMS,
    PLATFORM_PATH_HINTS,
    build_extension_index,
    detect_platform_from_path,
    resolve_platform,
)
from .playlists import MultiDiscAggregator
from .scanner import LibraryScannerService
from .titles import base_title, clean_rom_title, detect_disc_number, split_disc

__all__ = [
    "AppError",
    "Catalog",
    "CatalogError",
    "CatalogStore",
    "CatalogUnavailableError",
    "ConfigurationError",
    "ConfigurationService",
    "DEFAULT_PLATFORMS",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "FileDiscoverer",
    "FileSystemError",
    "GameLauncherService",
    "HttpClientService",
    "IgdbClient",
    "LaunchError",
    "LibraryScannerService",
    "MetadataService",
    "MultiDiscAggregator",
    "NetworkError",
    "PLATFORM_PATH_HINTS",
    "PlaylistError",
    "ScanRootError",
    "UserFriendlyError",
    "ValidationResult",
    "base_title",
    "build_extension_index",
    "build_launch_command",
    "canonical_path",
    "clean_rom_title",
    "detect_disc_number",
    "detect_platform_from_path",
    "get_error_service",
    "handle_error",
    "resolve_platform",
    "split_disc",
]
