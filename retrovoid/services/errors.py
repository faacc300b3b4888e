"""Error types and error handling for the retrovoid game library.

This module provides:
- Exception classes for each failure area (file system, catalog, playlists,
  launching, network, configuration)
- User-friendly error messages with suggested actions
- A small service that turns arbitrary exceptions into those messages
"""

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class ErrorCategory(Enum):
    """Categories of errors for classification and handling."""
    FILE_SYSTEM = "file_system"
    SCAN = "scan"
    PLAYLIST = "playlist"
    CATALOG = "catalog"
    LAUNCH = "launch"
    NETWORK = "network"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class UserFriendlyError:
    """User-friendly error representation with suggested actions."""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    suggested_actions: list[str]
    technical_details: str | None = None
    recoverable: bool = True


class AppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNEXPECTED,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        suggested_actions: list[str] | None = None,
        technical_details: str | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.suggested_actions = suggested_actions or []
        self.technical_details = technical_details
        self.recoverable = recoverable

    def to_user_friendly(self) -> UserFriendlyError:
        """Convert to user-friendly error representation."""
        return UserFriendlyError(
            message=self.message,
            category=self.category,
            severity=self.severity,
            suggested_actions=self.suggested_actions,
            technical_details=self.technical_details,
            recoverable=self.recoverable,
        )


def _describe(original_error: Exception | None) -> str | None:
    if original_error is None:
        return None
    return f"{type(original_error).__name__}: {original_error}"


class FileSystemError(AppError):
    """Exception for file system-related errors."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        path: str | None = None,
        operation: str | None = None,
    ) -> None:
        technical_details = _describe(original_error)
        if path:
            technical_details = f"Path: {path}" + (f"\n{technical_details}" if technical_details else "")

        super().__init__(
            message=message,
            category=ErrorCategory.FILE_SYSTEM,
            severity=ErrorSeverity.ERROR,
            suggested_actions=self._get_suggested_actions(original_error),
            technical_details=technical_details,
            recoverable=True,
        )
        self.original_error = original_error
        self.path = path
        self.operation = operation

    @staticmethod
    def _get_suggested_actions(original_error: Exception | None) -> list[str]:
        """Get suggested actions based on error type."""
        if isinstance(original_error, PermissionError):
            return [
                "Check file/directory permissions",
                "Try running with appropriate permissions",
            ]
        elif isinstance(original_error, FileNotFoundError):
            return [
                "Verify the path is correct",
                "Check if the drive or share is mounted",
            ]
        elif isinstance(original_error, OSError):
            error_str = str(original_error).lower()
            if "no space" in error_str or "disk full" in error_str:
                return ["Free up disk space"]
            elif "read-only" in error_str:
                return [
                    "The file system is read-only",
                    "Create playlists manually or remount the library read-write",
                ]

        return [
            "Check the path and permissions",
            "Ensure sufficient disk space",
        ]


class ScanRootError(FileSystemError):
    """A scan root does not exist or cannot be walked at all."""

    def __init__(self, path: str, original_error: Exception | None = None) -> None:
        if original_error is None:
            message = f"Path does not exist: {path}"
        else:
            message = f"Path cannot be read: {path}: {original_error}"
        super().__init__(
            message=message,
            original_error=original_error,
            path=path,
            operation="scan",
        )
        self.category = ErrorCategory.SCAN


class PlaylistError(FileSystemError):
    """A multi-disc playlist could not be written."""

    def __init__(self, base_title: str, path: str, original_error: Exception | None = None) -> None:
        super().__init__(
            message=f"Failed to create playlist for {base_title}: {original_error}",
            original_error=original_error,
            path=path,
            operation="write_playlist",
        )
        self.category = ErrorCategory.PLAYLIST
        self.base_title = base_title


class CatalogError(AppError):
    """A single catalog read or write failed."""

    def __init__(
        self,
        message: str,
        rom_path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        technical_details = _describe(original_error)
        if rom_path:
            technical_details = f"ROM: {rom_path}" + (f"\n{technical_details}" if technical_details else "")

        super().__init__(
            message=message,
            category=ErrorCategory.CATALOG,
            severity=ErrorSeverity.ERROR,
            suggested_actions=[
                "Re-run the scan; already imported games are skipped",
                "Check that the catalog file is writable",
            ],
            technical_details=technical_details,
            recoverable=True,
        )
        self.rom_path = rom_path
        self.original_error = original_error


class CatalogUnavailableError(CatalogError):
    """The catalog as a whole cannot be read or written."""

    def __init__(
        self,
        message: str,
        catalog_path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message=message, original_error=original_error)
        self.severity = ErrorSeverity.CRITICAL
        self.recoverable = False
        self.suggested_actions = [
            "Check that the catalog file exists and is valid JSON",
            "Restore the catalog from a backup",
        ]
        if catalog_path:
            self.technical_details = f"Catalog: {catalog_path}" + (
                f"\n{self.technical_details}" if self.technical_details else ""
            )
        self.catalog_path = catalog_path


class LaunchError(AppError):
    """A game could not be launched because something it needs is missing."""

    def __init__(self, message: str, game_id: str | None = None, emulator_id: str | None = None) -> None:
        details = []
        if game_id:
            details.append(f"Game: {game_id}")
        if emulator_id:
            details.append(f"Emulator: {emulator_id}")

        super().__init__(
            message=message,
            category=ErrorCategory.LAUNCH,
            severity=ErrorSeverity.ERROR,
            suggested_actions=[
                "Rescan the library",
                "Configure an emulator for the platform",
            ],
            technical_details="\n".join(details) or None,
            recoverable=True,
        )
        self.game_id = game_id
        self.emulator_id = emulator_id


class NetworkError(AppError):
    """Exception for network-related errors."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        suggested_actions = [
            "Check your internet connection",
            "Try again in a few moments",
        ]
        if status_code == 429:
            suggested_actions = [
                "Wait a few minutes before retrying",
                "Increase request_delay in the configuration",
            ]
        elif status_code in (400, 401, 403):
            suggested_actions = ["Check your IGDB client id and secret"]
        elif status_code and status_code >= 500:
            suggested_actions = [
                "The server is experiencing issues",
                "Try again later",
            ]

        technical_details = _describe(original_error)
        if url:
            technical_details = f"URL: {url}" + (f"\n{technical_details}" if technical_details else "")
        if status_code:
            technical_details = f"Status: {status_code}" + (f"\n{technical_details}" if technical_details else "")

        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.original_error = original_error
        self.url = url
        self.status_code = status_code


class ConfigurationError(AppError):
    """Exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        expected: str | None = None,
    ) -> None:
        suggested_actions = ["Check the configuration file"]
        if expected:
            suggested_actions.append(f"Expected: {expected}")

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=f"Setting: {setting}" if setting else None,
            recoverable=True,
        )
        self.setting = setting
        self.expected = expected


class ErrorHandlingService:
    """Turns exceptions into user-friendly errors and logs the technical side."""

    def __init__(self) -> None:
        self._error_history: list[tuple[float, AppError]] = []
        self._max_history_size = 100

    def handle_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None = None,
    ) -> UserFriendlyError:
        """Handle an error and return a user-friendly representation.

        Args:
            error: The exception that occurred
            operation: The operation being performed
            component: The component where the error occurred
            context: Additional context information

        Returns:
            User-friendly error representation
        """
        app_error = self._convert_to_app_error(error, operation, context)

        log_method = log.warning if app_error.severity == ErrorSeverity.WARNING else log.error
        log_method(
            "Error occurred",
            error_message=app_error.message,
            category=app_error.category.value,
            severity=app_error.severity.value,
            operation=operation,
            component=component,
            technical_details=app_error.technical_details,
            recoverable=app_error.recoverable,
            context=context,
        )

        self._error_history.append((time.time(), app_error))
        if len(self._error_history) > self._max_history_size:
            self._error_history.pop(0)

        return app_error.to_user_friendly()

    def _convert_to_app_error(
        self,
        error: Exception,
        operation: str,
        context: dict[str, Any] | None,
    ) -> AppError:
        """Convert a standard exception to an AppError."""
        if isinstance(error, AppError):
            return error

        path = context.get("path") if context else None

        if isinstance(error, httpx.HTTPStatusError):
            return NetworkError(
                message=f"HTTP error {error.response.status_code} occurred.",
                original_error=error,
                url=str(error.request.url),
                status_code=error.response.status_code,
            )
        elif isinstance(error, httpx.TimeoutException):
            return NetworkError(
                message="The request timed out. The server may be slow or unavailable.",
                original_error=error,
            )
        elif isinstance(error, httpx.RequestError):
            return NetworkError(
                message="A network error occurred. Please check your connection.",
                original_error=error,
            )
        elif isinstance(error, PermissionError):
            return FileSystemError(
                message="Permission denied. You don't have access to this file or directory.",
                original_error=error,
                path=path,
                operation=operation,
            )
        elif isinstance(error, FileNotFoundError):
            return FileSystemError(
                message="The file or directory was not found.",
                original_error=error,
                path=path,
                operation=operation,
            )
        elif isinstance(error, OSError):
            return FileSystemError(
                message=f"A file system error occurred: {error}",
                original_error=error,
                path=path,
                operation=operation,
            )
        elif isinstance(error, json.JSONDecodeError):
            return AppError(
                message="Invalid JSON format. The data could not be parsed.",
                category=ErrorCategory.VALIDATION,
                severity=ErrorSeverity.WARNING,
                technical_details=_describe(error),
            )
        elif isinstance(error, ValueError):
            return AppError(
                message=str(error),
                category=ErrorCategory.VALIDATION,
                severity=ErrorSeverity.WARNING,
                suggested_actions=["Review the input requirements"],
            )

        return AppError(
            message="An unexpected error occurred. Please try again.",
            category=ErrorCategory.UNEXPECTED,
            severity=ErrorSeverity.ERROR,
            technical_details=_describe(error),
        )

    def get_recent_errors(self, count: int = 10) -> list[AppError]:
        """Get the most recent handled errors, oldest first."""
        recent = self._error_history[-count:] if self._error_history else []
        return [error for _, error in recent]

    def create_user_message(
        self,
        error: UserFriendlyError,
        include_suggestions: bool = True,
    ) -> str:
        """Create a formatted user message from an error.

        Args:
            error: The user-friendly error
            include_suggestions: Whether to include suggested actions

        Returns:
            Formatted message string
        """
        parts = [error.message]

        if include_suggestions and error.suggested_actions:
            parts.append("\nSuggested actions:")
            for action in error.suggested_actions[:3]:
                parts.append(f"  • {action}")

        return "\n".join(parts)


_error_service: ErrorHandlingService | None = None


def get_error_service() -> ErrorHandlingService:
    """Get the global error handling service instance."""
    global _error_service
    if _error_service is None:
        _error_service = ErrorHandlingService()
    return _error_service


def handle_error(
    error: Exception,
    operation: str,
    component: str,
    context: dict[str, Any] | None = None,
) -> UserFriendlyError:
    """Convenience function to handle errors using the global service."""
    return get_error_service().handle_error(error, operation, component, context)
