"""Tests for error types and the error handling service."""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import httpx
import pytest
from hypothesis import given, settings, strategies as st

from retrovoid.models import Game
from retrovoid.services.catalog import CatalogStore
from retrovoid.services.errors import (
    AppError,
    CatalogError,
    CatalogUnavailableError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    FileSystemError,
    LaunchError,
    NetworkError,
    PlaylistError,
    ScanRootError,
)


class TestErrorTypes:
    """Messages and classification of the application's error types."""

    def test_scan_root_error(self) -> None:
        error = ScanRootError("/roms/missing")

        assert error.message == "Path does not exist: /roms/missing"
        assert error.category is ErrorCategory.SCAN
        assert isinstance(error, FileSystemError)

    def test_playlist_error_names_the_title(self) -> None:
        cause = PermissionError(13, "Permission denied")

        error = PlaylistError("Final Fantasy IX", "/roms/Final Fantasy IX.m3u", cause)

        assert error.message.startswith("Failed to create playlist for Final Fantasy IX: ")
        assert "Permission denied" in error.message
        assert error.category is ErrorCategory.PLAYLIST
        assert error.original_error is cause

    def test_catalog_unavailable_is_a_critical_catalog_error(self) -> None:
        error = CatalogUnavailableError("gone", catalog_path="/data/catalog.json")

        assert isinstance(error, CatalogError)
        assert error.severity is ErrorSeverity.CRITICAL
        assert not error.recoverable
        assert "Catalog: /data/catalog.json" in (error.technical_details or "")

    def test_per_item_catalog_error_is_recoverable(self) -> None:
        error = CatalogError("duplicate", rom_path="/roms/a.sfc")

        assert error.recoverable
        assert error.severity is ErrorSeverity.ERROR
        assert error.technical_details == "ROM: /roms/a.sfc"

    def test_network_error_suggestions_follow_status(self) -> None:
        assert NetworkError("x", status_code=401).suggested_actions == ["Check your IGDB client id and secret"]
        assert "Increase request_delay in the configuration" in NetworkError("x", status_code=429).suggested_actions

    def test_launch_error_details(self) -> None:
        error = LaunchError("Emulator not found", emulator_id="emu-1")
        assert error.technical_details == "Emulator: emu-1"
        assert error.category is ErrorCategory.LAUNCH

    def test_to_user_friendly(self) -> None:
        friendly = ScanRootError("/roms/missing").to_user_friendly()

        assert friendly.message == "Path does not exist: /roms/missing"
        assert friendly.category is ErrorCategory.SCAN
        assert friendly.recoverable


class TestErrorHandlingService:
    """Test cases for ErrorHandlingService."""

    @pytest.mark.parametrize("error,category", [
        (PermissionError(13, "Permission denied"), ErrorCategory.FILE_SYSTEM),
        (FileNotFoundError(2, "No such file"), ErrorCategory.FILE_SYSTEM),
        (OSError(5, "I/O error"), ErrorCategory.FILE_SYSTEM),
        (json.JSONDecodeError("Expecting value", "", 0), ErrorCategory.VALIDATION),
        (ValueError("bad value"), ErrorCategory.VALIDATION),
        (httpx.ConnectError("refused"), ErrorCategory.NETWORK),
        (httpx.ReadTimeout("slow"), ErrorCategory.NETWORK),
        (RuntimeError("boom"), ErrorCategory.UNEXPECTED),
    ])
    def test_standard_exceptions_are_classified(self, error: Exception, category: ErrorCategory) -> None:
        friendly = ErrorHandlingService().handle_error(error, operation="scan", component="test")

        assert friendly.category is category
        assert friendly.message

    def test_http_status_error_keeps_status(self) -> None:
        request = httpx.Request("POST", "https://api.igdb.com/v4/games")
        response = httpx.Response(503, request=request)
        error = httpx.HTTPStatusError("unavailable", request=request, response=response)

        friendly = ErrorHandlingService().handle_error(error, operation="enrich", component="igdb")

        assert friendly.message == "HTTP error 503 occurred."
        assert "Status: 503" in (friendly.technical_details or "")
        assert "URL: https://api.igdb.com/v4/games" in (friendly.technical_details or "")

    def test_app_errors_pass_through(self) -> None:
        error = CatalogUnavailableError("Catalog could not be read")

        friendly = ErrorHandlingService().handle_error(error, operation="scan", component="catalog")

        assert friendly.message == "Catalog could not be read"
        assert friendly.severity is ErrorSeverity.CRITICAL

    def test_path_from_context_is_reported(self) -> None:
        friendly = ErrorHandlingService().handle_error(
            PermissionError(13, "Permission denied"),
            operation="write_playlist",
            component="playlists",
            context={"path": "/roms/Game.m3u"},
        )

        assert "Path: /roms/Game.m3u" in (friendly.technical_details or "")

    def test_errors_are_logged_with_context(self) -> None:
        with patch("retrovoid.services.errors.log") as mock_logger:
            ErrorHandlingService().handle_error(
                OSError(5, "I/O error"),
                operation="scan",
                component="discovery",
                context={"path": "/roms"},
            )

        assert mock_logger.error.called
        kwargs = mock_logger.error.call_args.kwargs
        assert kwargs["operation"] == "scan"
        assert kwargs["component"] == "discovery"
        assert kwargs["category"] == "file_system"

    def test_warnings_are_logged_as_warnings(self) -> None:
        with patch("retrovoid.services.errors.log") as mock_logger:
            ErrorHandlingService().handle_error(ValueError("bad"), operation="parse", component="cli")

        assert mock_logger.warning.called
        assert not mock_logger.error.called

    def test_create_user_message(self) -> None:
        service = ErrorHandlingService()
        friendly = service.handle_error(
            CatalogUnavailableError("Catalog could not be read"), operation="scan", component="cli"
        )

        message = service.create_user_message(friendly)

        assert message.startswith("Catalog could not be read\n\nSuggested actions:")
        assert "Restore the catalog from a backup" in message
        assert service.create_user_message(friendly, include_suggestions=False) == "Catalog could not be read"

    @given(st.lists(
        st.sampled_from([ValueError("v"), OSError("o"), RuntimeError("r"), ScanRootError("/x")]),
        min_size=1,
        max_size=150,
    ))
    @settings(deadline=None)
    def test_history_keeps_most_recent(self, errors: list[Exception]) -> None:
        """The service keeps working and remembers at most the last 100 errors."""
        service = ErrorHandlingService()
        with patch("retrovoid.services.errors.log"):
            for error in errors:
                service.handle_error(error, operation="op", component="test")

        recent = service.get_recent_errors(count=200)
        assert len(recent) == min(len(errors), 100)
        assert all(isinstance(e, AppError) for e in recent)
        assert len(service.get_recent_errors(count=3)) == min(len(errors), 3)


class TestErrorRecovery:
    """A failed write must leave earlier data intact and the service usable."""

    def test_failed_catalog_write_keeps_previous_file(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        catalog = CatalogStore(path)
        catalog.insert(Game.create("Zelda", "/roms/Zelda.sfc", "snes"))
        before = path.read_text(encoding="utf-8")

        failing_replace = Mock(side_effect=OSError(28, "No space left on device"))
        with patch.object(Path, "replace", failing_replace):
            with pytest.raises(CatalogError):
                catalog.insert(Game.create("Metroid", "/roms/Metroid.sfc", "snes"))

        assert path.read_text(encoding="utf-8") == before
        assert not path.with_suffix(".json.tmp").exists()
        assert [g.title for g in CatalogStore(path).get_all_games()] == ["Zelda"]
