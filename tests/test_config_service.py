"""Tests for the configuration service."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from retrovoid.models import AppConfig
from retrovoid.services import ConfigurationService
from retrovoid.services.config import DEFAULT_CATALOG_PATH

valid_log_levels = st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
valid_request_delay = st.floats(min_value=0.0, max_value=60.0, allow_nan=False, allow_infinity=False)
valid_platforms = st.sampled_from(["ps1", "ps2", "saturn", "3do"])
valid_catalog_names = st.text(
    min_size=1,
    max_size=30,
    alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd")),
)


def write_config(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def no_igdb_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("IGDB_CLIENT_ID", raising=False)
    monkeypatch.delenv("IGDB_CLIENT_SECRET", raising=False)


class TestLoadConfig:
    """Test cases for ConfigurationService.load_config."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = ConfigurationService(tmp_path / "absent.json").load_config()

        assert config == AppConfig(catalog_path=DEFAULT_CATALOG_PATH)
        assert config.default_playlist_platform == "ps1"

    def test_values_are_read(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "config.json", {
            "catalog_path": str(tmp_path / "catalog.json"),
            "log_level": "debug",
            "default_playlist_platform": "saturn",
            "request_delay": 1,
        })

        config = ConfigurationService(path).load_config()

        assert config.catalog_path == tmp_path / "catalog.json"
        assert config.log_level == "DEBUG"
        assert config.default_playlist_platform == "saturn"
        assert config.request_delay == 1.0

    def test_home_is_expanded(self, tmp_path: Path) -> None:
        path = write_config(tmp_path / "config.json", {"catalog_path": "~/games/catalog.json"})

        config = ConfigurationService(path).load_config()

        assert config.catalog_path == Path.home() / "games" / "catalog.json"

    @pytest.mark.parametrize("content", [
        "{broken",
        "[]",
        '{"request_delay": "fast"}',
        '{"request_delay": -1}',
        '{"log_level": "LOUD"}',
        '{"catalog_path": "relative/catalog.json"}',
        '{"igdb_client_id": "only-id"}',
    ])
    def test_invalid_files_fall_back_to_defaults(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "config.json"
        path.write_text(content, encoding="utf-8")

        config = ConfigurationService(path).load_config()

        assert config == ConfigurationService.get_default_config()

    def test_environment_overrides_credentials(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_config(tmp_path / "config.json", {
            "igdb_client_id": "file-id",
            "igdb_client_secret": "file-secret",
        })
        monkeypatch.setenv("IGDB_CLIENT_ID", "env-id")
        monkeypatch.setenv("IGDB_CLIENT_SECRET", "env-secret")

        config = ConfigurationService(path).load_config()

        assert config.igdb_client_id == "env-id"
        assert config.igdb_client_secret == "env-secret"

    def test_partial_environment_is_ignored(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IGDB_CLIENT_ID", "env-id")

        config = ConfigurationService(tmp_path / "absent.json").load_config()

        assert config.igdb_client_id is None

    def test_unreadable_file_is_logged(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{broken", encoding="utf-8")

        with patch("retrovoid.services.config.log") as mock_logger:
            ConfigurationService(path).load_config()

        assert mock_logger.error.called

    @given(
        name=valid_catalog_names,
        log_level=valid_log_levels,
        delay=valid_request_delay,
        platform=valid_platforms,
    )
    @settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_valid_files_load_as_written(
        self,
        tmp_path: Path,
        name: str,
        log_level: str,
        delay: float,
        platform: str,
    ) -> None:
        """Any valid configuration file loads back with the same values."""
        catalog_path = tmp_path / f"{name}.json"
        path = write_config(tmp_path / "config.json", {
            "catalog_path": str(catalog_path),
            "log_level": log_level,
            "request_delay": delay,
            "default_playlist_platform": platform,
        })

        config = ConfigurationService(path).load_config()

        assert config.catalog_path == catalog_path
        assert config.log_level == log_level
        assert config.request_delay == delay
        assert config.default_playlist_platform == platform


class TestValidateConfig:
    def test_default_config_is_valid(self) -> None:
        service = ConfigurationService(Path("/nonexistent/config.json"))

        result = service.validate_config(service.get_default_config())

        assert result.is_valid
        assert result.errors == []

    def test_every_problem_is_reported(self) -> None:
        service = ConfigurationService(Path("/nonexistent/config.json"))
        config = AppConfig(
            catalog_path=Path("relative.json"),
            log_level="LOUD",
            default_playlist_platform="",
            igdb_client_id="id",
            request_delay=120.0,
        )

        result = service.validate_config(config)

        assert not result.is_valid
        assert len(result.errors) == 5
