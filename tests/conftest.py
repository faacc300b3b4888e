"""Shared fixtures for the retrovoid test suite."""

from pathlib import Path

import pytest

from retrovoid.services.catalog import CatalogStore


def touch(path: Path, content: str = "") -> Path:
    """Create a file and any missing parent folders."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def catalog(tmp_path: Path) -> CatalogStore:
    """A fresh catalog seeded with the default platforms."""
    return CatalogStore(tmp_path / "data" / "catalog.json")


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """An empty ROM library folder."""
    root = tmp_path / "roms"
    root.mkdir()
    return root
