# tests/conftest.py

"""Shared pytest fixtures for the converter tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so HTTP retry loops run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Keep charts and preferences written by tests out of ``data/``."""
    data_dir = tmp_path / "data"
    with patch.multiple(
        Settings,
        DATA_DIR=data_dir,
        CHARTS_DIR=data_dir / "charts",
        PREFERENCES_PATH=data_dir / "preferences.json",
    ):
        yield data_dir
