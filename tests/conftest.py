# tests/conftest.py

"""Shared pytest fixtures for all tracker tests."""

import logging
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path) -> Generator[None, None, None]:
    """Point every writable Settings path at a per-test temp dir."""
    data_dir = tmp_path / "data"
    with patch.multiple(
        Settings,
        DATA_DIR=data_dir,
        DOCS_DIR=tmp_path / "docs",
        LOGS_DIR=tmp_path / "logs",
        LOCAL_SNAPSHOT_PATH=data_dir / "latest-run.json",
        RAW_DATASET_PATH=data_dir / "price-logs.json",
        SUMMARY_PATH=tmp_path / "docs" / "price-data.json",
    ):
        yield


@pytest.fixture(autouse=True)
def reset_tracker_logger() -> Generator[None, None, None]:
    """Drop handlers added by setup_logging so tests stay independent."""
    yield
    root_logger = logging.getLogger("spot_tracker")
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
