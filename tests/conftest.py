"""Shared test fixtures for cell-vsm tests."""

from pathlib import Path
from typing import List

import pytest

from cell_vsm import ConfigLoader, Station


@pytest.fixture
def config_dir() -> Path:
    """Path to the bundled config directory."""
    return Path(__file__).parent.parent / "config"


@pytest.fixture
def loader(config_dir: Path) -> ConfigLoader:
    """ConfigLoader instance."""
    return ConfigLoader(config_dir)


@pytest.fixture
def two_step_stations() -> List[Station]:
    """Step 1 at 30s (120 UPH) feeding step 2 at 60s (60 UPH)."""
    return [
        Station(id="a", name="Saw", process_step=1, cycle_time=30),
        Station(id="b", name="Welder", process_step=2, cycle_time=60),
    ]


@pytest.fixture
def batch_station() -> Station:
    """Station with setup, batch and uptime losses."""
    return Station(
        id="press",
        name="Press",
        cycle_time=480,
        setup_time=3600,
        batch_size=200,
        uptime_percent=50,
    )


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Temporary database file path (does not create the file)."""
    return tmp_path / "test_cell_vsm.duckdb"
