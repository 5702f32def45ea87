"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Custom markers for test categorization
- Shared fixtures for common test setup
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List

import pytest
from _pytest.config import Config
from _pytest.python import Function

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def pytest_collection_modifyitems(config: Config, items: List[Function]) -> None:
    """Auto-mark integration tests by location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks integration tests")


# =============================================================================
# FIXTURES - Common test setup
# =============================================================================


@pytest.fixture
def sample_tle_lines() -> List[str]:
    """Three-line element set for the ISS (epoch 2021-10-02)."""
    return [
        "ISS (ZARYA)",
        "1 25544U 98067A   21275.52531015  .00001296  00000-0  29941-4 0  9998",
        "2 25544  51.6442 208.5455 0003525 319.8489 175.3714 15.48919755305637",
    ]


@pytest.fixture
def sample_tle_file(sample_tle_lines: List[str], tmp_path: Path) -> Path:
    """TLE file holding the sample element set."""
    tle_file = tmp_path / "iss.tle"
    tle_file.write_text("\n".join(sample_tle_lines) + "\n")
    return tle_file


@pytest.fixture
def sample_satellite(sample_tle_file: Path) -> Any:
    """Create a sample SatelliteOrbit for testing."""
    from pass_planner.orbit import SatelliteOrbit

    return SatelliteOrbit.from_tle_file(str(sample_tle_file), satellite_name="ISS")


@pytest.fixture
def sample_observer() -> Any:
    """Observer in London."""
    from pass_planner.observer import Observer

    return Observer(latitude=51.5074, longitude=-0.1278, name="London")


@pytest.fixture
def base_datetime() -> datetime:
    """Standard base datetime for tests, close to the sample TLE epoch."""
    return datetime(2021, 10, 2, 12, 0, 0)
