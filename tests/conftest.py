"""
Pytest configuration and shared fixtures for Statsview tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from statsview.monitoring.metrics import StatsRegistry
from statsview.stats.formatters import ProcessIdentity


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.
    
    Yields:
        Path to temporary directory that is cleaned up after test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def stats_registry() -> StatsRegistry:
    """
    Create a stats registry on a private CollectorRegistry.
    
    Returns:
        Empty StatsRegistry isolated from other tests.
    """
    return StatsRegistry(CollectorRegistry())


@pytest.fixture
def populated_registry(stats_registry: StatsRegistry) -> StatsRegistry:
    """
    Stats registry holding a few stats with known values.
    
    Returns:
        StatsRegistry with cpu=42, num_queries=7 and num_slow_queries=0.
    """
    stats_registry.register_stat("cpu")
    stats_registry.set_value("cpu", 42)
    stats_registry.register_stat("num_queries")
    stats_registry.add_value("num_queries", 7)
    stats_registry.register_stat("num_slow_queries")
    return stats_registry


@pytest.fixture
def identity() -> ProcessIdentity:
    """Identity with a literal IP so no name resolution happens."""
    return ProcessIdentity(local_ip="10.0.0.5", port=11000, role="storage")
