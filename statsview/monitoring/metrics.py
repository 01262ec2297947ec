"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Statsview, a product of Garudex Labs

Stats registry backed by Prometheus gauges.

Every stat is a named integer held by the registry and mirrored into a
Prometheus gauge living in a private CollectorRegistry. Gauges store
float64, so reads come from the integer store and never from the gauge.
The registry exposes the two reads the stats endpoint needs:
- read_all_values(): every stat in registration order
- read_value(name): one stat, raising StatNotFoundError when unknown

The same CollectorRegistry also backs the /metrics exposition endpoint.
"""

import re
import threading
from typing import Dict, List, Optional, Tuple

from prometheus_client import (
    Gauge,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

from statsview.exceptions import InvalidStatNameError, StatNotFoundError
from statsview.logging_config import get_logger

logger = get_logger(__name__)

# Prometheus metric name charset
STAT_NAME_PATTERN = re.compile(r'^[a-zA-Z_:][a-zA-Z0-9_:]*$')


class StatsRegistry:
    """
    Registry of named integer stats.

    Registration, updates and reads are serialized by one lock. The integer
    store is authoritative; each gauge only mirrors it for /metrics.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize stats registry.

        Args:
            registry: Optional Prometheus CollectorRegistry (creates new if not provided)
        """
        self.registry = registry or CollectorRegistry()
        self._gauges: Dict[str, Gauge] = {}
        self._values: Dict[str, int] = {}
        self._lock = threading.Lock()

    # Registration

    def register_stat(self, name: str, documentation: str = "") -> None:
        """
        Register a new stat with an initial value of zero.

        Args:
            name: Stat name (Prometheus metric name charset)
            documentation: Optional help text shown in /metrics output

        Raises:
            InvalidStatNameError: If the name is malformed or already registered
        """
        if not STAT_NAME_PATTERN.match(name):
            raise InvalidStatNameError(f"Invalid stat name: {name!r}")

        with self._lock:
            if name in self._gauges:
                raise InvalidStatNameError(f"Stat already registered: {name}")
            try:
                gauge = Gauge(
                    name,
                    documentation or f"Statsview stat {name}",
                    registry=self.registry,
                )
            except ValueError as e:
                # Name clashes with a collector registered outside this class
                raise InvalidStatNameError(str(e)) from e
            self._gauges[name] = gauge
            self._values[name] = 0

        logger.debug(f"Registered stat {name}")

    def is_registered(self, name: str) -> bool:
        """Check if a stat name is registered."""
        return name in self._gauges

    # Updates

    def add_value(self, name: str, value: int = 1) -> None:
        """
        Add ``value`` to a stat (negative values decrement it).

        Raises:
            StatNotFoundError: If the stat is not registered
        """
        with self._lock:
            gauge = self._get_gauge(name)
            self._values[name] += int(value)
            gauge.set(self._values[name])

    def set_value(self, name: str, value: int) -> None:
        """
        Overwrite the current value of a stat.

        Raises:
            StatNotFoundError: If the stat is not registered
        """
        with self._lock:
            gauge = self._get_gauge(name)
            self._values[name] = int(value)
            gauge.set(self._values[name])

    # Reads

    def read_value(self, name: str) -> int:
        """
        Read the current value of one stat.

        Args:
            name: Stat name

        Returns:
            Current value as an integer

        Raises:
            StatNotFoundError: If the stat is not registered
        """
        with self._lock:
            if name not in self._values:
                raise StatNotFoundError(name)
            return self._values[name]

    def read_all_values(self) -> List[Tuple[str, int]]:
        """
        Read every registered stat.

        Returns:
            (name, value) pairs in registration order
        """
        with self._lock:
            return list(self._values.items())

    # Metrics Export

    def generate_metrics(self) -> bytes:
        """
        Generate Prometheus metrics in text format.

        Returns:
            Metrics in Prometheus text format
        """
        return generate_latest(self.registry)

    def get_content_type(self) -> str:
        """
        Get the content type for Prometheus metrics.

        Returns:
            Content type string
        """
        return CONTENT_TYPE_LATEST

    def _get_gauge(self, name: str) -> Gauge:
        gauge = self._gauges.get(name)
        if gauge is None:
            raise StatNotFoundError(name)
        return gauge


# Global stats registry instance
_stats_registry: Optional[StatsRegistry] = None


def get_stats_registry() -> StatsRegistry:
    """
    Get global stats registry instance.

    Returns:
        StatsRegistry singleton instance

    Raises:
        RuntimeError: If stats registry not initialized
    """
    global _stats_registry
    if _stats_registry is None:
        raise RuntimeError(
            "Stats registry not initialized. "
            "Call initialize_stats_registry() first."
        )
    return _stats_registry


def initialize_stats_registry(registry: Optional[CollectorRegistry] = None) -> StatsRegistry:
    """
    Initialize global stats registry.

    Args:
        registry: Optional Prometheus CollectorRegistry

    Returns:
        Initialized StatsRegistry
    """
    global _stats_registry
    if _stats_registry is not None:
        logger.warning("Stats registry already initialized, reinitializing")

    _stats_registry = StatsRegistry(registry)
    logger.info("Global stats registry initialized")
    return _stats_registry
