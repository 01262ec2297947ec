"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Statsview, a product of Garudex Labs

Stats registry and web service for Statsview.
"""

from statsview.monitoring.metrics import (
    StatsRegistry,
    get_stats_registry,
    initialize_stats_registry,
)

from statsview.monitoring.http_server import (
    StatsWebServer,
    get_stats_server,
    start_stats_server,
    stop_stats_server,
)

__all__ = [
    "StatsRegistry",
    "get_stats_registry",
    "initialize_stats_registry",
    "StatsWebServer",
    "get_stats_server",
    "start_stats_server",
    "stop_stats_server",
]
